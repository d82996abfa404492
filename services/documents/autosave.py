"""
Autosave

Periodic, best-effort saving of an in-progress answer set.

    scheduler = AutosaveScheduler(save=lambda a: lifecycle.save_answers(doc_id, a),
                                  snapshot=editor.snapshot, interval=600)
    scheduler.start()
    ...
    scheduler.stop()      # no tick fires after this returns

Ticks with an empty snapshot are skipped. Save failures are logged and
reflected in ``status``; they never propagate and never stop the timer.
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 600


class SaveStatus(Enum):
    SAVED = "saved"
    SAVING = "saving"
    ERROR = "error"


class AutosaveScheduler:
    """A repeating timer bound to one editing session."""

    def __init__(
        self,
        save: Callable[[Dict[str, Any]], Any],
        snapshot: Callable[[], Dict[str, Any]],
        interval: float = DEFAULT_INTERVAL_SECONDS
    ):
        if interval <= 0:
            raise ValueError("Autosave interval must be positive")
        self._save = save
        self._snapshot = snapshot
        self.interval = interval
        self.status = SaveStatus.SAVED
        self.last_error: Optional[Exception] = None
        self.save_count = 0
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        # Held for the duration of a save; stop() takes it to wait out a save in flight
        self._save_lock = threading.RLock()
        self._stopped = True

    @property
    def running(self) -> bool:
        return not self._stopped

    def start(self) -> 'AutosaveScheduler':
        with self._lock:
            if not self._stopped:
                return self
            self._stopped = False
            self._schedule()
        logger.debug(f"Autosave started (every {self.interval}s)")
        return self

    def stop(self) -> None:
        """
        Cancel the pending tick and wait for a save already under way.

        A scheduled tick that has not reached its save yet is dropped.
        Safe to call more than once.
        """
        with self._lock:
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        with self._save_lock:
            pass
        logger.debug("Autosave stopped")

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.interval, self._run)
        self._timer.daemon = True
        self._timer.start()

    def _run(self) -> None:
        with self._lock:
            if self._stopped:
                return
        self._tick(scheduled=True)
        with self._lock:
            if not self._stopped:
                self._schedule()

    def tick(self) -> bool:
        """
        Save once if there is anything to save.

        Returns:
            True if a save succeeded, False if skipped or failed
        """
        return self._tick(scheduled=False)

    def _tick(self, scheduled: bool) -> bool:
        answers = self._snapshot() or {}
        if not answers:
            return False

        with self._save_lock:
            if scheduled and self._stopped:
                logger.debug("Autosave stopped during tick; save skipped")
                return False

            self.status = SaveStatus.SAVING
            try:
                self._save(dict(answers))
            except Exception as e:
                self.status = SaveStatus.ERROR
                self.last_error = e
                logger.warning(f"Autosave failed: {e}")
                return False

            self.status = SaveStatus.SAVED
            self.last_error = None
            self.save_count += 1
            return True

    def __enter__(self) -> 'AutosaveScheduler':
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
