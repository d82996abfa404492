"""
Document Editor

An in-process editing session: a local answer buffer, step navigation,
autosave, and the hand-off to export.

    with DocumentEditor.new(lifecycle, template_id) as editor:
        editor.update_answers({'fullName': 'Alice', 'birthDate': '1990-01-01'})
        editor.next()                # validates step 1, saves, moves to step 2
        ...
        if editor.finished:
            editor.export()

The document row is created lazily on the first save. Closing the editor
cancels autosave.
"""

import logging
import threading
from typing import Any, Dict, Mapping, Optional

from flask import current_app

from .autosave import AutosaveScheduler, DEFAULT_INTERVAL_SECONDS
from .form_engine import FormSession
from .lifecycle import DocumentLifecycle
from .repository import TemplateRepository
from .types import TemplateDefinition

logger = logging.getLogger(__name__)


class DocumentEditor:

    def __init__(
        self,
        lifecycle: DocumentLifecycle,
        definition: TemplateDefinition,
        document_id=None,
        answers: Optional[Mapping[str, Any]] = None,
        form_state: Optional[Dict[str, Any]] = None,
        autosave_interval: float = None
    ):
        self.lifecycle = lifecycle
        self.definition = definition
        self.document_id = document_id
        self.form = FormSession.from_dict(definition, form_state)
        self._answers: Dict[str, Any] = dict(answers or {})
        self._lock = threading.RLock()
        self._app = current_app._get_current_object()

        interval = autosave_interval or self._app.config.get(
            'AUTOSAVE_INTERVAL_SECONDS', DEFAULT_INTERVAL_SECONDS
        )
        self.autosave = AutosaveScheduler(
            save=self._save_in_app_context,
            snapshot=self.snapshot,
            interval=interval
        )

    @classmethod
    def new(cls, lifecycle: DocumentLifecycle, template_id, **kwargs) -> 'DocumentEditor':
        """Edit a not-yet-saved document for an active template."""
        definition = TemplateRepository.get_definition(template_id)
        return cls(lifecycle, definition, **kwargs)

    @classmethod
    def open(cls, lifecycle: DocumentLifecycle, document_id, **kwargs) -> 'DocumentEditor':
        """Resume editing an existing document."""
        document = lifecycle.get(document_id)
        definition = lifecycle.template_for(document)
        return cls(lifecycle, definition, document_id=document.id, answers=document.answers, **kwargs)

    # -- answers --------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._answers)

    def set_answer(self, field_name: str, value: Any) -> None:
        with self._lock:
            self._answers[field_name] = value

    def update_answers(self, answers: Mapping[str, Any]) -> None:
        with self._lock:
            self._answers.update(answers)

    # -- persistence ----------------------------------------------------------

    def save(self, answers: Optional[Mapping[str, Any]] = None):
        """Save the full answer buffer, creating the document on first save."""
        with self._lock:
            answers = dict(answers) if answers is not None else self.snapshot()
            if self.document_id is None:
                document = self.lifecycle.create(self.definition.id, initial_answers=answers)
                self.document_id = document.id
                return document
            return self.lifecycle.save_answers(self.document_id, answers)

    def _save_in_app_context(self, answers: Dict[str, Any]) -> None:
        # Timer threads have no app context of their own
        with self._app.app_context():
            self.save(answers)

    # -- navigation -----------------------------------------------------------

    @property
    def current_step(self) -> int:
        return self.form.current_step

    @property
    def finished(self) -> bool:
        return self.form.finished

    def next(self) -> int:
        """
        Validate the current step, save, and move forward.

        Raises:
            StepValidationError: the step stays current and nothing is saved
        """
        before = self.form.to_dict()
        step = self.form.advance(self.snapshot())
        try:
            self.save()
        except Exception:
            # Navigation only moves once the answers are stored
            self.form = FormSession.from_dict(self.definition, before)
            raise
        return step

    def back(self) -> int:
        return self.form.go_back()

    def go_to(self, step_number: int) -> int:
        return self.form.go_to(step_number)

    def export(self) -> str:
        """Save the buffer and request the export of the document."""
        self.save()
        return self.lifecycle.request_export(self.document_id)

    # -- session lifetime -----------------------------------------------------

    def start(self) -> 'DocumentEditor':
        self.autosave.start()
        return self

    def close(self) -> None:
        self.autosave.stop()
        logger.debug(f"Closed editor for document {self.document_id}")

    def __enter__(self) -> 'DocumentEditor':
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
