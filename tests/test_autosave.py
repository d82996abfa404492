"""
Autosave scheduler tests. Ticks are driven directly; only the timer test
waits on a real thread.
"""

import threading

import pytest

from services.documents import AutosaveScheduler, SaveStatus


class Recorder:
    def __init__(self, fail=False):
        self.saved = []
        self.fail = fail
        self.event = threading.Event()

    def __call__(self, answers):
        if self.fail:
            raise RuntimeError('database is down')
        self.saved.append(answers)
        self.event.set()


class TestAutosaveScheduler:
    """Periodic, best-effort saving."""

    def test_empty_snapshot_is_skipped(self):
        save = Recorder()
        scheduler = AutosaveScheduler(save=save, snapshot=dict)
        assert scheduler.tick() is False
        assert save.saved == []

    def test_tick_saves_a_copy_of_the_snapshot(self):
        save = Recorder()
        answers = {'name': 'Alice'}
        scheduler = AutosaveScheduler(save=save, snapshot=lambda: answers)

        assert scheduler.tick() is True
        answers['name'] = 'Bob'
        assert save.saved == [{'name': 'Alice'}]
        assert scheduler.status == SaveStatus.SAVED
        assert scheduler.save_count == 1

    def test_failure_is_recorded_not_raised(self):
        scheduler = AutosaveScheduler(save=Recorder(fail=True), snapshot=lambda: {'a': 1})
        assert scheduler.tick() is False
        assert scheduler.status == SaveStatus.ERROR
        assert 'database is down' in str(scheduler.last_error)

    def test_next_success_clears_error(self):
        save = Recorder(fail=True)
        scheduler = AutosaveScheduler(save=save, snapshot=lambda: {'a': 1})
        scheduler.tick()
        save.fail = False
        assert scheduler.tick() is True
        assert scheduler.last_error is None

    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            AutosaveScheduler(save=Recorder(), snapshot=dict, interval=0)

    def test_timer_fires_and_stop_is_idempotent(self):
        save = Recorder()
        scheduler = AutosaveScheduler(save=save, snapshot=lambda: {'a': 1}, interval=0.01)

        with scheduler:
            assert scheduler.running
            assert save.event.wait(timeout=5)

        assert not scheduler.running
        scheduler.stop()

    def test_no_tick_after_stop(self):
        save = Recorder()
        scheduler = AutosaveScheduler(save=save, snapshot=lambda: {'a': 1}, interval=60)
        scheduler.start()
        scheduler.stop()
        assert save.saved == []

    def test_tick_in_progress_does_not_save_after_stop(self):
        save = Recorder()
        entered = threading.Event()
        release = threading.Event()

        def snapshot():
            entered.set()
            release.wait(timeout=5)
            return {'a': 1}

        scheduler = AutosaveScheduler(save=save, snapshot=snapshot, interval=0.01)
        scheduler.start()
        assert entered.wait(timeout=5)

        scheduler.stop()
        release.set()

        # Give the timer thread time to finish its tick
        assert not save.event.wait(timeout=0.2)
        assert save.saved == []
        assert scheduler.save_count == 0
