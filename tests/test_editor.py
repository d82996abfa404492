"""
Document editor tests: lazy creation, step-by-step saving and autosave.
"""

import pytest

from models import Document
from services.documents import DocumentEditor, SaveStatus, StepValidationError


class TestDocumentEditor:
    """An editing session over one document."""

    def test_nothing_saved_before_first_step(self, lifecycle, template):
        editor = DocumentEditor.new(lifecycle, template.id)
        editor.set_answer('name', 'Alice')
        assert editor.document_id is None
        assert Document.query.count() == 0

    def test_failed_step_saves_nothing(self, lifecycle, template):
        editor = DocumentEditor.new(lifecycle, template.id)
        with pytest.raises(StepValidationError):
            editor.next()
        assert editor.current_step == 1
        assert Document.query.count() == 0

    def test_next_creates_then_updates(self, lifecycle, template):
        editor = DocumentEditor.new(lifecycle, template.id)
        editor.update_answers({'name': 'Alice', 'code': 'X1'})
        assert editor.next() == 2

        document = lifecycle.get(editor.document_id)
        assert document.answers == {'name': 'Alice', 'code': 'X1'}

        editor.set_answer('amount', 5)
        editor.next()
        assert editor.finished
        assert lifecycle.get(editor.document_id).answers['amount'] == 5
        assert Document.query.count() == 1

    def test_out_of_range_amount_blocks_last_step(self, lifecycle, template):
        editor = DocumentEditor.new(lifecycle, template.id)
        editor.update_answers({'name': 'Alice', 'amount': 0})
        editor.next()
        with pytest.raises(StepValidationError) as exc_info:
            editor.next()
        assert list(exc_info.value.failures) == ['amount']
        assert not editor.finished

    def test_export_after_finishing(self, lifecycle, template, generator):
        editor = DocumentEditor.new(lifecycle, template.id)
        editor.update_answers({'name': 'Alice', 'code': 'X1', 'amount': 3})
        editor.next()
        editor.next()

        assert editor.export() == 'mock://Claim.pdf'
        assert lifecycle.get(editor.document_id).status == 'generated'

    def test_open_existing_document(self, lifecycle, template):
        document = lifecycle.create(template.id, initial_answers={'name': 'Alice'})
        editor = DocumentEditor.open(lifecycle, document.id)
        assert editor.snapshot() == {'name': 'Alice'}
        assert editor.current_step == 1

    def test_open_restores_form_state(self, lifecycle, template):
        document = lifecycle.create(template.id, initial_answers={'name': 'Alice'})
        state = {'current_step': 2, 'completed': [1], 'visited': [1, 2], 'finished': False}
        editor = DocumentEditor.open(lifecycle, document.id, form_state=state)
        assert editor.current_step == 2
        assert editor.back() == 1
        assert editor.go_to(2) == 2

    def test_autosave_tick_saves_buffer(self, lifecycle, template):
        editor = DocumentEditor.new(lifecycle, template.id)
        editor.set_answer('name', 'Alice')

        assert editor.autosave.tick() is True
        assert editor.autosave.status == SaveStatus.SAVED
        assert lifecycle.get(editor.document_id).answers == {'name': 'Alice'}

    def test_autosave_skips_empty_buffer(self, lifecycle, template):
        editor = DocumentEditor.new(lifecycle, template.id)
        assert editor.autosave.tick() is False
        assert editor.document_id is None

    def test_close_stops_autosave(self, lifecycle, template):
        with DocumentEditor.new(lifecycle, template.id) as editor:
            assert editor.autosave.running
        assert not editor.autosave.running
