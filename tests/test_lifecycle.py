"""
Document lifecycle tests: ownership, saving and export.
"""

import pytest

from models import db, Document
from services.documents import (
    ArtifactGenerationError,
    DocumentLifecycle,
    DocumentNotFoundError,
    IncompleteAnswersError,
    InvalidTransitionError,
    MockArtifactGenerator,
    TemplateNotFoundError,
    UnauthorizedError,
    ValidationError
)

COMPLETE = {'name': 'Alice', 'code': 'X1', 'amount': 10}


class TestCreate:
    """Starting a draft."""

    def test_create_uses_template_title(self, lifecycle, template):
        document = lifecycle.create(template.id)
        assert document.status == 'draft'
        assert document.title == 'Claim'
        assert document.answers == {}

    def test_create_with_initial_answers_and_title(self, lifecycle, template):
        document = lifecycle.create(template.id, initial_answers={'name': 'Alice'}, title='  Mine ')
        assert document.title == 'Mine'
        assert document.answers == {'name': 'Alice'}

    def test_unknown_template(self, lifecycle, template):
        with pytest.raises(TemplateNotFoundError):
            lifecycle.create(template.id + 100)

    def test_inactive_template(self, lifecycle, template):
        template.is_active = False
        with pytest.raises(TemplateNotFoundError):
            lifecycle.create(template.id)

    def test_owner_required(self):
        with pytest.raises(UnauthorizedError):
            DocumentLifecycle(None)

    def test_nested_answers_rejected(self, lifecycle, template):
        with pytest.raises(ValidationError):
            lifecycle.create(template.id, initial_answers={'name': {'first': 'Alice'}})


class TestOwnership:
    """Documents are invisible to everyone but their owner."""

    def test_other_user_sees_not_found(self, lifecycle, template, bob):
        document = lifecycle.create(template.id, initial_answers=COMPLETE)
        generator = MockArtifactGenerator()
        intruder = DocumentLifecycle(bob.id, generator=generator)

        attempts = [
            lambda: intruder.get(document.id),
            lambda: intruder.save_answers(document.id, {'name': 'Mallory'}),
            lambda: intruder.set_title(document.id, 'Hijacked'),
            lambda: intruder.update(document.id, answers={'name': 'Mallory'}, status='generated'),
            lambda: intruder.request_export(document.id),
            lambda: intruder.preview(document.id),
            lambda: intruder.delete(document.id),
        ]
        for attempt in attempts:
            with pytest.raises(DocumentNotFoundError):
                attempt()

        owned = lifecycle.get(document.id)
        assert owned.answers == COMPLETE
        assert owned.title == 'Claim'
        assert owned.status == 'draft'
        assert generator.calls == []

    def test_list_only_returns_own_documents(self, lifecycle, template, bob):
        lifecycle.create(template.id)
        DocumentLifecycle(bob.id).create(template.id)
        assert len(lifecycle.list()) == 1

    def test_list_filters(self, lifecycle, template):
        lifecycle.create(template.id, title='Bank claim')
        lifecycle.create(template.id, title='Other')
        assert [d.title for d in lifecycle.list(search='bank')] == ['Bank claim']
        assert lifecycle.list(status='generated') == []

    def test_list_unknown_status(self, lifecycle):
        with pytest.raises(ValidationError):
            lifecycle.list(status='archived')


class TestSaveAnswers:
    """Answer persistence."""

    def test_save_replaces_whole_map(self, lifecycle, template):
        document = lifecycle.create(template.id, initial_answers={'name': 'Alice', 'code': 'A'})
        lifecycle.save_answers(document.id, {'name': 'Bob'})
        assert lifecycle.get(document.id).answers == {'name': 'Bob'}

    def test_save_bumps_updated_at(self, lifecycle, template):
        document = lifecycle.create(template.id)
        before = document.updated_at
        lifecycle.save_answers(document.id, {'name': 'Alice'})
        assert lifecycle.get(document.id).updated_at >= before

    def test_blank_title_rejected(self, lifecycle, template):
        document = lifecycle.create(template.id)
        with pytest.raises(ValidationError):
            lifecycle.set_title(document.id, '   ')

    def test_delete(self, lifecycle, template):
        document = lifecycle.create(template.id)
        lifecycle.delete(document.id)
        assert db.session.get(Document, document.id) is None


class TestExport:
    """Export gating and the artifact generator hand-off."""

    def test_incomplete_answers_block_export(self, lifecycle, template, generator):
        document = lifecycle.create(template.id, initial_answers={'name': 'Alice'})

        with pytest.raises(IncompleteAnswersError) as exc_info:
            lifecycle.request_export(document.id)

        assert exc_info.value.missing == ['code', 'amount']
        assert lifecycle.get(document.id).status == 'draft'
        assert generator.calls == []

    def test_complete_export(self, lifecycle, template, generator):
        document = lifecycle.create(template.id, initial_answers=COMPLETE)
        ref = lifecycle.request_export(document.id)

        saved = lifecycle.get(document.id)
        assert saved.status == 'generated'
        assert saved.artifact_ref == ref == 'mock://Claim.pdf'
        assert generator.calls[0]['html'] == '<p>Hello Alice, code X1.</p><p>Amount: 10</p>'

    def test_generator_failure_leaves_draft(self, alice, template):
        failing = DocumentLifecycle(alice.id, generator=MockArtifactGenerator(fail_with=IOError('disk full')))
        document = failing.create(template.id, initial_answers=COMPLETE)

        with pytest.raises(ArtifactGenerationError):
            failing.request_export(document.id)

        saved = failing.get(document.id)
        assert saved.status == 'draft'
        assert saved.artifact_ref is None

    def test_export_again_replaces_artifact(self, lifecycle, template, generator):
        document = lifecycle.create(template.id, initial_answers=COMPLETE)
        lifecycle.request_export(document.id)
        lifecycle.set_title(document.id, 'Renamed')
        assert lifecycle.request_export(document.id) == 'mock://Renamed.pdf'
        assert len(generator.calls) == 2

    def test_update_to_generated_runs_export(self, lifecycle, template, generator):
        document = lifecycle.create(template.id)
        updated = lifecycle.update(document.id, answers=COMPLETE, status='generated')
        assert updated.status == 'generated'
        assert len(generator.calls) == 1

    def test_update_to_generated_with_missing_answers(self, lifecycle, template):
        document = lifecycle.create(template.id)
        with pytest.raises(IncompleteAnswersError):
            lifecycle.update(document.id, answers={'name': 'Alice'}, status='generated')
        assert lifecycle.get(document.id).answers == {}

    def test_generated_cannot_return_to_draft(self, lifecycle, template):
        document = lifecycle.create(template.id, initial_answers=COMPLETE)
        lifecycle.request_export(document.id)
        with pytest.raises(InvalidTransitionError):
            lifecycle.update(document.id, status='draft')

    def test_preview_uses_html_placeholders(self, lifecycle, template):
        document = lifecycle.create(template.id, initial_answers={'name': 'Alice'})
        preview = lifecycle.preview(document.id)
        assert '<span class="text-gray-400 italic">[code]</span>' in preview.text
        assert preview.missing == ['code', 'amount']
