"""
Document Lifecycle

Owns a user's answer set for one template from creation to export.

Usage:
    lifecycle = DocumentLifecycle(current_user.id)
    document = lifecycle.create(template_id)
    lifecycle.save_answers(document.id, {'fullName': 'Alice'})
    artifact_ref = lifecycle.request_export(document.id)

Every operation is scoped to the owner passed in. A document owned by
someone else raises DocumentNotFoundError, exactly like a missing one.

Answers are replaced wholesale on every save (last write wins). Editing
one document from two sessions at once is not supported.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from flask import current_app

from models import db, Document
from .artifacts import ArtifactGenerator, get_artifact_generator
from .exceptions import (
    IncompleteAnswersError,
    InvalidTransitionError,
    UnauthorizedError,
    ValidationError
)
from .renderer import TemplateRenderer, RenderPreview
from .repository import DocumentRepository, TemplateRepository
from .types import DocumentStatus, TemplateDefinition

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, int, float, bool, date, datetime, type(None))


def check_answers(answers: Any) -> Dict[str, Any]:
    """
    Validate the shape of an answer map.

    Raises:
        ValidationError: if it is not a flat mapping of scalars
    """
    if answers is None:
        return {}
    if not isinstance(answers, Mapping):
        raise ValidationError("Answers must be an object of field name -> value")

    checked = {}
    for key, value in answers.items():
        if not isinstance(key, str):
            raise ValidationError(f"Answer keys must be strings, got {key!r}")
        if not isinstance(value, SCALAR_TYPES):
            raise ValidationError(f"Answer '{key}' must be a scalar value", field=key)
        checked[key] = value
    return checked


class DocumentLifecycle:
    """Owner-scoped document operations."""

    def __init__(self, owner_id, generator: Optional[ArtifactGenerator] = None):
        if owner_id is None:
            raise UnauthorizedError("Authentication required")
        self.owner_id = owner_id
        self._generator = generator

    @property
    def generator(self) -> ArtifactGenerator:
        if self._generator is None:
            self._generator = get_artifact_generator(current_app.config)
        return self._generator

    # =========================================================================
    # READ
    # =========================================================================

    def get(self, document_id) -> Document:
        return DocumentRepository.get_owned(self.owner_id, document_id)

    def list(self, status: str = None, search: str = None) -> List[Document]:
        if status:
            self._parse_status(status)
        return DocumentRepository.list_for_owner(self.owner_id, status=status, search=search)

    def template_for(self, document: Document) -> TemplateDefinition:
        """
        Decode the template a document is bound to.

        Inactive templates still serve their existing documents.
        """
        return TemplateDefinition.from_model(document.template)

    def preview(self, document_id) -> RenderPreview:
        """Render a document's current answers for the preview screen."""
        document = self.get(document_id)
        definition = self.template_for(document)
        return TemplateRenderer.preview(definition.body, document.answers)

    # =========================================================================
    # WRITE
    # =========================================================================

    def create(self, template_id, initial_answers: Optional[Mapping] = None, title: str = None) -> Document:
        """
        Start a new draft for an active template.

        Raises:
            TemplateNotFoundError: if no active template matches
        """
        template = TemplateRepository.get_active(template_id)
        answers = check_answers(initial_answers)

        document = Document(
            user_id=self.owner_id,
            template_id=template.id,
            title=(title or '').strip() or template.title,
            status=DocumentStatus.DRAFT.value
        )
        document.answers = answers
        self._commit(document)

        logger.info(f"Created document {document.id} from template {template.id} for user {self.owner_id}")
        return document

    def save_answers(self, document_id, answers: Mapping) -> Document:
        """Replace the whole answer map and bump the modification time."""
        document = self.get(document_id)
        document.answers = check_answers(answers)
        document.touch()
        self._commit(document)
        logger.debug(f"Saved {len(document.answers)} answer(s) for document {document.id}")
        return document

    def set_title(self, document_id, title: str) -> Document:
        document = self.get(document_id)
        document.title = self._clean_title(title)
        document.touch()
        self._commit(document)
        return document

    def update(self, document_id, answers: Optional[Mapping] = None, title: str = None,
               status: str = None) -> Document:
        """
        Partial update used by the PATCH endpoint.

        Setting status to 'generated' runs the export; moving a generated
        document back to 'draft' is rejected.
        """
        document = self.get(document_id)
        requested = self._parse_status(status) if status is not None else None

        if requested == DocumentStatus.DRAFT and document.is_generated:
            raise InvalidTransitionError(document.status, requested.value)

        try:
            if answers is not None:
                document.answers = check_answers(answers)
            if title is not None:
                document.title = self._clean_title(title)
            document.touch()

            if requested == DocumentStatus.GENERATED:
                self._export(document)
            else:
                db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        return document

    def delete(self, document_id) -> None:
        document = self.get(document_id)
        try:
            db.session.delete(document)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info(f"Deleted document {document_id} for user {self.owner_id}")

    # =========================================================================
    # EXPORT
    # =========================================================================

    def request_export(self, document_id) -> str:
        """
        Render the document and hand it to the artifact generator.

        Only a complete answer set may be exported. The status becomes
        'generated' only after the generator succeeds.

        Returns:
            The artifact reference

        Raises:
            IncompleteAnswersError: body variables without answers; nothing changes
            ArtifactGenerationError: generator failure, surfaced unchanged
        """
        document = self.get(document_id)
        try:
            return self._export(document)
        except Exception:
            db.session.rollback()
            raise

    def _export(self, document: Document) -> str:
        definition = self.template_for(document)
        answers = document.answers

        validation = TemplateRenderer.validate(definition.body, answers)
        if not validation.complete:
            logger.info(f"Export of document {document.id} blocked, missing: {validation.missing}")
            raise IncompleteAnswersError(validation.missing)

        rendered = TemplateRenderer.render(definition.body, answers)
        artifact_ref = self.generator.generate(rendered, document.title)

        document.status = DocumentStatus.GENERATED.value
        document.artifact_ref = artifact_ref
        document.touch()
        db.session.commit()

        logger.info(f"Exported document {document.id} -> {artifact_ref}")
        return artifact_ref

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _parse_status(status: str) -> DocumentStatus:
        try:
            return DocumentStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status '{status}'", field='status')

    @staticmethod
    def _clean_title(title: str) -> str:
        title = (title or '').strip()
        if not title:
            raise ValidationError("Title cannot be empty", field='title')
        return title[:255]

    @staticmethod
    def _commit(document: Document) -> None:
        try:
            db.session.add(document)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
