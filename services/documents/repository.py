"""
Persistence helpers for templates and documents.

All document lookups are owner-scoped: a row owned by someone else is
reported exactly like a missing row.
"""

import json
import logging
from typing import List, Optional

from models import db, Category, Template, FormField, Document
from .exceptions import DocumentNotFoundError, TemplateNotFoundError
from .types import ApplicantType, CategoryDefinition, TemplateDefinition, join_csv

logger = logging.getLogger(__name__)


class TemplateRepository:

    @classmethod
    def get_active(cls, template_id) -> Template:
        """
        Fetch an active template row.

        Raises:
            TemplateNotFoundError: if missing or inactive
        """
        template = None
        if template_id is not None:
            template = Template.query.filter_by(id=template_id, is_active=True).first()
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    @classmethod
    def get_definition(cls, template_id) -> TemplateDefinition:
        """Fetch and decode an active template."""
        return TemplateDefinition.from_model(cls.get_active(template_id))

    SORT_ORDERS = {
        'popularity': (Template.popularity_score.desc(), Template.id),
        'newest': (Template.created_at.desc(), Template.id.desc()),
        'title': (Template.title, Template.id),
    }

    @classmethod
    def search_active(cls, category: str = None, applicant_type: str = None,
                      search: str = None, sort: str = 'popularity'):
        """
        Query active templates for the catalog page.

        A physical or legal applicant also sees templates marked 'both'.
        Returns an unexecuted query so callers can paginate it.
        """
        query = Template.query.filter(Template.is_active.is_(True))
        if category:
            query = query.join(Category).filter(Category.slug == category)
        if applicant_type and applicant_type != ApplicantType.BOTH.value:
            query = query.filter(Template.applicant_type.in_(
                [applicant_type, ApplicantType.BOTH.value]
            ))
        if search:
            pattern = f"%{search}%"
            query = query.filter(db.or_(
                Template.title.ilike(pattern),
                Template.description.ilike(pattern),
                Template.tags.ilike(pattern)
            ))
        return query.order_by(*cls.SORT_ORDERS.get(sort, cls.SORT_ORDERS['popularity']))

    @classmethod
    def categories(cls) -> List[Category]:
        return Category.query.order_by(Category.sort_order, Category.name).all()

    @classmethod
    def get_or_create_category(cls, definition: CategoryDefinition) -> Category:
        category = Category.query.filter_by(slug=definition.slug).first()
        if category is None:
            category = Category(
                slug=definition.slug,
                name=definition.name,
                icon=definition.icon,
                description=definition.description,
                sort_order=definition.sort_order
            )
            db.session.add(category)
            db.session.flush()
        return category

    @classmethod
    def create_from_definition(cls, definition: TemplateDefinition, category: Category) -> Template:
        """
        Persist a decoded template, encoding it into its wire representation.

        The caller owns the transaction.
        """
        template = Template(
            title=definition.title,
            description=definition.description,
            category_id=category.id,
            applicant_type=definition.applicant_type.value,
            tags=join_csv(definition.tags),
            content_json=json.dumps({'html': definition.body}, ensure_ascii=False),
            is_active=definition.is_active,
            popularity_score=definition.popularity_score
        )
        for f in definition.fields:
            template.form_fields.append(FormField(
                field_name=f.field_name,
                label=f.label,
                field_type=f.field_type.value,
                placeholder=f.placeholder,
                is_required=f.required,
                step_number=f.step_number,
                order=f.order,
                validation_rules=json.dumps(f.rules.to_dict()),
                options=join_csv(f.options) or None
            ))
        db.session.add(template)
        db.session.flush()
        return template


class DocumentRepository:

    @classmethod
    def find_owned(cls, owner_id, document_id) -> Optional[Document]:
        """Find by owner id + document id, or None."""
        if owner_id is None or document_id is None:
            return None
        return Document.query.filter_by(id=document_id, user_id=owner_id).first()

    @classmethod
    def get_owned(cls, owner_id, document_id) -> Document:
        """
        Find by owner id + document id.

        Raises:
            DocumentNotFoundError: if missing or owned by someone else
        """
        document = cls.find_owned(owner_id, document_id)
        if document is None:
            logger.debug(f"Document {document_id} not found for user {owner_id}")
            raise DocumentNotFoundError(document_id)
        return document

    @classmethod
    def list_for_owner(cls, owner_id, status: str = None, search: str = None) -> List[Document]:
        """List an owner's documents, newest activity first."""
        query = Document.query.filter_by(user_id=owner_id)
        if status:
            query = query.filter(Document.status == status)
        if search:
            query = query.filter(Document.title.ilike(f"%{search}%"))
        return query.order_by(Document.updated_at.desc(), Document.id.desc()).all()
