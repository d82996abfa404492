# models.py
import json
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(120))
    password_hash = db.Column(db.String(256))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                           onupdate=datetime.utcnow)

    documents = db.relationship('Document', backref='owner', lazy='dynamic',
                                cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {'id': self.id, 'email': self.email, 'name': self.name}

    def __repr__(self):
        return f'<User {self.email}>'


class Category(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    icon = db.Column(db.String(60), nullable=False, default='description')
    description = db.Column(db.Text)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    templates = db.relationship('Template', backref='category', lazy=True)

    def __repr__(self):
        return f'<Category {self.slug}>'


class Template(db.Model):
    """
    A document blueprint.

    Tags are stored comma-delimited and the body lives in ``content_json``
    under the ``html`` key; decode through TemplateDefinition.from_model.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    category_id = db.Column(db.Integer, db.ForeignKey('category.id'), nullable=False)
    applicant_type = db.Column(db.String(20), nullable=False, default='both')
    tags = db.Column(db.Text, nullable=False, default='')
    content_json = db.Column(db.Text, nullable=False, default='{}')
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    popularity_score = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                           onupdate=datetime.utcnow)

    form_fields = db.relationship('FormField', backref='template', lazy=True,
                                  cascade='all, delete-orphan',
                                  order_by='FormField.step_number')
    documents = db.relationship('Document', backref='template', lazy='dynamic')

    def __repr__(self):
        return f'<Template {self.title}>'


class FormField(db.Model):
    __table_args__ = (
        db.UniqueConstraint('template_id', 'field_name', name='uq_form_field_template_name'),
    )

    id = db.Column(db.Integer, primary_key=True)
    template_id = db.Column(db.Integer, db.ForeignKey('template.id'), nullable=False)
    field_name = db.Column(db.String(100), nullable=False)
    label = db.Column(db.String(255), nullable=False)
    field_type = db.Column(db.String(20), nullable=False, default='text')
    placeholder = db.Column(db.String(255))
    is_required = db.Column(db.Boolean, nullable=False, default=False)
    step_number = db.Column(db.Integer, nullable=False, default=1)
    order = db.Column(db.Integer, nullable=False, default=0)
    validation_rules = db.Column(db.Text)  # JSON object
    options = db.Column(db.Text)           # comma-delimited, select fields only

    def __repr__(self):
        return f'<FormField {self.field_name} step={self.step_number}>'


class Document(db.Model):
    # Status values
    STATUS_DRAFT = 'draft'
    STATUS_GENERATED = 'generated'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    template_id = db.Column(db.Integer, db.ForeignKey('template.id'), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_DRAFT)
    filled_data = db.Column(db.Text, nullable=False, default='{}')
    artifact_ref = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    @property
    def answers(self):
        """Decoded answer map. Absent keys mean "not yet answered"."""
        try:
            data = json.loads(self.filled_data or '{}')
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    @answers.setter
    def answers(self, value):
        self.filled_data = json.dumps(value or {}, default=str, ensure_ascii=False)

    @property
    def is_generated(self):
        return self.status == self.STATUS_GENERATED

    def touch(self):
        self.updated_at = datetime.utcnow()

    def to_dict(self, include_template=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'template_id': self.template_id,
            'title': self.title,
            'status': self.status,
            'filled_data': self.answers,
            'artifact_ref': self.artifact_ref,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_template and self.template:
            data['template'] = {
                'id': self.template.id,
                'title': self.template.title,
                'category': self.template.category.name if self.template.category else None,
            }
        return data

    def __repr__(self):
        return f'<Document {self.id} {self.status}>'
