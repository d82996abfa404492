"""
Shared fixtures: an app on in-memory SQLite, two users, one seeded template
and a client already logged in as the first user.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from app import create_app
from config import TestConfig
from models import db, User
from services.documents import (
    CategoryDefinition,
    DocumentLifecycle,
    MockArtifactGenerator,
    TemplateDefinition,
    TemplateRepository
)

CLAIM_TEMPLATE = {
    'title': 'Claim',
    'description': 'A short claim used by the tests',
    'applicant_type': 'physical',
    'tags': 'claim, test',
    'body': '<p>Hello {{name}}, code {{code}}.</p><p>Amount: {{amount}}</p>',
    'fields': [
        {'field_name': 'name', 'label': 'Name', 'field_type': 'text', 'required': True,
         'step_number': 1, 'order': 1, 'validation_rules': {'minLength': 2}},
        {'field_name': 'code', 'label': 'Code', 'field_type': 'text',
         'step_number': 1, 'order': 2},
        {'field_name': 'amount', 'label': 'Amount', 'field_type': 'number', 'required': True,
         'step_number': 2, 'order': 1, 'validation_rules': {'min': 1}},
    ],
}


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, password='correct-horse'):
    user = User(email=email, name=email.split('@')[0])
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def alice(app):
    return make_user('alice@example.com')


@pytest.fixture
def bob(app):
    return make_user('bob@example.com')


@pytest.fixture
def category(app):
    category = TemplateRepository.get_or_create_category(
        CategoryDefinition(slug='banks', name='Banks', icon='account_balance_wallet', sort_order=3)
    )
    db.session.commit()
    return category


@pytest.fixture
def template(app, category):
    template = TemplateRepository.create_from_definition(
        TemplateDefinition.from_dict(CLAIM_TEMPLATE), category
    )
    db.session.commit()
    return template


@pytest.fixture
def generator():
    return MockArtifactGenerator()


@pytest.fixture
def lifecycle(alice, generator):
    return DocumentLifecycle(alice.id, generator=generator)


@pytest.fixture
def auth_client(client, alice):
    response = client.post('/api/auth/login', json={
        'email': 'alice@example.com',
        'password': 'correct-horse'
    })
    assert response.status_code == 200
    return client
