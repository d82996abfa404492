"""
Template catalog tests.

Validates every catalog definition on each test run, so authoring errors
are caught before deployment.
"""

import textwrap

import pytest

from models import Category, Template
from services.documents import ConfigurationError, TemplateDefinition, TemplateLoader, TemplateRenderer

VALID_TEMPLATE = textwrap.dedent("""\
    title: Simple note
    category: other
    body: "Dear {{name}}"
    fields:
      - field_name: name
        label: Name
        field_type: text
        required: true
""")


def write_catalog(root, templates):
    (root / 'templates').mkdir(parents=True)
    (root / 'categories.yml').write_text(textwrap.dedent("""\
        - slug: other
          name: Other organizations
          sort_order: 6
    """), encoding='utf-8')
    for name, content in templates.items():
        (root / 'templates' / name).write_text(content, encoding='utf-8')
    return root


@pytest.fixture(autouse=True)
def clear_loader():
    TemplateLoader.clear()
    yield
    TemplateLoader.clear()


class TestCatalog:
    """The shipped catalog."""

    def test_load_all_succeeds(self):
        TemplateLoader.load_all()
        assert TemplateLoader.entries()

    def test_catalog_has_templates_and_categories(self):
        TemplateLoader.load_all()
        assert len(TemplateLoader.entries()) >= 3
        assert [c.slug for c in TemplateLoader.categories()][0] == 'public-services'

    def test_every_body_token_has_a_field(self):
        TemplateLoader.load_all()
        for entry in TemplateLoader.entries():
            definition = entry.definition
            names = set(definition.field_names())
            assert TemplateRenderer.extract_variables(definition.body) <= names, entry.source

    def test_bank_claim_amount_has_minimum(self):
        TemplateLoader.load_all()
        bank = next(e.definition for e in TemplateLoader.entries() if e.category_slug == 'banks')
        assert bank.get_field('amount').rules.min == 1


class TestLoaderValidation:
    """Fail-fast validation of authored YAML."""

    def test_valid_yaml_content(self):
        TemplateLoader.load_all()
        assert TemplateLoader.validate_yaml_content(VALID_TEMPLATE) == []

    def test_schema_violation(self):
        TemplateLoader.load_all()
        errors = TemplateLoader.validate_yaml_content(VALID_TEMPLATE.replace('text', 'checkbox'))
        assert errors and 'Schema validation failed' in errors[0]

    def test_unbound_token(self):
        errors = TemplateLoader.validate_yaml_content(VALID_TEMPLATE.replace('{{name}}', '{{who}}'))
        assert errors and 'who' in errors[0]

    def test_yaml_syntax_error(self):
        errors = TemplateLoader.validate_yaml_content("title: [unclosed")
        assert errors[0].startswith('YAML syntax error')

    def test_unknown_category_reported(self, tmp_path):
        catalog = write_catalog(tmp_path / 'catalog', {
            'note.yml': VALID_TEMPLATE.replace('category: other', 'category: nowhere'),
        })
        with pytest.raises(ConfigurationError) as exc_info:
            TemplateLoader.load_all(catalog)
        assert "Unknown category 'nowhere'" in str(exc_info.value)

    def test_all_errors_reported_together(self, tmp_path):
        catalog = write_catalog(tmp_path / 'catalog', {
            'a.yml': VALID_TEMPLATE.replace('{{name}}', '{{ghost}}'),
            'b.yml': VALID_TEMPLATE.replace('category: other', 'category: nowhere'),
        })
        with pytest.raises(ConfigurationError) as exc_info:
            TemplateLoader.load_all(catalog)
        message = str(exc_info.value)
        assert 'a.yml' in message and 'b.yml' in message

    def test_duplicate_titles_rejected(self, tmp_path):
        catalog = write_catalog(tmp_path / 'catalog', {
            'a.yml': VALID_TEMPLATE,
            'b.yml': VALID_TEMPLATE,
        })
        with pytest.raises(ConfigurationError):
            TemplateLoader.load_all(catalog)


class TestSeed:
    """Seeding the database from the catalog."""

    def test_seed_is_idempotent(self, app):
        TemplateLoader.load_all()
        first = TemplateLoader.seed()
        second = TemplateLoader.seed()

        assert first['categories'] == 6
        assert first['templates'] == len(TemplateLoader.entries())
        assert second == {'categories': 0, 'templates': 0}
        assert Category.query.count() == 6

    def test_seeded_template_decodes_to_same_definition(self, app):
        TemplateLoader.load_all()
        TemplateLoader.seed()
        entry = TemplateLoader.entries()[0]

        row = Template.query.filter_by(title=entry.definition.title).one()
        decoded = TemplateDefinition.from_model(row)

        assert decoded.body == entry.definition.body
        assert decoded.tags == entry.definition.tags
        assert decoded.fields == entry.definition.fields
        assert decoded.category.slug == entry.category_slug
