"""
Template Catalog Loader

Loads, validates and seeds template definitions from YAML files.
Validates the whole catalog up front and fails fast if anything is invalid.

Layout:
    catalog/
        categories.yml        list of categories
        templates/*.yml       one template per file
        schema/v1.0.json      JSON schema for template files
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import jsonschema
import yaml

from .exceptions import ConfigurationError, DocumentError
from .linter import TemplateLinter
from .types import CategoryDefinition, TemplateDefinition

logger = logging.getLogger(__name__)

# Paths
CATALOG_DIR = Path(__file__).parent.parent.parent / 'catalog'


@dataclass(frozen=True)
class CatalogEntry:
    """A validated template plus the slug of the category it belongs to."""
    category_slug: str
    definition: TemplateDefinition
    source: str


class TemplateLoader:
    """
    Singleton loader for the template catalog.

    Usage:
        # From the seed command
        TemplateLoader.load_all()
        TemplateLoader.seed()
    """

    _categories: Dict[str, CategoryDefinition] = {}
    _entries: List[CatalogEntry] = []
    _schemas: Dict[str, dict] = {}
    _validated: bool = False

    @classmethod
    def load_all(cls, catalog_dir: Optional[Path] = None) -> None:
        """
        Load and validate every category and template.

        Raises:
            ConfigurationError: listing every problem found
        """
        catalog_dir = Path(catalog_dir or CATALOG_DIR)
        cls.clear()
        errors = []

        cls._load_schemas(catalog_dir / 'schema')

        if not catalog_dir.exists():
            logger.warning(f"Catalog directory not found: {catalog_dir}")
            return

        try:
            cls._load_categories(catalog_dir / 'categories.yml')
        except (ConfigurationError, yaml.YAMLError, KeyError) as e:
            errors.append(f"categories.yml: {e}")

        template_files = sorted((catalog_dir / 'templates').glob('*.yml')) + \
            sorted((catalog_dir / 'templates').glob('*.yaml'))

        if not template_files:
            logger.warning(f"No template definitions found in {catalog_dir / 'templates'}")

        titles = set()
        for path in template_files:
            try:
                entry = cls._load_and_validate(path)

                if entry.category_slug not in cls._categories:
                    errors.append(f"{path.name}: Unknown category '{entry.category_slug}'")
                    continue

                key = (entry.category_slug, entry.definition.title)
                if key in titles:
                    errors.append(f"{path.name}: Duplicate title '{entry.definition.title}'")
                    continue

                titles.add(key)
                cls._entries.append(entry)
                logger.debug(f"Loaded template definition: {entry.definition.title}")

            except (DocumentError, yaml.YAMLError, KeyError) as e:
                errors.append(f"{path.name}: {e}")

        if errors:
            error_msg = "Template catalog errors:\n" + "\n".join(f"  - {e}" for e in errors)
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        cls._validated = True
        logger.info(f"Loaded {len(cls._categories)} categories and {len(cls._entries)} template(s)")

    @classmethod
    def _load_schemas(cls, schema_dir: Path) -> None:
        """Load JSON schemas for validation."""
        if not schema_dir.exists():
            logger.warning(f"Schema directory not found: {schema_dir}")
            return

        for schema_file in schema_dir.glob('v*.json'):
            try:
                cls._schemas[schema_file.stem] = json.loads(schema_file.read_text(encoding='utf-8'))
                logger.debug(f"Loaded schema: {schema_file.stem}")
            except ValueError as e:
                logger.error(f"Failed to load schema {schema_file}: {e}")

    @classmethod
    def _load_categories(cls, path: Path) -> None:
        if not path.exists():
            raise ConfigurationError(f"Missing {path.name}")

        raw = yaml.safe_load(path.read_text(encoding='utf-8')) or []
        for item in raw:
            category = CategoryDefinition.from_dict(item)
            if category.slug in cls._categories:
                raise ConfigurationError(f"Duplicate category slug '{category.slug}'")
            cls._categories[category.slug] = category

    @classmethod
    def _validate_schema(cls, raw: dict) -> None:
        version = str(raw.get('schema_version', '1.0'))
        schema = cls._schemas.get(f"v{version}")
        if schema is None:
            if cls._schemas:
                raise ConfigurationError(f"Unknown schema version: {version}")
            return
        try:
            jsonschema.validate(raw, schema)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Schema validation failed: {e.message}")

    @classmethod
    def parse(cls, raw: dict, source: str = '<string>') -> CatalogEntry:
        """Validate a parsed template dict and lint it."""
        if not raw:
            raise ConfigurationError("Empty template definition")

        # 1. Schema validation
        cls._validate_schema(raw)

        # 2. Convert to typed dataclass
        definition = TemplateDefinition.from_dict(raw)

        # 3. Token/field binding
        TemplateLinter.lint(definition).raise_for_errors()

        return CatalogEntry(category_slug=raw['category'], definition=definition, source=source)

    @classmethod
    def _load_and_validate(cls, path: Path) -> CatalogEntry:
        """Load a YAML file and validate it."""
        raw = yaml.safe_load(path.read_text(encoding='utf-8'))
        return cls.parse(raw, source=path.name)

    @classmethod
    def validate_yaml_content(cls, yaml_content: str) -> List[str]:
        """
        Validate YAML content without loading it.

        Returns:
            List of validation error messages (empty if valid)
        """
        try:
            cls.parse(yaml.safe_load(yaml_content))
        except yaml.YAMLError as e:
            return [f"YAML syntax error: {e}"]
        except (DocumentError, KeyError) as e:
            return [str(e)]
        return []

    @classmethod
    def categories(cls) -> List[CategoryDefinition]:
        return sorted(cls._categories.values(), key=lambda c: c.sort_order)

    @classmethod
    def entries(cls) -> List[CatalogEntry]:
        return list(cls._entries)

    @classmethod
    def clear(cls) -> None:
        """Clear all cached definitions. Mainly for testing."""
        cls._categories.clear()
        cls._entries.clear()
        cls._schemas.clear()
        cls._validated = False

    @classmethod
    def seed(cls) -> Dict[str, int]:
        """
        Insert missing categories and templates into the database.

        Categories match by slug, templates by title within their category,
        so running this twice adds nothing the second time.

        Returns:
            Counts of created categories and templates
        """
        from models import db, Category, Template
        from .repository import TemplateRepository

        if not cls._validated:
            cls.load_all()

        created = {'categories': 0, 'templates': 0}
        try:
            categories = {}
            for definition in cls.categories():
                if Category.query.filter_by(slug=definition.slug).first() is None:
                    created['categories'] += 1
                categories[definition.slug] = TemplateRepository.get_or_create_category(definition)

            for entry in cls._entries:
                category = categories[entry.category_slug]
                exists = Template.query.filter_by(
                    title=entry.definition.title,
                    category_id=category.id
                ).first()
                if exists:
                    continue
                TemplateRepository.create_from_definition(entry.definition, category)
                created['templates'] += 1

            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Seeded {created['categories']} categories and {created['templates']} templates")
        return created
