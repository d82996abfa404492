"""
Document System Type Definitions

Immutable views of templates, categories and form fields.
Built from ORM rows (``from_model``) or catalog YAML (``from_dict``)
and never mutated by the engine.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ApplicantType(Enum):
    """Who a template is written for."""
    PHYSICAL = "physical"
    LEGAL = "legal"
    BOTH = "both"


class FieldType(Enum):
    """The closed set of input kinds a form field can take."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    TEXTAREA = "textarea"


class DocumentStatus(Enum):
    """Document status. GENERATED is terminal."""
    DRAFT = "draft"
    GENERATED = "generated"


class FailureReason(Enum):
    """Why a single field failed step validation."""
    REQUIRED = "Required"
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    PATTERN_MISMATCH = "PatternMismatch"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_NUMBER = "InvalidNumber"
    INVALID_DATE = "InvalidDate"
    INVALID_OPTION = "InvalidOption"


# Wire key -> attribute name
RULE_KEYS = {
    'minLength': 'min_length',
    'maxLength': 'max_length',
    'pattern': 'pattern',
    'min': 'min',
    'max': 'max',
}


def split_csv(value: Any) -> Tuple[str, ...]:
    """
    Decode a comma-delimited wire string into a tuple of items.

    Lists and tuples pass through (catalog YAML uses real lists).
    Whitespace around items is stripped and empty items dropped.
    """
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(',')
    return tuple(s for s in (str(i).strip() for i in items) if s)


def join_csv(values) -> str:
    """Encode items into the comma-delimited wire string."""
    return ','.join(str(v).strip() for v in values if str(v).strip())


def parse_json_object(value: Any, what: str = 'value') -> Dict[str, Any]:
    """Decode a JSON-object wire string. Dicts pass through, blanks become {}."""
    if value is None or value == '':
        return {}
    if isinstance(value, dict):
        return dict(value)
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid JSON in {what}: {e}")
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigurationError(f"{what} must be a JSON object")
    return parsed


def _as_number(key: str, value: Any):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Validation rule '{key}' must be a number, got {value!r}")
    return value


@dataclass(frozen=True)
class ValidationRules:
    """
    Declared per-field constraints.

    Every attribute is optional; None means "no constraint of that kind".
    Keys that are not recognized are kept in ``unknown_keys`` so the
    linter can warn about them.
    """
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    unknown_keys: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> 'ValidationRules':
        """Build rules from a dict or its JSON wire string."""
        raw = parse_json_object(data, 'validation rules')
        kwargs = {}
        unknown = []

        for key, value in raw.items():
            attr = RULE_KEYS.get(key)
            if attr is None:
                logger.debug(f"Ignoring unknown validation rule '{key}'")
                unknown.append(key)
                continue
            if value is None:
                continue

            if attr == 'pattern':
                try:
                    re.compile(value)
                except (re.error, TypeError) as e:
                    raise ConfigurationError(f"Invalid pattern {value!r}: {e}")
                kwargs[attr] = value
            elif attr in ('min_length', 'max_length'):
                kwargs[attr] = int(_as_number(key, value))
            else:
                kwargs[attr] = _as_number(key, value)

        return cls(unknown_keys=tuple(unknown), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation with only the declared keys."""
        return {
            key: getattr(self, attr)
            for key, attr in RULE_KEYS.items()
            if getattr(self, attr) is not None
        }


@dataclass(frozen=True)
class CategoryDefinition:
    """Grouping metadata for templates."""
    slug: str
    name: str
    icon: str = 'description'
    description: Optional[str] = None
    sort_order: int = 0

    @classmethod
    def from_model(cls, category) -> 'CategoryDefinition':
        return cls(
            slug=category.slug,
            name=category.name,
            icon=category.icon or 'description',
            description=category.description,
            sort_order=category.sort_order or 0
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategoryDefinition':
        return cls(
            slug=data['slug'],
            name=data['name'],
            icon=data.get('icon', 'description'),
            description=data.get('description'),
            sort_order=data.get('sort_order', 0)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slug': self.slug,
            'name': self.name,
            'icon': self.icon,
            'description': self.description,
            'sort_order': self.sort_order,
        }


@dataclass(frozen=True)
class FieldDefinition:
    """
    One input descriptor of a template's form.

    Attributes:
        field_name: Identifier, unique within the template; binds to {{field_name}}
        label: Human label
        field_type: One of FieldType
        step_number: Form page this field belongs to (1-based)
        order: Sort key within the step
        rules: Declared constraints
        options: Allowed values, only meaningful for select fields
    """
    field_name: str
    label: str
    field_type: FieldType
    step_number: int = 1
    order: int = 0
    required: bool = False
    placeholder: Optional[str] = None
    rules: ValidationRules = field(default_factory=ValidationRules)
    options: Tuple[str, ...] = ()

    @classmethod
    def from_model(cls, form_field) -> 'FieldDefinition':
        try:
            field_type = FieldType(form_field.field_type)
        except ValueError:
            raise ConfigurationError(
                f"Field '{form_field.field_name}' has unknown type '{form_field.field_type}'"
            )
        return cls(
            field_name=form_field.field_name,
            label=form_field.label,
            field_type=field_type,
            step_number=form_field.step_number,
            order=form_field.order or 0,
            required=bool(form_field.is_required),
            placeholder=form_field.placeholder,
            rules=ValidationRules.from_dict(form_field.validation_rules),
            options=split_csv(form_field.options)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FieldDefinition':
        try:
            field_type = FieldType(data.get('field_type', 'text'))
        except ValueError:
            raise ConfigurationError(
                f"Field '{data.get('field_name')}' has unknown type '{data.get('field_type')}'"
            )
        return cls(
            field_name=data['field_name'],
            label=data.get('label') or data['field_name'],
            field_type=field_type,
            step_number=data.get('step_number', 1),
            order=data.get('order', 0),
            required=bool(data.get('required', False)),
            placeholder=data.get('placeholder'),
            rules=ValidationRules.from_dict(data.get('validation_rules')),
            options=split_csv(data.get('options'))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'field_name': self.field_name,
            'label': self.label,
            'field_type': self.field_type.value,
            'placeholder': self.placeholder,
            'required': self.required,
            'step_number': self.step_number,
            'order': self.order,
            'validation_rules': self.rules.to_dict(),
            'options': list(self.options),
        }


@dataclass(frozen=True)
class TemplateDefinition:
    """
    Complete, decoded description of a template.

    This is the structure the renderer, form engine and lifecycle
    work from. Fields are kept sorted by (step, order, name).
    """
    title: str
    body: str
    fields: Tuple[FieldDefinition, ...] = ()
    id: Optional[int] = None
    description: str = ''
    category: Optional[CategoryDefinition] = None
    applicant_type: ApplicantType = ApplicantType.BOTH
    tags: Tuple[str, ...] = ()
    is_active: bool = True
    popularity_score: int = 0

    def get_field(self, field_name: str) -> Optional[FieldDefinition]:
        """Get a field definition by its name."""
        return next((f for f in self.fields if f.field_name == field_name), None)

    def field_names(self) -> List[str]:
        return [f.field_name for f in self.fields]

    @staticmethod
    def _sorted(fields) -> Tuple[FieldDefinition, ...]:
        return tuple(sorted(fields, key=lambda f: (f.step_number, f.order, f.field_name)))

    @classmethod
    def from_model(cls, template) -> 'TemplateDefinition':
        """
        Decode a Template row and its FormField rows.

        Tags and options arrive comma-delimited, rules and content as JSON text.
        """
        content = parse_json_object(template.content_json, 'template content')
        category = CategoryDefinition.from_model(template.category) if template.category else None

        return cls(
            id=template.id,
            title=template.title,
            description=template.description or '',
            category=category,
            applicant_type=ApplicantType(template.applicant_type or 'both'),
            tags=split_csv(template.tags),
            body=content.get('html') or '',
            is_active=bool(template.is_active),
            popularity_score=template.popularity_score or 0,
            fields=cls._sorted(FieldDefinition.from_model(f) for f in template.form_fields)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TemplateDefinition':
        """Create a TemplateDefinition from a parsed catalog YAML dict."""
        category = None
        if isinstance(data.get('category'), dict):
            category = CategoryDefinition.from_dict(data['category'])

        try:
            applicant_type = ApplicantType(data.get('applicant_type', 'both'))
        except ValueError:
            raise ConfigurationError(f"Unknown applicant type '{data.get('applicant_type')}'")

        return cls(
            id=data.get('id'),
            title=data['title'],
            description=data.get('description', ''),
            category=category,
            applicant_type=applicant_type,
            tags=split_csv(data.get('tags')),
            body=data.get('body') or '',
            is_active=data.get('is_active', True),
            popularity_score=data.get('popularity_score', 0),
            fields=cls._sorted(FieldDefinition.from_dict(f) for f in data.get('fields', []))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Decoded JSON shape returned by the template endpoint."""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category.to_dict() if self.category else None,
            'applicant_type': self.applicant_type.value,
            'tags': list(self.tags),
            'content_json': {'html': self.body},
            'is_active': self.is_active,
            'popularity_score': self.popularity_score,
            'form_fields': [f.to_dict() for f in self.fields],
        }
