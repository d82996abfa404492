"""
Field Validators

One validator per FieldType, registered by tag. Each validator takes a
field definition and a non-blank answer and returns the first
FailureReason it finds, or None when the answer is acceptable.

Requiredness is handled by the caller (see ``check_field``): blank
optional answers are never checked further.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from .renderer import is_blank, stringify
from .types import FailureReason, FieldDefinition, FieldType

logger = logging.getLogger(__name__)

# Type alias for validator functions
ValidatorFunc = Callable[[FieldDefinition, Any], Optional[FailureReason]]


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_string_rules(field: FieldDefinition, text: str) -> Optional[FailureReason]:
    """minLength, maxLength and pattern against a string answer."""
    rules = field.rules
    if rules.min_length is not None and len(text) < rules.min_length:
        return FailureReason.TOO_SHORT
    if rules.max_length is not None and len(text) > rules.max_length:
        return FailureReason.TOO_LONG
    if rules.pattern is not None and not re.search(rules.pattern, text):
        return FailureReason.PATTERN_MISMATCH
    return None


def check_range_rules(field: FieldDefinition, number) -> Optional[FailureReason]:
    """min and max against a numeric answer."""
    rules = field.rules
    if rules.min is not None and number < rules.min:
        return FailureReason.OUT_OF_RANGE
    if rules.max is not None and number > rules.max:
        return FailureReason.OUT_OF_RANGE
    return None


def coerce_number(value: Any) -> Optional[float]:
    """
    Read a numeric answer.

    Examples:
        5 -> 5
        "12.5" -> 12.5
        " 3 " -> 3.0
        "abc" -> None
        True -> None
    """
    if isinstance(value, bool):
        return None
    if _is_numeric(value):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError):
            return None
    if not math.isfinite(number):
        return None
    return number


def coerce_date(value: Any) -> Optional[date]:
    """Read an ISO-8601 (YYYY-MM-DD) date answer."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def validate_text(field: FieldDefinition, value: Any) -> Optional[FailureReason]:
    """Text and textarea: string rules, plus range rules for numeric-looking answers."""
    reason = check_string_rules(field, stringify(value))
    if reason is not None or (field.rules.min is None and field.rules.max is None):
        return reason
    number = coerce_number(value)
    if number is not None:
        reason = check_range_rules(field, number)
    return reason


def validate_number(field: FieldDefinition, value: Any) -> Optional[FailureReason]:
    number = coerce_number(value)
    if number is None:
        return FailureReason.INVALID_NUMBER
    if isinstance(value, str):
        reason = check_string_rules(field, value)
        if reason is not None:
            return reason
    return check_range_rules(field, number)


def validate_date(field: FieldDefinition, value: Any) -> Optional[FailureReason]:
    if coerce_date(value) is None:
        return FailureReason.INVALID_DATE
    return check_string_rules(field, stringify(value))


def validate_select(field: FieldDefinition, value: Any) -> Optional[FailureReason]:
    text = stringify(value)
    if field.options and text not in field.options:
        return FailureReason.INVALID_OPTION
    return check_string_rules(field, text)


# Registry: exactly one validator per field type
VALIDATORS: Dict[FieldType, ValidatorFunc] = {
    FieldType.TEXT: validate_text,
    FieldType.TEXTAREA: validate_text,
    FieldType.NUMBER: validate_number,
    FieldType.DATE: validate_date,
    FieldType.SELECT: validate_select,
}


def check_field(field: FieldDefinition, answers: Dict[str, Any]) -> Optional[FailureReason]:
    """
    Validate one field against the answer map.

    Returns:
        The first failure found, or None if the answer is acceptable
    """
    value = answers.get(field.field_name)

    if is_blank(value):
        return FailureReason.REQUIRED if field.required else None

    validator = VALIDATORS[field.field_type]
    return validator(field, value)


FAILURE_MESSAGES = {
    FailureReason.REQUIRED: "{label} is required",
    FailureReason.TOO_SHORT: "{label} must be at least {rules.min_length} characters",
    FailureReason.TOO_LONG: "{label} must be at most {rules.max_length} characters",
    FailureReason.PATTERN_MISMATCH: "{label} has an invalid format",
    FailureReason.OUT_OF_RANGE: "{label} is out of the allowed range",
    FailureReason.INVALID_NUMBER: "{label} must be a number",
    FailureReason.INVALID_DATE: "{label} must be a date (YYYY-MM-DD)",
    FailureReason.INVALID_OPTION: "{label} must be one of the listed options",
}


def describe_failure(field: FieldDefinition, reason: FailureReason) -> str:
    """Human-readable message for a field failure."""
    return FAILURE_MESSAGES[reason].format(label=field.label, rules=field.rules)
