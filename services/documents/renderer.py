"""
Template Renderer

Flat named substitution of ``{{identifier}}`` tokens in a template body.

    text = TemplateRenderer.render(body, answers)
    result = TemplateRenderer.validate(body, answers)
    if not result.complete:
        print(result.missing)

Rendering never fails. Tokens without a usable answer are replaced by a
placeholder that names the identifier, so output never leaks raw token
syntax. All tokens are substituted in a single pass; a value that itself
looks like a token is inserted verbatim and never re-scanned.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Set

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r'\{\{(\w+)\}\}', re.ASCII)

# Placeholder presets; {name} is the missing identifier
TEXT_PLACEHOLDER = '[{name}]'
HTML_PLACEHOLDER = '<span class="text-gray-400 italic">[{name}]</span>'


def is_blank(value: Any) -> bool:
    """An answer counts as missing when it is None or the empty string."""
    return value is None or value == ''


def stringify(value: Any) -> str:
    """
    Canonical, locale-independent string form of an answer.

    Examples:
        "Alice" -> "Alice"
        7 -> "7"
        7.0 -> "7"
        2.5 -> "2.5"
        True -> "true"
        date(2026, 1, 15) -> "2026-01-15"
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class RenderValidation:
    """Completeness report for a body against an answer map."""
    complete: bool
    missing: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'complete': self.complete, 'missing': list(self.missing)}


@dataclass(frozen=True)
class RenderPreview:
    """Rendered text plus the completeness report it was produced with."""
    text: str
    complete: bool
    missing: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.text, 'complete': self.complete, 'missing': list(self.missing)}


class TemplateRenderer:
    """Pure substitution and completeness checks over a body and answers."""

    @staticmethod
    def _body(body: Any) -> str:
        if isinstance(body, str):
            return body
        if body is not None:
            logger.warning(f"Template body is not a string: {type(body).__name__}")
        return ''

    @classmethod
    def render(
        cls,
        body: str,
        answers: Optional[Mapping[str, Any]],
        placeholder: str = TEXT_PLACEHOLDER
    ) -> str:
        """
        Substitute answers into the body.

        Args:
            body: Template body containing {{identifier}} tokens
            answers: Flat map of identifier -> scalar value
            placeholder: Format string for unanswered tokens, with {name}

        Returns:
            The substituted text. Never raises.
        """
        answers = answers or {}

        def substitute(match: re.Match) -> str:
            name = match.group(1)
            value = answers.get(name)
            if is_blank(value):
                return placeholder.format(name=name)
            return stringify(value)

        return TOKEN_PATTERN.sub(substitute, cls._body(body))

    @classmethod
    def ordered_variables(cls, body: str) -> List[str]:
        """Distinct identifiers in order of first appearance."""
        return list(dict.fromkeys(TOKEN_PATTERN.findall(cls._body(body))))

    @classmethod
    def extract_variables(cls, body: str) -> Set[str]:
        """Set of distinct identifiers referenced anywhere in the body."""
        return set(TOKEN_PATTERN.findall(cls._body(body)))

    @classmethod
    def validate(cls, body: str, answers: Optional[Mapping[str, Any]]) -> RenderValidation:
        """
        Report which body identifiers have no usable answer.

        ``missing`` follows first-occurrence order in the body.
        This is the only gate for exporting a document.
        """
        answers = answers or {}
        missing = [
            name for name in cls.ordered_variables(body)
            if is_blank(answers.get(name))
        ]
        return RenderValidation(complete=not missing, missing=missing)

    @classmethod
    def preview(
        cls,
        body: str,
        answers: Optional[Mapping[str, Any]],
        placeholder: str = HTML_PLACEHOLDER
    ) -> RenderPreview:
        """Render and validate in one call, for live previews."""
        validation = cls.validate(body, answers)
        return RenderPreview(
            text=cls.render(body, answers, placeholder=placeholder),
            complete=validation.complete,
            missing=validation.missing
        )


# Module-level aliases for callers that prefer plain functions
render = TemplateRenderer.render
extract_variables = TemplateRenderer.extract_variables
validate = TemplateRenderer.validate
