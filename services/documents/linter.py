"""
Template Linter

Authoring-time checks that bind body tokens to form fields.

Errors (template is unusable):
    - a body token with no matching field
    - duplicate field names
    - select fields without options
    - step numbers below 1
    - minLength greater than maxLength, or min greater than max

Warnings (allowed, but probably a mistake):
    - a field that never appears in the body (it may feed metadata only)
    - options declared on a non-select field
    - unrecognized validation rule keys
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List

from .exceptions import ConfigurationError
from .renderer import TemplateRenderer
from .types import FieldType, TemplateDefinition

logger = logging.getLogger(__name__)


@dataclass
class LintReport:
    """Findings for one template."""
    title: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ConfigurationError(
                f"Template '{self.title}' is invalid:\n" + "\n".join(f"  - {e}" for e in self.errors)
            )


class TemplateLinter:

    @classmethod
    def lint(cls, definition: TemplateDefinition) -> LintReport:
        report = LintReport(title=definition.title)

        tokens = TemplateRenderer.ordered_variables(definition.body)
        names = definition.field_names()
        known = set(names)

        for token in tokens:
            if token not in known:
                report.errors.append(f"Body token '{{{{{token}}}}}' has no form field")

        duplicates = sorted(n for n, count in Counter(names).items() if count > 1)
        if duplicates:
            report.errors.append(f"Duplicate field names: {', '.join(duplicates)}")

        used = set(tokens)
        for f in definition.fields:
            if f.field_name not in used:
                report.warnings.append(f"Field '{f.field_name}' is not used in the body")

            if f.step_number < 1:
                report.errors.append(f"Field '{f.field_name}' has step number {f.step_number}")

            if f.field_type == FieldType.SELECT and not f.options:
                report.errors.append(f"Select field '{f.field_name}' has no options")
            elif f.field_type != FieldType.SELECT and f.options:
                report.warnings.append(f"Field '{f.field_name}' declares options but is {f.field_type.value}")

            rules = f.rules
            if rules.min_length is not None and rules.max_length is not None \
                    and rules.min_length > rules.max_length:
                report.errors.append(f"Field '{f.field_name}' has minLength > maxLength")
            if rules.min is not None and rules.max is not None and rules.min > rules.max:
                report.errors.append(f"Field '{f.field_name}' has min > max")
            for key in rules.unknown_keys:
                report.warnings.append(f"Field '{f.field_name}' has unknown validation rule '{key}'")

        for warning in report.warnings:
            logger.warning(f"{definition.title}: {warning}")

        return report
