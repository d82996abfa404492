"""
Multi-Step Form Engine

Groups a template's fields into steps and enforces per-step validity
before forward navigation.

Usage:
    steps = FormEngine.steps_of(definition)
    result = FormEngine.validate_step(steps[0], answers)

    session = FormSession.start(definition)
    session.advance(answers)      # raises StepValidationError on failure
    session.go_back()
    if session.finished:
        lifecycle.request_export(document_id)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from .exceptions import StepNavigationError, StepValidationError
from .field_validators import check_field, describe_failure
from .types import FailureReason, FieldDefinition, TemplateDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    """One form page: the fields sharing a step number, in display order."""
    number: int
    fields: Tuple[FieldDefinition, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def field_names(self) -> List[str]:
        return [f.field_name for f in self.fields]


@dataclass(frozen=True)
class StepValidation:
    """Outcome of validating one step."""
    ok: bool
    failures: Dict[str, FailureReason] = field(default_factory=dict)
    messages: Dict[str, str] = field(default_factory=dict)


class FormEngine:
    """Step structure and step validation, both pure functions of their input."""

    @classmethod
    def steps_of(cls, template: TemplateDefinition) -> List[Step]:
        """
        Partition fields into steps 1..max(step_number).

        Fields are sorted by order index, ties broken by field name.
        Step numbers without fields produce empty steps.
        """
        if not template.fields:
            return []

        step_count = max(f.step_number for f in template.fields)
        by_step: Dict[int, List[FieldDefinition]] = {n: [] for n in range(1, step_count + 1)}
        for f in template.fields:
            if f.step_number in by_step:
                by_step[f.step_number].append(f)
            else:
                logger.warning(
                    f"Field '{f.field_name}' has step number {f.step_number}; it is not part of any step"
                )

        return [
            Step(number=n, fields=tuple(sorted(by_step[n], key=lambda f: (f.order, f.field_name))))
            for n in range(1, step_count + 1)
        ]

    @classmethod
    def validate_step(cls, step: Step, answers: Optional[Mapping[str, Any]]) -> StepValidation:
        """
        Check every field of a step against its declared constraints.

        Returns:
            StepValidation with one failure reason per invalid field
        """
        answers = answers or {}
        failures = {}
        messages = {}
        for f in step.fields:
            reason = check_field(f, answers)
            if reason is not None:
                failures[f.field_name] = reason
                messages[f.field_name] = describe_failure(f, reason)
        return StepValidation(ok=not failures, failures=failures, messages=messages)


class FormSession:
    """
    Navigation state for one editing session.

    Lives in memory only. Exactly one step is current; ``completed``
    marks survive backward exploration and are cleared only by a failed
    forward validation of that step.
    """

    def __init__(
        self,
        steps: List[Step],
        current_step: int = 1,
        completed: Optional[Set[int]] = None,
        visited: Optional[Set[int]] = None,
        finished: bool = False
    ):
        self.steps = list(steps)
        self.current_step = current_step
        self.completed = set(completed or ())
        self.visited = set(visited or ()) | {current_step}
        self.finished = finished

    @classmethod
    def start(cls, template: TemplateDefinition) -> 'FormSession':
        """Begin at step 1 of the template's form."""
        return cls(FormEngine.steps_of(template))

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def current(self) -> Optional[Step]:
        """The current Step, or None for a template without fields."""
        if 1 <= self.current_step <= self.total_steps:
            return self.steps[self.current_step - 1]
        return None

    @property
    def is_last_step(self) -> bool:
        return self.current_step >= self.total_steps

    def progress(self) -> Tuple[int, int]:
        return self.current_step, self.total_steps

    def advance(self, answers: Optional[Mapping[str, Any]]) -> int:
        """
        Validate the current step and move forward.

        On the last step a successful advance sets ``finished``; the
        caller then hands off to the export path.

        Returns:
            The new current step number

        Raises:
            StepValidationError: if the current step has invalid fields
        """
        step = self.current
        if step is not None:
            result = FormEngine.validate_step(step, answers)
            if not result.ok:
                self.completed.discard(step.number)
                self.finished = False
                logger.debug(f"Step {step.number} failed validation: {sorted(result.failures)}")
                raise StepValidationError(step.number, result.failures, result.messages)
            self.completed.add(step.number)

        if self.is_last_step:
            self.finished = True
        else:
            self.current_step += 1
            self.visited.add(self.current_step)
        return self.current_step

    def go_back(self) -> int:
        """Move one step back. Never validates; a no-op on step 1."""
        if self.current_step > 1:
            self.current_step -= 1
        self.finished = False
        return self.current_step

    def go_to(self, step_number: int) -> int:
        """
        Jump to a step that was already reached.

        Raises:
            StepNavigationError: for unknown or not-yet-reached steps
        """
        if not 1 <= step_number <= max(self.total_steps, 1):
            raise StepNavigationError(step_number, f"Step {step_number} does not exist")
        if step_number not in self.visited and step_number not in self.completed:
            raise StepNavigationError(step_number)
        self.current_step = step_number
        self.finished = False
        return self.current_step

    def to_dict(self) -> Dict[str, Any]:
        """Serializable navigation state (steps are rebuilt from the template)."""
        return {
            'current_step': self.current_step,
            'completed': sorted(self.completed),
            'visited': sorted(self.visited),
            'finished': self.finished,
        }

    @classmethod
    def from_dict(cls, template: TemplateDefinition, data: Optional[Dict[str, Any]]) -> 'FormSession':
        """Restore navigation state saved by ``to_dict`` for the same template."""
        steps = FormEngine.steps_of(template)
        if not data:
            return cls(steps)

        last = max(len(steps), 1)
        current = min(max(int(data.get('current_step', 1)), 1), last)
        return cls(
            steps,
            current_step=current,
            completed={n for n in data.get('completed', []) if 1 <= n <= last},
            visited={n for n in data.get('visited', []) if 1 <= n <= last},
            finished=bool(data.get('finished', False))
        )

    def describe(self) -> Dict[str, Any]:
        """State plus the current step's field names, for API responses."""
        state = self.to_dict()
        state['total_steps'] = self.total_steps
        state['fields'] = self.current.field_names() if self.current else []
        return state
