"""
Document System Exceptions

Custom exceptions for template configuration, form validation
and document lifecycle errors.
"""


class DocumentError(Exception):
    """Base exception for all document system errors."""
    pass


class ConfigurationError(DocumentError):
    """
    Raised when template configuration is invalid.

    This includes YAML syntax errors, schema validation failures,
    bad validation rules, and body tokens without a matching field.
    """
    pass


class UnauthorizedError(DocumentError):
    """Raised when an operation needs an identity and none was supplied."""
    pass


class NotFoundError(DocumentError):
    """
    Raised when a template or document cannot be found.

    Ownership mismatches raise this too, so callers can never tell
    a foreign document apart from a missing one.
    """
    pass


class TemplateNotFoundError(NotFoundError):
    def __init__(self, template_id=None):
        self.template_id = template_id
        super().__init__("Template not found")


class DocumentNotFoundError(NotFoundError):
    def __init__(self, document_id=None):
        self.document_id = document_id
        super().__init__("Document not found")


class ValidationError(DocumentError):
    """
    Raised when submitted data fails validation.

    Contains details about what specifically failed.
    """
    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class StepValidationError(ValidationError):
    """
    Raised when a form step cannot be completed.

    ``failures`` maps field name -> FailureReason for every invalid field;
    ``messages`` maps the same names to a human-readable message.
    """
    def __init__(self, step_number: int, failures: dict, messages: dict = None):
        self.step_number = step_number
        self.failures = dict(failures)
        self.messages = dict(messages or {})
        names = ", ".join(sorted(self.failures))
        super().__init__(f"Step {step_number} has invalid fields: {names}")


class IncompleteAnswersError(ValidationError):
    """
    Raised when an export is requested while body variables are unanswered.

    ``missing`` lists the identifiers in body order.
    """
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing answers: {', '.join(self.missing)}")


class InvalidTransitionError(DocumentError):
    """Raised when a status change is not allowed (generated is terminal)."""
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")


class StepNavigationError(DocumentError):
    """Raised when jumping forward to a step that was never reached."""
    def __init__(self, step_number: int, message: str = None):
        self.step_number = step_number
        super().__init__(message or f"Step {step_number} is not reachable yet")


class ArtifactGenerationError(DocumentError):
    """
    Raised when the artifact generator fails.

    Wraps the underlying error with context. The document is left
    untouched and the caller may retry the export manually.
    """
    def __init__(self, message: str, cause: Exception = None):
        self.cause = cause
        super().__init__(message)
