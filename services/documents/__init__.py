"""
Document Engine

A template-driven system for filling in legal documents.
Templates are defined in YAML files, collected through a multi-step form
and rendered into an exportable artifact.

Usage:
    from services.documents import TemplateLoader, DocumentLifecycle, DocumentEditor

    # From the seed command
    TemplateLoader.load_all()
    TemplateLoader.seed()

    # In a request
    lifecycle = DocumentLifecycle(current_user.id)
    with DocumentEditor.new(lifecycle, template_id) as editor:
        editor.update_answers(form_data)
        editor.next()
"""

from .types import (
    ApplicantType,
    FieldType,
    DocumentStatus,
    FailureReason,
    ValidationRules,
    CategoryDefinition,
    FieldDefinition,
    TemplateDefinition
)

from .exceptions import (
    DocumentError,
    ConfigurationError,
    UnauthorizedError,
    NotFoundError,
    TemplateNotFoundError,
    DocumentNotFoundError,
    ValidationError,
    StepValidationError,
    IncompleteAnswersError,
    InvalidTransitionError,
    StepNavigationError,
    ArtifactGenerationError
)

from .renderer import TemplateRenderer, RenderPreview, RenderValidation
from .form_engine import FormEngine, FormSession, Step, StepValidation
from .linter import TemplateLinter, LintReport
from .loader import TemplateLoader
from .repository import TemplateRepository, DocumentRepository
from .artifacts import (
    ArtifactGenerator,
    PdfArtifactGenerator,
    MockArtifactGenerator,
    get_artifact_generator
)
from .lifecycle import DocumentLifecycle
from .autosave import AutosaveScheduler, SaveStatus
from .editor import DocumentEditor

__all__ = [
    # Types
    'ApplicantType',
    'FieldType',
    'DocumentStatus',
    'FailureReason',
    'ValidationRules',
    'CategoryDefinition',
    'FieldDefinition',
    'TemplateDefinition',

    # Exceptions
    'DocumentError',
    'ConfigurationError',
    'UnauthorizedError',
    'NotFoundError',
    'TemplateNotFoundError',
    'DocumentNotFoundError',
    'ValidationError',
    'StepValidationError',
    'IncompleteAnswersError',
    'InvalidTransitionError',
    'StepNavigationError',
    'ArtifactGenerationError',

    # Rendering and forms
    'TemplateRenderer',
    'RenderPreview',
    'RenderValidation',
    'FormEngine',
    'FormSession',
    'Step',
    'StepValidation',

    # Catalog
    'TemplateLinter',
    'LintReport',
    'TemplateLoader',
    'TemplateRepository',
    'DocumentRepository',

    # Artifacts
    'ArtifactGenerator',
    'PdfArtifactGenerator',
    'MockArtifactGenerator',
    'get_artifact_generator',

    # Lifecycle
    'DocumentLifecycle',
    'AutosaveScheduler',
    'SaveStatus',
    'DocumentEditor',
]
