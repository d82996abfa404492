"""
Artifact Generators

Turn rendered document HTML into a stored, downloadable file.

The lifecycle treats a generator as a black box: ``generate`` returns an
artifact reference or raises ArtifactGenerationError. No retries here.

    generator = get_artifact_generator(current_app.config)
    ref = generator.generate(rendered_html, "Passport application")
"""

import html
import logging
import re
import uuid
from pathlib import Path
from typing import List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer
from xml.sax.saxutils import escape

from .exceptions import ArtifactGenerationError

logger = logging.getLogger(__name__)

BLOCK_TAG_PATTERN = re.compile(r'</?(?:p|div|h[1-6]|li|ul|ol|tr|table|section)\b[^>]*>', re.IGNORECASE)
BREAK_TAG_PATTERN = re.compile(r'<br\s*/?>', re.IGNORECASE)
ANY_TAG_PATTERN = re.compile(r'<[^>]+>')
UNSAFE_FILENAME_CHARS = re.compile(r'[^\w]+', re.UNICODE)


def safe_filename(title: str, extension: str = 'pdf') -> str:
    """
    Build a filesystem-safe file name from a document title.

    Examples:
        "Claim to bank (2026)" -> "Claim_to_bank_2026.pdf"
        "" -> "document.pdf"
    """
    stem = UNSAFE_FILENAME_CHARS.sub('_', title or '').strip('_') or 'document'
    return f"{stem[:100]}.{extension}"


def html_to_paragraphs(markup: str) -> List[str]:
    """
    Flatten rendered HTML into plain-text paragraphs.

    Block-level tags separate paragraphs, <br> becomes a newline,
    every other tag is dropped and entities are decoded.
    """
    text = BREAK_TAG_PATTERN.sub('\n', markup or '')
    text = BLOCK_TAG_PATTERN.sub('\n\n', text)
    text = html.unescape(ANY_TAG_PATTERN.sub('', text))

    paragraphs = []
    for chunk in re.split(r'\n\s*\n', text):
        lines = [' '.join(line.split()) for line in chunk.split('\n')]
        lines = [line for line in lines if line]
        if lines:
            paragraphs.append('\n'.join(lines))
    return paragraphs


class ArtifactGenerator:
    """Interface for artifact generators."""

    def generate(self, rendered_html: str, title: str) -> str:
        """
        Produce an artifact for the rendered document.

        Returns:
            An opaque artifact reference

        Raises:
            ArtifactGenerationError: on any failure
        """
        raise NotImplementedError


class PdfArtifactGenerator(ArtifactGenerator):
    """Writes an A4 PDF with reportlab into a local directory."""

    FONT_NAME = 'DocumentFont'

    def __init__(self, output_dir, font_path: Optional[str] = None, font_size: int = 12):
        self.output_dir = Path(output_dir)
        self.font_path = font_path
        self.font_size = font_size
        self._font_name = None

    def _font(self) -> str:
        if self._font_name:
            return self._font_name
        if self.font_path:
            try:
                pdfmetrics.registerFont(TTFont(self.FONT_NAME, self.font_path))
                self._font_name = self.FONT_NAME
            except Exception as e:
                raise ArtifactGenerationError(f"Could not load font {self.font_path}: {e}", cause=e)
        else:
            self._font_name = 'Times-Roman'
        return self._font_name

    def _styles(self) -> ParagraphStyle:
        base = getSampleStyleSheet()['Normal']
        return ParagraphStyle(
            'DocumentBody',
            parent=base,
            fontName=self._font(),
            fontSize=self.font_size,
            leading=self.font_size * 1.5,
            spaceAfter=self.font_size * 0.5
        )

    def build_pdf(self, rendered_html: str, path: Path) -> None:
        style = self._styles()
        story = []
        for paragraph in html_to_paragraphs(rendered_html):
            story.append(Paragraph(escape(paragraph).replace('\n', '<br/>'), style))
            story.append(Spacer(1, 2 * mm))

        doc = SimpleDocTemplate(
            str(path),
            pagesize=A4,
            leftMargin=25 * mm,
            rightMargin=15 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm
        )
        doc.build(story)

    def generate(self, rendered_html: str, title: str) -> str:
        filename = f"{uuid.uuid4().hex[:8]}_{safe_filename(title)}"
        path = self.output_dir / filename

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.build_pdf(rendered_html, path)
        except ArtifactGenerationError:
            raise
        except Exception as e:
            logger.error(f"PDF generation failed for '{title}': {e}")
            raise ArtifactGenerationError(f"PDF generation failed: {e}", cause=e)

        logger.info(f"Generated artifact {path}")
        return str(path)


class MockArtifactGenerator(ArtifactGenerator):
    """
    Records calls instead of writing files.

    Set ``fail_with`` to an exception to simulate a generator outage.
    """

    def __init__(self, fail_with: Optional[Exception] = None):
        self.fail_with = fail_with
        self.calls = []

    def generate(self, rendered_html: str, title: str) -> str:
        self.calls.append({'html': rendered_html, 'title': title})
        if self.fail_with is not None:
            raise ArtifactGenerationError(f"Mock generator failure: {self.fail_with}", cause=self.fail_with)
        return f"mock://{safe_filename(title)}"


def get_artifact_generator(config) -> ArtifactGenerator:
    """Pick the generator configured by ARTIFACT_MODE ('pdf' or 'mock')."""
    mode = (config.get('ARTIFACT_MODE') or 'pdf').lower()
    if mode == 'mock':
        return MockArtifactGenerator()
    if mode == 'pdf':
        return PdfArtifactGenerator(config.get('ARTIFACT_DIR', 'artifacts'),
                                    font_path=config.get('ARTIFACT_FONT_PATH'))
    raise ValueError(f"Unknown ARTIFACT_MODE: {mode}")
