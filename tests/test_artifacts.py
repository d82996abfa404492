"""
Artifact generator tests.
"""

import pytest

from services.documents import (
    ArtifactGenerationError,
    MockArtifactGenerator,
    PdfArtifactGenerator,
    get_artifact_generator
)
from services.documents.artifacts import html_to_paragraphs, safe_filename


class TestHelpers:

    def test_safe_filename(self):
        assert safe_filename('Claim to bank (2026)') == 'Claim_to_bank_2026.pdf'
        assert safe_filename('') == 'document.pdf'

    def test_html_to_paragraphs(self):
        markup = '<div><p>First &amp; <b>bold</b></p><p>Line one<br/>line two</p></div>'
        assert html_to_paragraphs(markup) == ['First & bold', 'Line one\nline two']


class TestGenerators:

    def test_pdf_written_to_output_dir(self, tmp_path):
        generator = PdfArtifactGenerator(tmp_path / 'out')
        ref = generator.generate('<p>Hello Alice</p><p>Second paragraph</p>', 'Claim')

        path = tmp_path / 'out' / ref.split('/')[-1]
        assert path.exists()
        assert path.name.endswith('_Claim.pdf')
        assert path.read_bytes().startswith(b'%PDF')

    def test_missing_font_is_a_generation_error(self, tmp_path):
        generator = PdfArtifactGenerator(tmp_path, font_path=str(tmp_path / 'missing.ttf'))
        with pytest.raises(ArtifactGenerationError):
            generator.generate('<p>x</p>', 'Claim')

    def test_mock_failure(self):
        generator = MockArtifactGenerator(fail_with=RuntimeError('offline'))
        with pytest.raises(ArtifactGenerationError):
            generator.generate('<p>x</p>', 'Claim')
        assert len(generator.calls) == 1

    def test_factory(self, tmp_path):
        assert isinstance(get_artifact_generator({'ARTIFACT_MODE': 'mock'}), MockArtifactGenerator)
        pdf = get_artifact_generator({'ARTIFACT_MODE': 'pdf', 'ARTIFACT_DIR': str(tmp_path)})
        assert isinstance(pdf, PdfArtifactGenerator)
        with pytest.raises(ValueError):
            get_artifact_generator({'ARTIFACT_MODE': 'fax'})
