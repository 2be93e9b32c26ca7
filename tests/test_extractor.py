from unittest.mock import MagicMock, patch

import pytest

from pipeline.errors import ExtractionFailed, UnsupportedFormat
from pipeline.extractor import ContentExtractor, extract_pdf_text


class FakePage:
    def __init__(self, runs):
        self.runs = runs

    def extract_words(self, **kwargs):
        return [{"text": r} for r in self.runs]


def fake_pdf(*pages):
    opened = MagicMock()
    opened.__enter__.return_value = MagicMock(pages=[FakePage(p) for p in pages])
    return opened


def test_pages_and_runs_are_joined():
    with patch("pipeline.extractor.pdfplumber.open", return_value=fake_pdf(["Bonjour", "monde"], ["Fin"])):
        assert extract_pdf_text(b"%PDF-1.4") == "Bonjour monde\nFin"


def test_runs_are_percent_decoded():
    with patch("pipeline.extractor.pdfplumber.open", return_value=fake_pdf(["caf%C3%A9", "50%", "a%20b"])):
        assert extract_pdf_text(b"%PDF-1.4") == "café 50% a b"


def test_corrupt_pdf_raises_extraction_failed():
    with patch("pipeline.extractor.pdfplumber.open", side_effect=ValueError("bad xref")):
        with pytest.raises(ExtractionFailed) as exc_info:
            extract_pdf_text(b"garbage")
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_image_is_delegated_to_describer():
    describer = MagicMock()
    describer.describe_image.return_value = "A labelled diagram of a cell."
    extractor = ContentExtractor(describer)
    assert extractor.extract_text(b"\x89PNG", "image/png") == "A labelled diagram of a cell."
    describer.describe_image.assert_called_once_with(b"\x89PNG", "image/png")


def test_pdf_does_not_touch_describer():
    describer = MagicMock()
    with patch("pipeline.extractor.pdfplumber.open", return_value=fake_pdf(["Fin"])):
        assert ContentExtractor(describer).extract_text(b"%PDF", "application/pdf") == "Fin"
    describer.describe_image.assert_not_called()


@pytest.mark.parametrize("mime", ["text/plain", "application/msword", "", None])
def test_unsupported_types_are_rejected(mime):
    with pytest.raises(UnsupportedFormat):
        ContentExtractor(MagicMock()).extract_text(b"data", mime)
