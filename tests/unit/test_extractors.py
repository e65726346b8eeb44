"""Unit tests for attachment text extraction."""

import io

import pytest

from mail_reviewer.exceptions import ExtractionError
from mail_reviewer.extractors import extract_attachment, extract_document_text
from mail_reviewer.models import Extracted, ExtractionFailed


def _docx_bytes(*paragraphs: str) -> bytes:
    from docx import Document

    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _xlsx_bytes() -> bytes:
    from openpyxl import Workbook

    wb = Workbook()
    ws = wb.active
    ws.title = "Budget"
    ws.append(["Item", "Cost"])
    ws.append(["Laptop", 1200])
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _pptx_bytes(title: str) -> bytes:
    from pptx import Presentation

    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = title
    buf = io.BytesIO()
    prs.save(buf)
    return buf.getvalue()


class TestExtractDocumentText:
    """Test suite for extract_document_text."""

    def test_docx_paragraphs(self) -> None:
        """Test that docx paragraphs are joined by newlines."""
        data = _docx_bytes("Quarterly plan", "Ship the beta")

        assert extract_document_text(data, "plan.DOCX") == "Quarterly plan\nShip the beta"

    def test_xlsx_sheets_and_rows(self) -> None:
        text = extract_document_text(_xlsx_bytes(), "budget.xlsx")

        assert text == "[Sheet: Budget]\nItem,Cost\nLaptop,1200"

    def test_pptx_text_frames(self) -> None:
        text = extract_document_text(_pptx_bytes("Roadmap 2025"), "deck.pptx")

        assert "Roadmap 2025" in text

    def test_legacy_doc_keeps_printable_runs(self) -> None:
        """Test the best-effort scrape of Word 97-2003 binaries."""
        data = b"\xd0\xcf\x11\xe0\x00\x00\x00\x00Meeting notes for Friday\x00\x00\x00\x00\x01\x02Budget approved"

        text = extract_document_text(data, "notes.doc")

        assert "Meeting notes for Friday" in text
        assert "Budget approved" in text
        assert "\x00" not in text

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(ExtractionError, match="Unsupported"):
            extract_document_text(b"data", "notes.txt")

    def test_library_failure_is_wrapped(self) -> None:
        with pytest.raises(ExtractionError, match="PDF extraction failed"):
            extract_document_text(b"this is not a pdf", "broken.pdf")


class TestExtractAttachment:
    """Test suite for extract_attachment."""

    def test_success_is_extracted(self) -> None:
        outcome = extract_attachment(_docx_bytes("Hello"), "a.docx")

        assert isinstance(outcome, Extracted)
        assert outcome.text == "Hello"

    def test_failure_is_a_value(self) -> None:
        outcome = extract_attachment(b"garbage", "broken.xlsx")

        assert isinstance(outcome, ExtractionFailed)
        assert not outcome.ok
        assert "XLSX" in outcome.reason
