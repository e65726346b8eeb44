"""Office document text extraction.

Each extractor takes raw bytes and returns best-effort plain text. Library
failures are wrapped in ExtractionError; ``extract_attachment`` turns them into
an ``ExtractionFailed`` outcome so a bad file never aborts a corpus load.
"""

from __future__ import annotations

import io
import re
from collections.abc import Callable
from pathlib import PurePath

import structlog

from mail_reviewer.exceptions import ExtractionError
from mail_reviewer.models import Extracted, ExtractionFailed, ExtractionOutcome

logger = structlog.get_logger()

_NON_PRINTABLE_RE = re.compile(r"[^\x09\x0A\x0D\x20-\x7E]")
_WIDE_GAP_RE = re.compile(r"\s{3,}")


def _extract_pdf(data: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(data))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _extract_docx(data: bytes) -> str:
    from docx import Document

    doc = Document(io.BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs if p.text)


def _extract_pptx(data: bytes) -> str:
    from pptx import Presentation

    prs = Presentation(io.BytesIO(data))
    parts: list[str] = []
    for slide in prs.slides:
        for shape in slide.shapes:
            if getattr(shape, "has_text_frame", False) and shape.text_frame.text:
                parts.append(shape.text_frame.text)
    return "\n".join(parts)


def _extract_xlsx(data: bytes) -> str:
    from openpyxl import load_workbook

    wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    sheets: list[str] = []
    try:
        for sheet in wb.worksheets:
            rows = []
            for row in sheet.iter_rows(values_only=True):
                if any(cell is not None for cell in row):
                    rows.append(",".join("" if cell is None else str(cell) for cell in row))
            if rows:
                sheets.append(f"[Sheet: {sheet.title}]\n" + "\n".join(rows))
    finally:
        wb.close()
    return "\n\n".join(sheets)


def _extract_doc(data: bytes) -> str:
    # Word 97-2003 binaries: keep the printable runs.
    text = _NON_PRINTABLE_RE.sub(" ", data.decode("utf-8", errors="replace"))
    return _WIDE_GAP_RE.sub("\n", text).strip()


EXTRACTORS: dict[str, Callable[[bytes], str]] = {
    ".pdf": _extract_pdf,
    ".docx": _extract_docx,
    ".pptx": _extract_pptx,
    ".xlsx": _extract_xlsx,
    ".doc": _extract_doc,
}

ATTACHMENT_EXTENSIONS = frozenset(EXTRACTORS)


def extract_document_text(data: bytes, filename: str) -> str:
    """Extract plain text from an office document.

    Args:
        data: Raw file bytes.
        filename: Original name; its extension selects the extractor.

    Returns:
        Extracted text (possibly empty).

    Raises:
        ExtractionError: If the type is unsupported or the library fails.
    """

    ext = PurePath(filename).suffix.lower()
    extractor = EXTRACTORS.get(ext)
    if extractor is None:
        raise ExtractionError(f"Unsupported document type: {ext or filename}")
    try:
        return extractor(data)
    except Exception as e:
        raise ExtractionError(f"{ext[1:].upper()} extraction failed: {e}") from e


def extract_attachment(data: bytes, filename: str) -> ExtractionOutcome:
    """Extract text, reporting failure as a value instead of raising."""

    try:
        return Extracted(text=extract_document_text(data, filename))
    except ExtractionError as e:
        logger.warning("attachment_extraction_failed", filename=filename, error=str(e))
        return ExtractionFailed(reason=str(e))
