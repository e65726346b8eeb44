"""Attachment text extractors."""

from .documents import ATTACHMENT_EXTENSIONS, extract_attachment, extract_document_text

__all__ = ["ATTACHMENT_EXTENSIONS", "extract_attachment", "extract_document_text"]
