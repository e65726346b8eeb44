"""Turning raw files into normalized records."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from mail_reviewer.config import Settings
from mail_reviewer.corpus.sources import EMAIL_EXTENSION, SourceFile, extension_of
from mail_reviewer.extractors import ATTACHMENT_EXTENSIONS, extract_attachment
from mail_reviewer.mime import decode_encoded_words, decode_message, sanitize
from mail_reviewer.models import AttachmentRecord, EmailRecord, Extracted, Record

logger = structlog.get_logger()


def _cap(text: str, max_chars: int | None) -> str:
    return text if max_chars is None else text[:max_chars]


def _header_text(headers: dict[str, str], name: str) -> str:
    return sanitize(decode_encoded_words(headers.get(name, "")))


def parse_eml(
    content: str,
    record_id: int,
    filename: str,
    body_max_chars: int | None = None,
) -> EmailRecord:
    """Build an email record from raw RFC-822 text."""

    headers, body = decode_message(content)
    return EmailRecord(
        id=record_id,
        filename=filename,
        sender=_header_text(headers, "from"),
        to=_header_text(headers, "to"),
        subject=_header_text(headers, "subject"),
        date=sanitize(headers.get("date", "")),
        body=_cap(sanitize(body), body_max_chars),
    )


def failure_placeholder(filename: str) -> str:
    return f"[Could not extract text from {filename}]"


def parse_attachment(
    data: bytes,
    record_id: int,
    filename: str,
    body_max_chars: int | None = None,
) -> AttachmentRecord:
    """Build an attachment record; failed extraction yields a placeholder body."""

    outcome = extract_attachment(data, filename)
    text = outcome.text if isinstance(outcome, Extracted) else failure_placeholder(filename)
    return AttachmentRecord(
        id=record_id,
        filename=filename,
        file_type=extension_of(filename).lstrip(".").upper(),
        body=_cap(sanitize(text), body_max_chars),
        extraction=outcome,
    )


def build_records(
    files: Iterable[SourceFile],
    settings: Settings,
    unknown_as_email: bool = False,
) -> list[Record]:
    """Normalize files into records, in the order given.

    Every recognized file consumes an id, so skipped files leave gaps. With
    ``unknown_as_email`` files of any other extension are read as messages.
    """

    records: list[Record] = []
    record_id = 0

    for filename, data in files:
        ext = extension_of(filename)
        is_attachment = ext in ATTACHMENT_EXTENSIONS
        if ext != EMAIL_EXTENSION and not is_attachment and not unknown_as_email:
            continue
        record_id += 1
        try:
            if not is_attachment:
                email = parse_eml(
                    data.decode("utf-8", errors="replace"),
                    record_id,
                    filename,
                    settings.email_body_max_chars,
                )
                if email.has_content:
                    records.append(email)
                continue

            attachment = parse_attachment(
                data, record_id, filename, settings.attachment_body_max_chars
            )
            if len(attachment.body) > settings.min_attachment_chars:
                records.append(attachment)
        except Exception as e:
            # A single unreadable file must not abort the load.
            logger.warning("record_skipped", filename=filename, record_id=record_id, error=str(e))

    return records
