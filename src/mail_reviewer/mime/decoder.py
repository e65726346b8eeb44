"""Recursive MIME body decoder.

Reduces an arbitrarily nested message body to the text of its ``text/plain``
and ``text/html`` leaves. Multipart bodies are walked with explicit offsets:
each part is located by scanning forward for the next delimiter line, so the
body is never re-split and boundary edge cases (missing close delimiter, empty
parts, preamble/epilogue) are handled in one place.

Malformed framing never raises out of this module; it degrades to decoding the
body as a single flat part.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

import structlog

from mail_reviewer.exceptions import ParseError
from mail_reviewer.mime.encoding import decode_transfer_encoding
from mail_reviewer.mime.headers import parse_headers, split_header_body
from mail_reviewer.mime.sanitize import strip_html

logger = structlog.get_logger()

_BOUNDARY_RE = re.compile(r'boundary="?([^";]+)"?', re.IGNORECASE)

DEFAULT_CONTENT_TYPE = "text/plain"
PART_SEPARATOR = "\n\n"


def get_boundary(content_type: str) -> str:
    """Return the boundary parameter of a content-type value, or ``""``."""

    m = _BOUNDARY_RE.search(content_type)
    return m.group(1).strip() if m else ""


def _content_type(headers: dict[str, str]) -> str:
    return (headers.get("content-type") or DEFAULT_CONTENT_TYPE).lower()


def _decode_leaf(body: str, headers: dict[str, str]) -> str:
    decoded = decode_transfer_encoding(body, headers)
    if "text/html" in _content_type(headers):
        return strip_html(decoded)
    return decoded


def _find_delimiter(body: str, delimiter: str, start: int) -> int:
    # A delimiter only counts at the start of a line.
    idx = body.find(delimiter, start)
    while idx > 0 and body[idx - 1] != "\n":
        idx = body.find(delimiter, idx + 1)
    return idx


def iter_part_spans(body: str, boundary: str) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` offsets of each body part of a multipart body.

    The preamble before the first delimiter and the epilogue after the close
    delimiter are not yielded. Without a close delimiter the last part runs to
    the end of ``body``.

    Raises:
        ParseError: If the body contains no delimiter line at all.
    """

    delimiter = f"--{boundary}"
    pos = _find_delimiter(body, delimiter, 0)
    if pos == -1:
        raise ParseError(f"boundary {boundary!r} not found in multipart body")

    while pos != -1:
        after = pos + len(delimiter)
        if body.startswith("--", after):
            return
        line_end = body.find("\n", after)
        if line_end == -1:
            return
        start = line_end + 1
        nxt = _find_delimiter(body, delimiter, start)
        end = nxt if nxt != -1 else len(body)
        yield start, end
        pos = nxt


def split_part(segment: str) -> tuple[dict[str, str], str] | None:
    """Split one raw body part into parsed headers and body.

    Returns:
        ``(headers, body)``, or None for an empty part.
    """

    segment = segment.rstrip()
    if segment.endswith("--"):
        segment = segment[:-2].rstrip()
    if not segment.strip():
        return None
    if segment[0] in "\r\n":
        # No header block: the part starts with the blank line.
        return {}, segment.lstrip("\r\n")
    raw_headers, body = split_header_body(segment)
    return parse_headers(raw_headers), body


def _walk_multipart(body: str, boundary: str) -> Iterator[str]:
    for start, end in iter_part_spans(body, boundary):
        part = split_part(body[start:end])
        if part is None:
            continue
        headers, part_body = part
        content_type = _content_type(headers)

        if "multipart/" in content_type:
            nested = extract_text(part_body, headers).strip()
            if nested:
                yield nested
            continue

        if "text/plain" not in content_type and "text/html" not in content_type:
            continue

        clean = _decode_leaf(part_body, headers).strip()
        if clean:
            yield clean


def extract_text(body: str, headers: dict[str, str]) -> str:
    """Reduce a message body to plain text.

    Args:
        body: Body text following the header block.
        headers: Parsed headers owning ``body``.

    Returns:
        The text of every textual leaf, joined by blank lines in part order.
        Non-multipart bodies are decoded as a single leaf.
    """

    content_type = _content_type(headers)
    boundary = get_boundary(headers.get("content-type", ""))

    if "multipart/" not in content_type or not boundary:
        return _decode_leaf(body, headers)

    try:
        texts = list(_walk_multipart(body, boundary))
    except ParseError as e:
        logger.debug("mime_framing_fallback", boundary=boundary, error=str(e))
        texts = []

    if texts:
        return PART_SEPARATOR.join(texts)
    return _decode_leaf(body, headers)


def decode_message(content: str) -> tuple[dict[str, str], str]:
    """Parse a raw message into its top-level headers and extracted body text."""

    raw_headers, body = split_header_body(content)
    headers = parse_headers(raw_headers)
    return headers, extract_text(body, headers)
