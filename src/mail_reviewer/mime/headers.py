"""Header block parsing for raw RFC-822 text."""

from __future__ import annotations

import re

_LINE_SPLIT_RE = re.compile(r"\r?\n")

_SEPARATORS = ("\r\n\r\n", "\n\n")


def parse_headers(raw: str) -> dict[str, str]:
    """Parse a raw header block into a lower-cased key -> value mapping.

    Continuation lines (starting with whitespace) are folded into the previous
    header, space-joined. A repeated header keeps its last value.

    Args:
        raw: Header text preceding the header/body separator.

    Returns:
        Mapping of lower-cased header names to folded values.
    """

    headers: dict[str, str] = {}
    key: str | None = None

    for line in _LINE_SPLIT_RE.split(raw):
        if not line.strip():
            continue
        if line[0] in " \t" and key is not None:
            headers[key] = f"{headers[key]} {line.strip()}".strip()
            continue
        name, sep, value = line.partition(":")
        if not sep:
            continue
        key = name.strip().lower()
        headers[key] = value.strip()

    return headers


def split_header_body(text: str) -> tuple[str, str]:
    """Split message text at the first blank line.

    Returns:
        (raw_headers, body). Without a separator the whole text is headers.
    """

    for sep in _SEPARATORS:
        idx = text.find(sep)
        if idx != -1:
            return text[:idx], text[idx + len(sep) :]
    return text, ""
