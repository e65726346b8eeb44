"""Content-transfer-encoding and RFC 2047 encoded-word decoding.

Both decoders are best-effort: on failure they hand back the input they were
given rather than raising.
"""

from __future__ import annotations

import base64
import binascii
import re

import structlog

logger = structlog.get_logger()

_SOFT_BREAK_RE = re.compile(r"=\r?\n")
_HEX_ESCAPE_RE = re.compile(r"=([A-Fa-f0-9]{2})")
_WHITESPACE_RE = re.compile(r"\s+")
_ENCODED_WORD_RE = re.compile(r"=\?([^?]+)\?([bBqQ])\?([^?]+)\?=")
_WIDE_CHARS_RE = re.compile(r"([^\x00-\xff]+)")


def unescape_hex(text: str) -> str:
    """Replace ``=XX`` escapes with the code point of byte XX."""

    return _HEX_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), text)


def decode_quoted_printable(text: str) -> str:
    """Remove soft line breaks and unescape ``=XX`` bytes.

    The result holds one character per decoded byte (Latin-1 view).
    """

    return unescape_hex(_SOFT_BREAK_RE.sub("", text))


def _byte_view(text: str) -> bytes:
    """Bytes of a one-char-per-byte string.

    Characters above U+00FF were never escaped bytes; they keep their UTF-8
    encoding so they survive the round trip.
    """

    return b"".join(
        part.encode("utf-8") if i % 2 else part.encode("latin-1")
        for i, part in enumerate(_WIDE_CHARS_RE.split(text))
    )


def _b64decode(data: str) -> bytes:
    compact = _WHITESPACE_RE.sub("", data)
    compact += "=" * (-len(compact) % 4)
    return base64.b64decode(compact)


def decode_transfer_encoding(body: str, headers: dict[str, str]) -> str:
    """Reverse the part's content-transfer-encoding.

    Args:
        body: Encoded body text.
        headers: Parsed headers of the part that owns ``body``.

    Returns:
        Decoded text, or ``body`` unchanged for unknown encodings and failures.
    """

    encoding = headers.get("content-transfer-encoding", "").lower()
    try:
        if "base64" in encoding:
            return _b64decode(body).decode("utf-8", errors="replace")
        if "quoted-printable" in encoding:
            return _byte_view(decode_quoted_printable(body)).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as e:
        logger.debug("transfer_decode_failed", encoding=encoding, error=str(e))
    return body


def _charset_codec(charset: str) -> str:
    return "utf-8" if "utf-8" in charset.lower() else "latin-1"


def _decode_word(match: re.Match[str]) -> str:
    charset, encoding, data = match.groups()
    try:
        if encoding.upper() == "B":
            raw = _b64decode(data)
        else:
            raw = unescape_hex(data.replace("_", " ")).encode("latin-1")
        return raw.decode(_charset_codec(charset))
    except (binascii.Error, ValueError):
        return match.group(0)


def decode_encoded_words(text: str) -> str:
    """Decode every ``=?charset?B|Q?data?=`` token in a header value.

    Q words get the ``=XX`` byte-unescape and are then decoded with the same
    charset rule as B words (UTF-8 when the charset names it, else Latin-1),
    so a UTF-8 Q word yields text rather than its Latin-1 view.

    Tokens that fail to decode are kept literally; the rest still decode.
    """

    return _ENCODED_WORD_RE.sub(_decode_word, text)
