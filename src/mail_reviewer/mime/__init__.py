"""MIME decoding.

Turns raw RFC-822 text into header values and body text without relying on a
full MIME implementation: only the transfer encodings and part types needed to
recover readable text are supported.
"""

from .decoder import decode_message, extract_text, get_boundary
from .encoding import decode_encoded_words, decode_transfer_encoding
from .headers import parse_headers, split_header_body
from .sanitize import sanitize, strip_html

__all__ = [
    "decode_encoded_words",
    "decode_message",
    "decode_transfer_encoding",
    "extract_text",
    "get_boundary",
    "parse_headers",
    "sanitize",
    "split_header_body",
    "strip_html",
]
