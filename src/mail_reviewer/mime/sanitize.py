"""Text clean-up applied before records leave the decoder."""

from __future__ import annotations

import re

# Printable ASCII plus tab/CR/LF, and Latin-1 Supplement through Latin Extended-A/B.
_DISALLOWED_RE = re.compile(r"[^\x09\x0A\x0D\x20-\x7E\u00A0-\u024F]")
_SPACE_RUN_RE = re.compile(r"[ \t]{2,}")

_STYLE_RE = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"</p>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def sanitize(text: str) -> str:
    """Strip control characters and collapse horizontal whitespace.

    Characters outside ASCII and the Latin ranges (emoji, most non-Latin
    scripts, control codes) become a single space. Idempotent.
    """

    text = text.replace("\x00", "")
    text = _DISALLOWED_RE.sub(" ", text)
    text = _SPACE_RUN_RE.sub(" ", text)
    return text.strip()


def strip_html(html: str) -> str:
    """Reduce HTML to text: drop style/script blocks and tags, keep line breaks."""

    text = _STYLE_RE.sub(" ", html)
    text = _SCRIPT_RE.sub(" ", text)
    text = _BR_RE.sub("\n", text)
    text = _P_CLOSE_RE.sub("\n", text)
    return _TAG_RE.sub(" ", text)
