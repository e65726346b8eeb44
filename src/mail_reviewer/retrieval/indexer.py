"""Compact corpus index and selection for two-pass retrieval.

The first pass shows the model only an index (id, filename, short preview) and
asks it to pick relevant ids. The second pass sends the full text of just those
records, bounded by a character budget.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from mail_reviewer.exceptions import SelectionParseError
from mail_reviewer.models import EmailRecord, IndexEntry, Record

TRUNCATION_MARKER = " ...[truncated]"

_ID_LIST_RE = re.compile(r"\[\s*\d+(?:\s*,\s*\d+)*\s*\]")
_WHITESPACE_RE = re.compile(r"\s+")


def make_preview(record: Record, preview_chars: int) -> str:
    """One-line preview of a record, at most ``preview_chars`` long."""

    if isinstance(record, EmailRecord):
        text = f"From: {record.sender} | Subject: {record.subject} | {record.body}"
    else:
        text = record.body
    return _WHITESPACE_RE.sub(" ", text).strip()[:preview_chars]


def build_index(records: Iterable[Record], preview_chars: int = 200) -> list[IndexEntry]:
    return [
        IndexEntry(
            id=r.id,
            kind=r.kind,
            filename=r.filename,
            preview=make_preview(r, preview_chars),
            length=len(r.body),
        )
        for r in records
    ]


def index_text(entries: Iterable[IndexEntry]) -> str:
    return "\n".join(e.to_json() for e in entries)


def parse_selection(response: str) -> list[int]:
    """Pull the first ``[1, 2, 3]`` style integer list out of a model response.

    Surrounding prose and code fences are tolerated.

    Raises:
        SelectionParseError: If no integer list is present.
    """

    m = _ID_LIST_RE.search(response or "")
    if not m:
        raise SelectionParseError("model response did not contain an id list")
    return [int(x) for x in re.findall(r"\d+", m.group(0))]


def default_selection(records: Sequence[Record], count: int) -> list[Record]:
    """The first ``count`` records by id."""

    return sorted(records, key=lambda r: r.id)[:count]


def resolve_selection(
    ids: Iterable[int],
    records: Sequence[Record],
    max_ids: int,
    default_count: int,
) -> list[Record]:
    """Map selected ids back to records.

    Unknown and repeated ids are dropped and the result is capped at
    ``max_ids``. An empty result falls back to ``default_selection``.
    """

    by_id = {r.id: r for r in records}
    selected: list[Record] = []
    seen: set[int] = set()
    for record_id in ids:
        if record_id in seen or record_id not in by_id:
            continue
        seen.add(record_id)
        selected.append(by_id[record_id])
        if len(selected) >= max_ids:
            break

    return selected or default_selection(records, default_count)


@dataclass(frozen=True)
class Context:
    """Bounded second-pass context."""

    text: str
    records: tuple[Record, ...]
    truncated: bool = False

    @property
    def filenames(self) -> list[str]:
        return [r.filename for r in self.records]


def _truncate_to_fit(record: Record, limit: int, marker: str) -> Record | None:
    # JSON escaping makes the serialized length non-linear in the body length,
    # so shrink until it fits.
    overhead = len(record.with_body(marker).to_json())
    keep = min(len(record.body), limit - overhead)
    while keep > 0:
        candidate = record.with_body(record.body[:keep] + marker)
        size = len(candidate.to_json())
        if size <= limit:
            return candidate
        keep -= size - limit
    return None


def assemble_context(
    records: Sequence[Record],
    budget: int,
    marker: str = TRUNCATION_MARKER,
) -> Context:
    """Concatenate serialized records until ``budget`` characters.

    The record that would cross the budget is truncated (with ``marker``) to
    fit and assembly stops there; later records are dropped.
    """

    lines: list[str] = []
    included: list[Record] = []
    used = 0

    for record in records:
        sep = 1 if lines else 0
        line = record.to_json()
        if used + sep + len(line) <= budget:
            lines.append(line)
            included.append(record)
            used += sep + len(line)
            continue

        cut = _truncate_to_fit(record, budget - used - sep, marker)
        if cut is not None:
            lines.append(cut.to_json())
            included.append(cut)
        return Context(text="\n".join(lines), records=tuple(included), truncated=True)

    return Context(text="\n".join(lines), records=tuple(included))
