"""Greedy size-bounded batching of records for map-reduce querying."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from mail_reviewer.models import Record

LINE_SEPARATOR = "\n"


@dataclass(frozen=True)
class Chunk:
    """An ordered, non-empty group of records sent in one request."""

    number: int
    records: tuple[Record, ...]
    text: str

    @property
    def filenames(self) -> list[str]:
        return [r.filename for r in self.records]


def compact(record: Record, body_chars: int | None) -> Record:
    """Truncate a record's body to ``body_chars`` (no-op for None)."""

    if body_chars is None or len(record.body) <= body_chars:
        return record
    return record.with_body(record.body[:body_chars])


def chunk_records(
    records: Sequence[Record],
    budget: int,
    compact_body_chars: int | None = None,
) -> list[Chunk]:
    """Pack records into chunks whose JSONL text stays within ``budget``.

    Records keep their order and are never split: a record that alone exceeds
    the budget becomes a one-record chunk.

    Args:
        records: Records in corpus order.
        budget: Maximum characters per chunk text, separators included.
        compact_body_chars: Optional per-record body cap applied first.

    Returns:
        Chunks numbered from 1.
    """

    chunks: list[Chunk] = []
    members: list[Record] = []
    lines: list[str] = []
    size = 0

    def _close() -> None:
        chunks.append(
            Chunk(
                number=len(chunks) + 1,
                records=tuple(members),
                text=LINE_SEPARATOR.join(lines),
            )
        )

    for record in records:
        record = compact(record, compact_body_chars)
        line = record.to_json()
        added = len(line) + (len(LINE_SEPARATOR) if lines else 0)

        if lines and size + added > budget:
            _close()
            members, lines, size = [], [], 0
            added = len(line)

        members.append(record)
        lines.append(line)
        size += added

    if lines:
        _close()

    return chunks
