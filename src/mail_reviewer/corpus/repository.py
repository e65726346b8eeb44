"""In-memory corpus store.

Each load builds a complete, immutable snapshot before publishing it, and the
"current" pointer is swapped under a lock. A query grabs one snapshot and keeps
using it, so it never sees a half-built or mixed corpus.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import cached_property
from pathlib import Path
from typing import Optional

import structlog

from mail_reviewer.config import Settings
from mail_reviewer.corpus.records import build_records
from mail_reviewer.corpus.sources import SourceFile, iter_archive, iter_folder
from mail_reviewer.exceptions import ValidationError
from mail_reviewer.models import AttachmentRecord, EmailRecord, Record

logger = structlog.get_logger()


@dataclass(frozen=True)
class CorpusSnapshot:
    """An immutable view of one corpus load."""

    records: tuple[Record, ...] = ()
    source: str | None = None
    loaded_at: datetime | None = None

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def email_count(self) -> int:
        return sum(1 for r in self.records if isinstance(r, EmailRecord))

    @property
    def attachment_count(self) -> int:
        return sum(1 for r in self.records if isinstance(r, AttachmentRecord))

    @cached_property
    def _by_id(self) -> dict[int, Record]:
        return {r.id: r for r in self.records}

    def get(self, record_id: int) -> Record | None:
        return self._by_id.get(record_id)

    def to_jsonl(self) -> str:
        return "\n".join(r.to_json() for r in self.records)


class CorpusRepository:
    """Holds the current corpus snapshot and replaces it wholesale on load."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Create an empty repository.

        Args:
            settings: Application settings. If None, uses default settings.
        """
        from mail_reviewer.config import get_settings

        self.settings = settings or get_settings()
        self._lock = threading.Lock()
        self._current = CorpusSnapshot()

    @property
    def current(self) -> CorpusSnapshot:
        return self._current

    def load(
        self,
        files: Iterable[SourceFile],
        source: str,
        unknown_as_email: bool = False,
    ) -> CorpusSnapshot:
        """Build a snapshot from ``files`` and make it current.

        A load that yields no records is returned but not published; the
        previous snapshot stays current.

        Args:
            files: ``(filename, raw_bytes)`` pairs in processing order.
            source: Human-readable origin of the files, for status output.
            unknown_as_email: Parse files with unrecognized extensions as
                messages instead of skipping them.

        Returns:
            The newly built snapshot.
        """

        files = list(files)
        records = build_records(files, self.settings, unknown_as_email=unknown_as_email)
        snapshot = CorpusSnapshot(
            records=tuple(records),
            source=source,
            loaded_at=datetime.now(timezone.utc),
        )

        if snapshot.is_empty:
            logger.warning("corpus_load_empty", source=source, files=len(files))
            return snapshot

        with self._lock:
            self._current = snapshot

        logger.info(
            "corpus_loaded",
            source=source,
            files=len(files),
            records=len(snapshot),
            emails=snapshot.email_count,
            attachments=snapshot.attachment_count,
        )
        return snapshot

    def load_folder(self, path: Path) -> CorpusSnapshot:
        """Load every recognized file directly inside ``path``.

        Raises:
            ValidationError: If ``path`` is not a directory.
        """

        if not path.is_dir():
            raise ValidationError(f"Corpus folder not found: {path}")
        return self.load(iter_folder(path), source=str(path))

    def load_archive(self, data: bytes, source: str = "archive") -> CorpusSnapshot:
        """Load every recognized file inside a ZIP archive."""

        return self.load(iter_archive(data), source=source)

    def load_message(self, data: bytes, filename: str) -> CorpusSnapshot:
        """Load a single uploaded file as a one-record corpus.

        Anything that is not a known attachment type is parsed as a message.
        """

        return self.load([(filename, data)], source=filename, unknown_as_email=True)
