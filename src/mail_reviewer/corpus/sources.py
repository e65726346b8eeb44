"""File acquisition for corpus loads.

Both sources yield ``(filename, raw_bytes)`` pairs filtered to recognized
extensions and sorted by name, so record ids are deterministic.
"""

from __future__ import annotations

import io
import zipfile
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import structlog

from mail_reviewer.exceptions import ValidationError
from mail_reviewer.extractors import ATTACHMENT_EXTENSIONS

logger = structlog.get_logger()

EMAIL_EXTENSION = ".eml"
RECOGNIZED_EXTENSIONS = ATTACHMENT_EXTENSIONS | {EMAIL_EXTENSION}

SourceFile = tuple[str, bytes]


def extension_of(filename: str) -> str:
    return PurePosixPath(filename).suffix.lower()


def is_recognized(filename: str) -> bool:
    return extension_of(filename) in RECOGNIZED_EXTENSIONS


def count_recognized(names: list[str]) -> tuple[int, int]:
    """Count ``(emails, attachments)`` among file names."""

    emails = sum(1 for n in names if extension_of(n) == EMAIL_EXTENSION)
    attachments = sum(1 for n in names if extension_of(n) in ATTACHMENT_EXTENSIONS)
    return emails, attachments


def iter_folder(path: Path) -> Iterator[SourceFile]:
    """Yield recognized files directly inside ``path`` (no recursion)."""

    for entry in sorted(path.iterdir(), key=lambda p: p.name):
        if not entry.is_file() or not is_recognized(entry.name):
            continue
        try:
            data = entry.read_bytes()
        except OSError as e:
            logger.warning("corpus_file_unreadable", filename=entry.name, error=str(e))
            continue
        yield entry.name, data


def iter_archive(data: bytes) -> Iterator[SourceFile]:
    """Yield recognized files from a ZIP archive, flattened to their base names.

    Raises:
        ValidationError: If ``data`` is not a ZIP archive.
    """

    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise ValidationError("Upload is not a valid ZIP archive") from e

    with archive:
        members = []
        for info in archive.infolist():
            name = PurePosixPath(info.filename)
            if info.is_dir() or "__MACOSX" in name.parts or name.name.startswith("."):
                continue
            if is_recognized(name.name):
                members.append(info)

        for info in sorted(members, key=lambda i: PurePosixPath(i.filename).name):
            yield PurePosixPath(info.filename).name, archive.read(info)
