"""Corpus loading and storage.

Raw files are normalized into records once per load; the resulting snapshot is
immutable and replaced wholesale by the next load.
"""

from .records import build_records, parse_attachment, parse_eml
from .repository import CorpusRepository, CorpusSnapshot
from .sources import count_recognized, iter_archive, iter_folder

__all__ = [
    "CorpusRepository",
    "CorpusSnapshot",
    "build_records",
    "count_recognized",
    "iter_archive",
    "iter_folder",
    "parse_attachment",
    "parse_eml",
]
