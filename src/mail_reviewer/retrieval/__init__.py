"""Fitting the corpus into per-request character budgets."""

from .chunker import Chunk, chunk_records
from .indexer import (
    TRUNCATION_MARKER,
    Context,
    assemble_context,
    build_index,
    default_selection,
    index_text,
    parse_selection,
    resolve_selection,
)

__all__ = [
    "TRUNCATION_MARKER",
    "Chunk",
    "Context",
    "assemble_context",
    "build_index",
    "chunk_records",
    "default_selection",
    "index_text",
    "parse_selection",
    "resolve_selection",
]
