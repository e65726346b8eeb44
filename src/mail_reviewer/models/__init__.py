"""Data models for Mail Reviewer.

This module contains Pydantic models for data validation and serialization.
"""

from typing import Literal

from pydantic import BaseModel, Field

from .record import (
    AttachmentRecord,
    EmailRecord,
    Extracted,
    ExtractionFailed,
    ExtractionOutcome,
    IndexEntry,
    Record,
)


class QueryAnswer(BaseModel):
    """Answer to a question over the loaded corpus."""

    answer: str = Field(description="Answer text")
    mode: Literal["live", "mock"] = Field(
        default="live",
        description="'mock' when no usable model credential is configured",
    )
    strategy: str = Field(description="Retrieval strategy that produced the answer")
    sources: list[str] = Field(
        default_factory=list,
        description="Filenames of the records the answer was drawn from",
    )
    errors: list[str] = Field(
        default_factory=list,
        description="Per-chunk failures recorded while answering",
    )


__all__ = [
    "AttachmentRecord",
    "EmailRecord",
    "Extracted",
    "ExtractionFailed",
    "ExtractionOutcome",
    "IndexEntry",
    "QueryAnswer",
    "Record",
]
