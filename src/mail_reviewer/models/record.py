"""Normalized corpus records.

A record is the unit of retrieval: one email message or one office-document
attachment flattened to text. Records serialize to one JSON object each; the
JSON keys (``type``, ``from``, ``file_type``) are what the model sees.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Extracted(BaseModel):
    """Successful attachment text extraction."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    text: str = Field(description="Extracted plain text")

    @property
    def ok(self) -> bool:
        return True


class ExtractionFailed(BaseModel):
    """Failed attachment text extraction."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failed"] = "failed"
    reason: str = Field(description="Why extraction failed")

    @property
    def ok(self) -> bool:
        return False


ExtractionOutcome = Union[Extracted, ExtractionFailed]


class _RecordBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_json(self) -> str:
        """Serialize to the compact JSON line sent to the model."""
        return self.model_dump_json(by_alias=True)

    def with_body(self, body: str) -> "_RecordBase":
        return self.model_copy(update={"body": body})


class EmailRecord(_RecordBase):
    """An email message reduced to headers and body text."""

    id: int = Field(gt=0, description="Position in load order")
    kind: Literal["email"] = Field(default="email", alias="type")
    filename: str = Field(description="Original file name")
    sender: str = Field(default="", alias="from", description="Decoded From header")
    to: str = Field(default="", description="Decoded To header")
    subject: str = Field(default="", description="Decoded Subject header")
    date: str = Field(default="", description="Date header as written")
    body: str = Field(default="", description="Normalized body text")

    @property
    def has_content(self) -> bool:
        return bool(self.sender or self.to or self.subject or self.body)


class AttachmentRecord(_RecordBase):
    """An office document reduced to its extracted text."""

    id: int = Field(gt=0, description="Position in load order")
    kind: Literal["attachment"] = Field(default="attachment", alias="type")
    filename: str = Field(description="Original file name")
    file_type: str = Field(description="Upper-cased extension without the dot")
    body: str = Field(default="", description="Extracted text or a failure placeholder")
    extraction: Extracted | ExtractionFailed | None = Field(
        default=None,
        exclude=True,
        description="Outcome of text extraction; not serialized",
    )

    @property
    def subject(self) -> str:
        return ""


Record = Union[EmailRecord, AttachmentRecord]


class IndexEntry(BaseModel):
    """Compact projection of a record used by the selection pass."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    kind: Literal["email", "attachment"] = Field(alias="type")
    filename: str
    preview: str = Field(description="Short preview; never the full body")
    length: int = Field(ge=0, description="Length of the full body")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
