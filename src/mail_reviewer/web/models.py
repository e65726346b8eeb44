"""API models for the Mail Reviewer HTTP surface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from mail_reviewer.corpus import CorpusSnapshot


class StatusResponse(BaseModel):
    corpus_dir: str
    corpus_dir_exists: bool
    eml_count: int
    attachment_count: int
    loaded_records: int
    loaded_source: str | None = None
    strategy: str
    has_credentials: bool


class ConvertResponse(BaseModel):
    count: int
    email_count: int
    attachment_count: int
    records: list[dict[str, Any]]
    jsonl: str

    @classmethod
    def from_snapshot(cls, snapshot: CorpusSnapshot) -> "ConvertResponse":
        return cls(
            count=len(snapshot),
            email_count=snapshot.email_count,
            attachment_count=snapshot.attachment_count,
            records=[r.model_dump(by_alias=True) for r in snapshot.records],
            jsonl=snapshot.to_jsonl(),
        )


class AskRequest(BaseModel):
    question: str | None = None
