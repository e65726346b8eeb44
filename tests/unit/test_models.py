"""Unit tests for data models."""

import json

import pydantic
import pytest

from mail_reviewer.models import (
    AttachmentRecord,
    EmailRecord,
    Extracted,
    ExtractionFailed,
    IndexEntry,
    QueryAnswer,
)


class TestEmailRecord:
    """Test suite for EmailRecord model."""

    def test_email_record_creation(self) -> None:
        """Test creating an EmailRecord instance."""
        record = EmailRecord(
            id=1,
            filename="hello.eml",
            sender="alice@example.com",
            to="bob@example.com",
            subject="Hello",
            date="Mon, 1 Jan 2024 10:00:00 +0000",
            body="Hi Bob",
        )

        assert record.kind == "email"
        assert record.sender == "alice@example.com"
        assert record.has_content is True

    def test_json_uses_wire_keys(self) -> None:
        """Test that serialization uses 'type' and 'from' keys."""
        record = EmailRecord(id=3, filename="a.eml", sender="x@example.com")

        data = json.loads(record.to_json())

        assert list(data) == ["id", "type", "filename", "from", "to", "subject", "date", "body"]
        assert data["type"] == "email"
        assert data["from"] == "x@example.com"

    def test_populate_by_alias(self) -> None:
        record = EmailRecord.model_validate({"id": 1, "filename": "a.eml", "from": "me"})

        assert record.sender == "me"

    def test_empty_email_has_no_content(self) -> None:
        assert EmailRecord(id=1, filename="blank.eml").has_content is False

    def test_id_must_be_positive(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            EmailRecord(id=0, filename="a.eml")

    def test_records_are_immutable(self) -> None:
        record = EmailRecord(id=1, filename="a.eml", body="original")

        with pytest.raises(pydantic.ValidationError):
            record.body = "changed"

        assert record.with_body("changed").body == "changed"
        assert record.body == "original"


class TestAttachmentRecord:
    """Test suite for AttachmentRecord model."""

    def test_extraction_outcome_is_not_serialized(self) -> None:
        record = AttachmentRecord(
            id=2,
            filename="plan.pdf",
            file_type="PDF",
            body="[Could not extract text from plan.pdf]",
            extraction=ExtractionFailed(reason="broken"),
        )

        data = json.loads(record.to_json())

        assert data == {
            "id": 2,
            "type": "attachment",
            "filename": "plan.pdf",
            "file_type": "PDF",
            "body": "[Could not extract text from plan.pdf]",
        }
        assert record.extraction is not None and not record.extraction.ok
        assert record.subject == ""


def test_extraction_outcomes() -> None:
    assert Extracted(text="x").ok is True
    assert Extracted(text="x").status == "ok"
    assert ExtractionFailed(reason="nope").status == "failed"


def test_index_entry_json() -> None:
    entry = IndexEntry(id=4, kind="email", filename="a.eml", preview="From: x", length=120)

    assert json.loads(entry.to_json()) == {
        "id": 4,
        "type": "email",
        "filename": "a.eml",
        "preview": "From: x",
        "length": 120,
    }


def test_query_answer_defaults() -> None:
    answer = QueryAnswer(answer="42", strategy="map_reduce")

    assert answer.mode == "live"
    assert answer.sources == []
    assert answer.errors == []
