"""Unit tests for the compact index and selection helpers."""

import json

import pytest

from mail_reviewer.exceptions import SelectionParseError
from mail_reviewer.models import AttachmentRecord, EmailRecord
from mail_reviewer.retrieval import (
    TRUNCATION_MARKER,
    assemble_context,
    build_index,
    default_selection,
    index_text,
    parse_selection,
    resolve_selection,
)


@pytest.fixture
def records() -> list:
    return [
        EmailRecord(
            id=1,
            filename="1.eml",
            sender="alice@example.com",
            subject="Budget",
            body="Numbers   for\nQ3 " + "z" * 500,
        ),
        AttachmentRecord(id=3, filename="plan.docx", file_type="DOCX", body="Plan " * 100),
        EmailRecord(id=4, filename="4.eml", subject="Lunch", body="Pizza?"),
    ]


class TestBuildIndex:
    """Test suite for build_index."""

    def test_previews_are_short_single_line(self, records: list) -> None:
        entries = build_index(records, preview_chars=60)

        assert [e.id for e in entries] == [1, 3, 4]
        assert entries[0].preview.startswith("From: alice@example.com | Subject: Budget | Numbers for Q3")
        assert all(len(e.preview) <= 60 and "\n" not in e.preview for e in entries)
        assert entries[1].length == len(records[1].body)

    def test_index_text_is_jsonl(self, records: list) -> None:
        lines = index_text(build_index(records)).split("\n")

        assert [json.loads(line)["type"] for line in lines] == ["email", "attachment", "email"]


class TestParseSelection:
    """Test suite for parse_selection."""

    @pytest.mark.parametrize(
        "response,expected",
        [
            ("[1, 3, 4]", [1, 3, 4]),
            ("Here are the relevant ids:\n```json\n[ 4,1 ]\n```", [4, 1]),
            ("[7]", [7]),
            ("First [2, 9] then [5]", [2, 9]),
        ],
    )
    def test_tolerates_surrounding_prose(self, response: str, expected: list[int]) -> None:
        assert parse_selection(response) == expected

    @pytest.mark.parametrize("response", ["none of them", "[]", "[a, b]", ""])
    def test_no_id_list_raises(self, response: str) -> None:
        with pytest.raises(SelectionParseError):
            parse_selection(response)


class TestResolveSelection:
    """Test suite for resolve_selection."""

    def test_unknown_and_duplicate_ids_are_dropped(self, records: list) -> None:
        selected = resolve_selection([4, 99, 4, 1], records, max_ids=30, default_count=20)

        assert [r.id for r in selected] == [4, 1]

    def test_capped_at_max_ids(self, records: list) -> None:
        selected = resolve_selection([1, 3, 4], records, max_ids=2, default_count=20)

        assert [r.id for r in selected] == [1, 3]

    def test_empty_result_falls_back_to_default(self, records: list) -> None:
        selected = resolve_selection([42], records, max_ids=30, default_count=2)

        assert [r.id for r in selected] == [1, 3]

    def test_default_selection_orders_by_id(self, records: list) -> None:
        assert [r.id for r in default_selection(list(reversed(records)), 5)] == [1, 3, 4]


class TestAssembleContext:
    """Test suite for assemble_context."""

    def test_everything_fits(self, records: list) -> None:
        context = assemble_context(records, budget=100_000)

        assert context.truncated is False
        assert context.filenames == ["1.eml", "plan.docx", "4.eml"]
        assert context.text == "\n".join(r.to_json() for r in records)

    def test_crossing_record_is_truncated_and_later_ones_dropped(self, records: list) -> None:
        """Test the budget boundary: truncate with a marker, then stop."""
        first_len = len(records[0].to_json())
        budget = first_len + 1 + 200

        context = assemble_context(records, budget=budget)

        assert context.truncated is True
        assert len(context.text) <= budget
        assert context.filenames == ["1.eml", "plan.docx"]
        assert context.records[1].body.endswith(TRUNCATION_MARKER)
        assert "4.eml" not in context.text

    def test_no_room_for_truncated_record(self, records: list) -> None:
        first_len = len(records[0].to_json())

        context = assemble_context(records, budget=first_len + 5)

        assert context.truncated is True
        assert context.filenames == ["1.eml"]
