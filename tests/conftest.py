"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
from typing import Any

import pytest
import structlog


class ScriptedGateway:
    """Stand-in for LLMGateway that replays canned replies.

    Each entry in ``replies`` is returned in turn; exception instances are
    raised instead. Sent message lists are kept in ``calls``.
    """

    def __init__(self, replies: list[Any] | None = None, has_credentials: bool = True) -> None:
        self.replies = list(replies or [])
        self.calls: list[list[dict[str, str]]] = []
        self.has_credentials = has_credentials
        self.closed = False

    async def complete(self, messages, temperature=None, **params) -> str:
        self.calls.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def aclose(self) -> None:
        self.closed = True


class RecordingSleep:
    """Awaitable sleep that records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo configure_logging so no test logs to another test's captured stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def mock_settings():
    """Provide settings with a credential and no real pauses."""
    from mail_reviewer.config import Settings

    return Settings(
        openai_api_key="test-key",
        openai_base_url="http://llm.test/v1",
        openai_model="test-model",
        request_delay_seconds=0,
        rate_limit_delay_seconds=0,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def scripted_gateway():
    """Factory for ScriptedGateway instances."""

    def _make(replies: list[Any] | None = None, has_credentials: bool = True) -> ScriptedGateway:
        return ScriptedGateway(replies, has_credentials)

    return _make


@pytest.fixture
def base64_email() -> str:
    """Single-part text/plain message with a base64 body."""
    encoded = base64.b64encode(b"Hello World").decode("ascii")
    return (
        "From: Alice <alice@example.com>\r\n"
        "To: bob@example.com\r\n"
        "Subject: Greetings\r\n"
        "Date: Mon, 1 Jan 2024 10:00:00 +0000\r\n"
        "Content-Type: text/plain; charset=utf-8\r\n"
        "Content-Transfer-Encoding: base64\r\n"
        "\r\n"
        f"{encoded}\r\n"
    )


@pytest.fixture
def alternative_email() -> str:
    """multipart/alternative message with a plain and an html part."""
    return (
        "From: Alice <alice@example.com>\n"
        "To: bob@example.com\n"
        "Subject: Alternative\n"
        'Content-Type: multipart/alternative; boundary="alt-1"\n'
        "\n"
        "This is a multi-part message in MIME format.\n"
        "--alt-1\n"
        "Content-Type: text/plain; charset=utf-8\n"
        "\n"
        "Plain text\n"
        "--alt-1\n"
        "Content-Type: text/html; charset=utf-8\n"
        "\n"
        "<p>Rich</p>\n"
        "--alt-1--\n"
    )


@pytest.fixture
def nested_email() -> str:
    """Three levels of multipart nesting with a non-text leaf in between."""
    return (
        "From: carol@example.com\n"
        "Subject: Nested\n"
        'Content-Type: multipart/mixed; boundary="outer"\n'
        "\n"
        "--outer\n"
        'Content-Type: multipart/related; boundary="middle"\n'
        "\n"
        "--middle\n"
        'Content-Type: multipart/alternative; boundary="inner"\n'
        "\n"
        "--inner\n"
        "Content-Type: text/plain\n"
        "\n"
        "First leaf\n"
        "--inner\n"
        "Content-Type: text/html\n"
        "\n"
        "<div>Second <b>leaf</b></div>\n"
        "--inner--\n"
        "--middle\n"
        "Content-Type: image/png\n"
        "Content-Transfer-Encoding: base64\n"
        "\n"
        "iVBORw0KGgo=\n"
        "--middle--\n"
        "--outer\n"
        "Content-Type: application/pdf\n"
        "\n"
        "%PDF-1.4 binary\n"
        "--outer\n"
        "Content-Type: text/plain\n"
        "Content-Transfer-Encoding: quoted-printable\n"
        "\n"
        "Third leaf caf=C3=A9\n"
        "--outer--\n"
    )
