"""Chat-completions gateway.

This module provides a single round-trip call to an OpenAI-compatible
chat-completions endpoint. Retry policy belongs to the caller.
"""

from typing import Any, Optional

import httpx
import structlog

from mail_reviewer.config import Settings
from mail_reviewer.exceptions import AuthError, RateLimitError, UpstreamError

logger = structlog.get_logger()

Message = dict[str, str]


def _retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class LLMGateway:
    """Client for a remote chat-completions model.

    The gateway maps HTTP outcomes onto the error taxonomy: missing or rejected
    credentials raise AuthError, HTTP 429 raises RateLimitError, and every other
    failure (including timeouts) raises UpstreamError.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            settings: Application settings. If None, uses default settings.
            client: HTTP client to use. If None, one is created on first use.
        """
        from mail_reviewer.config import get_settings

        self.settings = settings or get_settings()
        self._client = client
        logger.info(
            "llm_gateway_initialized",
            base_url=self.settings.openai_base_url,
            model=self.settings.openai_model,
            has_credentials=self.has_credentials,
        )

    @property
    def has_credentials(self) -> bool:
        return self.settings.has_credentials

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.llm_timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def complete(
        self,
        messages: list[Message],
        temperature: Optional[float] = None,
        **params: Any,
    ) -> str:
        """Send role-tagged messages and return the first choice's text.

        Args:
            messages: List of message dictionaries with 'role' and 'content'.
            temperature: Sampling temperature. If None, uses settings.
            **params: Extra generation parameters passed through to the API.

        Returns:
            Content of the first completion choice (may be empty).

        Raises:
            AuthError: If no credential is configured or it is rejected.
            RateLimitError: If the endpoint answers HTTP 429.
            UpstreamError: For timeouts, transport errors and other failures.
        """
        if not self.has_credentials:
            raise AuthError("No model API key configured")

        url = f"{self.settings.openai_base_url.rstrip('/')}/chat/completions"
        payload: dict[str, Any] = {
            "model": self.settings.openai_model,
            "messages": messages,
            "temperature": self.settings.temperature if temperature is None else temperature,
            **params,
        }
        prompt_chars = sum(len(m.get("content", "")) for m in messages)
        logger.debug("llm_request", model=payload["model"], prompt_chars=prompt_chars)

        try:
            resp = await self.client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
                timeout=self.settings.llm_timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("llm_request_timeout", timeout=self.settings.llm_timeout)
            raise UpstreamError(f"LLM request timed out after {self.settings.llm_timeout}s") from e
        except httpx.HTTPError as e:
            logger.warning("llm_request_transport_error", error=str(e))
            raise UpstreamError(f"LLM request failed: {e}") from e

        status = resp.status_code
        if status in (401, 403):
            raise AuthError(f"LLM endpoint rejected the credential ({status})")
        if status == 429:
            raise RateLimitError(
                "LLM endpoint rate limited the request",
                retry_after=_retry_after(resp.headers.get("retry-after")),
            )
        if not resp.is_success:
            logger.warning("llm_request_failed", status=status)
            raise UpstreamError(f"LLM request failed: {status} {resp.text}", status=status, body=resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError("LLM response was not valid JSON", status=status, body=resp.text) from e

        if not isinstance(data, dict):
            raise UpstreamError("Completion response is not a JSON object", status=status, body=resp.text)

        choices = data.get("choices") or []
        if not isinstance(choices, list) or not choices:
            raise UpstreamError("No choices in completion response", status=status, body=resp.text)

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise UpstreamError("Malformed choice in completion response", status=status, body=resp.text)

        content = message.get("content") or ""
        logger.debug("llm_response", response_chars=len(content))
        return content if isinstance(content, str) else str(content)
