"""Custom exceptions for Mail Reviewer."""


class MailReviewerError(Exception):
    """Base exception for all Mail Reviewer errors."""


class ConfigurationError(MailReviewerError):
    """Exception raised for configuration related errors."""


class ValidationError(MailReviewerError):
    """Exception raised for invalid user input, such as an empty question."""


class EmptyCorpusError(MailReviewerError):
    """Exception raised when a query runs before any records are loaded."""


class ParseError(MailReviewerError):
    """Exception raised for malformed header or MIME framing.

    Never escapes the MIME decoder; it falls back to a flatter decode instead.
    """


class ExtractionError(MailReviewerError):
    """Exception raised when text cannot be extracted from an attachment."""


class AuthError(MailReviewerError):
    """Exception raised when the model credential is missing or rejected."""


class RateLimitError(MailReviewerError):
    """Exception raised when the model endpoint signals rate limiting."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamError(MailReviewerError):
    """Exception raised for any other failed model call."""

    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class RateLimitExceeded(UpstreamError):
    """Exception raised when a rate-limited call exhausts its retry attempts."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Rate limited after {attempts} attempts", status=429)
        self.attempts = attempts


class SelectionParseError(MailReviewerError):
    """Exception raised when the model does not return a parseable id list."""
