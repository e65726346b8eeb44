"""Mail Reviewer - ask questions about a folder of emails and attachments.

This package normalizes raw .eml messages and office documents into flat text
records and answers natural-language questions about them with a remote LLM,
fitting the corpus into size-bounded requests.
"""

__version__ = "0.1.0"

from mail_reviewer.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
