"""Remote model access."""

from .client import LLMGateway, Message

__all__ = ["LLMGateway", "Message"]
