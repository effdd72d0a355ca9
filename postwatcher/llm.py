"""Model invocation for PostWatcher.

Wraps the Anthropic async client and reports the shape of each response as
an explicit result type instead of assuming the first block is text.
"""

import logging
from dataclasses import dataclass
from typing import Union

import anthropic

from .config import Config

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7


class LLMError(Exception):
    """Base error for model calls."""

    pass


class UnexpectedResponseError(LLMError):
    """Raised when a model response does not start with a text block."""

    def __init__(self, label: str, description: str):
        self.label = label
        self.description = description
        super().__init__(f"Unexpected model response for {label}: {description}")


@dataclass
class TextResult:
    """The first response block was text."""

    text: str


@dataclass
class UnexpectedShape:
    """The response was empty or its first block was not text."""

    description: str


ModelResult = Union[TextResult, UnexpectedShape]


class ModelClient:
    """Thin wrapper around ``anthropic.AsyncAnthropic``."""

    def __init__(self, config: Config, client=None):
        """Initialize the client.

        Args:
            config: Application configuration (key, base URL, model)
            client: Optional preconfigured SDK client, mainly for tests
        """
        self.model = config.model
        self.client = client or anthropic.AsyncAnthropic(
            api_key=config.api_key or "dummy",
            base_url=config.base_url,
        )

    async def complete(
        self,
        prompt: str,
        system: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> ModelResult:
        """Send one user prompt and classify the response.

        SDK errors (authentication, transport, API status) propagate.

        Args:
            prompt: User message
            system: System role description
            max_tokens: Maximum response tokens
            temperature: Sampling temperature

        Returns:
            TextResult or UnexpectedShape
        """
        logger.debug("Calling model %s (%d prompt chars)", self.model, len(prompt))
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        return classify_response(message)


def classify_response(message) -> ModelResult:
    """Classify an SDK message by the type of its first content block."""
    content = getattr(message, "content", None)
    if not content:
        return UnexpectedShape("empty response")

    first = content[0]
    block_type = getattr(first, "type", None)
    if block_type != "text":
        return UnexpectedShape(f"first block has type {block_type!r}")

    return TextResult(first.text)


def require_text(result: ModelResult, label: str) -> str:
    """Return the text of a TextResult or raise UnexpectedResponseError."""
    if isinstance(result, TextResult):
        return result.text
    raise UnexpectedResponseError(label, result.description)
