"""Abstract base class for LLM providers."""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """Base class that every LLM provider must implement.

    ``complete`` is synchronous, matching the vendor SDKs; async callers run
    it in a worker thread.
    """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'openai')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: User message.
            model: Override the provider's default model. None uses default.
            system: Optional system prompt.
            temperature: Sampling temperature. None uses the API default.
            max_tokens: Completion length cap. None uses the provider default.

        Returns:
            Raw text response from the LLM.
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""


def chat_completion(
    client: object,
    model: str,
    prompt: str,
    *,
    system: str | None,
    temperature: float | None,
    max_tokens: int | None,
) -> str:
    """Run one chat completion against an OpenAI-compatible client.

    Shared by every provider that speaks the OpenAI chat API.
    """
    messages: list[dict[str, str]] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    kwargs: dict[str, object] = {"model": model, "messages": messages}
    if temperature is not None:
        kwargs["temperature"] = temperature
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens

    logger.debug("Chat completion request (%s, %d chars)", model, len(prompt))
    response = client.chat.completions.create(**kwargs)  # type: ignore[attr-defined]
    return response.choices[0].message.content or ""
