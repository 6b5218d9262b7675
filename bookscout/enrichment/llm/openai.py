"""OpenAI LLM provider."""

import os

from bookscout.enrichment.llm.base import LLMProvider, chat_completion


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI chat completions API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        api_key = os.environ.get(self.env_var)
        if not api_key:
            msg = f"{self.env_var} environment variable is required"
            raise ValueError(msg)

        import openai

        client = openai.OpenAI(api_key=api_key)
        return chat_completion(
            client, model or self.default_model, prompt,
            system=system, temperature=temperature, max_tokens=max_tokens,
        )
