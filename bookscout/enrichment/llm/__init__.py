"""LLM provider registry with lazy loading.

Usage:
    from bookscout.enrichment.llm import get_provider

    provider = get_provider("openai")
    raw = provider.complete(prompt, system="...")
"""

import importlib

from bookscout.enrichment.llm.base import LLMProvider

__all__ = ["LLMProvider", "available_providers", "get_provider"]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("bookscout.enrichment.llm.anthropic", "AnthropicProvider"),
    "openai": ("bookscout.enrichment.llm.openai", "OpenAIProvider"),
    "ollama": ("bookscout.enrichment.llm.ollama", "OllamaProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
