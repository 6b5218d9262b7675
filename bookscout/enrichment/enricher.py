"""LLM-backed summary and relevance scoring for discovered books."""

import asyncio
import json
import logging
import re

from bookscout.core.config import EnrichmentConfig
from bookscout.core.schemas import NEUTRAL_RELEVANCE, UNPARSED_SUMMARY, Item, ScoredItem
from bookscout.enrichment.base import EnrichmentGateway
from bookscout.enrichment.llm import get_provider
from bookscout.enrichment.llm.base import LLMProvider

logger = logging.getLogger(__name__)

_ENRICHMENT_SYSTEM_PROMPT = (
    "You are a helpful assistant that analyzes books and provides concise "
    "summaries and relevance scores.\n\n"
    "Return ONLY a JSON object (no markdown, no explanation):\n"
    '{"summary": "<1-2 sentence summary>", '
    '"relevance_score": <integer 0-100>}'
)

_SUMMARY_LINE_RE = re.compile(r"Summary:\s*(.*?)(?=\n|$)")
_SCORE_LINE_RE = re.compile(r"Relevance Score:\s*(\d+)")


def _build_user_prompt(item: Item, topic: str) -> str:
    """Assemble the user prompt from the book fields and the topic."""
    return (
        f"Book Title: {item.title}\n"
        f"Book Author: {item.source_author or 'not provided'}\n"
        f"Book Description: {item.description or 'not provided'}\n"
        f"Theme: {topic}\n\n"
        "I need two things:\n"
        "1. A concise 1-2 sentence summary of this book based on the description.\n"
        "2. A relevance score from 0 to 100 indicating how well this book "
        f'matches the theme "{topic}".\n'
    )


def _parse_enrichment(raw_text: str) -> tuple[str, int]:
    """Parse an LLM reply into (summary, relevance_score).

    Accepts the JSON object requested by the system prompt (optionally
    wrapped in a markdown fence) or labelled ``Summary:`` and
    ``Relevance Score:`` lines. Missing parts fall back to the unparsed
    summary and the neutral score; the score is clamped to 0-100.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    summary: str | None = None
    score: int | None = None

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = None

    if isinstance(data, dict):
        if data.get("summary"):
            summary = str(data["summary"]).strip()
        raw_score = data.get("relevance_score", data.get("score"))
        try:
            score = round(float(raw_score)) if raw_score is not None else None
        except (TypeError, ValueError, OverflowError):
            score = None
    else:
        summary_match = _SUMMARY_LINE_RE.search(cleaned)
        score_match = _SCORE_LINE_RE.search(cleaned)
        if summary_match and summary_match.group(1).strip():
            summary = summary_match.group(1).strip()
        if score_match:
            score = int(score_match.group(1))

    if score is None:
        logger.debug("No relevance score in LLM reply, using %d", NEUTRAL_RELEVANCE)
        score = NEUTRAL_RELEVANCE

    return summary or UNPARSED_SUMMARY, max(0, min(100, score))


class LLMEnricher(EnrichmentGateway):
    """Enrichment gateway that asks an LLM provider for summary and relevance.

    The provider call is synchronous, so it runs in a worker thread to keep
    the event loop free while a batch is in flight.
    """

    def __init__(self, config: EnrichmentConfig, provider: LLMProvider | None = None) -> None:
        self._config = config
        self._provider = provider if provider is not None else get_provider(config.provider)

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    async def score(self, item: Item, topic: str) -> ScoredItem:
        prompt = _build_user_prompt(item, topic)
        raw = await asyncio.to_thread(
            self._provider.complete,
            prompt,
            self._config.model,
            system=_ENRICHMENT_SYSTEM_PROMPT,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )
        summary, relevance = _parse_enrichment(raw or "")
        logger.debug("Scored '%s': relevance %d", item.title, relevance)
        return ScoredItem.from_item(item, summary, relevance)
