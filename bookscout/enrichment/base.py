"""Abstract base class for enrichment gateways."""

from abc import ABC, abstractmethod

from bookscout.core.schemas import Item, ScoredItem


class EnrichmentGateway(ABC):
    """Scores one item against a topic."""

    @abstractmethod
    async def score(self, item: Item, topic: str) -> ScoredItem:
        """Return the item annotated with a summary and relevance score.

        May raise on transport or API errors; callers substitute
        ``ScoredItem.fallback``.
        """
