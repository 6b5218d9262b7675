"""BookDP DOM parser: converts product card elements into Item objects.

Every selector lookup goes through a fallback tuple, and any optional field
that cannot be read comes back as its empty value instead of raising. Cards
without a title or a derivable author are dropped.
"""

import logging
from typing import Protocol, runtime_checkable
from urllib.parse import urljoin

from bookscout.core.schemas import Item
from bookscout.sources.bookdp.searcher import author_from_url, parse_price
from bookscout.sources.bookdp.selectors import (
    CURRENT_PRICE_SELECTORS,
    ORIGINAL_PRICE_SELECTORS,
    SHORT_DESCRIPTION_SELECTORS,
    TITLE_LINK_SELECTORS,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class ElementLike(Protocol):
    """Minimal element interface so tests can use AsyncMock instead of patchright."""

    async def query_selector(self, selector: str) -> "ElementLike | None": ...
    async def get_attribute(self, name: str) -> str | None: ...
    async def text_content(self) -> str | None: ...


class BookDpParser:
    """Parses BookDP search-result cards into Item objects."""

    def __init__(self, base_url: str = "") -> None:
        self._base_url = base_url.rstrip("/") + "/" if base_url else ""

    async def parse_cards(self, cards: list[ElementLike]) -> list[Item]:
        """Parse multiple cards, skipping any that fail."""
        results: list[Item] = []
        for card in cards:
            try:
                item = await self.parse_card(card)
                if item is not None:
                    results.append(item)
            except Exception:
                logger.debug("Failed to parse card, skipping", exc_info=True)
        return results

    async def parse_card(self, card: ElementLike) -> Item | None:
        """Parse a single card element into an Item.

        Returns None if the title or author cannot be extracted.
        """
        title_link = await self._find_first(card, TITLE_LINK_SELECTORS)
        title = await self._text(title_link)
        url = await self._href(title_link)
        if url and self._base_url:
            url = urljoin(self._base_url, url)
        author = author_from_url(url)
        if not title or not author:
            logger.debug("Card missing title or author (title=%r, url=%r)", title, url)
            return None

        current_price = parse_price(await self._text_fallback(card, CURRENT_PRICE_SELECTORS))
        original_price = parse_price(await self._text_fallback(card, ORIGINAL_PRICE_SELECTORS))
        description = await self._text_fallback(card, SHORT_DESCRIPTION_SELECTORS)

        return Item(
            title=title,
            source_author=author,
            current_price=current_price or 0.0,
            original_price=original_price,
            description=description or f"Book: {title}",
            source_url=url,
        )

    # --- Private helpers ---

    async def _text_fallback(self, card: ElementLike, selectors: tuple[str, ...]) -> str:
        """Try selectors in order, return first element's text or ""."""
        el = await self._find_first(card, selectors)
        return await self._text(el)

    @staticmethod
    async def _text(el: ElementLike | None) -> str:
        if el is None:
            return ""
        try:
            text = await el.text_content()
        except Exception:
            logger.debug("Error reading text content", exc_info=True)
            return ""
        return " ".join(text.split()) if text else ""

    @staticmethod
    async def _href(el: ElementLike | None) -> str:
        if el is None:
            return ""
        try:
            href = await el.get_attribute("href")
        except Exception:
            logger.debug("Error reading href", exc_info=True)
            return ""
        return href.strip() if href else ""

    async def _find_first(
        self, parent: ElementLike, selectors: tuple[str, ...]
    ) -> ElementLike | None:
        """Return the first element matching any selector in order."""
        for selector in selectors:
            try:
                el = await parent.query_selector(selector)
                if el is not None:
                    return el
            except Exception:
                logger.debug("Selector '%s' raised, trying next", selector, exc_info=True)
        return None
