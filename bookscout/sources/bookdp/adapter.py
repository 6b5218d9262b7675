"""BookDP discovery gateway wiring the URL builder, parser, and browser session."""

import logging
from typing import Any

from bookscout.browser.session import BrowserSession
from bookscout.core.config import ScraperConfig
from bookscout.core.schemas import Item
from bookscout.sources.base import DiscoveryGateway
from bookscout.sources.bookdp.parser import BookDpParser
from bookscout.sources.bookdp.searcher import build_search_url, first_sentence
from bookscout.sources.bookdp.selectors import (
    CARD_SELECTORS,
    DETAIL_DESCRIPTION_SELECTORS,
    RESULTS_CONTAINER,
)

logger = logging.getLogger(__name__)


class BookDpDiscovery(DiscoveryGateway):
    """Searches bookdp.com.au with a dedicated browser session.

    The session is injectable so tests can pass a stub with ``page``,
    ``new_page``, ``start`` and ``close``.
    """

    def __init__(self, config: ScraperConfig, session: Any | None = None) -> None:
        self._config = config
        self._session = session if session is not None else BrowserSession(config)
        self._parser = BookDpParser(config.base_url)

    @property
    def source_id(self) -> str:
        return "bookdp"

    async def open(self) -> None:
        await self._session.start()

    async def close(self) -> None:
        await self._session.close()

    async def search(self, topic: str) -> list[Item]:
        """Collect items page by page, stopping at the first empty page."""
        page = self._session.page
        items: list[Item] = []

        for page_num in range(1, self._config.pages_to_scrape + 1):
            url = build_search_url(self._config.base_url, topic, page_num)
            logger.info("Scraping page %d: %s", page_num, url)

            await page.goto(url, wait_until="domcontentloaded")
            try:
                await page.wait_for_selector(
                    RESULTS_CONTAINER, timeout=self._config.search_wait_ms,
                )
            except Exception:
                logger.info("No result grid on page %d for '%s'", page_num, topic)

            cards = await self._find_cards(page)
            page_items = await self._parser.parse_cards(cards)
            items.extend(page_items)
            logger.info(
                "Page %d: found %d cards, parsed %d items",
                page_num, len(cards), len(page_items),
            )

            if not page_items:
                logger.info("Stopping pagination: page %d yielded no items", page_num)
                break

        return items

    async def fetch_detail(self, item: Item) -> str:
        """Open the product page and return the first description sentence.

        The detail page is always closed. A missing description yields "";
        navigation errors propagate to the caller.
        """
        if not item.source_url:
            return ""

        detail_page = await self._session.new_page()
        try:
            await detail_page.goto(item.source_url, wait_until="domcontentloaded")
            for selector in DETAIL_DESCRIPTION_SELECTORS:
                try:
                    el = await detail_page.wait_for_selector(
                        selector, timeout=self._config.detail_wait_ms,
                    )
                except Exception:
                    continue
                if el is not None:
                    return first_sentence(await el.text_content())
            logger.info("No description found for book: %s", item.title)
            return ""
        finally:
            await detail_page.close()

    async def _find_cards(self, page: Any) -> list[Any]:
        """Find product cards using fallback selectors."""
        for selector in CARD_SELECTORS:
            cards = await page.query_selector_all(selector)
            if cards:
                logger.debug("Found %d cards with selector '%s'", len(cards), selector)
                return cards  # type: ignore[no-any-return]
        logger.warning("No cards found with any selector")
        return []
