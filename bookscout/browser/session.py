"""Browser session management using patchright.

One session per job: a browser, a context and a listing page. Detail pages
are opened on demand from the same context and must be closed by the caller.
"""

import logging
from types import TracebackType

from patchright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from bookscout.core.config import ScraperConfig

logger = logging.getLogger(__name__)


class BrowserSession:
    """Async context manager that owns one patchright browser + context + page.

    Usage::

        async with BrowserSession(config) as session:
            await session.page.goto("https://...")
            detail = await session.new_page()
    """

    def __init__(self, config: ScraperConfig) -> None:
        self._config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def page(self) -> Page:
        """The listing page for this session. Raises if not started."""
        if self._page is None:
            msg = "BrowserSession not started, use 'async with' or start()"
            raise RuntimeError(msg)
        return self._page

    @property
    def is_open(self) -> bool:
        return self._page is not None

    async def new_page(self) -> Page:
        """Open an extra page in the session's context."""
        if self._context is None:
            msg = "BrowserSession not started, use 'async with' or start()"
            raise RuntimeError(msg)
        return await self._context.new_page()

    async def start(self) -> None:
        """Launch the browser. Anything already launched is torn down on failure."""
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._config.headless)
            self._context = await self._browser.new_context()
            self._context.set_default_timeout(self._config.timeout_ms)
            self._page = await self._context.new_page()
        except Exception:
            await self.close()
            raise
        logger.debug("Browser session started (headless=%s)", self._config.headless)

    async def close(self) -> None:
        """Close context, browser and driver; safe to call more than once."""
        context, browser, playwright = self._context, self._browser, self._playwright
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        try:
            if context is not None:
                await context.close()
            if browser is not None:
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
