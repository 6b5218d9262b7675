"""Abstract base class for discovery gateways."""

from abc import ABC, abstractmethod
from types import TracebackType

from bookscout.core.schemas import Item


class DiscoveryGateway(ABC):
    """Base class that every catalog source must implement.

    A gateway instance is owned by one job. ``open`` acquires its session,
    ``close`` releases it; ``async with`` pairs them on every exit path,
    including a failed ``open``.
    """

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Unique identifier for this source (e.g. 'bookdp')."""

    @abstractmethod
    async def open(self) -> None:
        """Acquire the underlying session (browser, client, ...)."""

    @abstractmethod
    async def close(self) -> None:
        """Release the session. Must be safe to call after a failed open."""

    @abstractmethod
    async def search(self, topic: str) -> list[Item]:
        """Return raw items for a topic, across all result pages."""

    @abstractmethod
    async def fetch_detail(self, item: Item) -> str:
        """Return an extended description for an item, or "" if none.

        May raise; callers keep the item's original description on error.
        """

    async def __aenter__(self) -> "DiscoveryGateway":
        try:
            await self.open()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
