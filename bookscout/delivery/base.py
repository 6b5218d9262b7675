"""Abstract base class for delivery gateways."""

from abc import ABC, abstractmethod

from bookscout.core.schemas import JobResult


class DeliveryGateway(ABC):
    """Hands a finished result to a downstream consumer."""

    @abstractmethod
    async def send(self, result: JobResult) -> bool:
        """Attempt one delivery. Returns False on failure; never raises."""
