"""Webhook delivery of finished job results over HTTP (httpx)."""

import logging

import httpx

from bookscout.core.config import DeliveryConfig
from bookscout.core.schemas import JobResult
from bookscout.delivery.base import DeliveryGateway

logger = logging.getLogger(__name__)


class WebhookDelivery(DeliveryGateway):
    """POSTs the camelCase JSON result to a configured webhook URL.

    One attempt per result; no retries. A client may be injected (tests pass
    one built on ``httpx.MockTransport``), otherwise a short-lived client is
    opened per send.
    """

    def __init__(self, config: DeliveryConfig, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._config.webhook_url)

    async def send(self, result: JobResult) -> bool:
        if not self.is_configured:
            logger.error("Webhook URL is not configured; skipping delivery of job %s", result.job_id)
            return False

        payload = result.model_dump(mode="json", by_alias=True)
        try:
            if self._client is not None:
                response = await self._client.post(self._config.webhook_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self._config.timeout_s) as client:
                    response = await client.post(self._config.webhook_url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Webhook request for job %s failed: %s", result.job_id, e)
            return False

        if not response.is_success:
            logger.error(
                "Webhook rejected job %s: status %d, body %.200s",
                result.job_id, response.status_code, response.text,
            )
            return False

        logger.info("Delivered job %s to webhook (%d books)", result.job_id, len(result.books))
        return True
