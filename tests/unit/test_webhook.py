"""Tests for WebhookDelivery using httpx.MockTransport."""

import json
from unittest.mock import patch

import httpx

from bookscout.core.config import DeliveryConfig
from bookscout.core.schemas import Item, JobResult, ScoredItem
from bookscout.delivery.webhook import WebhookDelivery

_HOOK_URL = "https://hook.example.com/abc"


def _make_result() -> JobResult:
    item = Item(title="Red Mars", source_author="kim", current_price=10.0)
    return JobResult(
        job_id="job-1",
        topic="mars",
        books=[ScoredItem.from_item(item, "About Mars.", 80)],
    )


def _make_client(handler: object) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))  # type: ignore[arg-type]


class TestWebhookDelivery:
    async def test_posts_camel_case_payload(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, text="Accepted")

        async with _make_client(handler) as client:
            delivery = WebhookDelivery(DeliveryConfig(webhook_url=_HOOK_URL), client=client)
            ok = await delivery.send(_make_result())

        assert ok is True
        assert len(captured) == 1
        assert str(captured[0].url) == _HOOK_URL
        assert captured[0].method == "POST"
        body = json.loads(captured[0].content)
        assert body["jobId"] == "job-1"
        assert body["books"][0]["relevanceScore"] == 80
        assert body["books"][0]["valueScore"] == 8.0
        assert body["metadata"]["totalBooks"] == 0

    async def test_non_success_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="Internal error")

        async with _make_client(handler) as client:
            delivery = WebhookDelivery(DeliveryConfig(webhook_url=_HOOK_URL), client=client)
            assert await delivery.send(_make_result()) is False

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _make_client(handler) as client:
            delivery = WebhookDelivery(DeliveryConfig(webhook_url=_HOOK_URL), client=client)
            assert await delivery.send(_make_result()) is False

    async def test_not_configured(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        async with _make_client(handler) as client:
            delivery = WebhookDelivery(DeliveryConfig(webhook_url=""), client=client)
            assert delivery.is_configured is False
            assert await delivery.send(_make_result()) is False

        assert calls == []

    async def test_opens_own_client_when_none_injected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        transport = httpx.MockTransport(handler)
        real_client = httpx.AsyncClient

        def _client_factory(**kwargs: object) -> httpx.AsyncClient:
            assert kwargs["timeout"] == 5.0
            return real_client(transport=transport)

        delivery = WebhookDelivery(DeliveryConfig(webhook_url=_HOOK_URL, timeout_s=5.0))
        with patch("bookscout.delivery.webhook.httpx.AsyncClient", side_effect=_client_factory):
            assert await delivery.send(_make_result()) is True
