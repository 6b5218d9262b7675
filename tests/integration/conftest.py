"""Fixtures shared by the pipeline and API integration tests."""

import pytest
from fakes import FakeDelivery, FakeDiscovery, FakeEnricher, PipelineFactory, mars_items

from bookscout.core.schemas import Item
from bookscout.core.store import JobStore
from bookscout.pipeline.jobs import JobPipeline


@pytest.fixture
def make_pipeline() -> PipelineFactory:
    """Build a JobPipeline over fake gateways with all pauses set to zero.

    Each job gets a fresh FakeDiscovery built from ``discovery_kwargs``; the
    created instances are returned so tests can check they were released.
    """

    def _factory(
        items: list[Item] | None = None,
        *,
        enricher: FakeEnricher | None = None,
        delivery: FakeDelivery | None = None,
        max_concurrent_jobs: int = 2,
        max_queued_jobs: int = 16,
        **discovery_kwargs: object,
    ) -> tuple[JobPipeline, list[FakeDiscovery]]:
        created: list[FakeDiscovery] = []
        job_items = mars_items() if items is None else items

        def discovery_factory() -> FakeDiscovery:
            discovery = FakeDiscovery(job_items, **discovery_kwargs)  # type: ignore[arg-type]
            created.append(discovery)
            return discovery

        pipeline = JobPipeline(
            JobStore(),
            discovery_factory,
            enricher or FakeEnricher({"Red Mars": 80, "Mars Trilogy": 40}),
            delivery or FakeDelivery(),
            detail_delay=0.0,
            batch_size=3,
            batch_delay=0.0,
            max_concurrent_jobs=max_concurrent_jobs,
            max_queued_jobs=max_queued_jobs,
        )
        return pipeline, created

    return _factory
