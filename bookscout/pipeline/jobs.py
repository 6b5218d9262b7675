"""Job pipeline: wires discovery, detail fetch, scoring, aggregation and delivery.

Stage order per job:
  1. Acquire:   open a fresh discovery gateway (one browser per job)
  2. Discover:  search the topic across result pages
  3. Detail:    sequential detail fetch, original description kept on error
  4. Score:     bounded-concurrency enrichment with per-item fallback
  5. Aggregate: batch metadata
  6. Release:   gateway closed on every exit path
  7. Store:     result kept so it outlives a failed delivery
  8. Deliver:   one best-effort webhook send, then status completed

Any error escaping stages 1-6 marks the job failed; there are no retries.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from functools import partial

from bookscout.browser.actions import pause
from bookscout.core.config import Settings
from bookscout.core.errors import JobNotFoundError, PipelineBusyError
from bookscout.core.schemas import Item, Job, JobResult, JobStatus, ScoredItem
from bookscout.core.store import JobStore
from bookscout.delivery.base import DeliveryGateway
from bookscout.delivery.webhook import WebhookDelivery
from bookscout.enrichment.base import EnrichmentGateway
from bookscout.enrichment.enricher import LLMEnricher
from bookscout.pipeline.aggregate import build_metadata
from bookscout.pipeline.batcher import score_in_batches
from bookscout.sources.base import DiscoveryGateway
from bookscout.sources.bookdp.adapter import BookDpDiscovery

logger = logging.getLogger(__name__)

DiscoveryFactory = Callable[[], DiscoveryGateway]


class JobPipeline:
    """Accepts topics and drives each one to a terminal status in the background.

    At most ``max_concurrent_jobs`` jobs execute at once; up to
    ``max_queued_jobs`` more wait for a slot. Submissions beyond that raise
    PipelineBusyError. ``submit`` must be called from a running event loop.

    Usage::

        pipeline = JobPipeline.from_settings(settings)
        job_id = pipeline.submit("mars")
        ...
        job = pipeline.store.get_status(job_id)
    """

    def __init__(
        self,
        store: JobStore,
        discovery_factory: DiscoveryFactory,
        enricher: EnrichmentGateway,
        delivery: DeliveryGateway,
        *,
        detail_delay: float = 0.5,
        batch_size: int = 3,
        batch_delay: float = 1.0,
        max_concurrent_jobs: int = 2,
        max_queued_jobs: int = 16,
    ) -> None:
        if max_concurrent_jobs < 1:
            msg = f"max_concurrent_jobs must be >= 1, got {max_concurrent_jobs}"
            raise ValueError(msg)
        self._store = store
        self._discovery_factory = discovery_factory
        self._enricher = enricher
        self._delivery = delivery
        self._detail_delay = detail_delay
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._capacity = max_concurrent_jobs + max(max_queued_jobs, 0)
        self._slots = asyncio.Semaphore(max_concurrent_jobs)
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, store: JobStore | None = None) -> "JobPipeline":
        """Build a pipeline with the BookDP, LLM and webhook gateways."""
        return cls(
            store if store is not None else JobStore(),
            discovery_factory=partial(BookDpDiscovery, settings.scraper),
            enricher=LLMEnricher(settings.enrichment),
            delivery=WebhookDelivery(settings.delivery),
            detail_delay=settings.scraper.detail_delay,
            batch_size=settings.enrichment.batch_size,
            batch_delay=settings.enrichment.batch_delay,
            max_concurrent_jobs=settings.jobs.max_concurrent_jobs,
            max_queued_jobs=settings.jobs.max_queued_jobs,
        )

    @property
    def store(self) -> JobStore:
        return self._store

    @property
    def in_flight(self) -> int:
        """Jobs running or waiting for a slot."""
        return len(self._tasks)

    @property
    def capacity(self) -> int:
        return self._capacity

    def submit(self, topic: str) -> str:
        """Create a job for ``topic`` and start it in the background.

        Raises:
            ValueError: If the topic is empty or whitespace.
            PipelineBusyError: If the in-flight ceiling is reached.
            RuntimeError: If no event loop is running.
        """
        topic = topic.strip()
        if not topic:
            msg = "topic must not be empty"
            raise ValueError(msg)
        if self.in_flight >= self._capacity:
            raise PipelineBusyError(self._capacity)

        loop = asyncio.get_running_loop()
        job_id = self._store.create(topic)
        task = loop.create_task(self._run(job_id, topic), name=f"job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job_id, None))
        logger.info("Accepted job %s for topic '%s' (%d in flight)", job_id, topic, self.in_flight)
        return job_id

    async def run(self, topic: str) -> Job:
        """Submit a job and wait for it; returns the terminal snapshot."""
        job_id = self.submit(topic)
        await self._tasks[job_id]
        job = self._store.get_status(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def join(self) -> None:
        """Wait until every in-flight job has reached a terminal status."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel in-flight jobs; each releases its gateway and is marked failed.

        A task cancelled before its first step never reaches its own handler,
        so any job still non-terminal after the cancellation is failed here.
        """
        in_flight = list(self._tasks.items())
        if not in_flight:
            return
        logger.info("Cancelling %d in-flight jobs", len(in_flight))
        for _, task in in_flight:
            task.cancel()
        await asyncio.gather(*(task for _, task in in_flight), return_exceptions=True)

        for job_id, _ in in_flight:
            job = self._store.get_status(job_id)
            if job is not None and not job.status.is_terminal:
                self._store.set_status(job_id, JobStatus.FAILED, "Job cancelled")

    # --- Job execution ---

    async def _run(self, job_id: str, topic: str) -> None:
        try:
            async with self._slots:
                await self._execute(job_id, topic)
        except asyncio.CancelledError:
            self._store.set_status(job_id, JobStatus.FAILED, "Job cancelled")
            raise
        except Exception as e:
            logger.exception("Job %s failed", job_id)
            self._store.set_status(job_id, JobStatus.FAILED, f"Job failed: {e}")

    async def _execute(self, job_id: str, topic: str) -> None:
        self._advance(job_id, "Starting the web scraping process")

        async with self._discovery_factory() as discovery:
            items = await discovery.search(topic)
            logger.info("Job %s: discovered %d books for '%s'", job_id, len(items), topic)
            scored: list[ScoredItem] = []
            if items:
                self._advance(
                    job_id, f"Found {len(items)} books. Fetching detailed descriptions...",
                )
                detailed = await self._fetch_details(discovery, items)
                self._advance(job_id, "Enriching books with AI analysis...")
                scored = await score_in_batches(
                    detailed,
                    partial(self._enricher.score, topic=topic),
                    batch_size=self._batch_size,
                    batch_delay=self._batch_delay,
                )
            result = JobResult(
                job_id=job_id, topic=topic, books=scored, metadata=build_metadata(scored),
            )

        self._store.put_result(job_id, result)
        if not scored:
            self._finish(job_id, "No books found for the given topic")
            return

        self._advance(job_id, "Sending results to webhook...")
        await self._deliver(result)
        self._finish(job_id, "Job completed successfully")

    async def _fetch_details(
        self, discovery: DiscoveryGateway, items: Sequence[Item],
    ) -> list[Item]:
        """Replace descriptions with detail-page text where available."""
        detailed: list[Item] = []
        for index, item in enumerate(items):
            if index:
                await pause(self._detail_delay)
            try:
                text = await discovery.fetch_detail(item)
            except Exception:
                logger.warning("Error fetching details for book '%s'", item.title, exc_info=True)
                text = ""
            detailed.append(item.model_copy(update={"description": text}) if text else item)
        return detailed

    async def _deliver(self, result: JobResult) -> bool:
        try:
            delivered = await self._delivery.send(result)
        except Exception:
            logger.exception("Delivery of job %s raised", result.job_id)
            return False
        if not delivered:
            logger.warning("Delivery of job %s failed; result kept in store", result.job_id)
        return delivered

    # --- Status helpers ---

    def _advance(self, job_id: str, message: str) -> Job:
        return self._transition(job_id, JobStatus.PROCESSING, message)

    def _finish(self, job_id: str, message: str) -> Job:
        job = self._transition(job_id, JobStatus.COMPLETED, message)
        logger.info("Job %s completed: %s", job_id, message)
        return job

    def _transition(self, job_id: str, status: JobStatus, message: str) -> Job:
        job = self._store.set_status(job_id, status, message)
        if job is not None:
            return job
        current = self._store.get_status(job_id)
        if current is None:
            raise JobNotFoundError(job_id)
        msg = f"Job {job_id} is already {current.status.value}"
        raise RuntimeError(msg)
