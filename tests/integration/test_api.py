"""Integration test: HTTP API over a pipeline with fake gateways."""

import asyncio
import time
from collections.abc import Iterator

import pytest
from fakes import PipelineFactory
from fastapi.testclient import TestClient

from bookscout.api.app import create_app
from bookscout.core.schemas import JobStatus
from bookscout.pipeline.jobs import JobPipeline


def _wait_for_terminal(client: TestClient, job_id: str, timeout: float = 5.0) -> dict[str, object]:
    deadline = time.monotonic() + timeout
    while True:
        data = client.get(f"/status/{job_id}").json()["data"]
        if data["status"] in ("completed", "failed"):
            return data  # type: ignore[no-any-return]
        if time.monotonic() > deadline:
            pytest.fail(f"Job {job_id} still {data['status']} after {timeout}s")
        time.sleep(0.01)


@pytest.fixture
def pipeline(make_pipeline: PipelineFactory) -> JobPipeline:
    built, _ = make_pipeline()
    return built


@pytest.fixture
def client(pipeline: JobPipeline) -> Iterator[TestClient]:
    with TestClient(create_app(pipeline=pipeline)) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# POST /scrape
# ---------------------------------------------------------------------------


class TestScrape:
    def test_accepts_topic(self, client: TestClient) -> None:
        resp = client.post("/scrape", json={"topic": "mars"})
        assert resp.status_code == 202
        body = resp.json()
        assert body["status"] == "success"
        assert body["message"] == "Job initiated successfully"
        assert isinstance(body["jobId"], str) and body["jobId"]

    def test_theme_alias(self, client: TestClient) -> None:
        resp = client.post("/scrape", json={"theme": "mars"})
        assert resp.status_code == 202

    @pytest.mark.parametrize("body", [{"topic": ""}, {"topic": "   "}, {}])
    def test_empty_topic_rejected(self, client: TestClient, body: dict[str, str]) -> None:
        resp = client.post("/scrape", json=body)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "A valid topic is required"

    def test_busy_returns_503(self, make_pipeline: PipelineFactory) -> None:
        busy, _ = make_pipeline(max_concurrent_jobs=1, max_queued_jobs=0, gate=asyncio.Event())
        with TestClient(create_app(pipeline=busy)) as test_client:
            first = test_client.post("/scrape", json={"topic": "a"})
            second = test_client.post("/scrape", json={"topic": "b"})

        assert first.status_code == 202
        assert second.status_code == 503
        assert "busy" in second.json()["detail"]


# ---------------------------------------------------------------------------
# GET /status and /results
# ---------------------------------------------------------------------------


class TestStatusAndResults:
    def test_full_round_trip(self, client: TestClient) -> None:
        job_id = client.post("/scrape", json={"topic": "mars"}).json()["jobId"]

        status = _wait_for_terminal(client, job_id)
        assert status["status"] == "completed"
        assert status["message"] == "Job completed successfully"
        assert status["topic"] == "mars"
        assert status["completedAt"] is not None

        resp = client.get(f"/results/{job_id}")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["jobId"] == job_id
        assert [b["title"] for b in data["books"]] == ["Red Mars", "Mars Trilogy"]
        assert data["books"][0]["valueScore"] == 8.0
        assert data["metadata"] == {
            "totalBooks": 2,
            "averagePrice": 15.0,
            "averageRelevance": 60.0,
            "mostRelevantBook": "Red Mars",
            "bestValueBook": "Red Mars",
        }

    def test_unknown_job_status(self, client: TestClient) -> None:
        resp = client.get("/status/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Job not found"

    def test_unknown_job_results(self, client: TestClient) -> None:
        resp = client.get("/results/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Job not found"

    def test_results_before_completion(self, client: TestClient, pipeline: JobPipeline) -> None:
        job_id = pipeline.store.create("mars")
        pipeline.store.set_status(job_id, JobStatus.PROCESSING, "Searching")

        resp = client.get(f"/results/{job_id}")

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Job is not yet completed. Current status: processing"

    def test_results_for_failed_job(self, client: TestClient, pipeline: JobPipeline) -> None:
        job_id = pipeline.store.create("mars")
        pipeline.store.set_status(job_id, JobStatus.FAILED, "Job failed: boom")

        resp = client.get(f"/results/{job_id}")

        assert resp.status_code == 400
        assert "failed" in resp.json()["detail"]

    def test_completed_without_result(
        self, client: TestClient, pipeline: JobPipeline, caplog: pytest.LogCaptureFixture,
    ) -> None:
        job_id = pipeline.store.create("mars")
        pipeline.store.set_status(job_id, JobStatus.COMPLETED, "done")

        resp = client.get(f"/results/{job_id}")

        assert resp.status_code == 404
        assert resp.json()["detail"] == "Results not found for the completed job"
        assert any("has no stored result" in r.getMessage() for r in caplog.records)

    def test_failed_job_status(self, make_pipeline: PipelineFactory) -> None:
        failing, _ = make_pipeline(open_error=RuntimeError("browser launch failed"))
        with TestClient(create_app(pipeline=failing)) as test_client:
            job_id = test_client.post("/scrape", json={"topic": "mars"}).json()["jobId"]
            status = _wait_for_terminal(test_client, job_id)

        assert status["status"] == "failed"
        assert status["message"] == "Job failed: browser launch failed"


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["message"] == "Service is healthy"
        assert body["inFlight"] == 0
        assert body["capacity"] == 18
        assert body["jobs"] == {"pending": 0, "processing": 0, "completed": 0, "failed": 0}

    def test_health_counts_jobs(self, client: TestClient) -> None:
        job_id = client.post("/scrape", json={"topic": "mars"}).json()["jobId"]
        _wait_for_terminal(client, job_id)

        assert client.get("/health").json()["jobs"]["completed"] == 1
