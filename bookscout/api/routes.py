"""Job submission, status and result endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import AliasChoices, BaseModel, Field

from bookscout.core.errors import PipelineBusyError
from bookscout.core.schemas import JobStatus
from bookscout.core.store import JobStore
from bookscout.pipeline.jobs import JobPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])


class ScrapeRequest(BaseModel):
    """Body of POST /scrape; ``theme`` is accepted for older clients."""

    topic: str = Field(default="", validation_alias=AliasChoices("topic", "theme"))


def get_pipeline(request: Request) -> JobPipeline:
    return request.app.state.pipeline  # type: ignore[no-any-return]


def get_store(request: Request) -> JobStore:
    return request.app.state.pipeline.store  # type: ignore[no-any-return]


@router.post("/scrape", status_code=202)
async def initiate_job(
    payload: ScrapeRequest,
    pipeline: JobPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    topic = payload.topic.strip()
    if not topic:
        raise HTTPException(status_code=400, detail="A valid topic is required")
    try:
        job_id = pipeline.submit(topic)
    except PipelineBusyError as e:
        logger.warning("Rejected topic '%s': %s", topic, e)
        raise HTTPException(status_code=503, detail=str(e)) from e
    return {"status": "success", "message": "Job initiated successfully", "jobId": job_id}


@router.get("/status/{job_id}")
async def get_job_status(job_id: str, store: JobStore = Depends(get_store)) -> dict[str, Any]:
    job = store.get_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return {"status": "success", "data": job.model_dump(mode="json", by_alias=True)}


@router.get("/results/{job_id}")
async def get_job_results(job_id: str, store: JobStore = Depends(get_store)) -> dict[str, Any]:
    job = store.get_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.status is not JobStatus.COMPLETED:
        raise HTTPException(
            status_code=400,
            detail=f"Job is not yet completed. Current status: {job.status.value}",
        )

    result = store.get_result(job_id)
    if result is None:
        logger.error("Completed job %s has no stored result", job_id)
        raise HTTPException(status_code=404, detail="Results not found for the completed job")
    return {"status": "success", "data": result.model_dump(mode="json", by_alias=True)}
