"""Exceptions shared by the pipeline, store and API layers."""


class JobNotFoundError(LookupError):
    """A job id is not (or no longer) present in the store."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class PipelineBusyError(RuntimeError):
    """The pipeline is at its in-flight ceiling and rejects new submissions."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Pipeline is busy: {limit} jobs already in flight")
        self.limit = limit
