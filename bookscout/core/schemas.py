"""Core data models for the bookscout service.

Every record is frozen: the store swaps whole snapshots instead of mutating
them, and derived annotations live on the ScoredItem wrapper. Fields are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NEUTRAL_RELEVANCE = 50
FALLBACK_SUMMARY = "No summary available due to processing error."
UNPARSED_SUMMARY = "No summary available"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class Job(_Record):
    """Snapshot of one submitted topic's lifecycle."""

    id: str
    status: JobStatus = JobStatus.PENDING
    topic: str
    message: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = None


class Item(_Record):
    """A catalog entry found by a discovery gateway.

    ``original_price`` is reported as scraped; it is expected to be at least
    ``current_price`` but that relation is not enforced.
    """

    title: str
    source_author: str
    current_price: float = Field(default=0.0, ge=0.0)
    original_price: float | None = None
    description: str = ""
    source_url: str = ""


class ScoredItem(Item):
    """An Item annotated with an LLM summary, relevance and derived value."""

    summary: str
    relevance_score: int = Field(ge=0, le=100)
    discount_amount: float | None = None
    discount_percentage: float | None = None
    value_score: float = 0.0

    @classmethod
    def from_item(cls, item: Item, summary: str, relevance_score: int) -> "ScoredItem":
        """Attach enrichment output and compute discount and value fields."""
        discount_amount: float | None = None
        discount_percentage: float | None = None
        if item.original_price is not None and item.original_price > item.current_price:
            discount_amount = item.original_price - item.current_price
            discount_percentage = discount_amount / item.original_price * 100

        return cls(
            **item.model_dump(include=set(Item.model_fields)),
            summary=summary,
            relevance_score=relevance_score,
            discount_amount=discount_amount,
            discount_percentage=discount_percentage,
            value_score=relevance_score / max(item.current_price, 1.0),
        )

    @classmethod
    def fallback(cls, item: Item) -> "ScoredItem":
        """Placeholder used when enrichment of ``item`` raised."""
        return cls.from_item(item, FALLBACK_SUMMARY, 0)


class ResultMetadata(_Record):
    """Batch summary of a finished job."""

    total_books: int = 0
    average_price: float = 0.0
    average_relevance: float = 0.0
    most_relevant_book: str = "None"
    best_value_book: str = "None"


class JobResult(_Record):
    """Terminal artifact of a completed job."""

    job_id: str
    topic: str
    books: list[ScoredItem] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)
