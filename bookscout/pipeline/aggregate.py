"""Batch metadata for a finished job."""

from collections.abc import Sequence

from bookscout.core.schemas import ResultMetadata, ScoredItem


def build_metadata(books: Sequence[ScoredItem]) -> ResultMetadata:
    """Summarize scored books.

    The most relevant and best value titles use strictly-greater comparison
    against the running best, so the earliest of equal scores wins. An empty
    batch yields zeros and "None" titles.
    """
    if not books:
        return ResultMetadata()

    most_relevant = books[0]
    best_value = books[0]
    for book in books[1:]:
        if book.relevance_score > most_relevant.relevance_score:
            most_relevant = book
        if book.value_score > best_value.value_score:
            best_value = book

    total = len(books)
    return ResultMetadata(
        total_books=total,
        average_price=sum(b.current_price for b in books) / total,
        average_relevance=sum(b.relevance_score for b in books) / total,
        most_relevant_book=most_relevant.title,
        best_value_book=best_value.title,
    )
