"""Tests for build_metadata."""

import pytest

from bookscout.core.schemas import Item, ResultMetadata, ScoredItem
from bookscout.pipeline.aggregate import build_metadata


def _make_scored(title: str, price: float, relevance: int) -> ScoredItem:
    item = Item(title=title, source_author="author", current_price=price)
    return ScoredItem.from_item(item, "summary", relevance)


class TestBuildMetadata:
    def test_empty_batch(self) -> None:
        meta = build_metadata([])
        assert meta == ResultMetadata()
        assert meta.most_relevant_book == "None"
        assert meta.best_value_book == "None"

    def test_two_books(self) -> None:
        books = [
            _make_scored("Red Mars", 10.0, 80),
            _make_scored("Mars Trilogy", 20.0, 40),
        ]
        meta = build_metadata(books)
        assert meta.total_books == 2
        assert meta.average_price == pytest.approx(15.0)
        assert meta.average_relevance == pytest.approx(60.0)
        assert meta.most_relevant_book == "Red Mars"
        assert meta.best_value_book == "Red Mars"

    def test_tie_goes_to_first(self) -> None:
        books = [
            _make_scored("First", 10.0, 70),
            _make_scored("Second", 10.0, 70),
        ]
        meta = build_metadata(books)
        assert meta.most_relevant_book == "First"
        assert meta.best_value_book == "First"

    def test_relevance_and_value_can_differ(self) -> None:
        books = [
            _make_scored("Pricey", 50.0, 90),
            _make_scored("Cheap", 2.0, 40),
        ]
        meta = build_metadata(books)
        assert meta.most_relevant_book == "Pricey"
        assert meta.best_value_book == "Cheap"

    def test_fallback_items_counted(self) -> None:
        books = [
            _make_scored("Scored", 10.0, 60),
            ScoredItem.fallback(Item(title="Failed", source_author="a", current_price=30.0)),
        ]
        meta = build_metadata(books)
        assert meta.total_books == 2
        assert meta.average_relevance == pytest.approx(30.0)
        assert meta.average_price == pytest.approx(20.0)
