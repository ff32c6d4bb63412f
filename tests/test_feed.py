from datetime import datetime, timezone

import pytest

from newsgrouper.feed import ZERO_TIME, FeedItem

WHEN = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def full_row():
    return {
        "id": 7,
        "md5": "abc",
        "time": WHEN,
        "source_name": "source",
        "parsed": True,
        "title": "Title",
        "description": "Description",
        "full_text": "Full text",
        "link": "https://example.com/news/7",
        "enclosure": "https://example.com/img.jpg",
        "category": "politics",
    }


def test_from_row_reads_every_column():
    item = FeedItem.from_row(full_row())
    assert item == FeedItem(
        id=7,
        md5="abc",
        time=WHEN,
        source_name="source",
        parsed=True,
        title="Title",
        description="Description",
        full_text="Full text",
        link="https://example.com/news/7",
        enclosure="https://example.com/img.jpg",
        category="politics",
    )


def test_from_row_missing_columns_take_defaults():
    item = FeedItem.from_row({"id": 3, "title": "T"})
    assert item.id == 3
    assert item.title == "T"
    assert item.time == ZERO_TIME
    assert item.parsed is False
    assert item.category is None


def test_from_row_accepts_null_category():
    row = full_row()
    row["category"] = None
    assert FeedItem.from_row(row).category is None


def test_from_row_rejects_unknown_column():
    row = full_row()
    row["extra"] = 1
    with pytest.raises(ValueError):
        FeedItem.from_row(row)


def test_from_row_rejects_null_in_required_column():
    row = full_row()
    row["title"] = None
    with pytest.raises(ValueError):
        FeedItem.from_row(row)


def test_from_row_uses_mapping_attribute():
    class Row:
        def __init__(self, mapping):
            self._mapping = mapping

    item = FeedItem.from_row(Row({"id": 11, "full_text": "body"}))
    assert item.id == 11
    assert item.full_text == "body"