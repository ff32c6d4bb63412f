"""Feed items as stored in the ``feed`` table."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Mapping

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
"""The time used where none was given."""


@dataclass
class FeedItem:
    """One news item from the feed table."""

    id: int = 0
    md5: str = ""
    time: datetime = ZERO_TIME
    source_name: str = ""
    parsed: bool = False
    title: str = ""
    description: str = ""
    full_text: str = ""
    link: str = ""
    enclosure: str = ""
    category: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> FeedItem:
        """Build an item from a database row keyed by column name.

        Accepts a mapping or a row object exposing ``_mapping``. Columns that
        have no matching field, or NULLs in non-nullable columns, raise
        ``ValueError``.
        """
        mapping: Mapping[str, Any] = getattr(row, "_mapping", row)
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for column, value in mapping.items():
            if column not in known:
                raise ValueError(f"missing destination name {column!r}")
            if value is None and column != "category":
                raise ValueError(f"column {column!r} is NULL")
            values[column] = value
        return cls(**values)