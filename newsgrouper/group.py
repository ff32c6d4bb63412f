"""News groups: clusters of feed items sharing an embedding centroid."""

from __future__ import annotations

import json
import logging
import math
import re
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Protocol

from .feed import ZERO_TIME, FeedItem
from .vector import Vector

log = logging.getLogger(__name__)

_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})\Z"
)


class Vectorizer(Protocol):
    """Something that turns a news item's text into an embedding."""

    def get_embedding(self, title: str, description: str, full_text: str) -> Vector: ...


class GroupStore(Protocol):
    """Persistence used by groups."""

    def insert(self, group: Group) -> int: ...

    def insert_compares(self, group_id: int, compare_id: int) -> None: ...

    def update_date(self, group_id: int, date: datetime, feed_id: int) -> None: ...

    def update_rt(self, group_id: int, is_rt: bool) -> None: ...

    def get_rt_words(self) -> list[str]: ...

    def update_embedding(self, group_id: int, pq_vec: str) -> None: ...


class EmptyItemError(ValueError):
    """Raised when a feed item lacks a title, description or full text."""


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    fraction = f"{moment.microsecond:06d}".rstrip("0")
    if fraction:
        text += "." + fraction
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    minutes_total = int(offset.total_seconds()) // 60
    sign = "+" if minutes_total >= 0 else "-"
    hours, minutes = divmod(abs(minutes_total), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _parse_time(value: Any) -> datetime:
    if value is None:
        return ZERO_TIME
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"invalid time {value!r}")
    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    micro = int((match.group(7) or "")[:6].ljust(6, "0"))
    zone = match.group(8)
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)


def _join(title: str, description: str, full_text: str) -> str:
    return f"{title}\n\n{description}\n\n{full_text}"


class Group:
    """A cluster of related news items.

    The centroid is the mean of the members' embeddings; ``vector()`` gives
    their sum.
    """

    def __init__(
        self,
        vectorizer: Vectorizer,
        db: GroupStore,
        *,
        group_id: int = 0,
        content_id: int = 0,
        centroid: Vector | None = None,
        date: datetime = ZERO_TIME,
        last_date: datetime = ZERO_TIME,
        texts: Iterable[str] = (),
        is_tatarstan: bool = False,
        alpha: float = 0.0,
        min_diff: float = 0.0,
        max_distance: float = 0.0,
    ) -> None:
        self.id = group_id
        self.content_id = content_id
        self.date = date
        self.last_date = last_date
        self._centroid = centroid if centroid is not None else Vector.zeros(0)
        self._texts = list(texts)
        self._vectorizer = vectorizer
        self._db = db
        self._lock = threading.Lock()
        self._is_tatarstan = is_tatarstan
        self._word_set: frozenset[str] = frozenset()
        self._alpha = alpha
        self._min_diff = min_diff
        self._max_distance = max_distance

    @classmethod
    def create(
        cls,
        vectorizer: Vectorizer,
        db: GroupStore,
        item: FeedItem,
        min_diff: float,
        max_distance: float,
        alpha: float,
    ) -> Group:
        """Start a new group from ``item`` and persist it."""
        text = _join(item.title, item.description, item.full_text).strip()
        group = cls(
            vectorizer,
            db,
            content_id=item.id,
            date=item.time,
            last_date=item.time,
            alpha=alpha,
            min_diff=min_diff,
            max_distance=max_distance,
        )
        try:
            group._load_rt_words()
        except Exception as exc:
            log.warning("Error loading RT words: %s", exc)

        group._is_tatarstan = group._check_for_tatarstan(text)
        group._texts.append(text)

        vec = vectorizer.get_embedding(item.title, item.description, item.full_text)
        group._centroid = vec
        vec.divide(len(group._texts))

        try:
            group.id = db.insert(group)
        except Exception as exc:
            log.error("Error inserting group: %s", exc)
            raise
        db.insert_compares(group.id, item.id)
        return group

    @classmethod
    def from_json(cls, data: str | bytes, vectorizer: Vectorizer, db: GroupStore) -> Group:
        """Restore a group saved by ``to_json``; keys match case-insensitively."""
        raw = json.loads(data)
        if not isinstance(raw, dict):
            raise ValueError("group JSON must be an object")
        fields = {str(key).lower(): value for key, value in raw.items()}
        texts = list(fields.get("texts") or [])
        centroid = Vector(fields.get("vector") or [])
        centroid.divide(len(texts))
        return cls(
            vectorizer,
            db,
            group_id=int(fields.get("id") or 0),
            content_id=int(fields.get("content_id") or 0),
            centroid=centroid,
            date=_parse_time(fields.get("date")),
            last_date=_parse_time(fields.get("last_date")),
            texts=texts,
            is_tatarstan=bool(fields.get("is_tatarstan") or False),
            alpha=float(fields.get("alpha") or 0.0),
            min_diff=float(fields.get("min_diff") or 0.0),
            max_distance=float(fields.get("max_distance") or 0.0),
        )

    def add(self, vec: Vector, item: FeedItem) -> None:
        """Add ``item`` with embedding ``vec`` to the group and persist the change."""
        if not item.title or not item.description or not item.full_text:
            raise EmptyItemError("empty item")
        with self._lock:
            text = _join(item.title.strip(), item.description.strip(), item.full_text.strip())
            rt = self._check_for_tatarstan(text)

            if item.time > self.date:
                self._db.update_date(self.id, item.time, item.id)
                self.date = item.time
                self.last_date = item.time

            self._db.insert_compares(self.id, item.id)

            if rt and not self._is_tatarstan:
                self._is_tatarstan = True
                try:
                    self._db.update_rt(self.id, True)
                except Exception as exc:
                    log.error(
                        "Error updating RT: %s (group %s, item %s, date %s)",
                        exc,
                        self.id,
                        item.id,
                        self.date,
                    )
                    raise

            self._texts.append(text.strip())
            self._update_vector(vec)

    def is_tatarstan(self) -> bool:
        with self._lock:
            return self._is_tatarstan

    def vector(self) -> Vector:
        """Sum of the members' embeddings."""
        return self._centroid.copy().multiply(len(self._texts))

    def centroid(self) -> Vector:
        """Mean of the members' embeddings."""
        return self._centroid.copy()

    def check_compare(self, vec: Vector) -> bool:
        """Whether ``vec`` passes both of the group's acceptance thresholds."""
        if self._centroid.cos_distance(vec) < self._similarity_threshold():
            return False
        return self._centroid.euclidean_distance(vec) >= self._distance_threshold()

    def __len__(self) -> int:
        return len(self._texts)

    def to_json(self) -> str:
        """Serialise the group; non-finite coordinates raise ``ValueError``."""
        payload = {
            "id": self.id,
            "content_id": self.content_id,
            "vector": self.vector().to_list(),
            "date": _format_time(self.date),
            "texts": list(self._texts),
            "last_date": _format_time(self.last_date),
            "is_tatarstan": self._is_tatarstan,
            "alpha": self._alpha,
            "min_diff": self._min_diff,
            "max_distance": self._max_distance,
        }
        return json.dumps(payload, ensure_ascii=False, allow_nan=False)

    def _load_rt_words(self) -> None:
        words = self._db.get_rt_words()
        self._word_set = frozenset(word.strip().lower() for word in words)

    def _check_for_tatarstan(self, *texts: str) -> bool:
        return any(self._contains_word(text) for text in texts)

    def _contains_word(self, text: str) -> bool:
        text = text.strip().lower()
        return any(
            " " + word in text
            or text.startswith(word)
            or text.endswith(word)
            or text.endswith(word + ".")
            or ">" + word in text
            or "&nbsp;" + word in text
            for word in self._word_set
        )

    def _update_vector(self, vec: Vector) -> None:
        size = len(self._texts)
        if size == 0:
            raise ValueError("empty vector: no texts available")
        if size == 1:
            self._centroid = vec
            return
        self._centroid.multiply(size - 1).add(vec).divide(size)
        self._db.update_embedding(self.id, self._centroid.to_pq_string())

    def _similarity_threshold(self) -> float:
        size = len(self._texts)
        if size < 3:
            return max(self._min_diff + 0.02 * (3 - size), 0.75)
        return max(self._min_diff + 0.03 * math.log10(size), 0.95)

    def _distance_threshold(self) -> float:
        size = len(self._texts)
        max_threshold = 0.6
        min_threshold = 0.3
        if size < 3:
            adjustment = (max_threshold - min_threshold) * ((size - 1) / 2.0)
            return max(self._max_distance + adjustment, min_threshold)
        adjustment = 0.03 * math.log10(size)
        return min(max(self._max_distance + adjustment, min_threshold), max_threshold)