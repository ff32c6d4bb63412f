"""Sorting incoming feed items into groups of related news."""

from __future__ import annotations

import dataclasses
import logging
import os
import re
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from .cache import NewsCache
from .db import Database
from .embedding import EmbeddingService
from .feed import FeedItem
from .group import EmptyItemError, Group, Vectorizer
from .vector import Vector

_TAG_RE = re.compile(r"<[^>]*>")
_BATCH_SIZE = 20
_DEFAULT_MAX_CONNECTIONS = 10


def clean_string(s: str) -> str:
    """Strip HTML tags and collapse all runs of whitespace to single spaces."""
    s = s.replace("\n", " ")
    s = _TAG_RE.sub("", s)
    return " ".join(s.split())


def correct_item(item: FeedItem) -> tuple[str, str, str]:
    """Cleaned title, description and full text of ``item``."""
    return (
        clean_string(item.title).strip(),
        clean_string(item.description).strip(),
        clean_string(item.full_text).strip(),
    )


def load_from_cache(
    cache: Any, vectorizer: Vectorizer, db: Any, logger: logging.Logger
) -> list[Group]:
    """Restore the groups saved in ``cache``.

    The first error reported by the cache is raised; items that cannot be
    decoded are logged and skipped.
    """
    items, errors = cache.load_today_news()
    for error in errors:
        logger.error("Error loading items from cache: %s", error)
        raise error

    groups: list[Group] = []
    for item in items:
        try:
            groups.append(Group.from_json(item, vectorizer, db))
        except (ValueError, TypeError) as exc:
            logger.error("Error creating group from JSON: %s", exc)
    return groups


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() == "true"


def _as_aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


class GroupMaker:
    """Reads unparsed feed items and assigns each to a matching group."""

    def __init__(
        self,
        min_diff: float,
        max_distance: float,
        alpha: float,
        time_life: timedelta,
        logger: logging.Logger | None = None,
        db: Any = None,
        vectorizer: Vectorizer | None = None,
        cache: Any = None,
        accept_old_groups: bool = False,
        no_delete_old_groups: bool = False,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._min_diff = min_diff
        self._max_distance = max_distance
        self._alpha = alpha
        self._time_life = time_life
        self._db = db
        self._vectorizer = vectorizer if vectorizer is not None else EmbeddingService(self._logger)
        self._cache = cache
        self.accept_old_groups = accept_old_groups
        self.no_delete_old_groups = no_delete_old_groups
        self._lock = threading.Lock()
        self._groups: list[Group] = self._initial_groups()

    @classmethod
    def from_env(
        cls,
        min_diff: float,
        max_distance: float,
        alpha: float,
        time_life: timedelta,
        logger: logging.Logger | None = None,
    ) -> GroupMaker:
        """Build a maker wired to the database, cache and embedding service."""
        logger = logger or logging.getLogger(__name__)
        try:
            max_connections = int(os.environ.get("MAX_REQUESTS", ""))
        except ValueError:
            max_connections = _DEFAULT_MAX_CONNECTIONS

        db: Database | None
        try:
            db = Database.connect(max_connections)
        except Exception as exc:
            logger.error("Error creating DB instance: %s", exc)
            db = None

        cache: NewsCache | None
        try:
            cache = NewsCache.connect(logger)
        except Exception as exc:
            logger.error("Error creating cache instance: %s", exc)
            cache = None

        return cls(
            min_diff,
            max_distance,
            alpha,
            time_life,
            logger,
            db=db,
            vectorizer=EmbeddingService(logger),
            cache=cache,
            accept_old_groups=_env_flag("ACCEPT_OLD_GROUPS"),
            no_delete_old_groups=_env_flag("NO_DELETE_OLD_GROUPS"),
        )

    def _initial_groups(self) -> list[Group]:
        if self._cache is None:
            self._logger.error("Error loading groups from cache: no cache available")
            return []
        try:
            return load_from_cache(self._cache, self._vectorizer, self._db, self._logger)
        except Exception as exc:
            self._logger.error("Error loading groups from cache: %s", exc)
            return []

    def groups(self) -> list[Group]:
        """The groups currently held, oldest first."""
        with self._lock:
            return list(self._groups)

    def update_groups(self) -> None:
        """Process all unparsed feed items and mark the handled ones parsed."""
        if self._db is None:
            raise RuntimeError("no database connection")
        try:
            feeds = self._db.get()
        except Exception as exc:
            self._logger.error("Error getting new feeds: %s", exc)
            raise

        if not feeds:
            self._logger.info("No new feeds to parse")
            return
        self._logger.info("Parsing %d feeds", len(feeds))

        pending: list[int] = []
        for item in feeds:
            if item.parsed or not self._process_feed(item):
                continue
            if len(pending) >= _BATCH_SIZE:
                self._mark_parsed(pending)
                pending = []
            pending.append(item.id)
        if pending:
            self._mark_parsed(pending)

        self._logger.info("Parsing complete for %d groups", len(self._groups))
        if not self.no_delete_old_groups:
            self._delete_old()

    def _mark_parsed(self, ids: Iterable[int]) -> None:
        try:
            self._db.update_parsed_batch(list(ids), True)
        except Exception as exc:
            self._logger.error("Error marking feeds parsed: %s", exc)

    def _process_feed(self, item: FeedItem) -> bool:
        if item.parsed:
            return True
        try:
            vec = self._vectorizer.get_embedding(*correct_item(item))
        except Exception as exc:
            self._logger.error("Error getting embedding for item: %s", exc)
            return False
        try:
            self._insert_vector(vec, item)
        except Exception as exc:
            self._logger.error("Error inserting vector for item: %s", exc)
            return False
        return True

    def _insert_vector(self, vec: Vector, item: FeedItem) -> None:
        if not item.title or not item.full_text:
            raise EmptyItemError("empty item")
        if not item.description:
            item = dataclasses.replace(item, description=item.title)

        for group in self.groups():
            if group.check_compare(vec):
                try:
                    group.add(vec, item)
                except Exception as exc:
                    self._logger.error("Error adding item to group %s: %s", group.id, exc)
                return

        new_group = Group.create(
            self._vectorizer, self._db, item, self._min_diff, self._max_distance, self._alpha
        )
        if self._cache is not None:
            try:
                self._cache.save_news(new_group)
            except Exception as exc:
                self._logger.error("Error saving group to cache: %s", exc)
                raise
        with self._lock:
            self._groups.append(new_group)

    def _delete_old(self) -> None:
        now = datetime.now(timezone.utc)
        with self._lock:
            self._groups = [
                group
                for group in self._groups
                if now - _as_aware(group.last_date) <= self._time_life
            ]