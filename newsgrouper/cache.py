"""Redis cache of serialised groups."""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import timedelta
from typing import Any, Iterable

import redis

KEY_PREFIX = "news:"
EXPIRATION = timedelta(hours=48)
_DEFAULT_HOST = "localhost"
_DEFAULT_PORT = 6379


def _split_addr(addr: str) -> tuple[str, int]:
    if not addr:
        return _DEFAULT_HOST, _DEFAULT_PORT
    host, sep, port = addr.rpartition(":")
    if not sep:
        return addr, _DEFAULT_PORT
    return host or _DEFAULT_HOST, int(port) if port else _DEFAULT_PORT


def _new_id() -> str:
    return str(uuid.uuid4())


def _as_bytes(value: Any) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


class NewsCache:
    """Stores items for 48 hours under ``news:`` keys."""

    def __init__(self, client: redis.Redis, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def connect(cls, logger: logging.Logger | None = None) -> NewsCache:
        """Connect using ``REDIS_ADDR`` and ``REDIS_PASSWORD`` and check the link."""
        logger = logger or logging.getLogger(__name__)
        host, port = _split_addr(os.environ.get("REDIS_ADDR", ""))
        password = os.environ.get("REDIS_PASSWORD") or None
        client = redis.Redis(
            host=host, port=port, password=password, db=0, socket_connect_timeout=15
        )
        try:
            client.ping()
        except redis.RedisError as exc:
            logger.error("Error pinging redis: %s", exc)
            raise
        return cls(client, logger)

    def save_many_news(self, items: Iterable[bytes]) -> None:
        """Store raw items in one pipeline; failures are logged, not raised."""
        pipe = self._client.pipeline()
        for item in items:
            pipe.set(f"{KEY_PREFIX}:{_new_id()}", _as_bytes(item), ex=EXPIRATION)
        try:
            pipe.execute()
        except redis.RedisError as exc:
            self._logger.error("Error executing pipeline: %s", exc)

    def save_news(self, item: Any) -> None:
        """Serialise ``item`` to JSON and store it under a fresh key."""
        to_json = getattr(item, "to_json", None)
        try:
            data = to_json() if callable(to_json) else json.dumps(item, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            self._logger.error("Error marshaling data: %s", exc)
            raise
        try:
            self._client.set(KEY_PREFIX + _new_id(), _as_bytes(data), ex=EXPIRATION)
        except redis.RedisError as exc:
            self._logger.error("Error saving data to Redis: %s", exc)
            raise

    def load_today_news(self) -> tuple[list[bytes], list[Exception]]:
        """Load every stored batch item.

        Returns the values that could be read and the errors met on the way.
        """
        try:
            keys = self._client.keys(f"{KEY_PREFIX}:*")
        except redis.RedisError as exc:
            self._logger.error("Error getting keys from Redis: %s", exc)
            return [], [exc]

        items: list[bytes] = []
        errors: list[Exception] = []
        for key in keys:
            try:
                value = self._client.get(key)
                if value is None:
                    raise KeyError(f"key {key!r} not found")
            except (redis.RedisError, KeyError) as exc:
                self._logger.error("Error getting value from Redis: %s", exc)
                errors.append(exc)
                continue
            items.append(_as_bytes(value))
        return items, errors