"""Client for the remote text embedding service."""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from typing import Iterator

import requests

from .config import MODEL_URI, URL, EmbeddingRequest, EmbeddingResponse, api_token
from .config import FOLDER_ID
from .vector import Vector

_DEFAULT_MAX_REQUESTS = 10
_MAX_TEXT_BYTES = 4000
_TIMEOUT_SECONDS = 60


class EmbeddingError(RuntimeError):
    """Raised when an embedding cannot be obtained."""


def build_text(title: str, description: str, full_text: str) -> str:
    """Compose the text sent for embedding, shortening it if it is too long.

    The full text is dropped when it repeats the description. Lengths are
    measured in UTF-8 bytes.
    """
    if full_text == description:
        full_text = ""
    text = f"{title}\n\n{description}\n\n{full_text}".strip()
    if len(text.encode("utf-8")) > _MAX_TEXT_BYTES:
        text = title + description
    if len(text.encode("utf-8")) > _MAX_TEXT_BYTES:
        text = title
    return text


def _max_requests_from_env(logger: logging.Logger) -> int:
    try:
        return int(os.environ.get("MAX_REQUESTS", ""))
    except ValueError:
        logger.info("Invalid MAX_REQUESTS value, defaulting to %d", _DEFAULT_MAX_REQUESTS)
        return _DEFAULT_MAX_REQUESTS


class EmbeddingService:
    """Fetches embeddings, with at most ``max_requests`` calls in flight."""

    def __init__(
        self,
        logger: logging.Logger | None = None,
        max_requests: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        if max_requests is None:
            max_requests = _max_requests_from_env(self._logger)
        self._available = max_requests
        self._cond = threading.Condition()
        self._session = session if session is not None else requests.Session()

    @contextmanager
    def _slot(self) -> Iterator[None]:
        with self._cond:
            while self._available <= 0:
                self._cond.wait()
            self._available -= 1
        try:
            yield
        finally:
            with self._cond:
                self._available += 1
                self._cond.notify()

    def _send_request(self, text: str) -> EmbeddingResponse:
        with self._slot():
            body = json.dumps(
                EmbeddingRequest(MODEL_URI, text).to_dict(), ensure_ascii=False
            ).encode("utf-8")
            headers = {
                "Content-Type": "application/json",
                "Authorization": "Api-Key " + api_token(),
                "X-Folder-Id": FOLDER_ID,
            }
            try:
                response = self._session.post(
                    URL, data=body, headers=headers, timeout=_TIMEOUT_SECONDS
                )
            except requests.RequestException as exc:
                self._logger.error("Error sending request: %s", exc)
                raise EmbeddingError(f"request failed: {exc}") from exc
            try:
                if response.status_code != 200:
                    self._logger.info(
                        "Error response from API: status %s, body %s",
                        response.status_code,
                        response.text,
                    )
                    raise EmbeddingError(f"API answered with status {response.status_code}")
                try:
                    return EmbeddingResponse.from_dict(json.loads(response.content))
                except ValueError as exc:
                    self._logger.error("Error decoding response: %s", exc)
                    raise EmbeddingError(f"invalid response: {exc}") from exc
            finally:
                response.close()

    def get_embedding(self, title: str, description: str, full_text: str) -> Vector:
        """Embedding of a news item's text."""
        try:
            response = self._send_request(build_text(title, description, full_text))
        except EmbeddingError as exc:
            self._logger.error("Error getting embedding: %s", exc)
            raise
        return Vector(response.embedding)

    def get_similarity(self, first: Vector, second: Vector) -> float:
        """Cosine similarity of two embeddings."""
        return first.cos_distance(second)