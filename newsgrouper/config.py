"""Settings and wire formats of the text embedding API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

MODEL_URI = "emb://b1g7e364b5giim9tajta/text-search-doc/latest"
FOLDER_ID = "b1g7e364b5giim9tajta"
URL = "https://llm.api.cloud.yandex.net:443/foundationModels/v1/textEmbedding"


def api_token() -> str:
    """The API token, taken from the ``YANDEX_TOKEN`` environment variable."""
    return os.environ.get("YANDEX_TOKEN", "")


@dataclass
class EmbeddingRequest:
    """Body of an embedding request."""

    model_uri: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"modelUri": self.model_uri, "text": self.text}


@dataclass
class EmbeddingResponse:
    """Body of an embedding response."""

    embedding: list[float] = field(default_factory=list)
    num_tokens: str = ""
    model_version: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmbeddingResponse:
        """Decode a response object; keys match case-insensitively.

        Values of the wrong type raise ``ValueError``; missing or null
        values leave the field at its default.
        """
        if not isinstance(data, Mapping):
            raise ValueError("embedding response must be a JSON object")
        lowered = {str(key).lower(): value for key, value in data.items()}

        raw_embedding = lowered.get("embedding")
        if raw_embedding is None:
            embedding: list[float] = []
        elif isinstance(raw_embedding, list) and all(
            isinstance(v, (int, float)) and not isinstance(v, bool) for v in raw_embedding
        ):
            embedding = [float(v) for v in raw_embedding]
        else:
            raise ValueError("embedding must be a list of numbers")

        return cls(
            embedding=embedding,
            num_tokens=_string_field(lowered, "numtokens"),
            model_version=_string_field(lowered, "modelversion"),
        )


def _string_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value