"""Client for OpenAI-compatible embedding servers and vector literal formatting."""

from __future__ import annotations

import json
import math
from collections.abc import Iterable
from typing import Any

import httpx
import numpy as np

_TIMEOUT_SECONDS = 30.0


class EmbeddingError(Exception):
    """Raised when an embedding cannot be obtained from the server."""


def _first_embedding(response: httpx.Response) -> np.ndarray:
    try:
        payload: Any = response.json()
    except ValueError as exc:
        raise EmbeddingError(f"decode embedding response: {exc}") from exc
    if not isinstance(payload, dict):
        raise EmbeddingError("decode embedding response: expected a JSON object")
    data = payload.get("data") or []
    if not isinstance(data, list):
        raise EmbeddingError("decode embedding response: 'data' is not a list")
    if not data:
        return np.empty(0, dtype=np.float32)
    first = data[0]
    if not isinstance(first, dict):
        raise EmbeddingError("decode embedding response: data entry is not an object")
    embedding = first.get("embedding") or []
    try:
        return np.asarray(embedding, dtype=np.float32).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise EmbeddingError(f"decode embedding response: {exc}") from exc


class EmbedderClient:
    """Calls the /embeddings endpoint of an embedding server."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str = "",
        dims: int = 0,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.dims = dims
        self._api_key = api_key
        self._http = httpx.Client(timeout=_TIMEOUT_SECONDS, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> EmbedderClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def embed(self, text: str) -> list[float]:
        """Return the embedding of text, truncated to dims values when dims > 0."""
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        body = json.dumps({"model": self.model, "input": text}).encode("utf-8")
        try:
            response = self._http.post(
                f"{self.base_url}/embeddings", content=body, headers=headers
            )
        except httpx.HTTPError as exc:
            raise EmbeddingError(f"embedding request: {exc}") from exc

        if response.status_code != 200:
            raise EmbeddingError(f"embedding server returned {response.status_code}")

        vector = _first_embedding(response)
        if vector.size == 0:
            raise EmbeddingError("empty embedding response")
        if self.dims > 0:
            vector = vector[: self.dims]
        return [float(v) for v in vector]


def _format_float32(value: float) -> str:
    number = np.float32(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    return np.format_float_positional(number, trim="-")


def vector_literal(values: Iterable[float]) -> str:
    """Format values as a PostgreSQL vector literal such as '[1,2.5,0.1]'."""
    return "[" + ",".join(_format_float32(v) for v in values) + "]"