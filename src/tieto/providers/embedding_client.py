"""
Embedding Port and its HTTP implementation.

The core only depends on `EmbeddingPort.embed(text) -> list of floats`.
`EmbeddingClient` implements it against a llama.cpp-style `/embedding`
endpoint (or anything accepting `{"input": text}`).
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence

import requests

from ..core.exceptions import EmbeddingError


logger = logging.getLogger(__name__)


class EmbeddingPort(ABC):
    """Turns text into a fixed-dimension vector."""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """
        Embed one text.

        Raises:
            EmbeddingError: If the embedding cannot be produced
        """

    def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed several texts in order."""
        return [self.embed(text) for text in texts]


class FunctionEmbeddingPort(EmbeddingPort):
    """Adapts a plain `text -> vector` callable to the port."""

    def __init__(self, func: Callable[[str], Sequence[float]]):
        self.func = func

    def embed(self, text: str) -> List[float]:
        return _validate_vector(self.func(text), source="embedding function")


class EmbeddingClient(EmbeddingPort):
    """
    HTTP client for an embedding service.

    Request body is `{"input": text}`. Accepted responses:
    - `[{"embedding": [...]}, ...]` (llama.cpp server; the embedding may
      also be a single nested row `[[...]]`)
    - `{"embedding": [...]}`
    - `{"data": [{"embedding": [...]}]}` (OpenAI-compatible)
    - `{"embeddings": [[...]]}` (Ollama /api/embed)

    Example:
        >>> client = EmbeddingClient("http://127.0.0.1:8080/embedding")
        >>> vector = client.embed("Widget A comes in blue")
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        headers: Optional[dict] = None,
    ):
        """
        Initialize the embedding client.

        Args:
            url: Full embedding endpoint URL
            timeout: Request timeout in seconds
            session: Optional requests session (one is created if omitted)
            headers: Extra request headers (e.g. an API key)
        """
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json", **(headers or {})}

        logger.debug(f"Initialized EmbeddingClient: url={self.url}, timeout={self.timeout}")

    def embed(self, text: str) -> List[float]:
        try:
            response = self.session.post(
                self.url,
                json={"input": text},
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise EmbeddingError(
                f"Embedding request timed out after {self.timeout}s: {e}",
                url=self.url,
            ) from e
        except requests.RequestException as e:
            raise EmbeddingError(
                f"Failed to connect to embedding service at {self.url}: {e}",
                url=self.url,
            ) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"HTTP error from embedding service: {response.status_code} - {response.text[:200]}")
            raise EmbeddingError(
                f"Embedding service error: {response.status_code} - {response.text[:500]}",
                url=self.url,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise EmbeddingError(
                f"Invalid JSON response from embedding service: {e}",
                url=self.url,
                status_code=response.status_code,
            ) from e

        vector = parse_embedding_response(payload)
        if vector is None:
            raise EmbeddingError(
                "Embedding response is missing a well-formed 'embedding' field",
                url=self.url,
                status_code=response.status_code,
            )
        return vector


def parse_embedding_response(payload: Any) -> Optional[List[float]]:
    """Extract the first embedding vector from a response body, or None."""
    if isinstance(payload, list):
        if not payload or not isinstance(payload[0], dict):
            return None
        candidate = payload[0].get("embedding")
    elif isinstance(payload, dict):
        if "embedding" in payload:
            candidate = payload["embedding"]
        elif isinstance(payload.get("data"), list) and payload["data"]:
            first = payload["data"][0]
            candidate = first.get("embedding") if isinstance(first, dict) else None
        elif isinstance(payload.get("embeddings"), list) and payload["embeddings"]:
            candidate = payload["embeddings"][0]
        else:
            return None
    else:
        return None

    # Pooled llama.cpp responses wrap the vector in a single row
    if isinstance(candidate, list) and len(candidate) == 1 and isinstance(candidate[0], list):
        candidate = candidate[0]

    try:
        return _validate_vector(candidate, source="embedding response")
    except EmbeddingError:
        return None


def _validate_vector(candidate: Any, source: str) -> List[float]:
    if not isinstance(candidate, (list, tuple)) or not candidate:
        raise EmbeddingError(f"Malformed vector from {source}: expected a non-empty list")
    vector = []
    for value in candidate:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise EmbeddingError(f"Malformed vector from {source}: non-numeric value {value!r}")
        vector.append(float(value))
    return vector
