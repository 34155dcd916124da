"""
Shared test fixtures and configuration for pytest.
"""

import hashlib
import logging
import re
import sys
from pathlib import Path
from typing import Dict, List, Sequence

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tieto.core.types import TietoConfig
from tieto.providers.embedding_client import EmbeddingPort
from tieto.storage.topic_store import TopicStore


logger = logging.getLogger(__name__)

WORD = re.compile(r"[a-z0-9$.]+")


# ============================================================================
# Stub embedding ports
# ============================================================================

class HashingEmbeddingPort(EmbeddingPort):
    """
    Deterministic bag-of-words embedding.

    Each lowercase word increments one hashed bucket, so identical texts get
    identical vectors and texts sharing words score higher.
    """

    def __init__(self, dimension: int = 64):
        self.dimension = dimension
        self.calls: List[str] = []

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        vector = [0.0] * self.dimension
        for word in WORD.findall(text.lower()):
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dimension
            vector[bucket] += 1.0
        if not any(vector):
            vector[0] = 1.0
        return vector


class MappingEmbeddingPort(EmbeddingPort):
    """Returns fixed vectors for known texts."""

    def __init__(self, vectors: Dict[str, Sequence[float]], default: Sequence[float] = None):
        self.vectors = {k: list(v) for k, v in vectors.items()}
        self.default = list(default) if default is not None else None
        self.calls: List[str] = []

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if text in self.vectors:
            return list(self.vectors[text])
        if self.default is None:
            raise KeyError(f"No stub vector for {text!r}")
        return list(self.default)


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def topics_root(tmp_path) -> Path:
    """Empty topics root directory."""
    root = tmp_path / "topics"
    root.mkdir()
    return root


@pytest.fixture
def store(topics_root) -> TopicStore:
    return TopicStore(topics_root)


@pytest.fixture
def config(topics_root) -> TietoConfig:
    """Config rooted at the temporary topics directory."""
    return TietoConfig(topics_root=str(topics_root))


@pytest.fixture
def hashing_embedder() -> HashingEmbeddingPort:
    return HashingEmbeddingPort()


@pytest.fixture
def write_document(topics_root):
    """Factory writing a document under topics/<topic>/<filename>."""
    def _write(topic: str, filename: str, content: str) -> Path:
        path = topics_root / topic / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mapping_embedder():
    """Factory building a MappingEmbeddingPort."""
    def _build(vectors: Dict[str, Sequence[float]], default: Sequence[float] = None) -> MappingEmbeddingPort:
        return MappingEmbeddingPort(vectors, default=default)

    return _build
