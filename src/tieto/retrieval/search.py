"""
Retrieval Search - score and rank chunks against a query vector.

Implements:
- A pluggable similarity metric with cosine similarity as the canonical one
- Euclidean distance as a diagnostic signal only
- Stable top-K ranking (ties keep scan order)
- The confidence threshold gate
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from ..contracts.retrieval_contracts import Chunk, QueryStatus, ScoredChunk
from ..core.exceptions import DimensionMismatchError


logger = logging.getLogger(__name__)


def _check_dimensions(vec_a: Sequence[float], vec_b: Sequence[float]) -> None:
    if not vec_a or not vec_b:
        raise DimensionMismatchError("Vectors cannot be empty")
    if len(vec_a) != len(vec_b):
        raise DimensionMismatchError(
            f"Vector dimensions must match: {len(vec_a)} != {len(vec_b)}",
            expected=len(vec_a),
            actual=len(vec_b),
        )


class SimilarityMetric(ABC):
    """Higher scores mean closer vectors; `-inf` means unscorable."""

    name = "metric"

    @abstractmethod
    def score(self, vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
        """Score two vectors of equal dimension."""


class CosineSimilarity(SimilarityMetric):
    """dot(a, b) / (|a| * |b|), in [-1, 1]."""

    name = "cosine_similarity"

    def score(self, vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
        return cosine_similarity(vec_a, vec_b)


COSINE = CosineSimilarity()


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        vec_a: First vector
        vec_b: Second vector

    Returns:
        Cosine similarity between -1 and 1, or -inf if either vector has
        zero magnitude

    Raises:
        DimensionMismatchError: If vectors are empty or differ in dimension
    """
    _check_dimensions(vec_a, vec_b)

    dot_product = sum(a * b for a, b in zip(vec_a, vec_b))
    magnitude_a = math.sqrt(sum(a * a for a in vec_a))
    magnitude_b = math.sqrt(sum(b * b for b in vec_b))

    if magnitude_a == 0 or magnitude_b == 0:
        return float("-inf")

    # Rounding can push identical vectors a hair past 1.0
    return max(-1.0, min(1.0, dot_product / (magnitude_a * magnitude_b)))


def euclidean_distance(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """L2 distance; for diagnostics, never used for ranking."""
    _check_dimensions(vec_a, vec_b)
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(vec_a, vec_b)))


@dataclass
class RankingResult:
    """Top-K hits plus the number of candidates that could not be scored."""
    hits: List[ScoredChunk] = field(default_factory=list)
    scored: int = 0
    skipped: int = 0


def rank_chunks(
    query_embedding: Sequence[float],
    chunks: Iterable[Chunk],
    top_k: int = 3,
    metric: SimilarityMetric = COSINE,
) -> RankingResult:
    """
    Score chunks against a query vector and keep the top K.

    Chunks whose dimension differs from the query, or whose score is -inf,
    are skipped. Sorting is stable, so equal scores keep scan order.

    Args:
        query_embedding: Embedding vector for the query
        chunks: Candidate chunks in scan order
        top_k: Number of results to return
        metric: Similarity metric

    Returns:
        RankingResult with ranked hits
    """
    if top_k < 1:
        raise ValueError("top_k must be positive")

    scored = []
    skipped = 0
    for position, chunk in enumerate(chunks):
        try:
            score = metric.score(query_embedding, chunk.embedding)
        except DimensionMismatchError as e:
            logger.warning(f"Skipping chunk at position {position}: {e}")
            skipped += 1
            continue

        if math.isnan(score) or score == float("-inf"):
            skipped += 1
            continue

        scored.append((score, position, chunk))

    scored.sort(key=lambda item: -item[0])

    hits = [
        ScoredChunk(chunk=chunk, score=score, rank=rank, position=position)
        for rank, (score, position, chunk) in enumerate(scored[:top_k], start=1)
    ]
    return RankingResult(hits=hits, scored=len(scored), skipped=skipped)


def apply_threshold(hits: List[ScoredChunk], threshold: float) -> QueryStatus:
    """
    Gate a ranked result on its top score.

    Returns:
        OK if the top score reaches the threshold, NO_CONFIDENT_MATCH if it
        falls below, NO_CANDIDATES if there are no hits
    """
    if not hits:
        return QueryStatus.NO_CANDIDATES
    if hits[0].score < threshold:
        return QueryStatus.NO_CONFIDENT_MATCH
    return QueryStatus.OK
