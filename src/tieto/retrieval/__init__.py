"""
Retrieval module: chunking, filtering, ranking, and the ingest/query
orchestrator.
"""

from .chunker import Chunker, chunk_lines
from .filters import matches_all, parse_filter, parse_filters
from .search import (
    COSINE,
    CosineSimilarity,
    SimilarityMetric,
    apply_threshold,
    cosine_similarity,
    euclidean_distance,
    rank_chunks,
)
from .orchestrator import Tieto, assemble_context

__all__ = [
    "Chunker",
    "chunk_lines",
    "matches_all",
    "parse_filter",
    "parse_filters",
    "COSINE",
    "CosineSimilarity",
    "SimilarityMetric",
    "apply_threshold",
    "cosine_similarity",
    "euclidean_distance",
    "rank_chunks",
    "Tieto",
    "assemble_context",
]
