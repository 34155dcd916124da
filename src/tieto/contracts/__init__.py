"""
Data contracts shared by the ingest and query pipelines.
"""

from .retrieval_contracts import (
    BatchIngestResult,
    Chunk,
    Filter,
    FilterOperator,
    FilterParseResult,
    IngestResult,
    QueryResult,
    QueryStatus,
    ScanRecord,
    ScanReport,
    ScoredChunk,
)

__all__ = [
    "BatchIngestResult",
    "Chunk",
    "Filter",
    "FilterOperator",
    "FilterParseResult",
    "IngestResult",
    "QueryResult",
    "QueryStatus",
    "ScanRecord",
    "ScanReport",
    "ScoredChunk",
]
