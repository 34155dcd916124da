"""
Retrieval Contracts - data models for ingest and query.

Defines chunk records as they are persisted, metadata filters, scan results,
ranked hits, and the terminal outcome of a query.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..core.exceptions import ParseError


MetadataValue = Union[str, int, float, bool, None, List[Any]]


@dataclass
class Chunk:
    """
    A unit of embedded text with its document metadata.

    Attributes:
        text: Chunk text (one or more lines joined by newline)
        embedding: Embedding vector
        metadata: Frontmatter of the source document
    """
    text: str
    embedding: List[float]
    metadata: Dict[str, MetadataValue] = field(default_factory=dict)

    @property
    def dimension(self) -> int:
        return len(self.embedding)

    def to_record(self) -> Dict[str, Any]:
        """Convert to the on-disk record shape."""
        return {
            "text": self.text,
            "embedding": self.embedding,
            "meta": self.metadata,
        }

    @classmethod
    def from_record(cls, data: Any) -> "Chunk":
        """
        Create from an on-disk record.

        Raises:
            ParseError: If the record is not a well-formed chunk
        """
        if not isinstance(data, dict):
            raise ParseError(f"Record is not an object: {type(data).__name__}")

        text = data.get("text")
        if not isinstance(text, str):
            raise ParseError("Record field 'text' must be a string")

        embedding = data.get("embedding")
        if not isinstance(embedding, list) or not embedding:
            raise ParseError("Record field 'embedding' must be a non-empty array")
        vector = []
        for value in embedding:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ParseError("Record field 'embedding' must contain only numbers")
            if not math.isfinite(value):
                raise ParseError("Record field 'embedding' contains a non-finite value")
            vector.append(float(value))

        meta = data.get("meta", {})
        if meta is None:
            meta = {}
        if not isinstance(meta, dict):
            raise ParseError("Record field 'meta' must be an object")

        return cls(text=text, embedding=vector, metadata=meta)


class FilterOperator(str, Enum):
    """Comparison operator of a metadata filter."""
    EQ = "="
    GTE = ">="
    LTE = "<="
    GT = ">"
    LT = "<"
    IN = "in"

    @property
    def is_ordering(self) -> bool:
        return self in (FilterOperator.GTE, FilterOperator.LTE, FilterOperator.GT, FilterOperator.LT)


@dataclass(frozen=True)
class Filter:
    """
    A metadata predicate: `key OP value`.

    Attributes:
        key: Metadata key to test
        operator: Comparison operator
        value: Right-hand side; a tuple of strings for `in`
    """
    key: str
    operator: FilterOperator
    value: Union[str, tuple]

    def __str__(self) -> str:
        if self.operator is FilterOperator.IN:
            return f"{self.key} in {','.join(self.value)}"
        return f"{self.key}{self.operator.value}{self.value}"


@dataclass
class FilterParseResult:
    """Filters that parsed, and the expressions that were dropped."""
    filters: List[Filter] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


@dataclass
class ScanRecord:
    """
    Outcome of reading one stored record.

    Exactly one of `chunk` or `error` is set.
    """
    source: str
    line_number: int
    chunk: Optional[Chunk] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.chunk is not None


@dataclass
class ScanReport:
    """Aggregate diagnostics for a topic scan."""
    records_read: int = 0
    failures: List[ScanRecord] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records_read": self.records_read,
            "failures": [
                {"source": f.source, "line_number": f.line_number, "error": f.error}
                for f in self.failures
            ],
        }


@dataclass
class ScoredChunk:
    """
    A chunk ranked against a query vector.

    Attributes:
        chunk: The scored chunk
        score: Similarity score
        rank: 1-based rank after sorting
        position: Position of the chunk in scan order
    """
    chunk: Chunk
    score: float
    rank: int
    position: int

    @property
    def text(self) -> str:
        return self.chunk.text


class QueryStatus(str, Enum):
    """Terminal state of a query."""
    OK = "ok"
    NO_DATA = "no_data"
    NO_CANDIDATES = "no_candidates"
    NO_CONFIDENT_MATCH = "no_confident_match"


@dataclass
class QueryResult:
    """
    Result of one query call.

    Attributes:
        status: Terminal state
        topic: Topic queried
        question: Original question
        hits: Top-K ranked chunks (also populated below threshold)
        threshold: Threshold applied by the gate
        prompt: Assembled completion prompt (OK only)
        answer: Generated text when a completion endpoint is configured
        filters: Filters applied
        rejected_filters: Filter expressions dropped as malformed
        candidates: Chunks that passed the filters
        skipped: Candidates excluded as unscorable
        scan_report: Store diagnostics for the topic read
    """
    status: QueryStatus
    topic: str
    question: str
    hits: List[ScoredChunk] = field(default_factory=list)
    threshold: float = 0.0
    prompt: Optional[str] = None
    answer: Optional[str] = None
    filters: List[Filter] = field(default_factory=list)
    rejected_filters: List[str] = field(default_factory=list)
    candidates: int = 0
    skipped: int = 0
    scan_report: ScanReport = field(default_factory=ScanReport)

    @property
    def ok(self) -> bool:
        return self.status is QueryStatus.OK

    @property
    def top_score(self) -> Optional[float]:
        return self.hits[0].score if self.hits else None

    @property
    def text(self) -> Optional[str]:
        """The generated answer if any, otherwise the assembled prompt."""
        return self.answer if self.answer is not None else self.prompt


@dataclass
class IngestResult:
    """Result of ingesting one document."""
    path: str
    topic: str
    record_log: Optional[str] = None
    chunks_written: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchIngestResult:
    """Result of ingesting several documents."""
    results: List[IngestResult] = field(default_factory=list)

    @property
    def chunks_written(self) -> int:
        return sum(r.chunks_written for r in self.results)

    @property
    def failed(self) -> List[IngestResult]:
        return [r for r in self.results if not r.ok]
