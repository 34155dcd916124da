"""
Retrieval Orchestrator - the `ingest` and `query` pipelines.

Ingest:
    document -> frontmatter -> line chunks -> embeddings -> topic record log

Query:
    topic scan -> metadata filters -> embed question -> rank -> threshold gate
    -> context prompt -> (optional) completion

Every call owns its working set; nothing is cached between calls and every
query re-reads the whole topic.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from ..contracts.retrieval_contracts import (
    BatchIngestResult,
    Chunk,
    Filter,
    FilterParseResult,
    IngestResult,
    QueryResult,
    QueryStatus,
    ScoredChunk,
)
from ..core.exceptions import ParseError, StoreIOError
from ..core.logging import QueryContext
from ..core.types import TietoConfig
from ..ingest.frontmatter import extract_frontmatter
from ..prompts.templates import create_rag_prompt
from ..providers.completion_client import CompletionClient
from ..providers.embedding_client import EmbeddingClient, EmbeddingPort
from ..storage.topic_store import TopicStore
from ..tools.token_estimate import quick_token_estimate
from .chunker import Chunker
from .filters import matches_all, parse_filters
from .search import COSINE, SimilarityMetric, apply_threshold, euclidean_distance, rank_chunks


logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n"

FilterSpec = Union[str, Filter]


def assemble_context(hits: Sequence[ScoredChunk]) -> str:
    """Join hit texts, best first, separated by a blank line."""
    return CONTEXT_SEPARATOR.join(hit.text for hit in hits)


class Tieto:
    """
    Ingest documents into topics and answer questions from them.

    Example:
        >>> tieto = Tieto(TietoConfig(topics_root="topics"))
        >>> tieto.ingest("topics/acme-corp/products.txt")
        >>> result = tieto.query("acme-corp", "What is Widget A?", ["status=current"])
        >>> if result.ok:
        ...     print(result.text)
    """

    def __init__(
        self,
        config: Optional[TietoConfig] = None,
        embedder: Optional[EmbeddingPort] = None,
        store: Optional[TopicStore] = None,
        completion: Optional[CompletionClient] = None,
        metric: SimilarityMetric = COSINE,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Configuration (defaults if omitted)
            embedder: Embedding port; an HTTP client for config.embedding_url
                is created if omitted
            store: Topic store; rooted at config.topics_root if omitted
            completion: Completion client; created from config.completion_url
                when that is set
            metric: Similarity metric used for ranking
        """
        self.config = config or TietoConfig()
        self.embedder = embedder or EmbeddingClient(
            self.config.embedding_url,
            timeout=self.config.embedding_timeout_seconds,
        )
        self.store = store or TopicStore(self.config.topics_root)
        if completion is None and self.config.completion_url:
            completion = CompletionClient(
                self.config.completion_url,
                temperature=self.config.temperature,
                n_predict=self.config.n_predict,
                timeout=self.config.completion_timeout_seconds,
            )
        self.completion = completion
        self.metric = metric

    # =========================================================================
    # Ingest
    # =========================================================================

    def resolve_topic(self, path) -> str:
        """
        Topic for a document path.

        Uses the first directory below the topics root, else the directory
        following a `topics` path component, else the parent directory name.
        """
        path = Path(path)
        try:
            relative = path.resolve().relative_to(self.store.root.resolve())
            if len(relative.parts) > 1:
                return relative.parts[0]
        except ValueError:
            pass

        parts = path.parts
        for i, part in enumerate(parts[:-2]):
            if part == "topics":
                return parts[i + 1]

        if path.parent.name:
            return path.parent.name
        raise ValueError(f"Cannot determine topic for {path}; pass one explicitly")

    def ingest(self, path, topic: Optional[str] = None, name: Optional[str] = None) -> IngestResult:
        """
        Run the full ingest pipeline for one document.

        Args:
            path: Document path
            topic: Topic name (derived from the path if omitted)
            name: Record log name (defaults to the document's file stem)

        Returns:
            IngestResult for the document

        Raises:
            ParseError: If the document's frontmatter is malformed
            EmbeddingError: If the embedding service fails
            StoreIOError: If the document or the store cannot be accessed
        """
        path = Path(path)
        topic = topic or self.resolve_topic(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Document is not valid UTF-8: {e}", source=str(path))
        except OSError as e:
            raise StoreIOError(f"Cannot read document {path}: {e}", path=str(path))

        return self.ingest_text(raw, topic=topic, name=name or path.stem, source=str(path))

    def ingest_text(
        self,
        raw: str,
        topic: str,
        name: str = "memory",
        source: Optional[str] = None,
    ) -> IngestResult:
        """
        Ingest raw document text into a topic.

        Chunks are appended one at a time as soon as they are embedded, so an
        interrupted ingest leaves a valid, resumable record log.
        """
        source = source or f"<{topic}/{name}>"
        metadata, body = extract_frontmatter(raw, source=source)
        chunks = list(Chunker(body, group_size=self.config.chunk_lines))
        result = IngestResult(path=source, topic=topic, metadata=metadata)

        if not chunks:
            logger.warning(f"No content to ingest in {source}")
            return result

        logger.info(f"Ingesting {source} into topic '{topic}': {len(chunks)} chunks")

        with self.store.write_lock(topic):
            for text, vector in self._embed_in_order(chunks):
                log_path = self.store.append(
                    topic,
                    Chunk(text=text, embedding=vector, metadata=dict(metadata)),
                    name=name,
                )
                result.record_log = str(log_path)
                result.chunks_written += 1

        logger.info(f"Wrote {result.chunks_written} chunks to {result.record_log}")
        return result

    def ingest_many(
        self,
        paths: Iterable,
        topic: Optional[str] = None,
        name: Optional[str] = None,
    ) -> BatchIngestResult:
        """
        Ingest several documents.

        A malformed document is recorded and skipped; network and storage
        failures abort the batch.
        """
        batch = BatchIngestResult()
        for path in paths:
            try:
                batch.results.append(self.ingest(path, topic=topic, name=name))
            except ParseError as e:
                logger.error(f"Skipping {path}: {e}")
                batch.results.append(
                    IngestResult(path=str(path), topic=topic or "", error=str(e))
                )
        return batch

    def _embed_in_order(self, texts: List[str]) -> Iterator[Tuple[str, List[float]]]:
        """Yield (text, vector) pairs in chunk order."""
        workers = self.config.embed_concurrency
        if workers <= 1:
            for text in texts:
                yield text, self.embedder.embed(text)
            return

        size = self.config.embed_batch_size
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tieto-embed") as executor:
            for start in range(0, len(texts), size):
                batch = texts[start:start + size]
                vectors = list(executor.map(self.embedder.embed, batch))
                for text, vector in zip(batch, vectors):
                    yield text, vector

    # =========================================================================
    # Query
    # =========================================================================

    def parse_filters(self, expressions: Iterable[str]) -> FilterParseResult:
        return parse_filters(expressions)

    def query(
        self,
        topic: str,
        question: str,
        filters: Optional[Sequence[FilterSpec]] = None,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> QueryResult:
        """
        Run the full query pipeline.

        Args:
            topic: Topic to search
            question: Natural-language question
            filters: Filter expressions or Filter objects (ANDed)
            top_k: Override config.top_k
            threshold: Override config.min_similarity_threshold

        Returns:
            QueryResult whose status distinguishes an empty topic, filters
            that eliminated everything, a low-confidence match, and success

        Raises:
            EmbeddingError: If the question cannot be embedded
            CompletionError: If the completion endpoint fails
            StoreIOError: If the topic cannot be read
        """
        if not question or not question.strip():
            raise ValueError("question must not be empty")

        top_k = self.config.top_k if top_k is None else top_k
        threshold = self.config.min_similarity_threshold if threshold is None else threshold
        parsed = self._split_filters(filters or [])

        with QueryContext(topic=topic):
            chunks, report = self.store.read_chunks(topic)
            result = QueryResult(
                status=QueryStatus.NO_DATA,
                topic=topic,
                question=question,
                threshold=threshold,
                filters=parsed.filters,
                rejected_filters=parsed.rejected,
                scan_report=report,
            )

            if not chunks:
                logger.info(f"Topic '{topic}' has no data")
                return result

            candidates = [c for c in chunks if matches_all(c.metadata, parsed.filters)]
            result.candidates = len(candidates)
            if not candidates:
                logger.info(
                    f"Filters eliminated all {len(chunks)} chunks: "
                    f"{', '.join(str(f) for f in parsed.filters)}"
                )
                result.status = QueryStatus.NO_CANDIDATES
                return result

            query_vector = self.embedder.embed(question)
            ranking = rank_chunks(query_vector, candidates, top_k=top_k, metric=self.metric)
            result.hits = ranking.hits
            result.skipped = ranking.skipped
            result.status = apply_threshold(ranking.hits, threshold)

            if self.config.debug:
                self._log_scores(query_vector, result)

            if result.status is QueryStatus.NO_CANDIDATES:
                logger.info(f"No scorable candidates ({ranking.skipped} skipped)")
                return result

            if result.status is QueryStatus.NO_CONFIDENT_MATCH:
                logger.info(
                    f"Top score {result.top_score:.3f} below threshold {threshold:.3f}"
                )
                return result

            result.prompt = self.build_prompt(assemble_context(result.hits), question)
            logger.debug(f"Assembled prompt of ~{quick_token_estimate(result.prompt)} tokens")

            if self.completion is not None:
                result.answer = self.completion.complete(result.prompt).content

            return result

    def build_prompt(self, context: str, question: str) -> str:
        """Fill the RAG template (or config.prompt_template_path) with context and question."""
        return create_rag_prompt(context, question, template_path=self.config.prompt_template_path)

    def _split_filters(self, filters: Sequence[FilterSpec]) -> FilterParseResult:
        expressions = [f for f in filters if isinstance(f, str)]
        parsed = parse_filters(expressions)
        parsed.filters.extend(f for f in filters if isinstance(f, Filter))
        return parsed

    def _log_scores(self, query_vector: List[float], result: QueryResult) -> None:
        logger.info(
            f"Threshold {result.threshold:.3f}; {result.candidates} candidates, "
            f"{result.skipped} skipped, status={result.status.value}"
        )
        for hit in result.hits:
            distance = euclidean_distance(query_vector, hit.chunk.embedding)
            preview = hit.text.replace("\n", " ")[:60]
            logger.info(
                f"#{hit.rank} score={hit.score:.4f} distance={distance:.4f} "
                f"position={hit.position} text={preview!r}"
            )
