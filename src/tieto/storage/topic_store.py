"""
Topic Store - append-only, line-delimited chunk records per topic.

Directory structure:
    {topics_root}/{topic}/
        ├── memory/
        │   ├── {name}.jsonl   # one chunk record per line
        │   └── .lock          # present while a writer holds the topic
        └── ...                # source documents may live alongside

Each record is a self-contained JSON object:
    {"text": "...", "embedding": [0.1, ...], "meta": {...}}

Appends never rewrite existing lines. Reads scan every record log of the
topic in file-name order and yield one ScanRecord per line, so a corrupt
line is reported without invalidating the rest of the topic.
"""

import json
import logging
import os
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..contracts.retrieval_contracts import Chunk, ScanRecord, ScanReport
from ..core.exceptions import (
    DimensionMismatchError,
    ParseError,
    StoreCorruptionError,
    StoreIOError,
    StoreLockError,
)


logger = logging.getLogger(__name__)

MEMORY_DIR = "memory"
RECORD_SUFFIX = ".jsonl"
LOCK_FILE = ".lock"
DEFAULT_LOG_NAME = "memory"

_NAME_PATTERN = re.compile(r"^[^/\\\x00]+$")


def _check_name(kind: str, value: str) -> str:
    if not value or value in (".", "..") or not _NAME_PATTERN.match(value):
        raise ValueError(f"Invalid {kind} name: {value!r}")
    return value


class TopicStore:
    """
    Flat-file vector store rooted at a topics directory.

    A topic with no directory simply has no data.

    Example:
        >>> store = TopicStore("topics")
        >>> store.append("acme-corp", chunk, name="products")
        >>> chunks, report = store.read_chunks("acme-corp")
    """

    def __init__(self, root):
        """
        Initialize the store.

        Args:
            root: Topics root directory
        """
        self.root = Path(root)

    def topic_dir(self, topic: str) -> Path:
        return self.root / _check_name("topic", topic)

    def memory_dir(self, topic: str) -> Path:
        return self.topic_dir(topic) / MEMORY_DIR

    def record_log_path(self, topic: str, name: str = DEFAULT_LOG_NAME) -> Path:
        return self.memory_dir(topic) / f"{_check_name('record log', name)}{RECORD_SUFFIX}"

    def record_logs(self, topic: str) -> List[Path]:
        """Record logs of a topic in scan order."""
        memory_dir = self.memory_dir(topic)
        if not memory_dir.is_dir():
            return []
        return sorted(p for p in memory_dir.glob(f"*{RECORD_SUFFIX}") if p.is_file())

    def topic_exists(self, topic: str) -> bool:
        return bool(self.record_logs(topic))

    def list_topics(self) -> List[str]:
        """Names of topics holding at least one record log."""
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.is_dir() and any((entry / MEMORY_DIR).glob(f"*{RECORD_SUFFIX}"))
        )

    # =========================================================================
    # Writes
    # =========================================================================

    @contextmanager
    def write_lock(self, topic: str) -> Iterator[Path]:
        """
        Hold the topic's advisory write lock.

        Raises:
            StoreLockError: If another writer holds the lock
            StoreIOError: If the lock file cannot be created
        """
        memory_dir = self.memory_dir(topic)
        lock_path = memory_dir / LOCK_FILE
        try:
            memory_dir.mkdir(parents=True, exist_ok=True)
            fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            raise StoreLockError(
                f"Topic '{topic}' is locked by another writer (remove {lock_path} if stale)",
                path=str(lock_path),
            )
        except OSError as e:
            raise StoreIOError(f"Cannot create lock for topic '{topic}': {e}", path=str(lock_path))

        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
        finally:
            os.close(fd)

        logger.debug(f"Acquired write lock {lock_path}")
        try:
            yield lock_path
        finally:
            try:
                lock_path.unlink()
            except FileNotFoundError:
                logger.warning(f"Lock file {lock_path} vanished before release")

    def append(self, topic: str, chunk: Chunk, name: str = DEFAULT_LOG_NAME) -> Path:
        """
        Append one chunk record to a topic's record log.

        Args:
            topic: Topic name
            chunk: Chunk to persist
            name: Record log name (file stem)

        Returns:
            Path of the record log written

        Raises:
            DimensionMismatchError: If the chunk's dimension differs from the
                topic's existing records
            StoreIOError: If the log cannot be written
        """
        expected = self.topic_dimension(topic)
        if expected is not None and expected != chunk.dimension:
            raise DimensionMismatchError(
                f"Topic '{topic}' holds {expected}-dimensional embeddings, "
                f"got {chunk.dimension}",
                expected=expected,
                actual=chunk.dimension,
            )

        path = self.record_log_path(topic, name)
        line = json.dumps(chunk.to_record(), ensure_ascii=False, default=str)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StoreIOError(f"Cannot append to {path}: {e}", path=str(path))

        return path

    def topic_dimension(self, topic: str) -> Optional[int]:
        """Embedding dimension of the first readable record, if any."""
        for record in self.scan(topic):
            if record.ok:
                return record.chunk.dimension
        return None

    # =========================================================================
    # Reads
    # =========================================================================

    def scan(self, topic: str) -> Iterator[ScanRecord]:
        """
        Lazily read every record of a topic.

        Yields one ScanRecord per non-blank line, in file-name then line
        order. Unparseable lines yield a ScanRecord carrying the error.

        Raises:
            StoreIOError: If a record log cannot be opened or read
        """
        for path in self.record_logs(topic):
            try:
                with open(path, "rb") as f:
                    for line_number, raw in enumerate(f, start=1):
                        if not raw.strip():
                            continue
                        yield _parse_line(path.name, line_number, raw)
            except OSError as e:
                raise StoreIOError(f"Cannot read {path}: {e}", path=str(path))

    def read_chunks(self, topic: str, strict: bool = False) -> Tuple[List[Chunk], ScanReport]:
        """
        Read all valid chunks of a topic.

        Args:
            topic: Topic name
            strict: Raise on the first corrupt record instead of reporting it

        Returns:
            Tuple of (chunks in scan order, scan report)

        Raises:
            StoreCorruptionError: In strict mode, on the first corrupt record
        """
        chunks = []
        report = ScanReport()
        for record in self.scan(topic):
            report.records_read += 1
            if record.ok:
                chunks.append(record.chunk)
                continue
            if strict:
                raise StoreCorruptionError(
                    f"Corrupt record {record.source}:{record.line_number}: {record.error}",
                    source=record.source,
                    line_number=record.line_number,
                )
            logger.warning(
                f"Skipping corrupt record {record.source}:{record.line_number} "
                f"in topic '{topic}': {record.error}"
            )
            report.failures.append(record)

        return chunks, report


def _parse_line(source: str, line_number: int, raw: bytes) -> ScanRecord:
    try:
        data = json.loads(raw.decode("utf-8"))
        chunk = Chunk.from_record(data)
    except UnicodeDecodeError as e:
        return ScanRecord(source=source, line_number=line_number, error=f"invalid UTF-8: {e}")
    except json.JSONDecodeError as e:
        return ScanRecord(source=source, line_number=line_number, error=f"invalid JSON: {e}")
    except ParseError as e:
        return ScanRecord(source=source, line_number=line_number, error=str(e))
    return ScanRecord(source=source, line_number=line_number, chunk=chunk)
