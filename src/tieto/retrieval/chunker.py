"""
Chunker - Split document bodies into line-group chunks.

A body is reduced to its non-empty, trimmed lines; every `group_size`
consecutive lines form one chunk. The final group may be shorter.
"""

import logging
from typing import Iterator, List

logger = logging.getLogger(__name__)

DEFAULT_GROUP_SIZE = 3


class Chunker:
    """
    Restartable, ordered sequence of chunks over one body.

    Iterating again yields the same chunks in the same order.

    Example:
        >>> chunks = Chunker("a\\nb\\n\\nc\\nd", group_size=3)
        >>> list(chunks)
        ['a\\nb\\nc', 'd']
    """

    def __init__(self, body: str, group_size: int = DEFAULT_GROUP_SIZE):
        if group_size < 1:
            raise ValueError("group_size must be positive")
        self.group_size = group_size
        self._lines = split_lines(body)

    def __iter__(self) -> Iterator[str]:
        g = self.group_size
        for start in range(0, len(self._lines), g):
            yield "\n".join(self._lines[start:start + g])

    def __len__(self) -> int:
        return -(-len(self._lines) // self.group_size)

    @property
    def line_count(self) -> int:
        return len(self._lines)


def split_lines(body: str) -> List[str]:
    """Non-empty trimmed lines of `body`, in order."""
    return [line.strip() for line in body.splitlines() if line.strip()]


def chunk_lines(body: str, group_size: int = DEFAULT_GROUP_SIZE) -> List[str]:
    """
    Split text into chunks of `group_size` lines.

    Args:
        body: Text content to chunk
        group_size: Lines per chunk

    Returns:
        List of chunk strings, lines joined by newline
    """
    chunks = list(Chunker(body, group_size=group_size))
    logger.debug(f"Created {len(chunks)} chunks of up to {group_size} lines")
    return chunks
