"""
Tieto - topic-scoped retrieval for LLM prompts.

Documents with optional YAML frontmatter are split into line chunks, embedded
through an external embedding service, and appended to per-topic record
logs. Questions are answered by filtering a topic on metadata, ranking the
remaining chunks by cosine similarity, and assembling the best matches into
a prompt for a completion endpoint.
"""

from .core import TietoConfig, TietoError
from .contracts import QueryResult, QueryStatus
from .retrieval import Tieto

__version__ = "0.1.0"

__all__ = [
    "Tieto",
    "TietoConfig",
    "TietoError",
    "QueryResult",
    "QueryStatus",
]
