"""
Core configuration type for the Tieto retrieval engine.

Configuration is an explicit object handed to the orchestrator; nothing in the
package reads process-wide settings after construction.
"""

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

from .exceptions import ConfigError


DEFAULT_EMBEDDING_URL = "http://127.0.0.1:8080/embedding"
DEFAULT_MIN_SIMILARITY_THRESHOLD = 0.42

# Environment variable -> config field
ENV_VARS = {
    "TIETO_TOPICS_ROOT": "topics_root",
    "TIETO_EMBEDDING_URL": "embedding_url",
    "TIETO_EMBEDDING_TIMEOUT": "embedding_timeout_seconds",
    "TIETO_COMPLETION_URL": "completion_url",
    "TIETO_COMPLETION_TIMEOUT": "completion_timeout_seconds",
    "TIETO_TEMPERATURE": "temperature",
    "TIETO_N_PREDICT": "n_predict",
    "TIETO_MIN_SIMILARITY": "min_similarity_threshold",
    "TIETO_TOP_K": "top_k",
    "TIETO_CHUNK_LINES": "chunk_lines",
    "TIETO_EMBED_CONCURRENCY": "embed_concurrency",
    "TIETO_EMBED_BATCH_SIZE": "embed_batch_size",
    "TIETO_PROMPT_TEMPLATE": "prompt_template_path",
    "TIETO_DEBUG": "debug",
}


@dataclass(frozen=True)
class TietoConfig:
    """
    Configuration for ingest and query.

    Attributes:
        topics_root: Directory holding one sub-directory per topic
        embedding_url: Embedding service endpoint
        embedding_timeout_seconds: Timeout for one embedding request
        completion_url: Optional completion endpoint; None returns the prompt
        completion_timeout_seconds: Timeout for one completion request
        temperature: Sampling temperature forwarded to the completion endpoint
        n_predict: Maximum tokens to generate
        min_similarity_threshold: Minimum top score for a confident answer
        top_k: Number of chunks kept after ranking
        chunk_lines: Lines per chunk at ingest
        embed_concurrency: Parallel embedding requests during ingest (1 = serial)
        embed_batch_size: Chunks embedded per parallel batch
        prompt_template_path: Optional file overriding the RAG prompt template
        debug: Surface per-chunk scores and the threshold
    """
    topics_root: str = "topics"
    embedding_url: str = DEFAULT_EMBEDDING_URL
    embedding_timeout_seconds: float = 30.0
    completion_url: Optional[str] = None
    completion_timeout_seconds: float = 120.0
    temperature: float = 0.2
    n_predict: int = 512
    min_similarity_threshold: float = DEFAULT_MIN_SIMILARITY_THRESHOLD
    top_k: int = 3
    chunk_lines: int = 3
    embed_concurrency: int = 1
    embed_batch_size: int = 8
    prompt_template_path: Optional[str] = None
    debug: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigError: If any value is out of range
        """
        if not -1.0 <= self.min_similarity_threshold <= 1.0:
            raise ConfigError(
                f"min_similarity_threshold must be within [-1, 1], "
                f"got {self.min_similarity_threshold}"
            )
        for name in ("top_k", "chunk_lines", "embed_concurrency", "embed_batch_size", "n_predict"):
            value = getattr(self, name)
            if value < 1:
                raise ConfigError(f"{name} must be positive, got {value}")
        for name in ("embedding_timeout_seconds", "completion_timeout_seconds"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")

    def with_overrides(self, **overrides: Any) -> "TietoConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any], base: Optional["TietoConfig"] = None) -> "TietoConfig":
        """
        Build a config from a plain mapping, coercing values to field types.

        Args:
            data: Field name -> value (strings are coerced)
            base: Config supplying values for missing fields

        Raises:
            ConfigError: On unknown keys or values that cannot be coerced
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = {}
        for name, raw in data.items():
            values[name] = _coerce(name, raw, getattr(base or cls(), name))

        return replace(base, **values) if base else cls(**values)

    @classmethod
    def from_env(cls, base: Optional["TietoConfig"] = None, environ=None) -> "TietoConfig":
        """Create config from TIETO_* environment variables."""
        environ = os.environ if environ is None else environ
        data = {
            field_name: environ[var]
            for var, field_name in ENV_VARS.items()
            if environ.get(var) not in (None, "")
        }
        return cls.from_mapping(data, base=base or cls())


def _coerce(name: str, raw: Any, default: Any) -> Any:
    """Coerce a raw config value to the type of the field's default."""
    if raw is None:
        return None
    try:
        if isinstance(default, bool):
            if isinstance(raw, bool):
                return raw
            return str(raw).strip().lower() in ("1", "true", "yes", "on")
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r} ({e})")
