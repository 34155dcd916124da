"""
Core subpackage for Tieto.

Contains configuration, exceptions, and logging utilities.
"""

from .types import TietoConfig
from .exceptions import (
    TietoError,
    ParseError,
    FilterSyntaxError,
    ProviderError,
    EmbeddingError,
    CompletionError,
    StoreIOError,
    StoreLockError,
    StoreCorruptionError,
    DimensionMismatchError,
    ConfigError,
    TemplateError,
)

__all__ = [
    # Types
    "TietoConfig",
    # Exceptions
    "TietoError",
    "ParseError",
    "FilterSyntaxError",
    "ProviderError",
    "EmbeddingError",
    "CompletionError",
    "StoreIOError",
    "StoreLockError",
    "StoreCorruptionError",
    "DimensionMismatchError",
    "ConfigError",
    "TemplateError",
]
