"""
Custom exceptions for the Tieto retrieval engine.
"""

from typing import Optional


class TietoError(Exception):
    """Base exception for all Tieto errors."""
    pass


class ParseError(TietoError):
    """
    Error parsing a document's frontmatter or a stored chunk record.

    Raised when:
    - A frontmatter block is opened but never closed
    - The frontmatter block is not valid YAML or not a mapping
    - A stored record is not a well-formed chunk

    Scoped to one document or one record; batch operations recover from it.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        super().__init__(message)
        self.source = source
        self.line_number = line_number


class FilterSyntaxError(TietoError):
    """Filter expression does not match `key OP value`."""

    def __init__(self, message: str, expression: str = None):
        super().__init__(message)
        self.expression = expression


class ProviderError(TietoError):
    """
    Error communicating with an external model service.

    Raised when:
    - Service is unreachable
    - Request times out
    - Service returns a non-success status
    - Response body is missing the expected fields
    """

    def __init__(self, message: str, url: str = None, status_code: int = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class EmbeddingError(ProviderError):
    """Embedding service call failed."""
    pass


class CompletionError(ProviderError):
    """Completion endpoint call failed."""
    pass


class StoreIOError(TietoError):
    """
    Error accessing the on-disk topic store.

    Raised when:
    - Topic directory cannot be created
    - Record log cannot be opened for reading or appending
    """

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class StoreLockError(StoreIOError):
    """Another writer holds the topic's write lock."""
    pass


class StoreCorruptionError(TietoError):
    """A stored record failed to parse during a strict scan."""

    def __init__(self, message: str, source: str = None, line_number: int = None):
        super().__init__(message)
        self.source = source
        self.line_number = line_number


class DimensionMismatchError(TietoError):
    """Embedding vectors have incompatible dimensions."""

    def __init__(self, message: str, expected: int = None, actual: int = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ConfigError(TietoError):
    """
    Error in Tieto configuration.

    Raised when:
    - Configuration file is missing or not a YAML mapping
    - Unknown configuration keys are present
    - Configuration values are out of valid range
    """
    pass


class TemplateError(TietoError):
    """Prompt template could not be loaded or is not registered."""
    pass
