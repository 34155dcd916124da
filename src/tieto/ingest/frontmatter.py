"""
Frontmatter Extractor - split a document into metadata and body.

A document may open with a YAML block fenced by `---` lines:

    ---
    status: current
    price: "$19.95"
    ---
    Body text...

Documents without an opening fence have no metadata.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

import yaml

from ..core.exceptions import ParseError


logger = logging.getLogger(__name__)

OPEN_FENCE = "---"
CLOSE_FENCES = ("---", "...")


def extract_frontmatter(raw: str, source: Optional[str] = None) -> Tuple[Dict[str, Any], str]:
    """
    Split raw document text into (metadata, body).

    Args:
        raw: Full document text
        source: Document path, used in error messages

    Returns:
        Tuple of (metadata mapping, body string)

    Raises:
        ParseError: If a metadata block is opened but not closed, is not
            valid YAML, or is not a mapping
    """
    text = raw[1:] if raw.startswith("\ufeff") else raw
    lines = text.splitlines()

    if not lines or lines[0].rstrip() != OPEN_FENCE:
        return {}, text

    close_index = None
    for i in range(1, len(lines)):
        if lines[i].rstrip() in CLOSE_FENCES:
            close_index = i
            break

    if close_index is None:
        raise ParseError(
            "Frontmatter block opened but never closed",
            source=source,
            line_number=1,
        )

    block = "\n".join(lines[1:close_index])
    body = "\n".join(lines[close_index + 1:])

    try:
        loaded = yaml.safe_load(block) if block.strip() else {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise ParseError(
            f"Invalid frontmatter YAML: {e}",
            source=source,
            line_number=(mark.line + 2) if mark is not None else None,
        ) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ParseError(
            f"Frontmatter must be a mapping, got {type(loaded).__name__}",
            source=source,
        )

    metadata = {str(key): _normalize(value) for key, value in loaded.items()}
    logger.debug(f"Extracted {len(metadata)} frontmatter keys from {source or '<text>'}")
    return metadata, body


def _normalize(value: Any) -> Any:
    """Make YAML values JSON-serialisable (dates become ISO strings)."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    return value
