"""
Document ingestion helpers.
"""

from .frontmatter import extract_frontmatter

__all__ = ["extract_frontmatter"]
