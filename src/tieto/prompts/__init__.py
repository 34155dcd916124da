"""
Prompt templates for retrieval-augmented completion.
"""

from .templates import (
    RAG_TEMPLATE,
    InlineTemplateParser,
    TemplateParser,
    create_rag_prompt,
)

__all__ = [
    "RAG_TEMPLATE",
    "InlineTemplateParser",
    "TemplateParser",
    "create_rag_prompt",
]
