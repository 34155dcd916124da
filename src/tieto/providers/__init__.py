"""
Clients for the external embedding and completion services.
"""

from .completion_client import CompletionClient, CompletionResponse
from .embedding_client import EmbeddingClient, EmbeddingPort, FunctionEmbeddingPort

__all__ = [
    "CompletionClient",
    "CompletionResponse",
    "EmbeddingClient",
    "EmbeddingPort",
    "FunctionEmbeddingPort",
]
