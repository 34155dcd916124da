"""
Storage subpackage: the flat-file topic store.
"""

from .topic_store import TopicStore

__all__ = ["TopicStore"]
