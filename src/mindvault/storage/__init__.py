"""Storage abstraction for thought backends."""

from .base import ThoughtStoreBase, get_thought_store
from .json_store import JsonThoughtStore

__all__ = ["JsonThoughtStore", "ThoughtStoreBase", "get_thought_store"]
