"""Abstract base class for thought stores and factory function."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..models import ClusterAdjustment, ClusterHierarchy, Thought


class ThoughtStoreBase(ABC):
    """Common interface for thought storage backends."""

    @abstractmethod
    def all_thoughts(self) -> list[Thought]:
        """All thoughts, newest first."""

    @abstractmethod
    def get(self, thought_id: str) -> Thought | None:
        """Fetch one thought by id."""

    @abstractmethod
    def save_thought(self, thought: Thought) -> None:
        """Insert or replace a thought."""

    @abstractmethod
    def delete_thought(self, thought_id: str) -> bool:
        """Delete a thought. Returns False if it did not exist."""

    @abstractmethod
    def load_hierarchy(self) -> ClusterHierarchy:
        """Last saved cluster hierarchy (empty if none was saved)."""

    @abstractmethod
    def save_hierarchy(self, hierarchy: ClusterHierarchy) -> None:
        """Replace the stored cluster hierarchy."""

    @abstractmethod
    def load_adjustments(self) -> list[ClusterAdjustment]:
        """Manual cluster adjustments, oldest first."""

    @abstractmethod
    def append_adjustment(self, adjustment: ClusterAdjustment) -> None:
        """Record a manual cluster adjustment."""

    @abstractmethod
    def export_data(self, path: str | Path) -> None:
        """Write thoughts, hierarchy and adjustments to a JSON file."""

    @abstractmethod
    def import_data(self, path: str | Path) -> int:
        """Merge thoughts from an export file. Returns the number imported."""

    @abstractmethod
    def clear(self) -> None:
        """Delete everything."""


def get_thought_store(config: dict[str, Any]) -> ThoughtStoreBase:
    """Factory: return the right thought store based on config."""
    backend = config.get("storage_backend", "json")

    if backend == "json":
        from .json_store import JsonThoughtStore
        return JsonThoughtStore(config["store_path"])
    else:
        raise ValueError(f"Unknown storage_backend: {backend}")
