"""Thought store backed by a single JSON document."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from ..errors import StoreError
from ..models import ClusterAdjustment, ClusterHierarchy, Thought
from .base import ThoughtStoreBase

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def _empty() -> dict[str, Any]:
    return {"version": FORMAT_VERSION, "thoughts": [], "hierarchy": None, "adjustments": []}


class JsonThoughtStore(ThoughtStoreBase):
    """Keeps the whole journal in one file, rewritten on every change."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return _empty()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt thought store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Corrupt thought store {self.path}: expected a JSON object")
        base = _empty()
        base.update(data)
        return base

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    def all_thoughts(self) -> list[Thought]:
        try:
            return [Thought.from_dict(t) for t in self._read()["thoughts"]]
        except (KeyError, ValueError) as e:
            raise StoreError(f"Invalid thought record in {self.path}: {e}") from e

    def get(self, thought_id: str) -> Thought | None:
        for thought in self.all_thoughts():
            if thought.id == thought_id:
                return thought
        return None

    def save_thought(self, thought: Thought) -> None:
        data = self._read()
        records = [t for t in data["thoughts"] if t.get("id") != thought.id]
        records.append(thought.to_dict())
        records.sort(key=lambda t: datetime.fromisoformat(t["created_at"]).timestamp(), reverse=True)
        data["thoughts"] = records
        self._write(data)

    def delete_thought(self, thought_id: str) -> bool:
        data = self._read()
        records = [t for t in data["thoughts"] if t.get("id") != thought_id]
        if len(records) == len(data["thoughts"]):
            return False
        data["thoughts"] = records
        self._write(data)
        return True

    def load_hierarchy(self) -> ClusterHierarchy:
        raw = self._read().get("hierarchy")
        if not raw:
            return ClusterHierarchy()
        try:
            return ClusterHierarchy.from_dict(raw)
        except (KeyError, ValueError) as e:
            raise StoreError(f"Invalid cluster hierarchy in {self.path}: {e}") from e

    def save_hierarchy(self, hierarchy: ClusterHierarchy) -> None:
        data = self._read()
        data["hierarchy"] = hierarchy.to_dict()
        self._write(data)

    def load_adjustments(self) -> list[ClusterAdjustment]:
        return [ClusterAdjustment.from_dict(a) for a in self._read()["adjustments"]]

    def append_adjustment(self, adjustment: ClusterAdjustment) -> None:
        data = self._read()
        data["adjustments"].append(adjustment.to_dict())
        self._write(data)

    def export_data(self, path: str | Path) -> None:
        data = self._read()
        data["exported_at"] = datetime.now().isoformat()
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Exported {len(data['thoughts'])} thought(s) to {out}")

    def import_data(self, path: str | Path) -> int:
        """Merge an export into this store; imported thoughts replace ones with the same id."""
        try:
            incoming = json.loads(Path(path).read_text(encoding="utf-8"))
            thoughts = [Thought.from_dict(t) for t in incoming.get("thoughts", [])]
        except (json.JSONDecodeError, AttributeError, KeyError, ValueError) as e:
            raise StoreError(f"Cannot import {path}: {e}") from e

        data = self._read()
        ids = {t.id for t in thoughts}
        records = [t for t in data["thoughts"] if t.get("id") not in ids]
        records.extend(t.to_dict() for t in thoughts)
        records.sort(key=lambda t: datetime.fromisoformat(t["created_at"]).timestamp(), reverse=True)
        data["thoughts"] = records
        self._write(data)
        logger.info(f"Imported {len(thoughts)} thought(s) from {path}")
        return len(thoughts)

    def clear(self) -> None:
        self._write(_empty())
