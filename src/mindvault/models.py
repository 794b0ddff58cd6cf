"""Data models used throughout mindvault."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .errors import ThoughtValidationError

MAX_CONTENT_LENGTH = 10_000


class Category(str, Enum):
    """Thought categories. Declaration order is the categorizer's tie-break order."""
    IDEA = "idea"
    FEELING = "feeling"
    MEMORY = "memory"
    TASK = "task"
    QUESTION = "question"
    OBSERVATION = "observation"
    REFLECTION = "reflection"


class Emotion(str, Enum):
    ANXIETY = "anxiety"
    DEPRESSION = "depression"
    EXCITEMENT = "excitement"
    GRATITUDE = "gratitude"
    CONFUSION = "confusion"
    MOTIVATION = "motivation"
    LOVE = "love"


class AdjustmentType(str, Enum):
    """Manual operations a user can apply to a cluster hierarchy."""
    ADD_THOUGHT = "add_thought"
    REMOVE_THOUGHT = "remove_thought"
    RENAME_CLUSTER = "rename_cluster"
    MERGE_CLUSTERS = "merge_clusters"
    SPLIT_CLUSTER = "split_cluster"
    CREATE_CHILD_CLUSTER = "create_child_cluster"
    MOVE_TO_PARENT = "move_to_parent"


def validate_content(content: str) -> str:
    """Check thought content and return it trimmed.

    Raises:
        ThoughtValidationError: if the content is empty after trimming or
            longer than MAX_CONTENT_LENGTH characters.
    """
    if content is None or not content.strip():
        raise ThoughtValidationError("Thought content cannot be empty")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ThoughtValidationError(
            f"Thought content is {len(content)} characters, the limit is {MAX_CONTENT_LENGTH}"
        )
    return content.strip()


def _parse_dt(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Thought:
    """A single journal entry."""
    id: str
    content: str
    category: Category
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, content: str, category: Category, now: datetime | None = None) -> "Thought":
        """Validate content and build a new thought with a fresh id."""
        content = validate_content(content)
        now = now or datetime.now()
        return cls(
            id=f"thought-{uuid.uuid4().hex[:12]}",
            content=content,
            category=Category(category),
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "category": self.category.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Thought":
        return cls(
            id=data["id"],
            content=data["content"],
            category=Category(data.get("category", "idea")),
            created_at=_parse_dt(data["created_at"]),
            updated_at=_parse_dt(data.get("updated_at", data["created_at"])),
        )


@dataclass
class ThoughtRelevance:
    """A scored, unordered relationship between two thoughts."""
    thought_id1: str
    thought_id2: str
    score: float
    reason: str = ""

    @property
    def key(self) -> str:
        return pair_key(self.thought_id1, self.thought_id2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "thoughtId1": self.thought_id1,
            "thoughtId2": self.thought_id2,
            "score": self.score,
            "reason": self.reason,
        }


def pair_key(id1: str, id2: str) -> str:
    """Key for an unordered thought pair: the two ids sorted and joined with ':'."""
    a, b = sorted((id1, id2))
    return f"{a}:{b}"


@dataclass
class Cluster:
    """A group of thoughts. Parent links are the only tree edges stored."""
    id: str
    name: str
    thought_ids: list[str]
    created_at: datetime = field(default_factory=datetime.now)
    parent_id: str | None = None
    keywords: list[str] = field(default_factory=list)
    description: str = ""
    is_user_modified: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "thought_ids": list(self.thought_ids),
            "created_at": self.created_at.isoformat(),
            "parent_id": self.parent_id,
            "keywords": list(self.keywords),
            "description": self.description,
            "is_user_modified": self.is_user_modified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Cluster":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            thought_ids=list(data.get("thought_ids", [])),
            created_at=_parse_dt(data["created_at"]) if data.get("created_at") else datetime.now(),
            parent_id=data.get("parent_id"),
            keywords=list(data.get("keywords", [])),
            description=data.get("description", ""),
            is_user_modified=bool(data.get("is_user_modified", False)),
        )


@dataclass
class ClusterHierarchy:
    """Arena of clusters indexed by id.

    ``all_clusters`` is the single source of truth; roots and children are
    derived by scanning parent links.
    """
    all_clusters: dict[str, Cluster] = field(default_factory=dict)
    relevance_map: dict[str, float] = field(default_factory=dict)

    @property
    def root_clusters(self) -> list[Cluster]:
        return [c for c in self.all_clusters.values() if c.parent_id is None]

    def get(self, cluster_id: str) -> Cluster | None:
        return self.all_clusters.get(cluster_id)

    def children(self, parent_id: str) -> list[Cluster]:
        return [c for c in self.all_clusters.values() if c.parent_id == parent_id]

    def ancestors(self, cluster_id: str) -> list[str]:
        """Ids from the cluster's parent up to its root.

        Raises ValueError on a cycle or a dangling parent id.
        """
        chain: list[str] = []
        current = self.all_clusters.get(cluster_id)
        while current is not None and current.parent_id is not None:
            if current.parent_id == cluster_id or current.parent_id in chain:
                raise ValueError(f"Cycle detected at cluster {cluster_id}")
            parent = self.all_clusters.get(current.parent_id)
            if parent is None:
                raise ValueError(f"Cluster {current.id} references missing parent {current.parent_id}")
            chain.append(parent.id)
            current = parent
        return chain

    def depth(self, cluster_id: str) -> int:
        return len(self.ancestors(cluster_id))

    def validate(self) -> None:
        """Check the tree invariant for every cluster."""
        for cluster_id in self.all_clusters:
            self.ancestors(cluster_id)

    def relevance(self, thought_id1: str, thought_id2: str) -> float:
        """Relevance score for a pair, 0.0 when the pair was never scored."""
        if thought_id1 == thought_id2:
            return 0.0
        return self.relevance_map.get(pair_key(thought_id1, thought_id2), 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "all_clusters": {cid: c.to_dict() for cid, c in self.all_clusters.items()},
            "relevance_map": dict(self.relevance_map),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClusterHierarchy":
        return cls(
            all_clusters={
                cid: Cluster.from_dict(c) for cid, c in data.get("all_clusters", {}).items()
            },
            relevance_map={k: float(v) for k, v in data.get("relevance_map", {}).items()},
        )


@dataclass
class EmotionMatch:
    """A detected emotion with the patterns and phrases that triggered it."""
    emotion: Emotion
    intensity: float
    context: list[str] = field(default_factory=list)


@dataclass
class SentimentResult:
    score: float
    polarity: str  # "positive", "negative" or "neutral"
    confidence: float
    magnitude: float
    emotions: list[EmotionMatch] = field(default_factory=list)
    nuance: str = "balanced"

    @property
    def dominant_emotion(self) -> Emotion | None:
        return self.emotions[0].emotion if self.emotions else None


@dataclass
class CategoryResult:
    """Outcome of heuristic categorization."""
    category: Category
    confidence: float
    subcategories: list[Category] = field(default_factory=list)
    reasoning: str = ""
    scores: dict[Category, float] = field(default_factory=dict)


@dataclass
class WeeklyRecap:
    week_starting: datetime
    top_themes: list[str]
    thought_count: int
    category_breakdown: dict[Category, int]
    suggested_revisit: Thought | None
    average_sentiment: float | None = None
    emotional_insights: list[str] = field(default_factory=list)


@dataclass
class ClusterAdjustment:
    """A logged manual change to the cluster hierarchy."""
    cluster_id: str
    type: AdjustmentType
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:13])
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "cluster_id": self.cluster_id,
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClusterAdjustment":
        return cls(
            id=data["id"],
            cluster_id=data["cluster_id"],
            type=AdjustmentType(data["type"]),
            timestamp=_parse_dt(data["timestamp"]),
            data=dict(data.get("data", {})),
        )
