"""Journal service: the application layer over the store and the analysis core.

All AI-backed paths are optional. When Claude is unavailable or returns
something unusable, the local heuristic result is used instead and the
fallback is logged.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from .clustering.cluster import ClusteringEngine
from .clustering.hierarchy import apply_adjustment, build_hierarchy
from .clustering.relationships import MIN_RELEVANCE, extract_relationships
from .enrichment.assistant import ClaudeAssistant
from .errors import ClusterAdjustmentError
from .models import (
    AdjustmentType,
    Category,
    ClusterAdjustment,
    ClusterHierarchy,
    Thought,
    WeeklyRecap,
    validate_content,
)
from .nlp.categorizer import categorize
from .nlp.similarity import concept_similarity_matrix
from .query.search import find_related, fuzzy_search
from .recap.weekly import current_time, generate_recap, in_window
from .storage.base import ThoughtStoreBase

logger = logging.getLogger(__name__)


class Journal:
    """Add, analyze, cluster and recap thoughts held in a store."""

    def __init__(
        self,
        store: ThoughtStoreBase,
        config: dict[str, Any],
        assistant: ClaudeAssistant | None = None,
        engine: ClusteringEngine | None = None,
    ):
        self.store = store
        self.config = config
        clustering = config.get("clustering", {})
        self.engine = engine or ClusteringEngine(clustering.get("similarity_threshold", 0.25))
        self.assistant = assistant
        if self.assistant is None and config.get("ai_mode"):
            try:
                self.assistant = ClaudeAssistant(config)
            except ValueError as e:
                logger.warning(f"AI mode disabled: {e}")
        self.last_strategy: str | None = None

    @property
    def ai_enabled(self) -> bool:
        return self.assistant is not None

    # Thoughts

    def categorize(self, content: str) -> Category:
        """Claude's category when AI mode is on and it answers, else the heuristic one."""
        if self.assistant is not None:
            category = self.assistant.categorize(content)
            if category is not None:
                return category
            logger.warning("AI categorization failed, using local categorizer")
        return categorize(content).category

    def add_thought(self, content: str, now: datetime | None = None) -> Thought:
        content = validate_content(content)
        thought = Thought.create(content, self.categorize(content), now=now)
        self.store.save_thought(thought)
        logger.info(f"Added {thought.category.value} thought {thought.id}")
        return thought

    def get_thought(self, thought_id: str) -> Thought:
        thought = self.store.get(thought_id)
        if thought is None:
            raise KeyError(thought_id)
        return thought

    def update_thought(self, thought_id: str, content: str, now: datetime | None = None) -> Thought:
        """Replace a thought's content; its category is left as it was."""
        thought = self.get_thought(thought_id)
        thought.content = validate_content(content)
        thought.updated_at = now or datetime.now(thought.created_at.tzinfo)
        self.store.save_thought(thought)
        return thought

    def delete_thought(self, thought_id: str) -> None:
        """Delete a thought and remove it from every cluster and relevance entry."""
        if not self.store.delete_thought(thought_id):
            raise KeyError(thought_id)

        hierarchy = self.store.load_hierarchy()
        if not hierarchy.all_clusters and not hierarchy.relevance_map:
            return
        for cluster in hierarchy.all_clusters.values():
            cluster.thought_ids = [t for t in cluster.thought_ids if t != thought_id]
        emptied = [cid for cid, c in hierarchy.all_clusters.items() if not c.thought_ids]
        for cid in emptied:
            del hierarchy.all_clusters[cid]
        for cluster in hierarchy.all_clusters.values():
            if cluster.parent_id in emptied:
                cluster.parent_id = None
        hierarchy.relevance_map = {
            key: score for key, score in hierarchy.relevance_map.items()
            if thought_id not in key.split(":")
        }
        self.store.save_hierarchy(hierarchy)

    def list_thoughts(self, category: Category | None = None) -> list[Thought]:
        thoughts = self.store.all_thoughts()
        if category is not None:
            thoughts = [t for t in thoughts if t.category is Category(category)]
        return thoughts

    # Clusters

    def _local_hierarchy(self, thoughts: list[Thought], now: datetime | None) -> ClusterHierarchy:
        clustering = self.config.get("clustering", {})
        name, clusters = self.engine.cluster_with_strategy(
            thoughts,
            min_cluster_size=clustering.get("min_cluster_size", 2),
            max_clusters=clustering.get("max_clusters", 8),
            now=now,
        )
        self.last_strategy = name
        matrix = concept_similarity_matrix([t.content for t in thoughts])
        relationships = extract_relationships(thoughts, matrix, MIN_RELEVANCE)
        return build_hierarchy(clusters, relationships)

    def _ai_hierarchy(self, thoughts: list[Thought], now: datetime | None) -> ClusterHierarchy | None:
        relationships = self.assistant.relevance_scores(thoughts)
        hierarchy = self.assistant.hierarchical_clusters(thoughts, relationships, now=now)
        if hierarchy is None or not hierarchy.all_clusters:
            return None
        try:
            hierarchy.validate()
        except ValueError as e:
            logger.warning(f"Discarding invalid AI hierarchy: {e}")
            return None
        return hierarchy

    def refresh_clusters(self, now: datetime | None = None) -> ClusterHierarchy:
        """Recompute and persist the cluster hierarchy for all thoughts."""
        thoughts = self.store.all_thoughts()
        self.last_strategy = None
        if len(thoughts) < 2:
            hierarchy = ClusterHierarchy()
        else:
            hierarchy = None
            if self.assistant is not None:
                hierarchy = self._ai_hierarchy(thoughts, now)
                if hierarchy is None:
                    logger.warning("AI clustering failed, using local clustering")
                else:
                    self.last_strategy = "ai"
            if hierarchy is None:
                hierarchy = self._local_hierarchy(thoughts, now)
        self.store.save_hierarchy(hierarchy)
        logger.info(f"Refreshed clusters: {len(hierarchy.all_clusters)} cluster(s)")
        return hierarchy

    def clusters(self) -> ClusterHierarchy:
        return self.store.load_hierarchy()

    def thoughts_in_cluster(self, cluster_id: str) -> list[Thought]:
        cluster = self.store.load_hierarchy().get(cluster_id)
        if cluster is None:
            raise KeyError(cluster_id)
        by_id = {t.id: t for t in self.store.all_thoughts()}
        return [by_id[t] for t in cluster.thought_ids if t in by_id]

    def adjust_cluster(
        self,
        adjustment_type: AdjustmentType | str,
        cluster_id: str,
        data: dict[str, Any] | None = None,
    ) -> ClusterHierarchy:
        """Apply a manual adjustment, persist the result and log it."""
        adjustment = ClusterAdjustment(
            cluster_id=cluster_id,
            type=AdjustmentType(adjustment_type),
            data=dict(data or {}),
        )
        if adjustment.type is AdjustmentType.ADD_THOUGHT:
            thought_id = adjustment.data.get("thought_id")
            if thought_id is None or self.store.get(thought_id) is None:
                raise ClusterAdjustmentError(f"Unknown thought: {thought_id}")

        hierarchy = apply_adjustment(self.store.load_hierarchy(), adjustment)
        self.store.save_hierarchy(hierarchy)
        self.store.append_adjustment(adjustment)
        logger.info(f"Cluster {cluster_id}: {adjustment.type.value}")
        return hierarchy

    # Queries

    def search(self, query: str) -> list[Thought]:
        min_similarity = self.config.get("search", {}).get("min_similarity", 0.1)
        return fuzzy_search(query, self.store.all_thoughts(), min_similarity)

    def related(self, thought_id: str) -> list[Thought]:
        target = self.get_thought(thought_id)
        related = self.config.get("related", {})
        return find_related(
            target,
            self.store.all_thoughts(),
            limit=related.get("limit", 5),
            min_similarity=related.get("min_similarity", 0.2),
        )

    def relevance(self, thought_id1: str, thought_id2: str) -> float:
        return self.store.load_hierarchy().relevance(thought_id1, thought_id2)

    def weekly_recap(self, now: datetime | None = None) -> WeeklyRecap | None:
        """Recap of the configured window; Claude refines themes and revisit when enabled."""
        thoughts = self.store.all_thoughts()
        window_days = self.config.get("recap", {}).get("window_days", 7)
        now = now or current_time(thoughts)
        recap = generate_recap(thoughts, window_days=window_days, now=now, engine=self.engine)
        if recap is None or self.assistant is None:
            return recap

        recent = in_window(thoughts, window_days, now)
        themes = self.assistant.themes(recent)
        if themes:
            recap.top_themes = themes
        else:
            logger.warning("AI theme extraction failed, keeping category themes")
        revisit = self.assistant.revisit_candidate(recent)
        if revisit is not None:
            recap.suggested_revisit = revisit
        else:
            logger.warning("AI revisit selection failed, keeping first thought")
        return recap

    # Data

    def export_data(self, path: str | Path) -> None:
        self.store.export_data(path)

    def import_data(self, path: str | Path) -> int:
        return self.store.import_data(path)

    def reset(self) -> None:
        self.store.clear()
        logger.info("Journal reset")
