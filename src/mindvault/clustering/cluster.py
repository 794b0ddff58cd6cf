"""Multi-strategy clustering of thoughts.

Four strategies run on every call (content, time, emotion, hybrid). Each
returns disjoint groups of thought indices; a quality score picks the
winner, and the winning groups are turned into named clusters.
"""

import logging
from datetime import datetime
from typing import Callable, Sequence

import numpy as np

from ..models import Cluster, Thought
from ..nlp.sentiment import analyze_sentiment
from ..nlp.similarity import concept_similarity_matrix
from .enrich import build_cluster

logger = logging.getLogger(__name__)

Groups = list[list[int]]

DEFAULT_THRESHOLD = 0.25
EMOTION_SCORE_CUTOFF = 0.3
INTENSE_MAGNITUDE = 0.6


def _keep_large(groups: Sequence[list[int]], min_size: int) -> Groups:
    return [g for g in groups if len(g) >= min_size]


def average_linkage(matrix: np.ndarray, a: Sequence[int], b: Sequence[int]) -> float:
    """Mean pairwise similarity between two groups."""
    if not a or not b:
        return 0.0
    return float(matrix[np.ix_(a, b)].mean())


def agglomerate(matrix: np.ndarray, threshold: float = DEFAULT_THRESHOLD) -> Groups:
    """Average-linkage agglomerative clustering.

    Starts from singletons and repeatedly merges the most similar pair of
    groups, rescanning every pair after each merge, until the best pair
    falls below ``threshold`` or one group remains. A merged group is
    appended after the untouched ones.
    """
    groups: Groups = [[i] for i in range(matrix.shape[0])]
    while len(groups) > 1:
        best = -1.0
        pair = (0, 1)
        for i in range(len(groups)):
            for j in range(i + 1, len(groups)):
                sim = average_linkage(matrix, groups[i], groups[j])
                if sim > best:
                    best = sim
                    pair = (i, j)
        if best < threshold:
            break
        i, j = pair
        merged = groups[i] + groups[j]
        del groups[j]
        del groups[i]
        groups.append(merged)
    return groups


def group_by_category(thoughts: Sequence[Thought], min_size: int) -> Groups:
    buckets: dict[str, list[int]] = {}
    for idx, thought in enumerate(thoughts):
        buckets.setdefault(thought.category.value, []).append(idx)
    return _keep_large(buckets.values(), min_size)


def _local_date(moment: datetime):
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def emotion_key(text: str) -> str:
    """Bucket label such as ``negative-anxiety`` or ``neutral``."""
    sentiment = analyze_sentiment(text)
    if sentiment.score > EMOTION_SCORE_CUTOFF:
        key = "positive"
    elif sentiment.score < -EMOTION_SCORE_CUTOFF:
        key = "negative"
    elif sentiment.magnitude > INTENSE_MAGNITUDE:
        key = "intense"
    else:
        key = "neutral"
    if sentiment.emotions:
        key = f"{key}-{sentiment.emotions[0].emotion.value}"
    return key


def score_quality(groups: Sequence[Sequence[int]], total: int) -> float:
    """Blend of cluster count, size balance and coverage; 0 for no groups."""
    if not groups or total == 0:
        return 0.0

    count = len(groups)
    if 2 <= count <= 6:
        count_score = 1.0
    elif count > 6:
        count_score = 0.5
    else:
        count_score = 0.3

    sizes = np.array([len(g) for g in groups], dtype=float)
    mean = sizes.mean()
    variance = ((sizes - mean) ** 2).mean()
    balance_score = max(0.0, 1 - variance / (mean * mean))

    coverage_score = sizes.sum() / total

    return count_score * 0.3 + balance_score * 0.3 + coverage_score * 0.4


class ClusteringEngine:
    """Runs the clustering strategies and enriches the best result."""

    def __init__(self, similarity_threshold: float = DEFAULT_THRESHOLD):
        self.similarity_threshold = similarity_threshold

    def by_content(self, thoughts: Sequence[Thought], min_size: int) -> Groups:
        matrix = concept_similarity_matrix([t.content for t in thoughts])
        groups = _keep_large(agglomerate(matrix, self.similarity_threshold), min_size)
        if not groups:
            logger.debug("No content clusters survived, falling back to category groups")
            return group_by_category(thoughts, min_size)
        return groups

    def by_time(self, thoughts: Sequence[Thought], min_size: int) -> Groups:
        buckets: dict = {}
        for idx, thought in enumerate(thoughts):
            buckets.setdefault(_local_date(thought.created_at), []).append(idx)
        return _keep_large(buckets.values(), min_size)

    def by_emotion(self, thoughts: Sequence[Thought], min_size: int) -> Groups:
        buckets: dict[str, list[int]] = {}
        for idx, thought in enumerate(thoughts):
            buckets.setdefault(emotion_key(thought.content), []).append(idx)
        return _keep_large(buckets.values(), min_size)

    def hybrid(self, thoughts: Sequence[Thought], min_size: int) -> Groups:
        relaxed = max(2, min_size - 1)
        content = self.by_content(thoughts, relaxed)
        if len(content) >= 2:
            return content
        for strategy in (self.by_emotion, self.by_time):
            groups = strategy(thoughts, relaxed)
            if len(groups) >= 2:
                return groups
        return content

    def strategies(self) -> list[tuple[str, Callable[[Sequence[Thought], int], Groups]]]:
        """Strategies in evaluation order; on equal quality the earlier one wins."""
        return [
            ("content", self.by_content),
            ("time", self.by_time),
            ("emotion", self.by_emotion),
            ("hybrid", self.hybrid),
        ]

    def best_groups(self, thoughts: Sequence[Thought], min_cluster_size: int = 2) -> tuple[str | None, Groups]:
        """Run every strategy and return the name and groups of the best one."""
        best_name = None
        best_groups: Groups = []
        best_score = 0.0
        for name, strategy in self.strategies():
            groups = strategy(thoughts, min_cluster_size)
            score = score_quality(groups, len(thoughts))
            logger.debug(f"Strategy {name}: {len(groups)} group(s), quality {score:.3f}")
            if score > best_score:
                best_name, best_groups, best_score = name, groups, score
        return best_name, best_groups

    def cluster_with_strategy(
        self,
        thoughts: Sequence[Thought],
        min_cluster_size: int = 2,
        max_clusters: int = 8,
        now: datetime | None = None,
    ) -> tuple[str | None, list[Cluster]]:
        """Like ``cluster`` but also report which strategy won."""
        thoughts = list(thoughts)
        if len(thoughts) < max(min_cluster_size, 2):
            return None, []

        name, groups = self.best_groups(thoughts, min_cluster_size)
        now = now or datetime.now()
        clusters = [build_cluster([thoughts[i] for i in g], now) for g in groups[:max_clusters]]
        logger.info(f"Clustered {len(thoughts)} thought(s) into {len(clusters)} cluster(s) using {name or 'no'} strategy")
        return name, clusters

    def cluster(
        self,
        thoughts: Sequence[Thought],
        min_cluster_size: int = 2,
        max_clusters: int = 8,
        now: datetime | None = None,
    ) -> list[Cluster]:
        """Group thoughts into at most ``max_clusters`` disjoint, enriched clusters.

        Thoughts that no group takes are left out. Fewer thoughts than the
        minimum cluster size (or fewer than two) yield no clusters.
        """
        return self.cluster_with_strategy(thoughts, min_cluster_size, max_clusters, now)[1]
