"""Score relationships between thoughts from a similarity matrix."""

from itertools import combinations
from typing import Iterable, Sequence

import numpy as np

from ..models import ThoughtRelevance, pair_key

MIN_RELEVANCE = 0.2


def extract_relationships(
    thoughts: Sequence,
    matrix: np.ndarray,
    min_score: float = MIN_RELEVANCE,
) -> list[ThoughtRelevance]:
    """One relevance entry per unordered pair scoring at least ``min_score``.

    Self-pairs are skipped. Sorted by score descending.
    """
    relationships = []
    for (i, a), (j, b) in combinations(enumerate(thoughts), 2):
        score = float(matrix[i, j])
        if score >= min_score:
            relationships.append(ThoughtRelevance(
                thought_id1=a.id,
                thought_id2=b.id,
                score=min(max(score, 0.0), 1.0),
            ))

    relationships.sort(key=lambda r: r.score, reverse=True)
    return relationships


def relevance_map(relationships: Iterable[ThoughtRelevance]) -> dict[str, float]:
    """Map sorted ``"id1:id2"`` keys to scores; the last score for a pair wins."""
    result = {}
    for rel in relationships:
        if rel.thought_id1 == rel.thought_id2:
            continue
        result[pair_key(rel.thought_id1, rel.thought_id2)] = rel.score
    return result


def lookup(relevance: dict[str, float], thought_id1: str, thought_id2: str) -> float:
    """Score for a pair, 0.0 when unscored."""
    if thought_id1 == thought_id2:
        return 0.0
    return relevance.get(pair_key(thought_id1, thought_id2), 0.0)
