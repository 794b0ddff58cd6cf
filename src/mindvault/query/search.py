"""Similarity search over thoughts."""

import logging
from typing import Sequence

from ..clustering.relationships import lookup
from ..models import ClusterHierarchy, Thought
from ..nlp.similarity import similarity_matrix

logger = logging.getLogger(__name__)


def _rank_against(target: str, thoughts: Sequence[Thought]) -> list[tuple[Thought, float]]:
    """TF-IDF similarity of every thought to ``target``, computed over one shared corpus."""
    matrix = similarity_matrix([target] + [t.content for t in thoughts])
    return [(thought, float(matrix[0, i + 1])) for i, thought in enumerate(thoughts)]


def fuzzy_search(query: str, thoughts: Sequence[Thought], min_similarity: float = 0.1) -> list[Thought]:
    """Run a similarity search query.

    Args:
        query: Free-text query.
        thoughts: Thoughts to search.
        min_similarity: Results must score strictly above this.

    Returns:
        Matching thoughts, most similar first.
    """
    if not query.strip() or not thoughts:
        return []
    scored = _rank_against(query, thoughts)
    scored.sort(key=lambda item: item[1], reverse=True)
    results = [t for t, sim in scored if sim > min_similarity]
    logger.debug(f"Search '{query}' matched {len(results)} of {len(thoughts)} thought(s)")
    return results


def find_related(
    target: Thought,
    thoughts: Sequence[Thought],
    limit: int = 5,
    min_similarity: float = 0.2,
) -> list[Thought]:
    """Thoughts most similar to ``target`` (never ``target`` itself)."""
    others = [t for t in thoughts if t.id != target.id]
    if not others:
        return []
    scored = _rank_against(target.content, others)
    scored.sort(key=lambda item: item[1], reverse=True)
    return [t for t, sim in scored[:limit] if sim > min_similarity]


def relevance(source: ClusterHierarchy | dict[str, float], thought_id1: str, thought_id2: str) -> float:
    """Previously computed relevance for a pair of thoughts; 0.0 when unscored."""
    if isinstance(source, ClusterHierarchy):
        return source.relevance(thought_id1, thought_id2)
    return lookup(source, thought_id1, thought_id2)
