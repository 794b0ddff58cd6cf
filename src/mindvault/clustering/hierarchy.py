"""Cluster hierarchies and the manual adjustments users make to them.

A hierarchy is at most two levels deep: root clusters and their children.
Adjustments are applied to a copy, so a rejected adjustment leaves the
original hierarchy untouched.
"""

import copy
import logging
import uuid
from datetime import datetime
from typing import Any, Iterable

from ..errors import ClusterAdjustmentError
from ..models import AdjustmentType, Cluster, ClusterAdjustment, ClusterHierarchy, ThoughtRelevance
from .relationships import relevance_map

logger = logging.getLogger(__name__)

MAX_DEPTH = 1  # roots are depth 0, their children depth 1


def build_hierarchy(
    clusters: Iterable[Cluster],
    relevance: Iterable[ThoughtRelevance] = (),
) -> ClusterHierarchy:
    """Flat hierarchy: every cluster becomes a root unless it names a known parent."""
    clusters = list(clusters)
    hierarchy = ClusterHierarchy(
        all_clusters={c.id: c for c in clusters},
        relevance_map=relevance_map(relevance),
    )
    for cluster in clusters:
        if cluster.parent_id is not None and cluster.parent_id not in hierarchy.all_clusters:
            cluster.parent_id = None
    hierarchy.validate()
    return hierarchy


def _new_cluster_id() -> str:
    return f"cluster-{uuid.uuid4().hex[:12]}"


def _require(hierarchy: ClusterHierarchy, cluster_id: str) -> Cluster:
    cluster = hierarchy.get(cluster_id)
    if cluster is None:
        raise ClusterAdjustmentError(f"Unknown cluster: {cluster_id}")
    return cluster


def _check_tree(hierarchy: ClusterHierarchy) -> None:
    for cluster_id in hierarchy.all_clusters:
        try:
            depth = hierarchy.depth(cluster_id)
        except ValueError as e:
            raise ClusterAdjustmentError(str(e)) from e
        if depth > MAX_DEPTH:
            raise ClusterAdjustmentError(f"Cluster {cluster_id} would be nested more than two levels deep")


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def _rename(h: ClusterHierarchy, cluster: Cluster, data: dict[str, Any]) -> None:
    name = str(data.get("new_name", "")).strip()
    if not name:
        raise ClusterAdjustmentError("A new cluster name is required")
    cluster.name = name


def _add_thought(h: ClusterHierarchy, cluster: Cluster, data: dict[str, Any]) -> None:
    thought_id = data["thought_id"]
    if thought_id not in cluster.thought_ids:
        cluster.thought_ids.append(thought_id)


def _remove_thought(h: ClusterHierarchy, cluster: Cluster, data: dict[str, Any]) -> None:
    thought_id = data["thought_id"]
    cluster.thought_ids = [t for t in cluster.thought_ids if t != thought_id]
    for child in h.children(cluster.id):
        child.thought_ids = [t for t in child.thought_ids if t != thought_id]


def _merge(h: ClusterHierarchy, target: Cluster, data: dict[str, Any]) -> None:
    for source_id in data.get("source_cluster_ids", []):
        if source_id == target.id:
            raise ClusterAdjustmentError("Cannot merge a cluster into itself")
        source = _require(h, source_id)
        target.thought_ids = _unique(target.thought_ids + source.thought_ids)
        for child in h.children(source_id):
            if child.id == target.id:
                child.parent_id = source.parent_id
            else:
                child.parent_id = target.id
        del h.all_clusters[source_id]


def _split(h: ClusterHierarchy, original: Cluster, data: dict[str, Any]) -> None:
    moved = _unique(data.get("thought_ids", []))
    missing = [t for t in moved if t not in original.thought_ids]
    if not moved or missing:
        raise ClusterAdjustmentError(f"Split thoughts must belong to cluster {original.id}")
    original.thought_ids = [t for t in original.thought_ids if t not in moved]
    new = Cluster(
        id=_new_cluster_id(),
        name=data.get("name") or f"{original.name} (split)",
        thought_ids=moved,
        created_at=datetime.now(),
        parent_id=original.parent_id,
        is_user_modified=True,
    )
    h.all_clusters[new.id] = new


def _create_child(h: ClusterHierarchy, parent: Cluster, data: dict[str, Any]) -> None:
    thought_ids = _unique(data.get("thought_ids", []))
    if any(t not in parent.thought_ids for t in thought_ids):
        raise ClusterAdjustmentError(f"Child thoughts must belong to cluster {parent.id}")
    child = Cluster(
        id=_new_cluster_id(),
        name=data.get("name") or "Untitled",
        thought_ids=thought_ids,
        created_at=datetime.now(),
        parent_id=parent.id,
        is_user_modified=True,
    )
    h.all_clusters[child.id] = child


def _move_to_parent(h: ClusterHierarchy, cluster: Cluster, data: dict[str, Any]) -> None:
    parent_id = data.get("parent_id")
    if parent_id is not None:
        if parent_id == cluster.id:
            raise ClusterAdjustmentError("A cluster cannot be its own parent")
        _require(h, parent_id)
    cluster.parent_id = parent_id


_HANDLERS = {
    AdjustmentType.RENAME_CLUSTER: _rename,
    AdjustmentType.ADD_THOUGHT: _add_thought,
    AdjustmentType.REMOVE_THOUGHT: _remove_thought,
    AdjustmentType.MERGE_CLUSTERS: _merge,
    AdjustmentType.SPLIT_CLUSTER: _split,
    AdjustmentType.CREATE_CHILD_CLUSTER: _create_child,
    AdjustmentType.MOVE_TO_PARENT: _move_to_parent,
}


def apply_adjustment(hierarchy: ClusterHierarchy, adjustment: ClusterAdjustment) -> ClusterHierarchy:
    """Return a new hierarchy with ``adjustment`` applied.

    Raises:
        ClusterAdjustmentError: unknown clusters, bad data, or a result that
            is not a tree of at most two levels.
    """
    updated = copy.deepcopy(hierarchy)
    cluster = _require(updated, adjustment.cluster_id)
    try:
        _HANDLERS[adjustment.type](updated, cluster, adjustment.data)
    except KeyError as e:
        raise ClusterAdjustmentError(f"Missing adjustment data: {e}") from e
    cluster.is_user_modified = True
    _check_tree(updated)
    logger.debug(f"Applied {adjustment.type.value} to cluster {adjustment.cluster_id}")
    return updated
