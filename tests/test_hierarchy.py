"""Tests for cluster hierarchies, relationships and manual adjustments."""

from datetime import datetime

import numpy as np
import pytest

from mindvault.clustering.hierarchy import apply_adjustment, build_hierarchy
from mindvault.clustering.relationships import extract_relationships, lookup, relevance_map
from mindvault.errors import ClusterAdjustmentError
from mindvault.models import (
    AdjustmentType,
    Category,
    Cluster,
    ClusterAdjustment,
    ClusterHierarchy,
    Thought,
    ThoughtRelevance,
)

NOW = datetime(2024, 3, 15, 12, 0)


def _hierarchy():
    return build_hierarchy(
        [
            Cluster(id="A", name="Work", thought_ids=["t1", "t2", "t3"], created_at=NOW),
            Cluster(id="B", name="Coffee", thought_ids=["t4", "t5"], created_at=NOW),
        ],
        [ThoughtRelevance("t1", "t2", 0.7)],
    )


def _adjust(h, kind, cluster_id, **data):
    return apply_adjustment(h, ClusterAdjustment(cluster_id=cluster_id, type=kind, data=data))


def test_build_hierarchy():
    h = _hierarchy()
    assert [c.id for c in h.root_clusters] == ["A", "B"]
    assert h.relevance("t2", "t1") == 0.7


def test_build_hierarchy_drops_unknown_parent():
    h = build_hierarchy([Cluster(id="A", name="x", thought_ids=["t1"], parent_id="missing")])
    assert h.get("A").parent_id is None


def test_unscored_pair_relevance_is_zero():
    h = _hierarchy()
    assert h.relevance("t1", "t5") == 0.0
    assert h.relevance("t1", "t1") == 0.0
    assert ClusterHierarchy().relevance("x", "y") == 0.0


def test_ancestors_detects_cycles():
    h = ClusterHierarchy(all_clusters={
        "A": Cluster(id="A", name="a", thought_ids=[], parent_id="B"),
        "B": Cluster(id="B", name="b", thought_ids=[], parent_id="A"),
    })
    with pytest.raises(ValueError):
        h.validate()


def test_hierarchy_round_trip():
    h = _hierarchy()
    assert ClusterHierarchy.from_dict(h.to_dict()) == h


def test_rename_leaves_original_untouched():
    h = _hierarchy()
    updated = _adjust(h, AdjustmentType.RENAME_CLUSTER, "A", new_name="Day job")
    assert updated.get("A").name == "Day job"
    assert updated.get("A").is_user_modified
    assert h.get("A").name == "Work"
    assert not h.get("A").is_user_modified


def test_rename_requires_name():
    with pytest.raises(ClusterAdjustmentError):
        _adjust(_hierarchy(), AdjustmentType.RENAME_CLUSTER, "A", new_name="  ")


def test_unknown_cluster():
    with pytest.raises(ClusterAdjustmentError):
        _adjust(_hierarchy(), AdjustmentType.RENAME_CLUSTER, "nope", new_name="x")


def test_missing_data():
    with pytest.raises(ClusterAdjustmentError):
        _adjust(_hierarchy(), AdjustmentType.ADD_THOUGHT, "A")


def test_add_and_remove_thought():
    h = _adjust(_hierarchy(), AdjustmentType.ADD_THOUGHT, "A", thought_id="t4")
    assert h.get("A").thought_ids == ["t1", "t2", "t3", "t4"]
    h = _adjust(h, AdjustmentType.ADD_THOUGHT, "A", thought_id="t4")
    assert h.get("A").thought_ids.count("t4") == 1

    h = _adjust(h, AdjustmentType.CREATE_CHILD_CLUSTER, "A", thought_ids=["t1", "t2"], name="Deadlines")
    h = _adjust(h, AdjustmentType.REMOVE_THOUGHT, "A", thought_id="t1")
    assert "t1" not in h.get("A").thought_ids
    assert h.children("A")[0].thought_ids == ["t2"]


def test_merge_clusters():
    h = _adjust(_hierarchy(), AdjustmentType.MERGE_CLUSTERS, "A", source_cluster_ids=["B"])
    assert h.get("B") is None
    assert h.get("A").thought_ids == ["t1", "t2", "t3", "t4", "t5"]


def test_merge_reparents_children():
    h = _adjust(_hierarchy(), AdjustmentType.CREATE_CHILD_CLUSTER, "B", thought_ids=["t4"], name="Beans")
    child = h.children("B")[0]
    h = _adjust(h, AdjustmentType.MERGE_CLUSTERS, "A", source_cluster_ids=["B"])
    assert h.get(child.id).parent_id == "A"


def test_merge_into_itself():
    with pytest.raises(ClusterAdjustmentError):
        _adjust(_hierarchy(), AdjustmentType.MERGE_CLUSTERS, "A", source_cluster_ids=["A"])


def test_split_cluster():
    h = _adjust(_hierarchy(), AdjustmentType.SPLIT_CLUSTER, "A", thought_ids=["t3"], name="Side project")
    assert h.get("A").thought_ids == ["t1", "t2"]
    new = [c for c in h.root_clusters if c.name == "Side project"][0]
    assert new.thought_ids == ["t3"]
    assert new.parent_id is None
    assert new.is_user_modified


def test_split_rejects_foreign_thoughts():
    with pytest.raises(ClusterAdjustmentError):
        _adjust(_hierarchy(), AdjustmentType.SPLIT_CLUSTER, "A", thought_ids=["t4"])


def test_create_child_cluster():
    h = _adjust(_hierarchy(), AdjustmentType.CREATE_CHILD_CLUSTER, "A", thought_ids=["t1"], name="Urgent")
    child = h.children("A")[0]
    assert child.parent_id == "A"
    assert h.depth(child.id) == 1
    with pytest.raises(ClusterAdjustmentError):
        _adjust(h, AdjustmentType.CREATE_CHILD_CLUSTER, "A", thought_ids=["t5"])


def test_move_to_parent_keeps_two_levels():
    h = _adjust(_hierarchy(), AdjustmentType.MOVE_TO_PARENT, "B", parent_id="A")
    assert h.get("B").parent_id == "A"
    with pytest.raises(ClusterAdjustmentError):
        _adjust(h, AdjustmentType.CREATE_CHILD_CLUSTER, "B", thought_ids=["t4"])
    h = _adjust(h, AdjustmentType.MOVE_TO_PARENT, "B", parent_id=None)
    assert h.get("B").parent_id is None


def test_move_to_parent_rejects_cycles():
    h = _adjust(_hierarchy(), AdjustmentType.MOVE_TO_PARENT, "A", parent_id="B")
    with pytest.raises(ClusterAdjustmentError):
        _adjust(h, AdjustmentType.MOVE_TO_PARENT, "B", parent_id="A")
    with pytest.raises(ClusterAdjustmentError):
        _adjust(h, AdjustmentType.MOVE_TO_PARENT, "A", parent_id="A")


def test_extract_relationships():
    thoughts = [
        Thought(id=tid, content=tid, category=Category.IDEA, created_at=NOW, updated_at=NOW)
        for tid in ("a", "b", "c")
    ]
    matrix = np.array([
        [1.0, 0.5, 0.1],
        [0.5, 1.0, 0.3],
        [0.1, 0.3, 1.0],
    ])
    rels = extract_relationships(thoughts, matrix, 0.2)
    assert [(r.thought_id1, r.thought_id2, r.score) for r in rels] == [("a", "b", 0.5), ("b", "c", 0.3)]

    scores = relevance_map(rels)
    assert scores == {"a:b": 0.5, "b:c": 0.3}
    assert lookup(scores, "c", "b") == 0.3
    assert lookup(scores, "a", "c") == 0.0
