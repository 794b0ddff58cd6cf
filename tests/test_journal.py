"""Tests for the journal service."""

import copy
import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from mindvault.config import DEFAULT_CONFIG
from mindvault.enrichment.assistant import ClaudeAssistant
from mindvault.errors import ClusterAdjustmentError, ThoughtValidationError
from mindvault.journal import Journal
from mindvault.models import AdjustmentType, Category
from mindvault.storage import JsonThoughtStore
from tests.fakes import FakeAnthropic

NOW = datetime(2024, 3, 15, 12, 0)


def _journal(tmpdir, responses=None, **overrides):
    config = copy.deepcopy(DEFAULT_CONFIG)
    config.update(overrides)
    assistant = None
    if responses is not None:
        assistant = ClaudeAssistant(config, client=FakeAnthropic(responses))
    return Journal(JsonThoughtStore(Path(tmpdir) / "thoughts.json"), config, assistant=assistant)


def test_add_thought_categorizes():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        thought = journal.add_thought("  I need to finish the report by Friday  ", now=NOW)
        assert thought.category is Category.TASK
        assert thought.content == "I need to finish the report by Friday"
        assert journal.get_thought(thought.id) == thought


def test_add_thought_validation():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        with pytest.raises(ThoughtValidationError):
            journal.add_thought("   ")
        with pytest.raises(ThoughtValidationError):
            journal.add_thought("x" * 10_001)
        assert journal.list_thoughts() == []


def test_ai_categorization_and_fallback():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir, responses=["memory", "not-a-category"])
        assert journal.add_thought("I need to finish the report", now=NOW).category is Category.MEMORY
        assert journal.add_thought("I need to finish the report", now=NOW).category is Category.TASK
        # client exhausted: the fake raises an API error
        assert journal.add_thought("I wonder if this will work?", now=NOW).category is Category.QUESTION


def test_ai_mode_without_key_falls_back():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir, ai_mode=True)
        assert not journal.ai_enabled
        assert journal.add_thought("I wonder if this will work?").category is Category.QUESTION


def test_update_thought_keeps_category():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        thought = journal.add_thought("I need to finish the report by Friday", now=NOW)
        later = NOW + timedelta(hours=1)
        updated = journal.update_thought(thought.id, "I wonder if this will work?", now=later)
        assert updated.category is Category.TASK
        assert updated.updated_at == later
        assert journal.get_thought(thought.id).content == "I wonder if this will work?"
        with pytest.raises(KeyError):
            journal.update_thought("missing", "text")
        with pytest.raises(ThoughtValidationError):
            journal.update_thought(thought.id, "")


def test_refresh_clusters_local():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        a = journal.add_thought("Stressed about the client deadline", now=NOW)
        b = journal.add_thought("The project deadline is making me anxious", now=NOW)
        hierarchy = journal.refresh_clusters(now=NOW)

        assert journal.last_strategy == "content"
        assert len(hierarchy.all_clusters) == 1
        cluster = hierarchy.root_clusters[0]
        assert sorted(cluster.thought_ids) == sorted([a.id, b.id])
        assert journal.relevance(a.id, b.id) == pytest.approx(0.32)
        assert journal.relevance(a.id, "unknown") == 0.0
        assert journal.clusters() == hierarchy
        assert {t.id for t in journal.thoughts_in_cluster(cluster.id)} == {a.id, b.id}


def test_refresh_clusters_too_few_thoughts():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        journal.add_thought("Stressed about the client deadline", now=NOW)
        assert journal.refresh_clusters(now=NOW).all_clusters == {}


def test_refresh_clusters_ai():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir, responses=["task", "task"])
        a = journal.add_thought("Stressed about the client deadline", now=NOW)
        b = journal.add_thought("The project deadline is making me anxious", now=NOW)
        relevance = [{"thoughtId1": a.id, "thoughtId2": b.id, "score": 0.9}]
        clusters = {"allClusters": {"w": {"id": "w", "name": "Work stress", "thoughtIds": [a.id, b.id]}}}
        journal.assistant.client.messages.responses = [json.dumps(relevance), json.dumps(clusters)]

        hierarchy = journal.refresh_clusters(now=NOW)
        assert journal.last_strategy == "ai"
        assert hierarchy.get("w").name == "Work stress"
        assert journal.relevance(b.id, a.id) == 0.9


def test_refresh_clusters_ai_failure_uses_local():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir, responses=["feeling", "feeling"])
        journal.add_thought("Stressed about the client deadline", now=NOW)
        journal.add_thought("The project deadline is making me anxious", now=NOW)
        hierarchy = journal.refresh_clusters(now=NOW)
        assert journal.last_strategy == "content"
        assert len(hierarchy.all_clusters) == 1


def test_delete_thought_cleans_clusters():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        a = journal.add_thought("Stressed about the client deadline", now=NOW)
        b = journal.add_thought("The project deadline is making me anxious", now=NOW)
        journal.refresh_clusters(now=NOW)

        journal.delete_thought(a.id)
        hierarchy = journal.clusters()
        assert [c.thought_ids for c in hierarchy.all_clusters.values()] == [[b.id]]
        assert hierarchy.relevance_map == {}
        with pytest.raises(KeyError):
            journal.delete_thought(a.id)


def test_adjust_cluster_logs_adjustment():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        journal.add_thought("Stressed about the client deadline", now=NOW)
        journal.add_thought("The project deadline is making me anxious", now=NOW)
        cluster_id = journal.refresh_clusters(now=NOW).root_clusters[0].id

        hierarchy = journal.adjust_cluster("rename_cluster", cluster_id, {"new_name": "Deadlines"})
        assert hierarchy.get(cluster_id).name == "Deadlines"
        assert journal.clusters().get(cluster_id).is_user_modified
        assert [a.type for a in journal.store.load_adjustments()] == [AdjustmentType.RENAME_CLUSTER]

        with pytest.raises(ClusterAdjustmentError):
            journal.adjust_cluster(AdjustmentType.ADD_THOUGHT, cluster_id, {"thought_id": "ghost"})
        with pytest.raises(ValueError):
            journal.adjust_cluster("explode", cluster_id)
        assert len(journal.store.load_adjustments()) == 1


def test_weekly_recap_local():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        assert journal.weekly_recap(now=NOW) is None
        journal.add_thought("I need to finish the report by Friday", now=NOW - timedelta(days=1))
        recap = journal.weekly_recap(now=NOW)
        assert recap.thought_count == 1
        assert recap.top_themes == ["task"]


def test_weekly_recap_ai():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir, responses=["task", "question"])
        first = journal.add_thought("I need to finish the report by Friday", now=NOW - timedelta(days=2))
        second = journal.add_thought("I wonder if this will work?", now=NOW - timedelta(days=1))
        journal.assistant.client.messages.responses = ['["Deadlines", "Doubt", "Planning"]', first.id]

        recap = journal.weekly_recap(now=NOW)
        assert recap.top_themes == ["Deadlines", "Doubt", "Planning"]
        assert recap.suggested_revisit.id == first.id
        assert recap.thought_count == 2
        # newest first from the store, so the local choice would have been the second thought
        assert journal.list_thoughts()[0].id == second.id


def test_weekly_recap_keeps_category_themes_when_ai_returns_too_few():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir, responses=["task"])
        journal.add_thought("I need to finish the report by Friday", now=NOW - timedelta(days=1))
        journal.assistant.client.messages.responses = ['["Deadlines"]', "unknown-id"]

        recap = journal.weekly_recap(now=NOW)
        assert recap.top_themes == ["task"]


def test_weekly_recap_mixes_naive_and_aware_timestamps():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        journal.add_thought("I need to finish the report by Friday", now=datetime.now(timezone.utc) - timedelta(hours=1))
        journal.add_thought("I wonder if this will work?")

        recap = journal.weekly_recap()
        assert recap.thought_count == 2


def test_search_and_related():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        coffee = journal.add_thought("Coffee tastes best in the morning", now=NOW)
        morning = journal.add_thought("Morning coffee tastes wonderful", now=NOW)
        journal.add_thought("Finish the quarterly report", now=NOW)
        journal.add_thought("Walk the dog after dinner", now=NOW)

        assert journal.search("quarterly")[0].content == "Finish the quarterly report"
        assert [t.id for t in journal.related(coffee.id)] == [morning.id]
        with pytest.raises(KeyError):
            journal.related("missing")


def test_list_filter_and_reset():
    with tempfile.TemporaryDirectory() as tmpdir:
        journal = _journal(tmpdir)
        journal.add_thought("I need to finish the report by Friday", now=NOW)
        journal.add_thought("I wonder if this will work?", now=NOW)
        assert [t.category for t in journal.list_thoughts(Category.QUESTION)] == [Category.QUESTION]
        journal.reset()
        assert journal.list_thoughts() == []
