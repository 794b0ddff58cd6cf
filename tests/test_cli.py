"""Tests for the command line interface."""

import json
import tempfile
from pathlib import Path

from click.testing import CliRunner

from mindvault.cli import cli


def _run(tmpdir, *args, **kwargs):
    config = Path(tmpdir) / "config.yaml"
    if not config.exists():
        config.write_text(f"store_path: {Path(tmpdir) / 'thoughts.json'}\n")
    return CliRunner().invoke(cli, ["--config", str(config), "--no-ai", *args], **kwargs)


def _thought_ids(tmpdir):
    data = json.loads((Path(tmpdir) / "thoughts.json").read_text())
    return [t["id"] for t in data["thoughts"]]


def test_init_creates_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = CliRunner().invoke(cli, ["init", "--path", tmpdir])
        assert result.exit_code == 0
        assert (Path(tmpdir) / "config.yaml").exists()
        assert "thoughts.json" in (Path(tmpdir) / "config.yaml").read_text()


def test_add_and_list():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "add", "I need to finish the report by Friday")
        assert result.exit_code == 0
        assert "(task)" in result.output

        result = _run(tmpdir, "list")
        assert result.exit_code == 0
        assert "task" in result.output


def test_add_rejects_empty():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "add", "   ")
        assert result.exit_code == 1
        assert "cannot be empty" in result.output


def test_edit_and_delete():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "I need to finish the report by Friday")
        thought_id = _thought_ids(tmpdir)[0]

        assert _run(tmpdir, "edit", thought_id, "Report is done").exit_code == 0
        assert _run(tmpdir, "delete", thought_id).exit_code == 0
        assert _thought_ids(tmpdir) == []

        result = _run(tmpdir, "delete", thought_id)
        assert result.exit_code == 1
        assert "Not found" in result.output


def test_analyze():
    result = CliRunner().invoke(cli, ["--no-ai", "analyze", "This is amazing and wonderful, I love it!"])
    assert result.exit_code == 0
    assert "positive" in result.output
    assert "excitement" in result.output


def test_analyze_rejects_blank():
    result = CliRunner().invoke(cli, ["--no-ai", "analyze", "   "])
    assert result.exit_code == 1
    assert "cannot be empty" in result.output
    assert "Category" not in result.output


def test_search_and_cluster():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "Stressed about the client deadline")
        _run(tmpdir, "add", "The project deadline is making me anxious")
        _run(tmpdir, "add", "Walk the dog after dinner")

        result = _run(tmpdir, "search", "client")
        assert result.exit_code == 0
        assert "Stressed" in result.output

        result = _run(tmpdir, "cluster")
        assert result.exit_code == 0
        assert "Found 1 cluster(s)" in result.output

        result = _run(tmpdir, "cluster", "--show")
        assert result.exit_code == 0
        assert "Clusters" in result.output


def test_adjust_unknown_cluster():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "adjust", "rename_cluster", "nope", "--name", "Work")
        assert result.exit_code == 1
        assert "Unknown cluster" in result.output


def test_recap_and_stats():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "recap")
        assert "No thoughts" in result.output

        _run(tmpdir, "add", "I need to finish the report by Friday")
        result = _run(tmpdir, "recap")
        assert result.exit_code == 0
        assert "Thoughts: 1" in result.output

        result = _run(tmpdir, "stats", "--range", "all")
        assert result.exit_code == 0
        assert "Total thoughts: 1" in result.output


def test_export_import_reset():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "add", "I need to finish the report by Friday")
        export_path = Path(tmpdir) / "export.json"
        assert _run(tmpdir, "export", str(export_path)).exit_code == 0

        result = _run(tmpdir, "reset", "--yes")
        assert result.exit_code == 0
        assert _thought_ids(tmpdir) == []

        result = _run(tmpdir, "import", str(export_path))
        assert result.exit_code == 0
        assert "Imported 1 thought(s)" in result.output
        assert len(_thought_ids(tmpdir)) == 1


def test_corrupt_store_reported():
    with tempfile.TemporaryDirectory() as tmpdir:
        _run(tmpdir, "list")
        (Path(tmpdir) / "thoughts.json").write_text("{broken")
        result = _run(tmpdir, "list")
        assert result.exit_code == 1
        assert "Corrupt thought store" in result.output


def test_unexpected_errors_are_not_reported_as_user_errors(monkeypatch):
    from mindvault.journal import Journal

    def broken(self, category=None):
        raise ValueError("bug in listing")

    monkeypatch.setattr(Journal, "list_thoughts", broken)
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _run(tmpdir, "list")
        assert result.exit_code == 1
        assert isinstance(result.exception, ValueError)
        assert "bug in listing" not in result.output
