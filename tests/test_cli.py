"""Tests for the mediaflow command-line interface."""

import json
from pathlib import Path

import pytest

from mediaflow import cli
from mediaflow.graph.dispatcher import NodeDispatcher
from mediaflow.llm.mock import MockLLMProvider


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path: Path, monkeypatch):
    config_path = tmp_path / "configuration.json"
    config_path.write_text(json.dumps({"storage_path": str(tmp_path / "storage")}))
    monkeypatch.setenv("MEDIAFLOW_CONFIG", str(config_path))
    # Keep pytest's own log capture in place
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)


@pytest.fixture(autouse=True)
def offline_dispatcher(monkeypatch):
    """Route the CLI's default dispatcher through the mock LLM."""
    original = NodeDispatcher.default.__func__

    def default(cls, **kwargs):
        kwargs.setdefault("llm", MockLLMProvider())
        return original(cls, **kwargs)

    monkeypatch.setattr(NodeDispatcher, "default", classmethod(default))


def write_workflow(tmp_path: Path, nodes, edges=()) -> str:
    path = tmp_path / "workflow.json"
    path.write_text(json.dumps({"nodes": list(nodes), "edges": list(edges)}))
    return str(path)


TEXT_TO_LLM = (
    [
        {"id": "text-1", "type": "text", "data": {"type": "text", "text": "hello"}},
        {"id": "llm-1", "type": "llm", "data": {"type": "llm"}},
    ],
    [{"id": "e1", "source": "text-1", "target": "llm-1", "targetHandle": "userMessage"}],
)


def test_run_prints_result_and_succeeds(tmp_path, capsys):
    path = write_workflow(tmp_path, *TEXT_TO_LLM)

    exit_code = cli.main(["run", path])

    result = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert result["status"] == "success"
    assert [r["node_id"] for r in result["node_results"]] == ["text-1", "llm-1"]


def test_run_selected_nodes_and_history(tmp_path, capsys):
    path = write_workflow(tmp_path, *TEXT_TO_LLM)

    assert cli.main(["run", path, "--node", "text-1", "--mode", "single", "--user", "u1"]) == 0
    run = json.loads(capsys.readouterr().out)

    assert cli.main(["history", "--user", "u1"]) == 0
    history = json.loads(capsys.readouterr().out)

    assert run["type"] == "single"
    assert [h["run_id"] for h in history] == [run["run_id"]]


def test_run_with_failures_exits_nonzero(tmp_path, capsys):
    path = write_workflow(
        tmp_path, [{"id": "x", "data": {"type": "cropImage", "image_url": "ftp://nope"}}]
    )

    assert cli.main(["run", path, "--no-save"]) == 1
    assert json.loads(capsys.readouterr().out)["status"] == "failed"


def test_run_with_cycle_exits_nonzero(tmp_path, capsys):
    nodes, edges = TEXT_TO_LLM
    path = write_workflow(
        tmp_path, nodes, edges + [{"id": "e2", "source": "llm-1", "target": "text-1"}]
    )

    assert cli.main(["run", path]) == 1
    assert "cycles" in capsys.readouterr().err


def test_validate_reports_errors(tmp_path, capsys):
    path = write_workflow(tmp_path, [{"id": "llm-1", "data": {"type": "llm"}}])

    assert cli.main(["validate", path]) == 1
    report = json.loads(capsys.readouterr().out)
    assert report["valid"] is False
    assert any("userMessage" in e for e in report["errors"])


def test_sample_is_valid(tmp_path, capsys):
    assert cli.main(["sample"]) == 0
    sample = capsys.readouterr().out
    path = tmp_path / "sample.json"
    path.write_text(sample)

    assert cli.main(["validate", str(path)]) == 0


def test_missing_file(tmp_path, capsys):
    assert cli.main(["run", str(tmp_path / "nope.json")]) == 1
    assert "Error" in capsys.readouterr().err


@pytest.mark.parametrize("command", ["run", "validate"])
def test_malformed_node_reports_error_instead_of_traceback(tmp_path, capsys, command):
    path = write_workflow(tmp_path, [{"type": "text", "data": {"type": "text", "text": "hi"}}])

    assert cli.main([command, path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error:")
    assert "id" in captured.err
