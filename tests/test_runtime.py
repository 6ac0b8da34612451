"""Tests for WorkflowRuntime: execution plus persisted workflows and history."""

from pathlib import Path

import pytest

from mediaflow.errors import CycleError
from mediaflow.graph.dispatcher import NodeDispatcher
from mediaflow.graph.executor import WorkflowExecutor
from mediaflow.llm.mock import MockLLMProvider
from mediaflow.runtime import WorkflowRuntime
from mediaflow.schemas.execution import ExecutionType, RunStatus
from mediaflow.storage import WorkflowNotFoundError

NODES = [
    {"id": "text-1", "type": "text", "data": {"type": "text", "text": "hello"}},
    {"id": "llm-1", "type": "llm", "data": {"type": "llm"}},
]
EDGES = [
    {
        "id": "e1",
        "source": "text-1",
        "target": "llm-1",
        "sourceHandle": "output",
        "targetHandle": "userMessage",
    }
]


@pytest.fixture
def llm():
    return MockLLMProvider()


@pytest.fixture
def runtime(tmp_path: Path, llm):
    executor = WorkflowExecutor(dispatcher=NodeDispatcher.default(llm=llm))
    return WorkflowRuntime.from_storage_path(tmp_path, executor=executor)


@pytest.mark.asyncio
async def test_execute_inline_graph_records_history(runtime):
    result = await runtime.execute("alice", nodes=NODES, edges=EDGES)

    assert result.status == RunStatus.SUCCESS
    assert result.node_ids == ["text-1", "llm-1"]

    history = await runtime.history("alice")
    assert [r.run_id for r in history] == [result.run_id]
    assert history[0].node_types == {"text-1": "text", "llm-1": "llm"}
    assert history[0].workflow_id is None
    assert await runtime.history("bob") == []


@pytest.mark.asyncio
async def test_execute_without_save_leaves_no_history(runtime):
    await runtime.execute("alice", nodes=NODES, edges=EDGES, save=False)

    assert await runtime.history("alice") == []


@pytest.mark.asyncio
async def test_saved_workflow_runs_and_caches_outputs(runtime, llm):
    saved = await runtime.save_workflow("alice", NODES, EDGES, name="Greeting")

    result = await runtime.execute("alice", workflow_id=saved.id)

    assert result.status == RunStatus.SUCCESS
    reloaded = await runtime.load_workflow(saved.id, "alice")
    assert reloaded.nodes[1].data["output"] == "echo: hello"

    history = await runtime.history("alice", workflow_id=saved.id)
    assert history[0].workflow_id == saved.id


@pytest.mark.asyncio
async def test_single_node_run_reads_cached_upstream_output(runtime, llm):
    nodes = [
        {"id": "text-1", "type": "text", "data": {"type": "text", "output": "from last run"}},
        NODES[1],
    ]

    result = await runtime.execute(
        "alice", ["llm-1"], ExecutionType.SINGLE, nodes=nodes, edges=EDGES
    )

    assert [r.node_id for r in result.node_results] == ["llm-1"]
    assert llm.calls[0]["prompt"] == "from last run"


@pytest.mark.asyncio
async def test_saved_workflow_of_another_user_is_not_found(runtime):
    saved = await runtime.save_workflow("alice", NODES, EDGES)

    with pytest.raises(WorkflowNotFoundError):
        await runtime.execute("mallory", workflow_id=saved.id)


@pytest.mark.asyncio
async def test_structural_errors_are_not_recorded(runtime):
    edges = EDGES + [{"id": "e2", "source": "llm-1", "target": "text-1"}]

    with pytest.raises(CycleError):
        await runtime.execute("alice", nodes=NODES, edges=edges)

    assert await runtime.history("alice") == []


@pytest.mark.asyncio
async def test_graph_or_workflow_id_is_required(runtime):
    with pytest.raises(ValueError):
        await runtime.execute("alice")


@pytest.mark.asyncio
async def test_failed_runs_are_recorded_too(runtime, llm):
    llm.error = RuntimeError("backend down")

    result = await runtime.execute("alice", nodes=NODES, edges=EDGES)

    assert result.status == RunStatus.PARTIAL
    history = await runtime.history("alice")
    assert history[0].result.failed_node_ids == ["llm-1"]
