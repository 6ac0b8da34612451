"""
Workflow Runtime - executor plus persistence.

The executor is a pure function of (graph, targets, dispatcher). The runtime
adds who ran it and where the graph came from: it loads saved graphs, runs
them, writes a ``RunRecord`` per run and serves the history back.
"""

import logging
from pathlib import Path

from mediaflow.config import get_storage_path
from mediaflow.graph.edge import EdgeLike, NodeLike, WorkflowGraph
from mediaflow.graph.executor import WorkflowExecutor, apply_outputs
from mediaflow.schemas.execution import ExecutionType, WorkflowExecutionResult
from mediaflow.schemas.workflow import RunRecord, SavedWorkflow
from mediaflow.storage.run_store import RunStore
from mediaflow.storage.workflow_store import WorkflowStore

logger = logging.getLogger(__name__)


class WorkflowRuntime:
    """
    Runs workflows on behalf of a user and keeps their history.

    Example:
        runtime = WorkflowRuntime.from_storage_path(tmp_path)
        saved = await runtime.save_workflow("user-1", nodes, edges, name="Kit")
        result = await runtime.execute("user-1", workflow_id=saved.id)
        history = await runtime.history("user-1")
    """

    def __init__(
        self,
        executor: WorkflowExecutor | None = None,
        run_store: RunStore | None = None,
        workflow_store: WorkflowStore | None = None,
    ):
        storage_path = None
        if run_store is None or workflow_store is None:
            storage_path = get_storage_path()
        self.executor = executor or WorkflowExecutor()
        self.run_store = run_store or RunStore(storage_path)
        self.workflow_store = workflow_store or WorkflowStore(storage_path)

    @classmethod
    def from_storage_path(
        cls, storage_path: str | Path, executor: WorkflowExecutor | None = None
    ) -> "WorkflowRuntime":
        return cls(
            executor=executor,
            run_store=RunStore(storage_path),
            workflow_store=WorkflowStore(storage_path),
        )

    async def execute(
        self,
        user_id: str,
        node_ids: list[str] | None = None,
        mode: ExecutionType | str = ExecutionType.FULL,
        nodes: list[NodeLike] | None = None,
        edges: list[EdgeLike] | None = None,
        workflow_id: str | None = None,
        save: bool = True,
    ) -> WorkflowExecutionResult:
        """
        Execute a workflow and record the run.

        With no ``nodes`` the saved workflow ``workflow_id`` is loaded. With no
        ``node_ids`` every node in the graph runs. When a saved workflow runs,
        the successful outputs are written back into it so later partial
        runs can read them as cached values.

        Raises:
            ValueError: If neither a graph nor a workflow_id is given
            WorkflowNotFoundError: If the saved workflow is not the user's
            StructuralError: Cycles abort before anything runs; nothing is saved
        """
        saved: SavedWorkflow | None = None
        if nodes is None:
            if workflow_id is None:
                raise ValueError("Either nodes/edges or a workflow_id is required")
            saved = await self.workflow_store.load(workflow_id, user_id)
            nodes, edges = saved.nodes, saved.edges

        graph = WorkflowGraph.snapshot(nodes, edges or [])
        if node_ids is None:
            node_ids = [node.id for node in graph.nodes]

        result = await self.executor.execute(graph.nodes, graph.edges, node_ids, mode)

        if save:
            record = RunRecord(
                user_id=user_id,
                workflow_id=workflow_id,
                node_types={
                    node_id: graph.get_node(node_id).node_type or ""
                    for node_id in result.node_ids
                    if graph.has_node(node_id)
                },
                result=result,
            )
            await self.run_store.save(record)
            logger.info(f"💾 Recorded run {result.run_id} for user {user_id}")

            if saved is not None and result.outputs_by_node():
                await self.workflow_store.save(
                    user_id,
                    apply_outputs(saved.nodes, result),
                    saved.edges,
                    name=saved.name,
                    description=saved.description,
                    workflow_id=saved.id,
                )

        return result

    async def save_workflow(
        self,
        user_id: str,
        nodes: list[NodeLike],
        edges: list[EdgeLike],
        name: str | None = None,
        description: str | None = None,
        workflow_id: str | None = None,
    ) -> SavedWorkflow:
        return await self.workflow_store.save(
            user_id, nodes, edges, name=name, description=description, workflow_id=workflow_id
        )

    async def load_workflow(self, workflow_id: str, user_id: str) -> SavedWorkflow:
        return await self.workflow_store.load(workflow_id, user_id)

    async def list_workflows(self, user_id: str) -> list[SavedWorkflow]:
        return await self.workflow_store.list(user_id)

    async def history(
        self, user_id: str, workflow_id: str | None = None, limit: int = 50
    ) -> list[RunRecord]:
        """A user's runs, newest first."""
        return await self.run_store.list_runs(user_id, workflow_id=workflow_id, limit=limit)

    async def get_run(self, run_id: str, user_id: str) -> RunRecord | None:
        return await self.run_store.load(run_id, user_id=user_id)
