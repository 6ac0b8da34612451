"""
Workflow Executor - runs a requested subset of a workflow graph.

The executor:
1. Snapshots the graph so caller edits cannot race the run
2. Computes a topological order of the requested nodes (cycles abort the run)
3. Runs each node once all of its intra-run dependencies are terminal
4. Resolves inputs, dispatches, and records a result per node
5. Aggregates the node results into the run's status
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from mediaflow.errors import MissingNodeError
from mediaflow.graph.dispatcher import NodeDispatcher
from mediaflow.graph.edge import EdgeLike, NodeLike, WorkflowGraph
from mediaflow.graph.inputs import InputResolver
from mediaflow.graph.node import NodeRunState, WorkflowNode
from mediaflow.graph.resolver import DependencyResolver
from mediaflow.observability import clear_trace_context, get_trace_context, set_trace_context
from mediaflow.schemas.execution import (
    ExecutionType,
    NodeExecutionResult,
    NodeStatus,
    WorkflowExecutionResult,
    determine_status,
    generate_run_id,
)


@dataclass
class ExecutorConfig:
    """Policies for a run."""

    # Run nodes as soon as their dependencies finish instead of strictly
    # one at a time in topological order
    parallel: bool = False
    max_concurrency: int = 4

    # Requested node IDs absent from the graph: "skip" (log, list in
    # skipped_node_ids) or "error" (raise MissingNodeError before running)
    missing_node_policy: str = "skip"

    # A dependency failed: "proceed" (run anyway; the edge contributes no
    # value) or "block" (record the node as failed without dispatching)
    failed_dependency_policy: str = "proceed"

    def __post_init__(self) -> None:
        if self.missing_node_policy not in ("skip", "error"):
            raise ValueError(f"Invalid missing_node_policy: {self.missing_node_policy!r}")
        if self.failed_dependency_policy not in ("proceed", "block"):
            raise ValueError(
                f"Invalid failed_dependency_policy: {self.failed_dependency_policy!r}"
            )
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")


StateListener = Callable[[str, NodeRunState], None]


class _RunState:
    """Mutable bookkeeping for one run; shared by the node tasks."""

    def __init__(self, order: Sequence[str], listener: StateListener | None = None):
        self.listener = listener
        self.states: dict[str, NodeRunState] = {}
        for node_id in order:
            self.transition(node_id, NodeRunState.PENDING)
        self.done = {node_id: asyncio.Event() for node_id in order}
        self.outputs: dict[str, dict[str, Any]] = {}
        self.failed: set[str] = set()
        self.results: list[NodeExecutionResult] = []
        self.lock = asyncio.Lock()

    def transition(self, node_id: str, state: NodeRunState) -> None:
        self.states[node_id] = state
        if self.listener is not None:
            self.listener(node_id, state)

    async def snapshot_outputs(self) -> tuple[dict[str, dict[str, Any]], set[str]]:
        async with self.lock:
            return dict(self.outputs), set(self.failed)

    async def record(self, result: NodeExecutionResult) -> None:
        async with self.lock:
            self.results.append(result)
            if result.status == NodeStatus.SUCCESS:
                self.outputs[result.node_id] = dict(result.outputs or {})
                self.transition(result.node_id, NodeRunState.SUCCESS)
            else:
                self.failed.add(result.node_id)
                self.transition(result.node_id, NodeRunState.FAILED)


class WorkflowExecutor:
    """
    Executes workflow graphs.

    Example:
        executor = WorkflowExecutor(dispatcher=NodeDispatcher.default())

        result = await executor.execute(
            nodes=[text_node, llm_node],
            edges=[{"id": "e1", "source": "text-1", "target": "llm-1",
                    "targetHandle": "userMessage"}],
            target_node_ids=["text-1", "llm-1"],
            mode="full",
        )

    ``on_state_change(node_id, state)`` is called on every node transition
    (pending, waiting, running, then success or failed), for progress display.
    """

    def __init__(
        self,
        dispatcher: NodeDispatcher | None = None,
        config: ExecutorConfig | None = None,
        on_state_change: StateListener | None = None,
    ):
        self.dispatcher = dispatcher or NodeDispatcher.default()
        self.config = config or ExecutorConfig()
        self.on_state_change = on_state_change
        self.logger = logging.getLogger(__name__)

    async def execute(
        self,
        nodes: Iterable[NodeLike],
        edges: Iterable[EdgeLike],
        target_node_ids: Iterable[str],
        mode: ExecutionType | str = ExecutionType.FULL,
    ) -> WorkflowExecutionResult:
        """
        Run ``target_node_ids`` and return the run's result.

        ``mode`` is carried into the result as metadata only; exactly the
        requested nodes run whatever the label says.

        Raises:
            CycleError: If the requested nodes contain a cycle (nothing runs)
            MissingNodeError: If a requested node is absent and the policy is "error"
            ValueError: If ``mode`` is not full, partial or single
        """
        mode = ExecutionType(mode)
        graph = WorkflowGraph.snapshot(nodes, edges)
        requested = list(dict.fromkeys(target_node_ids))

        missing = [node_id for node_id in requested if not graph.has_node(node_id)]
        if missing:
            if self.config.missing_node_policy == "error":
                raise MissingNodeError(missing)
            self.logger.warning(f"⚠ Skipping requested nodes not in graph: {missing}")

        runnable = [node_id for node_id in requested if node_id not in missing]
        resolver = DependencyResolver(graph.edges)
        order = resolver.topological_order(runnable, transitive=True)

        members = set(order)
        dependencies = {node_id: resolver.dependencies_of(node_id) & members for node_id in order}

        run_id = generate_run_id()
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        state = _RunState(order, self.on_state_change)
        input_resolver = InputResolver(graph)

        previous_context = get_trace_context()
        set_trace_context(run_id=run_id, mode=str(mode))
        try:
            self.logger.info(f"🚀 Starting {mode} run {run_id}: {len(order)} node(s)")
            self.logger.debug(f"   Order: {' → '.join(order)}")

            if self.config.parallel:
                semaphore = asyncio.Semaphore(self.config.max_concurrency)
                await asyncio.gather(
                    *(
                        self._run_node(
                            graph.get_node(node_id),
                            dependencies[node_id],
                            state,
                            input_resolver,
                            semaphore,
                        )
                        for node_id in order
                    )
                )
            else:
                for node_id in order:
                    await self._run_node(
                        graph.get_node(node_id), dependencies[node_id], state, input_resolver
                    )

            duration = _elapsed_ms(start)
            status = determine_status(state.results)
            self.logger.info(
                f"✓ Run {run_id} finished: {status} "
                f"({len(state.results) - len(state.failed)} succeeded, "
                f"{len(state.failed)} failed) in {duration}ms",
                extra={"event": "run_complete", "status": str(status), "duration_ms": duration},
            )
        finally:
            clear_trace_context()
            set_trace_context(**previous_context)

        return WorkflowExecutionResult(
            run_id=run_id,
            type=mode,
            status=status,
            duration=duration,
            node_results=list(state.results),
            node_ids=requested,
            skipped_node_ids=missing,
            started_at=started_at,
        )

    async def _run_node(
        self,
        node: WorkflowNode,
        dependencies: set[str],
        state: _RunState,
        input_resolver: InputResolver,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        """Wait for dependencies, then resolve, dispatch and record ``node``."""
        try:
            state.transition(node.id, NodeRunState.WAITING)
            if dependencies:
                await asyncio.gather(*(state.done[dep].wait() for dep in dependencies))

            set_trace_context(node_id=node.id, node_type=node.node_type)
            prior_outputs, failed = await state.snapshot_outputs()

            failed_dependencies = sorted(dependencies & failed)
            if failed_dependencies and self.config.failed_dependency_policy == "block":
                error = f"Skipped: upstream node(s) failed: {', '.join(failed_dependencies)}"
                self.logger.warning(f"   ✗ {node.id}: {error}")
                await state.record(
                    NodeExecutionResult(node_id=node.id, status=NodeStatus.FAILED, error=error)
                )
                return

            async with semaphore or contextlib.nullcontext():
                state.transition(node.id, NodeRunState.RUNNING)
                self.logger.info(f"▶ {node.id} ({node.node_type})")
                start = time.perf_counter()
                inputs = input_resolver.resolve(node, prior_outputs, failed)
                outcome = await self.dispatcher.execute(node, inputs)
                duration = _elapsed_ms(start)

            if outcome.success:
                # Cache on the snapshot node as well, like the editor does
                node.data["output"] = outcome.outputs["output"]
                self.logger.info(f"   ✓ {node.id} succeeded in {duration}ms")
            else:
                self.logger.info(f"   ✗ {node.id} failed in {duration}ms: {outcome.error}")

            await state.record(
                NodeExecutionResult(
                    node_id=node.id,
                    status=NodeStatus.SUCCESS if outcome.success else NodeStatus.FAILED,
                    inputs=inputs,
                    outputs=outcome.outputs or None,
                    error=outcome.error,
                    duration=duration,
                )
            )
        finally:
            state.done[node.id].set()


def apply_outputs(
    nodes: Iterable[NodeLike], result: WorkflowExecutionResult
) -> list[NodeLike]:
    """
    Write each successful node's ``output`` into the caller's nodes.

    The engine never mutates its inputs; call this afterwards to keep the
    outputs for later partial or single runs that read them from ``data``.
    """
    outputs = result.outputs_by_node()
    nodes = list(nodes)
    for node in nodes:
        node_id = node.id if isinstance(node, WorkflowNode) else node.get("id")
        if node_id not in outputs or "output" not in outputs[node_id]:
            continue
        value = outputs[node_id]["output"]
        if isinstance(node, WorkflowNode):
            node.data["output"] = value
        else:
            node.setdefault("data", {})["output"] = value
    return nodes


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
