"""
Execution Schema - what a workflow run produces.

A run yields one immutable ``NodeExecutionResult`` per executed node, in
completion order, and one ``WorkflowExecutionResult`` summarising the run.
The run's status is derived from the node results and nothing else.
"""

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, computed_field


class ExecutionType(StrEnum):
    """How the requested node set was chosen. Informational only."""

    FULL = "full"  # Every node in the graph
    PARTIAL = "partial"  # A selection
    SINGLE = "single"  # Exactly one node


class NodeStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


class RunStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


class NodeExecutionResult(BaseModel):
    """Outcome of one node in one run. Frozen once created."""

    node_id: str
    status: NodeStatus
    inputs: dict[str, Any] = Field(default_factory=dict)
    outputs: dict[str, Any] | None = None
    error: str | None = None
    duration: int = Field(default=0, description="Elapsed milliseconds")

    model_config = {"frozen": True}

    @property
    def succeeded(self) -> bool:
        return self.status == NodeStatus.SUCCESS

    @property
    def output(self) -> Any:
        """The chaining value (``outputs['output']``), if any."""
        return (self.outputs or {}).get("output")


def determine_status(node_results: Sequence[NodeExecutionResult]) -> RunStatus:
    """
    Aggregate node results into a run status.

    success if nothing failed, failed if nothing succeeded, partial
    otherwise. An empty run counts as success.
    """
    failed = sum(1 for r in node_results if r.status == NodeStatus.FAILED)
    succeeded = sum(1 for r in node_results if r.status == NodeStatus.SUCCESS)

    if failed == 0:
        return RunStatus.SUCCESS
    if succeeded == 0:
        return RunStatus.FAILED
    return RunStatus.PARTIAL


def generate_run_id() -> str:
    """Run IDs sort by creation time: run_YYYYMMDD_HHMMSS_{hex8}."""
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return f"run_{timestamp}_{uuid.uuid4().hex[:8]}"


class WorkflowExecutionResult(BaseModel):
    """
    The complete outcome of one engine invocation.

    ``node_results`` is in completion order, which matches topological
    order for sequential runs but not necessarily for parallel ones.
    """

    run_id: str = Field(default_factory=generate_run_id)
    type: ExecutionType = ExecutionType.FULL
    status: RunStatus
    duration: int = Field(default=0, description="Wall-clock milliseconds")
    node_results: list[NodeExecutionResult] = Field(default_factory=list)
    node_ids: list[str] = Field(default_factory=list, description="Requested target set")
    skipped_node_ids: list[str] = Field(
        default_factory=list, description="Requested IDs that were not in the graph"
    )
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @computed_field
    @property
    def failed_node_ids(self) -> list[str]:
        return [r.node_id for r in self.node_results if r.status == NodeStatus.FAILED]

    def get_node_result(self, node_id: str) -> NodeExecutionResult | None:
        for result in self.node_results:
            if result.node_id == node_id:
                return result
        return None

    def outputs_by_node(self) -> dict[str, dict[str, Any]]:
        """Map of node ID to outputs for every node that succeeded."""
        return {r.node_id: dict(r.outputs or {}) for r in self.node_results if r.succeeded}
