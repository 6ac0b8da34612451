"""Persistence schemas: saved workflows and execution run records."""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from mediaflow.graph.edge import WorkflowEdge
from mediaflow.graph.node import WorkflowNode
from mediaflow.schemas.execution import WorkflowExecutionResult


def _now() -> datetime:
    return datetime.now(UTC)


class SavedWorkflow(BaseModel):
    """A workflow graph saved by a user."""

    id: str = Field(default_factory=lambda: f"wf_{uuid.uuid4().hex[:12]}")
    user_id: str
    name: str | None = None
    description: str | None = None
    nodes: list[WorkflowNode] = Field(default_factory=list)
    edges: list[WorkflowEdge] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class RunRecord(BaseModel):
    """
    A persisted execution: the engine's result plus the ambient metadata the
    engine itself does not know about (who ran it, from which saved graph).
    """

    user_id: str
    workflow_id: str | None = None
    node_types: dict[str, str] = Field(
        default_factory=dict, description="node_id -> node type at run time"
    )
    result: WorkflowExecutionResult
    created_at: datetime = Field(default_factory=_now)

    @property
    def run_id(self) -> str:
        return self.result.run_id
