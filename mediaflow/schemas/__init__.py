"""Result and persistence schemas."""

from mediaflow.schemas.execution import (
    ExecutionType,
    NodeExecutionResult,
    NodeStatus,
    RunStatus,
    WorkflowExecutionResult,
    determine_status,
)
from mediaflow.schemas.workflow import RunRecord, SavedWorkflow

__all__ = [
    "ExecutionType",
    "NodeExecutionResult",
    "NodeStatus",
    "RunStatus",
    "WorkflowExecutionResult",
    "determine_status",
    "RunRecord",
    "SavedWorkflow",
]
