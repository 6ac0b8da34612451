"""File-backed persistence for workflows and run history."""

from mediaflow.storage.run_store import RunStore
from mediaflow.storage.workflow_store import WorkflowNotFoundError, WorkflowStore

__all__ = ["RunStore", "WorkflowStore", "WorkflowNotFoundError"]
