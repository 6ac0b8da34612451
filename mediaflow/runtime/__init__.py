"""Runtime: execution with persisted workflows and run history."""

from mediaflow.runtime.workflow_runtime import WorkflowRuntime

__all__ = ["WorkflowRuntime"]
