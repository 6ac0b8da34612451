"""
mediaflow - execute DAG workflows of media and LLM nodes.

A workflow is a graph of typed nodes (text, image/video upload, LLM, crop,
frame extraction) joined by edges between named ports. The executor runs a
requested subset of nodes in dependency order, feeding each node the
outputs of its upstream nodes, and reports a per-node and overall result.
"""

from mediaflow.errors import (
    CycleError,
    InvalidConnectionError,
    LLMExecutionError,
    MediaError,
    MissingNodeError,
    ProcessorError,
    StructuralError,
    WorkflowError,
)
from mediaflow.graph import (
    DependencyResolver,
    ExecutorConfig,
    InputResolver,
    NodeDispatcher,
    NodeType,
    WorkflowEdge,
    WorkflowExecutor,
    WorkflowGraph,
    WorkflowNode,
    apply_outputs,
)
from mediaflow.schemas import (
    ExecutionType,
    NodeExecutionResult,
    NodeStatus,
    RunStatus,
    WorkflowExecutionResult,
)

__version__ = "0.1.0"

__all__ = [
    # Graph
    "WorkflowNode",
    "WorkflowEdge",
    "WorkflowGraph",
    "NodeType",
    "DependencyResolver",
    "InputResolver",
    "NodeDispatcher",
    "WorkflowExecutor",
    "ExecutorConfig",
    "apply_outputs",
    # Results
    "ExecutionType",
    "NodeExecutionResult",
    "NodeStatus",
    "RunStatus",
    "WorkflowExecutionResult",
    # Errors
    "WorkflowError",
    "StructuralError",
    "CycleError",
    "MissingNodeError",
    "InvalidConnectionError",
    "ProcessorError",
    "LLMExecutionError",
    "MediaError",
]
