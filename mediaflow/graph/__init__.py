"""Graph structures: Nodes, Edges, Dependency Resolution and Execution."""

from mediaflow.graph.catalog import (
    NODE_DEFINITIONS,
    ConnectionType,
    HandleSpec,
    NodeTypeDefinition,
    get_definition,
    validate_graph,
)
from mediaflow.graph.dispatcher import NodeDispatcher, NodeOutcome
from mediaflow.graph.edge import WorkflowEdge, WorkflowGraph
from mediaflow.graph.executor import ExecutorConfig, WorkflowExecutor, apply_outputs
from mediaflow.graph.inputs import InputResolver, resolve_inputs
from mediaflow.graph.node import NodeRunState, NodeType, WorkflowNode
from mediaflow.graph.resolver import DependencyResolver

__all__ = [
    # Node
    "WorkflowNode",
    "NodeType",
    "NodeRunState",
    # Edge
    "WorkflowEdge",
    "WorkflowGraph",
    # Catalog
    "NODE_DEFINITIONS",
    "ConnectionType",
    "HandleSpec",
    "NodeTypeDefinition",
    "get_definition",
    "validate_graph",
    # Resolution
    "DependencyResolver",
    "InputResolver",
    "resolve_inputs",
    # Dispatch
    "NodeDispatcher",
    "NodeOutcome",
    # Executor
    "WorkflowExecutor",
    "ExecutorConfig",
    "apply_outputs",
]
