"""
Edge Protocol - how nodes connect in a workflow graph.

An edge carries a value from a named output port (``sourceHandle``) of one
node into a named input port (``targetHandle``) of another. Edges are
directed; a node may fan out to many targets and receive from many sources
on different handles (or on the list-valued ``images`` handle).

The graph as a whole must stay a DAG. ``WorkflowGraph.connect`` rejects a
connection that would close a cycle, and the executor re-checks the
requested subset before every run.
"""

import copy
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field, field_validator

from mediaflow.errors import InvalidConnectionError
from mediaflow.graph.node import WorkflowNode

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_HANDLE = "output"
DEFAULT_TARGET_HANDLE = "input"


class WorkflowEdge(BaseModel):
    """
    A directed data-flow connection between two node ports.

    Accepts both the editor's camelCase payload and snake_case names:

        WorkflowEdge(id="e1", source="prompt", target="llm", targetHandle="userMessage")
        WorkflowEdge(id="e1", source="prompt", target="llm", target_handle="userMessage")
    """

    id: str
    source: str = Field(description="Source node ID")
    target: str = Field(description="Target node ID")
    source_handle: str = Field(
        default=DEFAULT_SOURCE_HANDLE,
        alias="sourceHandle",
        description="Named output port on the source node",
    )
    target_handle: str = Field(
        default=DEFAULT_TARGET_HANDLE,
        alias="targetHandle",
        description="Named input port on the target node",
    )

    model_config = {"extra": "allow", "populate_by_name": True}

    @field_validator("source_handle", mode="before")
    @classmethod
    def _default_source_handle(cls, value: Any) -> Any:
        return DEFAULT_SOURCE_HANDLE if value in (None, "") else value

    @field_validator("target_handle", mode="before")
    @classmethod
    def _default_target_handle(cls, value: Any) -> Any:
        return DEFAULT_TARGET_HANDLE if value in (None, "") else value


NodeLike = WorkflowNode | dict[str, Any]
EdgeLike = WorkflowEdge | dict[str, Any]


class WorkflowGraph(BaseModel):
    """
    A complete workflow: nodes plus the edges connecting them.

    The executor always works on a ``snapshot`` so that edits made to the
    caller's nodes while a run is in flight are never observed.
    """

    nodes: list[WorkflowNode] = Field(default_factory=list)
    edges: list[WorkflowEdge] = Field(default_factory=list)

    model_config = {"extra": "allow"}

    @classmethod
    def snapshot(cls, nodes: Iterable[NodeLike], edges: Iterable[EdgeLike]) -> "WorkflowGraph":
        """Build a graph from deep copies of the given nodes and edges."""
        return cls(
            nodes=[_copy_model(WorkflowNode, n) for n in nodes],
            edges=[_copy_model(WorkflowEdge, e) for e in edges],
        )

    def get_node(self, node_id: str) -> WorkflowNode | None:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None

    def get_incoming_edges(self, node_id: str) -> list[WorkflowEdge]:
        """Get all edges entering a node, in declaration order."""
        return [e for e in self.edges if e.target == node_id]

    def get_outgoing_edges(self, node_id: str) -> list[WorkflowEdge]:
        """Get all edges leaving a node, in declaration order."""
        return [e for e in self.edges if e.source == node_id]

    def get_connected_nodes(self, node_id: str) -> list[WorkflowNode]:
        """Nodes sharing an edge with ``node_id`` in either direction."""
        connected = set()
        for edge in self.edges:
            if edge.source == node_id:
                connected.add(edge.target)
            elif edge.target == node_id:
                connected.add(edge.source)
        return [n for n in self.nodes if n.id in connected]

    def would_create_cycle(self, source: str, target: str) -> bool:
        """
        Check whether adding ``source -> target`` would close a cycle.

        It would exactly when ``source`` is already reachable from
        ``target`` along outgoing edges.
        """
        visited: set[str] = set()
        queue = [target]
        while queue:
            current = queue.pop(0)
            if current in visited:
                continue
            visited.add(current)
            if current == source:
                return True
            for edge in self.get_outgoing_edges(current):
                if edge.target not in visited:
                    queue.append(edge.target)
        return False

    def validate_connection(self, source: str | None, target: str | None) -> str | None:
        """Return why ``source -> target`` cannot be connected, or None if it can."""
        if not source or not target:
            return "Connection requires both a source and a target"
        if not self.has_node(source):
            return f"Source node '{source}' not found"
        if not self.has_node(target):
            return f"Target node '{target}' not found"
        if source == target:
            return f"Node '{source}' cannot connect to itself"
        if self.would_create_cycle(source, target):
            return f"Connecting '{source}' -> '{target}' would create a cycle"
        return None

    def connect(self, edge: EdgeLike) -> WorkflowEdge:
        """
        Add an edge after connection-time validation.

        Raises:
            InvalidConnectionError: On unknown endpoints, self-loops or cycles
        """
        edge = edge if isinstance(edge, WorkflowEdge) else WorkflowEdge.model_validate(edge)
        reason = self.validate_connection(edge.source, edge.target)
        if reason:
            logger.warning(f"✗ Rejected connection {edge.source} -> {edge.target}: {reason}")
            raise InvalidConnectionError(reason)
        self.edges.append(edge)
        return edge

    def remove_node(self, node_id: str) -> None:
        """Delete a node together with every edge touching it."""
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]

    def validate(self) -> list[str]:
        """Validate the graph structure. Returns a list of error messages."""
        from mediaflow.errors import CycleError
        from mediaflow.graph.resolver import DependencyResolver

        errors = []

        seen_ids: set[str] = set()
        for node in self.nodes:
            if node.id in seen_ids:
                errors.append(f"Duplicate node ID: '{node.id}'")
            seen_ids.add(node.id)

        seen_edge_ids: set[str] = set()
        for edge in self.edges:
            if edge.id in seen_edge_ids:
                errors.append(f"Duplicate edge ID: '{edge.id}'")
            seen_edge_ids.add(edge.id)
            if edge.source not in seen_ids:
                errors.append(f"Edge '{edge.id}' references missing source '{edge.source}'")
            if edge.target not in seen_ids:
                errors.append(f"Edge '{edge.id}' references missing target '{edge.target}'")
            if edge.source == edge.target:
                errors.append(f"Edge '{edge.id}' connects node '{edge.source}' to itself")

        try:
            DependencyResolver(self.edges).topological_order([n.id for n in self.nodes])
        except CycleError as e:
            errors.append(str(e))

        return errors


def _copy_model(model_cls: type[BaseModel], value: Any) -> Any:
    if isinstance(value, model_cls):
        return value.model_copy(deep=True)
    return model_cls.model_validate(copy.deepcopy(value))
