"""
Input resolution - what a node sees when it runs.

For every edge into the node, in declaration order, the value on the edge
comes from:

1. the source's output produced earlier in this run (the edge's
   ``sourceHandle`` key, falling back to ``output``), or
2. nothing, if the source ran in this run and failed, or
3. the source's persisted value (``output``, ``text``, ``imageUrl`` or
   ``videoUrl``, first non-empty) when the source is outside the run.

The value is written under the edge's ``targetHandle``. The ``images``
handle accumulates into a list; every other handle is last-writer-wins in
edge declaration order. Finally the node's own static ``data`` fills in
every key no edge provided.
"""

from collections.abc import Collection, Mapping
from typing import Any

from mediaflow.graph.edge import WorkflowGraph
from mediaflow.graph.node import WorkflowNode

LIST_HANDLES = frozenset({"images"})


class InputResolver:
    """Resolves node inputs against one graph snapshot."""

    def __init__(self, graph: WorkflowGraph):
        self.graph = graph

    def resolve(
        self,
        node: WorkflowNode,
        prior_outputs: Mapping[str, Mapping[str, Any]] | None = None,
        failed_node_ids: Collection[str] = (),
    ) -> dict[str, Any]:
        """
        Build the input mapping for ``node``.

        Args:
            node: The node about to run
            prior_outputs: Outputs of nodes that succeeded earlier in this run
            failed_node_ids: Nodes that ran in this run and failed

        Returns:
            Mapping of handle name to value
        """
        prior_outputs = prior_outputs or {}
        inputs: dict[str, Any] = {}

        for edge in self.graph.get_incoming_edges(node.id):
            source = self.graph.get_node(edge.source)
            if source is None:
                continue

            if edge.source in prior_outputs:
                produced = prior_outputs[edge.source]
                value = produced.get(edge.source_handle, produced.get("output"))
            elif edge.source in failed_node_ids:
                value = None
            else:
                value = source.cached_value()

            handle = edge.target_handle
            if handle in LIST_HANDLES:
                bucket = inputs.setdefault(handle, [])
                if value not in (None, ""):
                    bucket.append(value)
            elif value is not None:
                inputs[handle] = value

        for key, value in node.data.items():
            inputs.setdefault(key, value)

        return inputs


def resolve_inputs(
    graph: WorkflowGraph,
    node: WorkflowNode,
    prior_outputs: Mapping[str, Mapping[str, Any]] | None = None,
    failed_node_ids: Collection[str] = (),
) -> dict[str, Any]:
    """Functional shortcut for ``InputResolver(graph).resolve(...)``."""
    return InputResolver(graph).resolve(node, prior_outputs, failed_node_ids)
