"""
Dependency resolution for workflow runs.

Two questions are answered from the edge list alone:

- which nodes must finish before a given node may start
  (``dependencies_of``: every ancestor, not just direct predecessors), and
- in what order a requested subset of nodes can run
  (``topological_order``: Kahn's algorithm restricted to edges whose both
  endpoints are in the subset).

Edges that leave the requested subset are ignored for ordering, which is
what makes "single" and "partial" runs possible: a node outside the subset
is never scheduled, but its cached output is still readable as an input.
"""

from collections import deque
from collections.abc import Iterable

from mediaflow.errors import CycleError
from mediaflow.graph.edge import WorkflowEdge


class DependencyResolver:
    """
    Computes ancestry and execution order over a fixed edge list.

    Example:
        resolver = DependencyResolver(graph.edges)
        order = resolver.topological_order(["text-1", "llm-1"])
        deps = resolver.dependencies_of("llm-1") & set(order)
    """

    def __init__(self, edges: Iterable[WorkflowEdge]):
        self.edges = list(edges)
        self._incoming: dict[str, list[str]] = {}
        for edge in self.edges:
            self._incoming.setdefault(edge.target, []).append(edge.source)

    def dependencies_of(self, node_id: str) -> set[str]:
        """
        Return every node reachable from ``node_id`` by walking incoming
        edges transitively. Safe on cyclic graphs; a node on a cycle lists
        itself among its dependencies.
        """
        dependencies: set[str] = set()
        visited: set[str] = set()
        stack = [node_id]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            for source in self._incoming.get(current, []):
                dependencies.add(source)
                stack.append(source)

        return dependencies

    def topological_order(self, node_ids: Iterable[str], transitive: bool = False) -> list[str]:
        """
        Order ``node_ids`` so every intra-set edge points forward.

        With ``transitive=True`` a node is also ordered after every requested
        ancestor reached through nodes outside the set (a -> b -> c with only
        a and c requested puts a before c). This is the order the executor
        uses, since it waits on ``dependencies_of(node) & requested``. A cycle
        that passes through an outside node then makes a node its own
        dependency and is reported like any other cycle.

        Nodes that become ready at the same time keep discovery order
        (requested order for roots, edge declaration order afterwards).
        That is deterministic for a given input but carries no meaning:
        independent nodes do not interact.

        Raises:
            CycleError: If the edges inside the set form a cycle, or (transitive)
                a requested node is among its own ancestors
        """
        requested = list(dict.fromkeys(node_ids))
        members = set(requested)

        in_degree = {node_id: 0 for node_id in requested}
        adjacency: dict[str, list[str]] = {node_id: [] for node_id in requested}

        if transitive:
            for target in requested:
                ancestors = self.dependencies_of(target)
                for source in requested:
                    if source in ancestors:
                        adjacency[source].append(target)
                        in_degree[target] += 1
        else:
            for edge in self.edges:
                if edge.source in members and edge.target in members:
                    adjacency[edge.source].append(edge.target)
                    in_degree[edge.target] += 1

        queue = deque(node_id for node_id in requested if in_degree[node_id] == 0)
        order: list[str] = []

        while queue:
            node_id = queue.popleft()
            order.append(node_id)
            for neighbor in adjacency[node_id]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(order) < len(requested):
            stuck = [node_id for node_id in requested if in_degree[node_id] > 0]
            raise CycleError(stuck)

        return order
