"""
Node type catalog - the declared ports of every built-in node type.

The catalog drives structural validation only (editor-side connection
checks, ``mediaflow validate``). The executor does not consult it: a node
whose required input is missing still runs, and its processor decides
whether that is fatal.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

from mediaflow.graph.edge import WorkflowGraph
from mediaflow.graph.inputs import LIST_HANDLES
from mediaflow.graph.node import NodeType


class ConnectionType(StrEnum):
    """Semantic kind of value flowing through a handle."""

    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    NUMBER = "number"


class HandleSpec(BaseModel):
    """A named input or output port."""

    id: str
    kind: ConnectionType
    label: str = ""
    required: bool = False


class NodeTypeDefinition(BaseModel):
    """Static catalog entry for one node type."""

    type: str
    label: str
    inputs: list[HandleSpec] = Field(default_factory=list)
    outputs: list[HandleSpec] = Field(default_factory=list)

    def get_input(self, handle_id: str) -> HandleSpec | None:
        return next((h for h in self.inputs if h.id == handle_id), None)

    def get_output(self, handle_id: str) -> HandleSpec | None:
        return next((h for h in self.outputs if h.id == handle_id), None)


def _output(kind: ConnectionType, label: str) -> list[HandleSpec]:
    return [HandleSpec(id="output", kind=kind, label=label, required=True)]


NODE_DEFINITIONS: dict[str, NodeTypeDefinition] = {
    NodeType.TEXT: NodeTypeDefinition(
        type=NodeType.TEXT,
        label="Text",
        outputs=_output(ConnectionType.TEXT, "Text"),
    ),
    NodeType.UPLOAD_IMAGE: NodeTypeDefinition(
        type=NodeType.UPLOAD_IMAGE,
        label="Upload Image",
        outputs=_output(ConnectionType.IMAGE, "Image URL"),
    ),
    NodeType.UPLOAD_VIDEO: NodeTypeDefinition(
        type=NodeType.UPLOAD_VIDEO,
        label="Upload Video",
        outputs=_output(ConnectionType.VIDEO, "Video URL"),
    ),
    NodeType.LLM: NodeTypeDefinition(
        type=NodeType.LLM,
        label="Run Any LLM",
        inputs=[
            HandleSpec(id="systemPrompt", kind=ConnectionType.TEXT, label="System Prompt"),
            HandleSpec(
                id="userMessage", kind=ConnectionType.TEXT, label="User Message", required=True
            ),
            HandleSpec(id="images", kind=ConnectionType.IMAGE, label="Images"),
        ],
        outputs=_output(ConnectionType.TEXT, "Output"),
    ),
    NodeType.CROP_IMAGE: NodeTypeDefinition(
        type=NodeType.CROP_IMAGE,
        label="Crop Image",
        inputs=[
            HandleSpec(id="image_url", kind=ConnectionType.IMAGE, label="Image URL", required=True),
            HandleSpec(id="x_percent", kind=ConnectionType.NUMBER, label="X %"),
            HandleSpec(id="y_percent", kind=ConnectionType.NUMBER, label="Y %"),
            HandleSpec(id="width_percent", kind=ConnectionType.NUMBER, label="Width %"),
            HandleSpec(id="height_percent", kind=ConnectionType.NUMBER, label="Height %"),
        ],
        outputs=_output(ConnectionType.IMAGE, "Cropped Image"),
    ),
    NodeType.EXTRACT_FRAME: NodeTypeDefinition(
        type=NodeType.EXTRACT_FRAME,
        label="Extract Frame from Video",
        inputs=[
            HandleSpec(id="video_url", kind=ConnectionType.VIDEO, label="Video URL", required=True),
            HandleSpec(id="timestamp", kind=ConnectionType.NUMBER, label="Timestamp"),
        ],
        outputs=_output(ConnectionType.IMAGE, "Frame Image"),
    ),
}


def is_compatible(source: ConnectionType, target: ConnectionType) -> bool:
    """Whether a value of kind ``source`` may feed a port of kind ``target``."""
    # Text can carry numbers and "50%"-style percentages
    return source == target or (source == ConnectionType.TEXT and target == ConnectionType.NUMBER)


def get_definition(node_type: str | None) -> NodeTypeDefinition | None:
    if node_type is None:
        return None
    return NODE_DEFINITIONS.get(node_type)


def validate_graph(
    graph: WorkflowGraph,
    definitions: dict[str, NodeTypeDefinition] | None = None,
) -> list[str]:
    """
    Validate a graph against the node type catalog.

    Reports everything ``WorkflowGraph.validate`` does, plus unknown node
    types, edges on undeclared handles, mismatched handle kinds and
    required inputs with neither an edge nor a static value.
    """
    definitions = definitions if definitions is not None else NODE_DEFINITIONS
    errors = graph.validate()

    for node in graph.nodes:
        definition = definitions.get(node.node_type or "")
        if definition is None:
            errors.append(f"Node '{node.id}' has unknown type '{node.node_type}'")
            continue

        incoming = graph.get_incoming_edges(node.id)
        connected = {edge.target_handle for edge in incoming}
        for handle in definition.inputs:
            if handle.required and handle.id not in connected and not node.data.get(handle.id):
                errors.append(
                    f"Node '{node.id}' is missing required input '{handle.id}' "
                    "(connect an edge or set a static value)"
                )

        for edge in incoming:
            target_spec = definition.get_input(edge.target_handle)
            if target_spec is None:
                errors.append(
                    f"Edge '{edge.id}' targets unknown handle '{edge.target_handle}' "
                    f"on {definition.type} node '{node.id}'"
                )
                continue

            source = graph.get_node(edge.source)
            source_definition = definitions.get(source.node_type or "") if source else None
            if source_definition is None:
                continue
            source_spec = source_definition.get_output(edge.source_handle)
            if source_spec is None:
                errors.append(
                    f"Edge '{edge.id}' reads unknown handle '{edge.source_handle}' "
                    f"from {source_definition.type} node '{edge.source}'"
                )
            elif not is_compatible(source_spec.kind, target_spec.kind):
                errors.append(
                    f"Edge '{edge.id}' connects {source_spec.kind} output to "
                    f"{target_spec.kind} input '{edge.target_handle}' on node '{node.id}'"
                )

        # Only list handles may take more than one edge
        counts: dict[str, int] = {}
        for edge in incoming:
            counts[edge.target_handle] = counts.get(edge.target_handle, 0) + 1
        for handle_id, count in counts.items():
            if count > 1 and handle_id not in LIST_HANDLES:
                errors.append(
                    f"Node '{node.id}' receives {count} edges on single-value input '{handle_id}'"
                )

    return errors
