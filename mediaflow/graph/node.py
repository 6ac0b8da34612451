"""
Node Protocol - the units of work in a workflow graph.

A node is a passive container: an id, a type tag and a ``data`` bag. The
bag holds the node's static configuration (``text``, ``imageUrl``,
``x_percent``...) and, once the node has run, its cached ``output``. The
engine reads the bag, it never validates it; processors validate the
inputs they receive.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class NodeType(StrEnum):
    """Built-in node types. The registry is open; other tags are allowed."""

    TEXT = "text"
    UPLOAD_IMAGE = "uploadImage"
    UPLOAD_VIDEO = "uploadVideo"
    LLM = "llm"
    CROP_IMAGE = "cropImage"
    EXTRACT_FRAME = "extractFrame"


class NodeRunState(StrEnum):
    """Lifecycle of a node within a single run."""

    PENDING = "pending"
    WAITING = "waiting"  # Waiting on intra-run dependencies
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (NodeRunState.SUCCESS, NodeRunState.FAILED)


# Static fields a source node can expose when it has not run in this run,
# in lookup order.
CACHED_VALUE_FIELDS = ("output", "text", "imageUrl", "videoUrl")


class WorkflowNode(BaseModel):
    """
    A node in the workflow graph.

    Examples:
        WorkflowNode(id="prompt", type="text", data={"type": "text", "text": "hello"})

        WorkflowNode(
            id="crop",
            type="cropImage",
            data={"type": "cropImage", "x_percent": 10, "width_percent": 80},
        )
    """

    id: str = Field(description="Unique ID of the node in the graph")
    type: str | None = Field(default=None, description="Node type tag (editor level)")
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Static configuration plus cached output from previous runs",
    )

    model_config = {"extra": "allow"}

    @property
    def node_type(self) -> str | None:
        """The tag the dispatcher routes on: ``data.type``, else ``type``."""
        return self.data.get("type") or self.type

    @property
    def label(self) -> str:
        return self.data.get("label") or self.id

    def cached_value(self) -> Any:
        """Return the first non-empty persisted value this node can feed downstream."""
        for key in CACHED_VALUE_FIELDS:
            value = self.data.get(key)
            if value not in (None, ""):
                return value
        return None
