"""
Node dispatch - route a node to its processor behind a failure boundary.

``NodeDispatcher.execute`` never raises for a processor fault. Unknown node
types, invalid inputs, ``ProcessorError`` and unexpected exceptions all
come back as ``NodeOutcome(outputs={}, error=message)``. There are no
retries at this level.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from mediaflow.errors import ProcessorError
from mediaflow.graph.node import WorkflowNode
from mediaflow.processors.base import FunctionProcessor, Processor, ProcessorFn

logger = logging.getLogger(__name__)


@dataclass
class NodeOutcome:
    """Normalized result of one processor invocation."""

    outputs: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class NodeDispatcher:
    """
    Registry of processors keyed by node type.

    Example:
        dispatcher = NodeDispatcher.default()
        dispatcher.register_function("upper", lambda inputs: {"output": inputs["text"].upper()})
        outcome = await dispatcher.execute(node, {"text": "hi"})
    """

    def __init__(self, processors: dict[str, Processor] | None = None):
        self._processors: dict[str, Processor] = dict(processors or {})

    @classmethod
    def default(cls, **kwargs: Any) -> "NodeDispatcher":
        """Dispatcher with the built-in processors (see ``build_default_processors``)."""
        from mediaflow.processors import build_default_processors

        return cls(build_default_processors(**kwargs))

    def register(self, node_type: str, processor: Processor) -> None:
        """Register (or replace) the processor for a node type."""
        self._processors[node_type] = processor

    def register_function(self, node_type: str, func: ProcessorFn) -> None:
        """Register a plain ``inputs -> outputs`` function as a processor."""
        self._processors[node_type] = FunctionProcessor(func, node_type=node_type)

    def get_processor(self, node_type: str | None) -> Processor | None:
        if node_type is None:
            return None
        return self._processors.get(node_type)

    @property
    def node_types(self) -> list[str]:
        return sorted(self._processors)

    async def execute(self, node: WorkflowNode, inputs: dict[str, Any]) -> NodeOutcome:
        """Run ``node`` with its resolved ``inputs``."""
        node_type = node.node_type
        processor = self.get_processor(node_type)
        if processor is None:
            error = f"No processor registered for node type '{node_type}'"
            logger.error(f"✗ {node.id}: {error}")
            return NodeOutcome(error=error)

        try:
            outputs = await processor.process(inputs)
        except ProcessorError as e:
            logger.warning(f"✗ {node.id} ({node_type}) failed: {e}")
            return NodeOutcome(error=str(e) or type(e).__name__)
        except Exception as e:
            logger.error(
                f"✗ {node.id} ({node_type}) raised {type(e).__name__}: {e}", exc_info=True
            )
            return NodeOutcome(error=str(e) or f"{type(e).__name__} in {node_type} processor")

        if not isinstance(outputs, dict) or "output" not in outputs:
            error = f"Processor for '{node_type}' returned no 'output'"
            logger.error(f"✗ {node.id}: {error}")
            return NodeOutcome(error=error)

        return NodeOutcome(outputs=outputs)
