"""Exception hierarchy for the workflow engine.

Structural errors describe an invalid caller-supplied graph and abort a run
before any node executes. Processor errors describe a single node's failure
and are captured into that node's result instead of propagating.
"""


class WorkflowError(Exception):
    """Base class for all engine errors."""

    pass


class StructuralError(WorkflowError):
    """The graph (or the requested subset of it) is not executable."""

    pass


class CycleError(StructuralError):
    """The requested node subset contains a cycle."""

    def __init__(self, node_ids: list[str]):
        self.node_ids = node_ids
        super().__init__(f"Workflow contains cycles (involving: {', '.join(sorted(node_ids))})")


class MissingNodeError(WorkflowError):
    """A requested node ID does not exist in the supplied graph."""

    def __init__(self, node_ids: list[str]):
        self.node_ids = node_ids
        super().__init__(f"Requested nodes not found in graph: {', '.join(node_ids)}")


class InvalidConnectionError(WorkflowError):
    """An edge was rejected at connection time."""

    pass


class ProcessorError(WorkflowError):
    """A node processor failed with a descriptive message."""

    pass


class LLMExecutionError(ProcessorError):
    """An LLM call failed."""

    def __init__(
        self,
        message: str,
        status: int = 400,
        is_quota_error: bool = False,
        is_not_found_error: bool = False,
    ):
        super().__init__(message)
        self.status = status
        self.is_quota_error = is_quota_error
        self.is_not_found_error = is_not_found_error


class MediaError(ProcessorError):
    """Loading, decoding or transforming image/video media failed."""

    pass
