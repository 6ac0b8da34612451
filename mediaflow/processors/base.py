"""
Processor Protocol - the per-type work behind each node.

A processor receives the node's resolved inputs and returns an outputs
mapping that contains at least ``output`` (the value chained downstream).
It reports failure by raising ``ProcessorError`` with a message meant for
the user; the dispatcher turns any exception into a failed node result.

Processors declare an ``input_model`` (pydantic) so inputs are validated
and coerced before ``run`` sees them. Unknown keys, such as the node's
``label`` or its cached ``output``, are ignored.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from mediaflow.errors import ProcessorError

ProcessorFn = Callable[[dict[str, Any]], dict[str, Any] | Awaitable[dict[str, Any]]]


class ProcessorInputs(BaseModel):
    """Base for processor input models."""

    model_config = {"extra": "ignore", "coerce_numbers_to_str": True}


class Processor(ABC):
    """Base class for node processors."""

    node_type: str = ""
    input_model: type[BaseModel] | None = None

    async def process(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """Validate ``inputs`` against ``input_model`` and run."""
        if self.input_model is None:
            return await self.run(inputs)

        # Unset ports arrive as None; let the model defaults apply
        present = {k: v for k, v in inputs.items() if v is not None}
        try:
            params = self.input_model.model_validate(present)
        except ValidationError as e:
            raise ProcessorError(
                f"Invalid inputs for {self.node_type or 'node'}: {format_validation_error(e)}"
            ) from e
        return await self.run(params)

    @abstractmethod
    async def run(self, params: Any) -> dict[str, Any]:
        """Do the work. ``params`` is an ``input_model`` instance, or the raw mapping."""
        pass


class FunctionProcessor(Processor):
    """Wraps a plain (sync or async) ``inputs -> outputs`` function."""

    def __init__(self, func: ProcessorFn, node_type: str = ""):
        self.func = func
        self.node_type = node_type

    async def run(self, params: Any) -> dict[str, Any]:
        result = self.func(params)
        if inspect.isawaitable(result):
            result = await result
        return result


def format_validation_error(error: ValidationError) -> str:
    """Render pydantic errors as 'field: message; field: message'."""
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "inputs"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_percent(value: Any) -> float:
    """Parse 25, 25.0, "25" or "25%" into 25.0."""
    if isinstance(value, bool):
        raise ValueError("expected a number or percentage")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        text = value.strip().removesuffix("%").strip()
        return float(text)
    raise ValueError("expected a number or percentage")
