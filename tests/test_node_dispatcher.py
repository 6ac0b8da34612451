"""
Tests for NodeDispatcher: routing by node type and the failure boundary.
"""

import pytest

from mediaflow.errors import ProcessorError
from mediaflow.graph.dispatcher import NodeDispatcher
from mediaflow.graph.node import NodeType, WorkflowNode
from mediaflow.llm.mock import MockLLMProvider
from mediaflow.processors.base import Processor, ProcessorInputs


class GreetingInputs(ProcessorInputs):
    name: str


class GreetingProcessor(Processor):
    node_type = "greet"
    input_model = GreetingInputs

    async def run(self, params):
        return {"output": f"hello {params.name}"}


def node(node_id, node_type):
    return WorkflowNode(id=node_id, data={"type": node_type})


@pytest.mark.asyncio
async def test_routes_on_data_type():
    dispatcher = NodeDispatcher({"greet": GreetingProcessor()})

    outcome = await dispatcher.execute(node("n1", "greet"), {"name": "ada"})

    assert outcome.success
    assert outcome.outputs == {"output": "hello ada"}


@pytest.mark.asyncio
async def test_data_type_takes_precedence_over_editor_type():
    dispatcher = NodeDispatcher()
    dispatcher.register_function("upper", lambda inputs: {"output": inputs["text"].upper()})

    outcome = await dispatcher.execute(
        WorkflowNode(id="n1", type="text", data={"type": "upper"}), {"text": "hi"}
    )

    assert outcome.outputs["output"] == "HI"


@pytest.mark.asyncio
async def test_unknown_type_is_a_failure_not_an_exception():
    dispatcher = NodeDispatcher()

    outcome = await dispatcher.execute(node("n1", "teleport"), {})

    assert not outcome.success
    assert "teleport" in outcome.error
    assert outcome.outputs == {}


@pytest.mark.asyncio
async def test_processor_error_message_is_kept():
    async def boom(inputs):
        raise ProcessorError("Quota exceeded. Try again later.")

    dispatcher = NodeDispatcher()
    dispatcher.register_function("boom", boom)

    outcome = await dispatcher.execute(node("n1", "boom"), {})

    assert outcome.error == "Quota exceeded. Try again later."


@pytest.mark.asyncio
async def test_unexpected_exception_is_captured():
    def broken(inputs):
        return inputs["missing"]

    dispatcher = NodeDispatcher()
    dispatcher.register_function("broken", broken)

    outcome = await dispatcher.execute(node("n1", "broken"), {})

    assert not outcome.success
    assert "missing" in outcome.error


@pytest.mark.asyncio
async def test_output_key_is_required():
    dispatcher = NodeDispatcher()
    dispatcher.register_function("silent", lambda inputs: {"result": 1})

    outcome = await dispatcher.execute(node("n1", "silent"), {})

    assert not outcome.success
    assert "output" in outcome.error


@pytest.mark.asyncio
async def test_invalid_inputs_fail_validation():
    dispatcher = NodeDispatcher({"greet": GreetingProcessor()})

    outcome = await dispatcher.execute(node("n1", "greet"), {})

    assert not outcome.success
    assert outcome.error.startswith("Invalid inputs for greet")
    assert "name" in outcome.error


@pytest.mark.asyncio
async def test_none_inputs_fall_back_to_model_defaults():
    dispatcher = NodeDispatcher.default(llm=MockLLMProvider())

    outcome = await dispatcher.execute(node("t", NodeType.TEXT), {"text": None})

    assert outcome.outputs == {"output": ""}


def test_default_registry_covers_every_node_type():
    dispatcher = NodeDispatcher.default(llm=MockLLMProvider())

    assert set(dispatcher.node_types) == {t.value for t in NodeType}
