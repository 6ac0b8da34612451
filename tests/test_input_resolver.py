"""
Tests for InputResolver: how edge values and static data become node inputs.
"""

from mediaflow.graph.edge import WorkflowEdge, WorkflowGraph
from mediaflow.graph.inputs import InputResolver, resolve_inputs
from mediaflow.graph.node import WorkflowNode


def make_graph(nodes, edges):
    return WorkflowGraph.snapshot(nodes, edges)


def test_in_run_output_is_used():
    graph = make_graph(
        [
            {"id": "t", "data": {"type": "text", "text": "stale"}},
            {"id": "llm", "data": {"type": "llm"}},
        ],
        [{"id": "e1", "source": "t", "target": "llm", "targetHandle": "userMessage"}],
    )

    inputs = InputResolver(graph).resolve(graph.get_node("llm"), {"t": {"output": "fresh"}})

    assert inputs["userMessage"] == "fresh"
    assert inputs["type"] == "llm"


def test_source_handle_is_read_before_output():
    graph = make_graph(
        [{"id": "s", "data": {}}, {"id": "t", "data": {}}],
        [
            {
                "id": "e1",
                "source": "s",
                "target": "t",
                "sourceHandle": "caption",
                "targetHandle": "x",
            }
        ],
    )

    inputs = resolve_inputs(graph, graph.get_node("t"), {"s": {"output": "o", "caption": "c"}})

    assert inputs["x"] == "c"


def test_cached_value_used_for_source_outside_run():
    graph = make_graph(
        [
            {"id": "img", "data": {"type": "uploadImage", "imageUrl": "https://x/a.png"}},
            {"id": "vid", "data": {"type": "uploadVideo", "output": "https://x/cached.mp4"}},
            {"id": "t", "data": {"type": "text", "text": ""}},
            {"id": "target", "data": {}},
        ],
        [
            {"id": "e1", "source": "img", "target": "target", "targetHandle": "image_url"},
            {"id": "e2", "source": "vid", "target": "target", "targetHandle": "video_url"},
            {"id": "e3", "source": "t", "target": "target", "targetHandle": "text"},
        ],
    )

    inputs = resolve_inputs(graph, graph.get_node("target"), {})

    assert inputs["image_url"] == "https://x/a.png"
    # "output" takes priority over the type-specific fields
    assert inputs["video_url"] == "https://x/cached.mp4"
    # Nothing non-empty to read
    assert "text" not in inputs


def test_images_handle_accumulates_in_edge_order():
    graph = make_graph(
        [
            {"id": "a", "data": {}},
            {"id": "b", "data": {"imageUrl": "cached-b"}},
            {"id": "c", "data": {}},
            {"id": "llm", "data": {}},
        ],
        [
            {"id": "e1", "source": "a", "target": "llm", "targetHandle": "images"},
            {"id": "e2", "source": "b", "target": "llm", "targetHandle": "images"},
            {"id": "e3", "source": "c", "target": "llm", "targetHandle": "images"},
        ],
    )

    inputs = resolve_inputs(
        graph,
        graph.get_node("llm"),
        {"a": {"output": "img-a"}, "c": {"output": "img-c"}},
    )

    assert inputs["images"] == ["img-a", "cached-b", "img-c"]


def test_images_handle_is_an_empty_list_when_no_source_has_a_value():
    graph = make_graph(
        [{"id": "a", "data": {}}, {"id": "llm", "data": {}}],
        [{"id": "e1", "source": "a", "target": "llm", "targetHandle": "images"}],
    )

    inputs = resolve_inputs(graph, graph.get_node("llm"), {})

    assert inputs["images"] == []


def test_static_data_fills_unconnected_keys_only():
    graph = make_graph(
        [
            {"id": "src", "data": {}},
            {
                "id": "crop",
                "data": {"type": "cropImage", "image_url": "static.png", "x_percent": 10},
            },
        ],
        [{"id": "e1", "source": "src", "target": "crop", "targetHandle": "image_url"}],
    )

    inputs = resolve_inputs(graph, graph.get_node("crop"), {"src": {"output": "edge.png"}})

    assert inputs["image_url"] == "edge.png"
    assert inputs["x_percent"] == 10
    assert inputs["type"] == "cropImage"


def test_last_edge_wins_on_single_value_handle():
    graph = make_graph(
        [{"id": "a", "data": {}}, {"id": "b", "data": {}}, {"id": "t", "data": {}}],
        [
            {"id": "e1", "source": "a", "target": "t", "targetHandle": "userMessage"},
            {"id": "e2", "source": "b", "target": "t", "targetHandle": "userMessage"},
        ],
    )

    inputs = resolve_inputs(
        graph, graph.get_node("t"), {"a": {"output": "first"}, "b": {"output": "second"}}
    )

    assert inputs["userMessage"] == "second"


def test_failed_source_contributes_nothing_even_with_cached_value():
    graph = make_graph(
        [
            {"id": "a", "data": {"output": "old"}},
            {"id": "t", "data": {"userMessage": "static default"}},
        ],
        [{"id": "e1", "source": "a", "target": "t", "targetHandle": "userMessage"}],
    )

    inputs = resolve_inputs(graph, graph.get_node("t"), {}, failed_node_ids={"a"})

    assert inputs["userMessage"] == "static default"


def test_missing_handles_default_to_output_and_input():
    graph = make_graph(
        [WorkflowNode(id="a"), WorkflowNode(id="b")],
        [WorkflowEdge(id="e1", source="a", target="b")],
    )

    inputs = resolve_inputs(graph, graph.get_node("b"), {"a": {"output": 42}})

    assert inputs == {"input": 42}


def test_edge_from_unknown_node_is_ignored():
    graph = make_graph(
        [{"id": "t", "data": {}}],
        [{"id": "e1", "source": "ghost", "target": "t", "targetHandle": "x"}],
    )

    assert resolve_inputs(graph, graph.get_node("t"), {"ghost": {"output": 1}}) == {}
