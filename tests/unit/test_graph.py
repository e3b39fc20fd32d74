"""
Tests for the graph module.
"""

import pytest

from genflow.core.graph import (
    STATUS_READY,
    GenerationPhase,
    GenerationState,
    Link,
    Node,
    NodeGraph,
    NodeGroup,
    NodeInput,
    NodeOutput,
    Point2D,
    Size2D,
)
from genflow.core.node_types import NodeRegistry, NodeRole


def make_node(node_id=0, inputs=(), outputs=(), **kwargs):
    return Node(
        id=node_id,
        type_id="test/node",
        inputs=[NodeInput(name, type_) for name, type_ in inputs],
        outputs=[NodeOutput(name, type_) for name, type_ in outputs],
        **kwargs,
    )


class TestPoint2D:
    """Tests for Point2D dataclass."""

    def test_default_values(self):
        p = Point2D()
        assert p.x == 0.0
        assert p.y == 0.0

    def test_custom_values(self):
        p = Point2D(100, 200)
        assert p.x == 100
        assert p.y == 200


class TestSize2D:
    """Tests for Size2D dataclass."""

    def test_default_values(self):
        s = Size2D()
        assert s.width == 280.0
        assert s.height == 200.0


class TestNode:
    """Tests for Node dataclass."""

    def test_output_values_padded(self):
        node = make_node(outputs=[("a", "string"), ("b", "object")])
        assert node.output_values == [None, None]

    def test_socket_label_defaults_to_name(self):
        socket = NodeInput("prompt", "string")
        assert socket.label == "prompt"

    def test_find_slots_by_name_or_label(self):
        node = Node(
            id=1,
            type_id="test/node",
            inputs=[NodeInput("image_url", "string", label="Image URL")],
            outputs=[NodeOutput("data", "object", label="Data")],
        )
        assert node.find_input_slot("image_url") == 0
        assert node.find_input_slot("Image URL") == 0
        assert node.find_input_slot("missing") == -1
        assert node.find_output_slot("Data") == 0

    def test_output_data_out_of_range(self):
        node = make_node(outputs=[("a", "string")])
        node.set_output_data(5, "ignored")
        assert node.get_output_data(5) is None
        node.set_output_data(0, "value")
        assert node.get_output_data(0) == "value"

    def test_widget_values_take_precedence(self):
        node = make_node(properties={"prompt": "saved"})
        node.set_widget_value("prompt", "typed")

        assert node.get_property("prompt") == "typed"
        assert node.effective_properties() == {"prompt": "typed"}
        assert node.properties["prompt"] == "saved"

    def test_commit_widget_values(self):
        node = make_node(properties={"prompt": "saved"})
        node.set_widget_value("prompt", "typed")
        node.commit_widget_values()

        assert node.properties["prompt"] == "typed"
        assert node.widget_values == {}

    def test_status_without_generation(self):
        node = make_node()
        assert node.status == STATUS_READY
        assert node.result_url is None
        assert not node.is_generating

    def test_is_generating(self):
        node = make_node()
        node.generation = GenerationState(phase=GenerationPhase.PROCESSING)
        assert node.is_generating
        node.generation.phase = GenerationPhase.COMPLETE
        assert not node.is_generating


class TestGenerationState:
    """Tests for GenerationState."""

    def test_fail_sets_status(self):
        state = GenerationState(phase=GenerationPhase.PROCESSING)
        state.fail(RuntimeError("boom"))

        assert state.phase is GenerationPhase.ERROR
        assert state.error_message == "boom"
        assert state.status == "Error: boom"

    def test_restored(self):
        state = GenerationState.restored("https://x/img.png")
        assert state.phase is GenerationPhase.COMPLETE
        assert state.result_url == "https://x/img.png"
        assert state.status == "✓ Complete"

    def test_elapsed_without_start(self):
        assert GenerationState().elapsed == 0.0


class TestNodeGroup:
    """Tests for NodeGroup."""

    def test_dict_round_trip(self):
        group = NodeGroup(title="Stage 1", bounding=[1, 2, 3, 4], color="#fff", font_size=18)
        restored = NodeGroup.from_dict(group.to_dict())
        assert restored == group

    def test_from_dict_defaults(self):
        group = NodeGroup.from_dict({})
        assert group.title == "Group"
        assert group.font_size == 24


class TestNodeGraph:
    """Tests for NodeGraph."""

    def test_add_node_allocates_ids(self):
        graph = NodeGraph()
        first = graph.add_node(make_node())
        second = graph.add_node(make_node())
        assert (first.id, second.id) == (1, 2)
        assert len(graph) == 2
        assert 1 in graph

    def test_add_node_keeps_explicit_id(self):
        graph = NodeGraph()
        graph.add_node(make_node(7))
        assert graph.last_node_id == 7
        assert graph.add_node(make_node()).id == 8

    def test_add_node_keep_id_zero(self):
        graph = NodeGraph()
        graph.add_node(make_node(0), keep_id=True)
        graph.add_node(make_node(1), keep_id=True)
        assert [node.id for node in graph] == [0, 1]
        with pytest.raises(ValueError):
            graph.add_node(make_node(0), keep_id=True)
        assert graph.add_node(make_node()).id == 2

    def test_duplicate_node_id_rejected(self):
        graph = NodeGraph()
        graph.add_node(make_node(3))
        with pytest.raises(ValueError):
            graph.add_node(make_node(3))

    def test_nodes_in_registration_order(self):
        graph = NodeGraph()
        graph.add_node(make_node(5))
        graph.add_node(make_node(2))
        assert [n.id for n in graph.nodes] == [5, 2]

    def test_connect(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("out", "string")]))
        b = graph.add_node(make_node(inputs=[("in", "string")]))

        link = graph.connect(a.id, 0, b.id, 0)

        assert link is not None
        assert b.inputs[0].link == link.id
        assert a.outputs[0].links == [link.id]
        assert link.type == "string"

    def test_connect_invalid_slot(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("out", "string")]))
        b = graph.add_node(make_node(inputs=[("in", "string")]))
        assert graph.connect(a.id, 1, b.id, 0) is None
        assert graph.connect(a.id, 0, 99, 0) is None

    def test_connect_incompatible_types(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("data", "object")]))
        b = graph.add_node(make_node(inputs=[("prompt", "string")]))
        assert graph.connect(a.id, 0, b.id, 0) is None

    def test_any_type_connects(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("data", "object")]))
        b = graph.add_node(make_node(inputs=[("data", "*")]))
        assert graph.connect(a.id, 0, b.id, 0) is not None

    def test_input_link_replaced(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("out", "string")]))
        b = graph.add_node(make_node(outputs=[("out", "string")]))
        c = graph.add_node(make_node(inputs=[("in", "string")]))

        first = graph.connect(a.id, 0, c.id, 0)
        second = graph.connect(b.id, 0, c.id, 0)

        assert graph.get_link(first.id) is None
        assert a.outputs[0].links == []
        assert c.inputs[0].link == second.id

    def test_add_link_rejects_dangling(self):
        graph = NodeGraph()
        graph.add_node(make_node(1, outputs=[("out", "string")]))
        assert not graph.add_link(Link(1, 1, 0, 42, 0))
        assert graph.links == []

    def test_remove_node_removes_links(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("out", "string")]))
        b = graph.add_node(make_node(inputs=[("in", "string")]))
        graph.connect(a.id, 0, b.id, 0)

        removed = graph.remove_node(a.id)

        assert removed is a
        assert graph.links == []
        assert b.inputs[0].link is None
        assert graph.remove_node(a.id) is None

    def test_get_input_data(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("out", "string")]))
        b = graph.add_node(make_node(inputs=[("in", "string")]))
        graph.connect(a.id, 0, b.id, 0)
        a.set_output_data(0, "hello")

        assert graph.get_input_data(b.id, 0) == "hello"
        assert graph.get_input_data(a.id, 0) is None

    def test_upstream_and_downstream(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("out", "string")]))
        b = graph.add_node(make_node(inputs=[("x", "string"), ("y", "string")]))
        c = graph.add_node(make_node(inputs=[("in", "string")]))
        graph.connect(a.id, 0, b.id, 0)
        graph.connect(a.id, 0, b.id, 1)
        graph.connect(a.id, 0, c.id, 0)

        assert graph.get_upstream_nodes(b.id) == [a]
        assert graph.get_downstream_nodes(a.id) == [b, c]
        assert len(graph.get_output_links(a.id, 0)) == 3

    def test_reset_step_markers(self):
        graph = NodeGraph()
        node = graph.add_node(make_node())
        node.step_complete = True
        graph.reset_step_markers()
        assert not node.step_complete

    def test_groups(self):
        graph = NodeGraph()
        group = NodeGroup(title="G")
        graph.add_group(group)
        assert graph.groups == [group]
        assert graph.remove_group(group) is group
        assert graph.remove_group(group) is None

    def test_clear(self):
        graph = NodeGraph()
        a = graph.add_node(make_node(outputs=[("out", "string")]))
        b = graph.add_node(make_node(inputs=[("in", "string")]))
        graph.connect(a.id, 0, b.id, 0)
        graph.clear()
        assert len(graph) == 0
        assert graph.links == []
        assert graph.last_node_id == 0


class TestNodeRegistry:
    """Tests for node creation through the registry."""

    def test_create_node_from_type(self):
        node = NodeRegistry.instance().create_node("ai-tools/text/prompt")
        assert node.role is NodeRole.PROMPT
        assert node.title == "Prompt"
        assert node.properties["prompt"] == ""
        assert node.outputs[0].label == "Prompt"

    def test_unknown_type(self):
        with pytest.raises(KeyError):
            NodeRegistry.instance().create_node("ai-tools/does-not-exist")

    def test_builtin_types_registered(self):
        registry = NodeRegistry.instance()
        for type_id in (
            "ai-tools/text/prompt",
            "ai-tools/text/json_data",
            "ai-tools/image/image_preview",
            "ai-tools/image/upload_image",
            "ai-providers/text-to-image/flux_schnell_wavespeed",
            "ai-providers/text-to-image/flux_schnell_fal",
            "ai-providers/image-upscaler/image-upscaler_wavespeed",
            "ai-providers/qwen_image_edit_wavespeed",
            "ai-providers/image-to-video/midjourney_video_wavespeed",
        ):
            assert type_id in registry
        assert len(registry) >= 9
