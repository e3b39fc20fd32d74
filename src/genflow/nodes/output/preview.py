"""
Output Nodes - Nodes that display generated content.

Previews show the URL arriving on their input and pass it through, so
they can be chained. The JSON viewer shows whatever it is given.
"""

from __future__ import annotations

from typing import Any

from genflow.core.data_types import DataType, MediaKind
from genflow.core.graph import Node
from genflow.core.node_types import (
    InputDefinition,
    NodeCategory,
    NodeRole,
    NodeType,
    OutputDefinition,
)


def _preview_executor(input_name: str, output_name: str):
    async def executor(
        inputs: dict[str, Any],
        parameters: dict[str, Any],
        node: Node,
    ) -> dict[str, Any]:
        url = inputs.get(input_name)
        if url and url != node.display_value:
            node.display_value = url
        return {output_name: url}

    return executor


async def json_data_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    node: Node,
) -> dict[str, Any]:
    """Show the incoming data."""
    data = inputs.get("data")
    if data is not None:
        node.display_value = data
    return {}


def _preview_node(
    type_id: str,
    name: str,
    category: NodeCategory,
    kind: MediaKind,
    socket_name: str,
    socket_label: str,
    size: tuple[float, float],
) -> NodeType:
    return NodeType(
        id=type_id,
        name=name,
        description=f"Display a {kind.value.replace('_', ' ')} URL",
        category=category,
        role=NodeRole.PREVIEW,
        media=kind,
        inputs=[
            InputDefinition(name=socket_name, label=socket_label, data_type=DataType.STRING, required=False),
        ],
        outputs=[
            OutputDefinition(name=socket_name, label=socket_label, data_type=DataType.STRING),
        ],
        executor=_preview_executor(socket_name, socket_name),
        size=size,
    )


IMAGE_PREVIEW_NODE = _preview_node(
    "ai-tools/image/image_preview", "Image Preview", NodeCategory.IMAGE,
    MediaKind.IMAGE, "image", "Image", (280.0, 280.0),
)

VIDEO_PREVIEW_NODE = _preview_node(
    "ai-tools/video/video_preview", "Video Preview", NodeCategory.VIDEO,
    MediaKind.VIDEO, "video_url", "Video URL", (400.0, 300.0),
)

MODEL_3D_PREVIEW_NODE = _preview_node(
    "ai-tools/3d/model_3d_preview", "3D Model Preview", NodeCategory.MODEL_3D,
    MediaKind.MODEL_3D, "model_url", "Model URL", (400.0, 400.0),
)

JSON_DATA_NODE = NodeType(
    id="ai-tools/text/json_data",
    name="JSON Data",
    description="Display request/response data",
    category=NodeCategory.TEXT,
    role=NodeRole.PREVIEW,
    inputs=[
        InputDefinition(name="data", label="Data", data_type=DataType.ANY, required=False),
    ],
    outputs=[],  # Terminal node - no outputs
    executor=json_data_executor,
    size=(500.0, 400.0),
)
