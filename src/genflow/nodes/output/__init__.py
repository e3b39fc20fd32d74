"""
Output Nodes package.

Previews for images, videos and 3D models, plus the JSON data viewer.
"""

from genflow.nodes.output.preview import (
    IMAGE_PREVIEW_NODE,
    JSON_DATA_NODE,
    MODEL_3D_PREVIEW_NODE,
    VIDEO_PREVIEW_NODE,
    json_data_executor,
)


def register_output_nodes():
    """Register all output node types."""
    from genflow.core.node_types import NodeRegistry

    registry = NodeRegistry.instance()
    registry.register(IMAGE_PREVIEW_NODE)
    registry.register(VIDEO_PREVIEW_NODE)
    registry.register(MODEL_3D_PREVIEW_NODE)
    registry.register(JSON_DATA_NODE)


__all__ = [
    "IMAGE_PREVIEW_NODE",
    "VIDEO_PREVIEW_NODE",
    "MODEL_3D_PREVIEW_NODE",
    "JSON_DATA_NODE",
    "json_data_executor",
    "register_output_nodes",
]
