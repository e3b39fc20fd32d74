"""
Input Nodes package.

Nodes that feed values into the workflow: prompts and uploads.
"""

from genflow.nodes.input.prompt import PROMPT_NODE, prompt_executor
from genflow.nodes.input.upload import (
    IMAGE_UPLOAD_NODE,
    MODEL_3D_UPLOAD_NODE,
    VIDEO_UPLOAD_NODE,
    load_upload,
)


def register_input_nodes():
    """Register all input node types."""
    from genflow.core.node_types import NodeRegistry

    registry = NodeRegistry.instance()
    registry.register(PROMPT_NODE)
    registry.register(IMAGE_UPLOAD_NODE)
    registry.register(VIDEO_UPLOAD_NODE)
    registry.register(MODEL_3D_UPLOAD_NODE)


__all__ = [
    "PROMPT_NODE",
    "IMAGE_UPLOAD_NODE",
    "VIDEO_UPLOAD_NODE",
    "MODEL_3D_UPLOAD_NODE",
    "prompt_executor",
    "load_upload",
    "register_input_nodes",
]
