"""
Generation Nodes package.

Nodes that run remote generation jobs through provider adapters.
"""

from genflow.nodes.generation.common import generator_executor, ratio_to_size
from genflow.nodes.generation.image_edit import QWEN_IMAGE_EDIT_NODE
from genflow.nodes.generation.image_to_video import MIDJOURNEY_VIDEO_NODE
from genflow.nodes.generation.text_to_image import (
    FAL_IMAGE_SIZES,
    FLUX_SCHNELL_FAL_NODE,
    FLUX_SCHNELL_WAVESPEED_NODE,
)
from genflow.nodes.generation.upscale import IMAGE_UPSCALER_NODE


def register_generation_nodes():
    """Register all generator node types."""
    from genflow.core.node_types import NodeRegistry

    registry = NodeRegistry.instance()
    registry.register(FLUX_SCHNELL_WAVESPEED_NODE)
    registry.register(FLUX_SCHNELL_FAL_NODE)
    registry.register(IMAGE_UPSCALER_NODE)
    registry.register(QWEN_IMAGE_EDIT_NODE)
    registry.register(MIDJOURNEY_VIDEO_NODE)


__all__ = [
    "FLUX_SCHNELL_WAVESPEED_NODE",
    "FLUX_SCHNELL_FAL_NODE",
    "IMAGE_UPSCALER_NODE",
    "QWEN_IMAGE_EDIT_NODE",
    "MIDJOURNEY_VIDEO_NODE",
    "FAL_IMAGE_SIZES",
    "generator_executor",
    "ratio_to_size",
    "register_generation_nodes",
]
