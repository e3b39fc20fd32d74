"""
Upscale Node - Wavespeed image upscaler.
"""

from __future__ import annotations

from typing import Any

from genflow.core.data_types import DataType, MediaKind
from genflow.core.node_types import (
    GenerationProfile,
    InputDefinition,
    NodeCategory,
    NodeRole,
    NodeType,
    ParameterDefinition,
)
from genflow.nodes.generation.common import OUTPUT_FORMATS, generator_executor, generator_outputs
from genflow.providers.base import Operation


def upscale_params(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "image": inputs.get("image"),
        "target_resolution": properties.get("target_resolution"),
        "output_format": properties.get("output_format"),
    }


IMAGE_UPSCALER_NODE = NodeType(
    id="ai-providers/image-upscaler/image-upscaler_wavespeed",
    name="Image Upscaler (Wavespeed)",
    description="Upscale an image to 2k, 4k or 8k",
    category=NodeCategory.IMAGE_UPSCALER,
    role=NodeRole.GENERATOR,
    inputs=[
        InputDefinition(name="image", label="Image", data_type=DataType.STRING),
    ],
    outputs=generator_outputs("image", "Image"),
    parameters=[
        ParameterDefinition.enum("target_resolution", "Resolution", ["2k", "4k", "8k"], default="4k"),
        ParameterDefinition.enum("output_format", "Format", OUTPUT_FORMATS, default="jpeg"),
    ],
    executor=generator_executor,
    generation=GenerationProfile(
        operation=Operation.IMAGE_UPSCALE,
        media=MediaKind.IMAGE,
        default_provider="WAVESPEED",
        build_params=upscale_params,
    ),
    size=(280.0, 160.0),
)
