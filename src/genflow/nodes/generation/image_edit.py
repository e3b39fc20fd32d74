"""
Image Edit Node - Qwen prompted image editing.

The provider is selectable through the node's "provider" property.
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


def image_edit_params(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "prompt": inputs.get("prompt"),
        "image": inputs.get("image_url"),
        "num_images": properties.get("num_images"),
        "seed": properties.get("seed"),
        "output_format": properties.get("output_format"),
    }


QWEN_IMAGE_EDIT_NODE = NodeType(
    id="ai-providers/qwen_image_edit_wavespeed",
    name="Qwen Image Edit",
    description="Edit an image following a prompt",
    category=NodeCategory.IMAGE_EDIT,
    role=NodeRole.GENERATOR,
    inputs=[
        InputDefinition(name="prompt", label="Prompt", data_type=DataType.STRING),
        InputDefinition(name="image_url", label="Image URL", data_type=DataType.STRING),
    ],
    outputs=generator_outputs("edited_image", "Edited Image URL"),
    parameters=[
        ParameterDefinition.enum("provider", "Provider", ["WAVESPEED", "FAL"], default="WAVESPEED"),
        ParameterDefinition.integer("num_images", "Images", default=1, min_value=1, max_value=4),
        ParameterDefinition.seed(),
        ParameterDefinition.enum("output_format", "Format", OUTPUT_FORMATS, default="jpeg"),
    ],
    executor=generator_executor,
    generation=GenerationProfile(
        operation=Operation.IMAGE_EDIT,
        media=MediaKind.IMAGE,
        default_provider="WAVESPEED",
        build_params=image_edit_params,
    ),
    size=(280.0, 100.0),
)
