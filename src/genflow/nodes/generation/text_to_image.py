"""
Text-to-Image Nodes - FLUX Schnell on Wavespeed and on fal.ai.
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
from genflow.nodes.generation.common import (
    ASPECT_RATIOS,
    generator_executor,
    generator_outputs,
    ratio_to_size,
)
from genflow.providers.base import Operation


# fal.ai only accepts named sizes; unsupported ratios use the closest one
FAL_IMAGE_SIZES = {
    "1:1": "square_hd",
    "4:3": "landscape_4_3",
    "3:4": "portrait_4_3",
    "16:9": "landscape_16_9",
    "9:16": "portrait_16_9",
    "21:9": "landscape_16_9",
    "9:21": "portrait_16_9",
    "3:2": "landscape_4_3",
    "2:3": "portrait_4_3",
}


def flux_wavespeed_params(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Wavespeed FLUX Schnell params; size is sent as "W*H"."""
    width, height = ratio_to_size(properties.get("ratio") or "1:1")
    return {
        "prompt": inputs.get("prompt"),
        "size": f"{width}*{height}",
        "num_images": properties.get("num_images"),
        "seed": properties.get("seed"),
        "output_format": properties.get("output_format"),
        "strength": properties.get("strength"),
        "enable_sync_mode": properties.get("enable_sync_mode"),
        "enable_base64_output": properties.get("enable_base64_output"),
    }


def flux_fal_params(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """fal.ai FLUX Schnell params; ratio maps to a named image size."""
    params = {
        "prompt": inputs.get("prompt"),
        "image_size": FAL_IMAGE_SIZES.get(properties.get("ratio"), "square_hd"),
        "num_images": properties.get("num_images"),
        "output_format": properties.get("output_format"),
        "acceleration": properties.get("acceleration"),
        "num_inference_steps": properties.get("num_inference_steps"),
        "guidance_scale": properties.get("guidance_scale"),
        "enable_safety_checker": properties.get("enable_safety_checker"),
    }
    seed = properties.get("seed")
    if seed is not None and seed != -1:
        params["seed"] = seed
    return params


FLUX_SCHNELL_WAVESPEED_NODE = NodeType(
    id="ai-providers/text-to-image/flux_schnell_wavespeed",
    name="Flux Schnell v1.0 (Wavespeed)",
    description="Fast FLUX text-to-image on Wavespeed",
    category=NodeCategory.TEXT_TO_IMAGE,
    role=NodeRole.GENERATOR,
    inputs=[
        InputDefinition(name="prompt", label="Prompt", data_type=DataType.STRING),
    ],
    outputs=generator_outputs("image", "Image"),
    parameters=[
        ParameterDefinition.enum("ratio", "Ratio", ASPECT_RATIOS, default="1:1"),
        ParameterDefinition.enum("output_format", "Format", ["jpeg", "png", "webp"], default="jpeg"),
        ParameterDefinition.float_param("strength", "Strength", default=0.8, min_value=0.0, max_value=1.0),
        ParameterDefinition.seed(),
        ParameterDefinition.boolean("enable_sync_mode", "Sync Mode"),
        ParameterDefinition.boolean("enable_base64_output", "Base64 Output"),
    ],
    executor=generator_executor,
    generation=GenerationProfile(
        operation=Operation.TEXT_TO_IMAGE,
        media=MediaKind.IMAGE,
        default_provider="WAVESPEED",
        build_params=flux_wavespeed_params,
    ),
    size=(280.0, 220.0),
)

FLUX_SCHNELL_FAL_NODE = NodeType(
    id="ai-providers/text-to-image/flux_schnell_fal",
    name="Flux Schnell v1.0 (Fal)",
    description="Fast FLUX text-to-image on fal.ai",
    category=NodeCategory.TEXT_TO_IMAGE,
    role=NodeRole.GENERATOR,
    inputs=[
        InputDefinition(name="prompt", label="Prompt", data_type=DataType.STRING),
    ],
    outputs=generator_outputs("image", "Image"),
    parameters=[
        ParameterDefinition.enum("ratio", "Ratio", ASPECT_RATIOS, default="1:1"),
        ParameterDefinition.enum("output_format", "Format", ["jpeg", "png"], default="jpeg"),
        ParameterDefinition.enum("acceleration", "Acceleration", ["none", "regular", "high"], default="regular"),
        ParameterDefinition.enum("num_inference_steps", "Inference Steps", list(range(1, 13)), default=4),
        ParameterDefinition.enum("guidance_scale", "Guidance Scale", list(range(1, 21)), default=4),
        ParameterDefinition.boolean("enable_safety_checker", "Safety Checker", default=True),
        ParameterDefinition.integer("num_images", "Images", default=1, min_value=1, max_value=4),
        ParameterDefinition.seed(default=None),
    ],
    executor=generator_executor,
    generation=GenerationProfile(
        operation=Operation.TEXT_TO_IMAGE,
        media=MediaKind.IMAGE,
        default_provider="FAL",
        build_params=flux_fal_params,
    ),
    size=(280.0, 200.0),
)
