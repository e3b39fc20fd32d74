"""
Image-to-Video Node - Midjourney video on Wavespeed.

Video jobs poll less often and for longer than image jobs.
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
from genflow.nodes.generation.common import generator_executor, generator_outputs
from genflow.providers.base import Operation


def midjourney_video_params(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {
        "image": inputs.get("image"),
        "prompt": inputs.get("prompt"),
        "resolution": properties.get("resolution") or "480p",
        "aspect_ratio": properties.get("aspect_ratio") or "1:1",
        "motion": properties.get("motion") or "low",
        "quality": properties.get("quality") or 1,
    }

    # Optional knobs are only sent when set
    for name in ("stylize", "chaos", "weird"):
        value = properties.get(name) or 0
        if value > 0:
            params[name] = value

    seed = properties.get("seed")
    if seed and seed != -1:
        params["seed"] = seed

    return params


MIDJOURNEY_VIDEO_NODE = NodeType(
    id="ai-providers/image-to-video/midjourney_video_wavespeed",
    name="Midjourney Video",
    description="Animate an image with Midjourney",
    category=NodeCategory.IMAGE_TO_VIDEO,
    role=NodeRole.GENERATOR,
    inputs=[
        InputDefinition(name="image", label="Image", data_type=DataType.STRING),
        InputDefinition(name="prompt", label="Prompt", data_type=DataType.STRING),
    ],
    outputs=generator_outputs("video", "Video"),
    parameters=[
        ParameterDefinition.enum("resolution", "Resolution", ["480p", "720p"], default="480p"),
        ParameterDefinition.enum(
            "aspect_ratio", "Aspect Ratio",
            ["1:1", "4:3", "3:4", "2:3", "16:9", "9:16", "1:2"], default="1:1",
        ),
        ParameterDefinition.enum("motion", "Motion", ["low", "high"], default="low"),
        ParameterDefinition.enum("quality", "Quality", [0.25, 0.5, 1, 2], default=1),
        ParameterDefinition.integer("stylize", "Stylize", default=0, min_value=0, max_value=1000),
        ParameterDefinition.integer("chaos", "Chaos", default=0, min_value=0, max_value=100),
        ParameterDefinition.integer("weird", "Weird", default=0, min_value=0, max_value=3000),
        ParameterDefinition.seed(),
    ],
    executor=generator_executor,
    generation=GenerationProfile(
        operation=Operation.IMAGE_TO_VIDEO,
        media=MediaKind.VIDEO,
        default_provider="WAVESPEED",
        build_params=midjourney_video_params,
    ),
    size=(280.0, 160.0),
)
