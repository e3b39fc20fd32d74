"""
Upload Nodes - Local media files as node outputs.

Each upload node reads a file from disk once, keeps it as a data URL and
publishes that URL on its single output.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from genflow.core.data_types import DataType, MediaFile, MediaKind
from genflow.core.graph import Node
from genflow.core.node_types import (
    NodeCategory,
    NodeRole,
    NodeType,
    OutputDefinition,
    ParameterDefinition,
)


logger = logging.getLogger(__name__)


def load_upload(node: Node, path: str | Path, kind: MediaKind) -> MediaFile:
    """
    Load a file into an upload node.

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The file is not of the expected kind
    """
    media = MediaFile.from_file(path, kind)
    node.properties["file_path"] = str(media.path)
    node.display_value = media.data_url
    node.set_output_data(0, media.data_url)
    if media.size:
        logger.debug(f"Loaded {media.path.name} ({media.width}x{media.height}) into node {node.id}")
    return media


def _upload_executor(kind: MediaKind, output_name: str):
    async def executor(
        inputs: dict[str, Any],
        parameters: dict[str, Any],
        node: Node,
    ) -> dict[str, Any]:
        file_path = parameters.get("file_path")
        if node.display_value is None and file_path:
            load_upload(node, file_path, kind)
        return {output_name: node.display_value}

    return executor


def _upload_node(
    type_id: str,
    name: str,
    category: NodeCategory,
    kind: MediaKind,
    output_name: str,
    output_label: str,
    size: tuple[float, float],
) -> NodeType:
    return NodeType(
        id=type_id,
        name=name,
        description=f"Load a local {kind.value.replace('_', ' ')} file",
        category=category,
        role=NodeRole.UPLOAD,
        media=kind,
        outputs=[
            OutputDefinition(name=output_name, label=output_label, data_type=DataType.STRING),
        ],
        parameters=[
            ParameterDefinition.file_path(name="file_path", label="File"),
        ],
        executor=_upload_executor(kind, output_name),
        size=size,
    )


IMAGE_UPLOAD_NODE = _upload_node(
    "ai-tools/image/upload_image", "Upload Image", NodeCategory.IMAGE,
    MediaKind.IMAGE, "image_url", "Image URL", (280.0, 280.0),
)

VIDEO_UPLOAD_NODE = _upload_node(
    "ai-tools/video/upload_video", "Upload Video", NodeCategory.VIDEO,
    MediaKind.VIDEO, "video_url", "Video URL", (400.0, 300.0),
)

MODEL_3D_UPLOAD_NODE = _upload_node(
    "ai-tools/3d/upload_3d_model", "Upload 3D Model", NodeCategory.MODEL_3D,
    MediaKind.MODEL_3D, "model_url", "Model URL", (400.0, 400.0),
)
