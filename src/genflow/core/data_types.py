"""
Data Types - Socket types and media payloads that flow through the graph.

This module defines:
- DataType: Socket types, serialized with the LiteGraph type names
- MediaKind: Kind of media a node produces or displays
- MediaFile: Local file turned into a data URL for upload nodes
"""

from __future__ import annotations

import base64
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeAlias


class DataType(Enum):
    """
    Enumeration of data types that can flow through node connections.

    Values are the type strings stored in workflow documents.
    """
    STRING = "string"   # Prompts and media URLs
    OBJECT = "object"   # Request/response data
    ANY = "*"           # Accepts any type (viewer nodes)

    def is_compatible_with(self, other: DataType) -> bool:
        """Check if this type can connect to another type."""
        if self == DataType.ANY or other == DataType.ANY:
            return True
        return self == other

    @classmethod
    def parse(cls, value: str | None) -> DataType:
        """Parse a serialized type name; unknown names accept anything."""
        try:
            return cls(value)
        except ValueError:
            return cls.ANY


class MediaKind(Enum):
    """Kind of media a node deals with."""
    IMAGE = "image"
    VIDEO = "video"
    MODEL_3D = "model_3d"


# Type alias for parameter values
ParameterValue: TypeAlias = str | int | float | bool | list | dict | None


MODEL_3D_MIME_TYPES = {
    ".glb": "model/gltf-binary",
    ".gltf": "model/gltf+json",
    ".obj": "model/obj",
    ".fbx": "application/octet-stream",
}


@dataclass
class MediaFile:
    """
    A local media file encoded for use as a node output.

    Attributes:
        path: Source path
        kind: Media kind
        mime_type: MIME type used in the data URL
        data_url: base64 data URL
        width/height: Pixel dimensions (images only)
    """
    path: Path
    kind: MediaKind
    mime_type: str
    data_url: str
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_file(cls, path: str | Path, kind: MediaKind) -> MediaFile:
        """
        Load a media file and encode it as a data URL.

        Images are opened with Pillow, which rejects files that are not
        images and gives us the dimensions.

        Raises:
            FileNotFoundError: The file does not exist
            ValueError: The file is not a valid image/video/3D model
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Media file not found: {path}")

        raw = path.read_bytes()
        width = height = None

        if kind is MediaKind.IMAGE:
            mime_type, width, height = _inspect_image(path)
        elif kind is MediaKind.MODEL_3D:
            mime_type = MODEL_3D_MIME_TYPES.get(path.suffix.lower())
            if mime_type is None:
                raise ValueError(f"Unsupported 3D model format: {path.suffix}")
        else:
            mime_type = mimetypes.guess_type(path.name)[0]
            if not mime_type or not mime_type.startswith("video/"):
                raise ValueError(f"Not a video file: {path.name}")

        encoded = base64.b64encode(raw).decode("ascii")
        return cls(
            path=path,
            kind=kind,
            mime_type=mime_type,
            data_url=f"data:{mime_type};base64,{encoded}",
            width=width,
            height=height,
        )

    @property
    def size(self) -> tuple[int, int] | None:
        """Image size as (width, height)."""
        if self.width is None or self.height is None:
            return None
        return (self.width, self.height)


def _inspect_image(path: Path) -> tuple[str, int, int]:
    from PIL import Image, UnidentifiedImageError

    try:
        with Image.open(path) as image:
            image.verify()
            image_format = image.format
            width, height = image.size
    except UnidentifiedImageError as e:
        raise ValueError(f"Not an image file: {path.name}") from e

    mime_type = Image.MIME.get(image_format or "", "application/octet-stream")
    return mime_type, width, height
