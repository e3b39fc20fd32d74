"""
Nodes package - All node implementations.

This package contains node implementations organized by category:
- input: Prompt and media uploads
- generation: Text-to-image, upscale, image edit, image-to-video
- output: Image/video/3D previews and the JSON data viewer
"""

from genflow.nodes.generation import register_generation_nodes
from genflow.nodes.input import register_input_nodes
from genflow.nodes.output import register_output_nodes


def register_all_nodes() -> None:
    """Register all built-in nodes."""
    register_input_nodes()
    register_generation_nodes()
    register_output_nodes()


__all__ = [
    "register_all_nodes",
]
