"""
Shared pieces of the generator nodes.
"""

from __future__ import annotations

from typing import Any

from genflow.core.data_types import DataType
from genflow.core.graph import Node
from genflow.core.node_types import OutputDefinition


ASPECT_RATIOS = ["1:1", "4:3", "3:4", "16:9", "9:16", "21:9", "9:21", "3:2", "2:3"]
OUTPUT_FORMATS = ["jpeg", "png", "webp"]


async def generator_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    node: Node,
) -> dict[str, Any]:
    """
    Publish the node's last result.

    Generation itself runs in a GenerationJob; executing a generator
    only re-publishes what the last job produced.
    """
    state = node.generation
    outputs: dict[str, Any] = {
        "data": {
            "request": state.request_payload if state else None,
            "response": state.response_payload if state else None,
        },
    }
    if node.outputs:
        outputs[node.outputs[0].name] = node.result_url
    return outputs


def generator_outputs(name: str, label: str) -> list[OutputDefinition]:
    """Result URL output followed by the request/response data output."""
    return [
        OutputDefinition(name=name, label=label, data_type=DataType.STRING),
        OutputDefinition(name="data", label="Data", data_type=DataType.OBJECT),
    ]


def ratio_to_size(ratio: str, max_dim: int = 1024) -> tuple[int, int]:
    """
    Width and height for an aspect ratio such as "16:9".

    The longer side is max_dim; the shorter side is rounded to the
    nearest multiple of 8.
    """
    try:
        w_ratio, h_ratio = (float(part) for part in ratio.split(":"))
    except (AttributeError, ValueError):
        return max_dim, max_dim
    if w_ratio <= 0 or h_ratio <= 0:
        return max_dim, max_dim

    if w_ratio > h_ratio:
        return max_dim, _round8(max_dim * h_ratio / w_ratio)
    if h_ratio > w_ratio:
        return _round8(max_dim * w_ratio / h_ratio), max_dim
    return max_dim, max_dim


def _round8(value: float) -> int:
    # Halves round up
    return int(value / 8 + 0.5) * 8
