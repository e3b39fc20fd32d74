"""
Prompt Node - Text input for generators.
"""

from __future__ import annotations

from typing import Any

from genflow.core.data_types import DataType
from genflow.core.graph import Node
from genflow.core.node_types import (
    NodeCategory,
    NodeRole,
    NodeType,
    OutputDefinition,
    ParameterDefinition,
)


async def prompt_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    node: Node,
) -> dict[str, Any]:
    """Commit the edited text and pass it to the output."""
    node.commit_widget_values()
    return {"prompt": parameters.get("prompt") or ""}


PROMPT_NODE = NodeType(
    id="ai-tools/text/prompt",
    name="Prompt",
    description="Text prompt input for generation",
    category=NodeCategory.TEXT,
    role=NodeRole.PROMPT,
    inputs=[],
    outputs=[
        OutputDefinition(
            name="prompt",
            label="Prompt",
            data_type=DataType.STRING,
            description="The prompt text",
        ),
    ],
    parameters=[
        ParameterDefinition.text(
            name="prompt",
            label="Prompt",
            default="",
            multiline=True,
            description="Enter your prompt here",
        ),
    ],
    executor=prompt_executor,
    size=(400.0, 150.0),
)
