"""
Dataflow - Moving values along links.

Values live on output sockets (Node.output_values). Executing a node
pulls the values on the sockets feeding its inputs, runs the node type's
executor and writes the returned values back to its own outputs.
"""

from __future__ import annotations

import logging
from typing import Any

from genflow.core.graph import Node, NodeGraph
from genflow.core.node_types import NodeRegistry


logger = logging.getLogger(__name__)


def gather_inputs(graph: NodeGraph, node: Node) -> dict[str, Any]:
    """Current value of every input socket, keyed by socket name."""
    return {
        socket.name: graph.get_input_data(node.id, slot)
        for slot, socket in enumerate(node.inputs)
    }


async def execute_node(graph: NodeGraph, node: Node) -> dict[str, Any]:
    """
    Run a node's executor and publish its outputs.

    Nodes without a registered type or executor are left untouched.

    Returns:
        Output values by socket name
    """
    node_type = NodeRegistry.instance().get(node.type_id)
    if node_type is None or node_type.executor is None:
        return {}

    inputs = gather_inputs(graph, node)
    outputs = await node_type.executor(inputs, node.effective_properties(), node)

    for name, value in outputs.items():
        slot = node.find_output_slot(name)
        if slot >= 0:
            node.set_output_data(slot, value)

    return outputs


async def refresh_origins(graph: NodeGraph, node: Node) -> None:
    """Re-execute the nodes directly feeding a node, so its inputs are current."""
    for origin in graph.get_upstream_nodes(node.id):
        await execute_node(graph, origin)


async def notify_downstream(graph: NodeGraph, node: Node) -> list[Node]:
    """
    Re-execute every node directly linked from a node's outputs.

    Only direct targets are refreshed; values travel further on the
    next run.
    """
    targets = graph.get_downstream_nodes(node.id)
    for target in targets:
        logger.debug(f"Pushing output of node {node.id} to node {target.id}")
        await execute_node(graph, target)
    return targets
