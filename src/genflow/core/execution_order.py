"""
Execution Order - Deterministic, cycle-safe node ordering.

Depth-first post-order over input links: a node is emitted only after
every node feeding its inputs. Traversal starts from each node in
registration order, so the same graph always yields the same order.
An edge leading back to a node that is still in progress closes a cycle;
it is skipped and recorded instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Iterator

if TYPE_CHECKING:
    from genflow.core.graph import Link, Node


logger = logging.getLogger(__name__)

LinkLookup = Callable[[int], "Link | None"]


class _Mark(Enum):
    IN_PROGRESS = 1
    DONE = 2


@dataclass
class ExecutionOrder:
    """
    Result of resolving an execution order.

    Attributes:
        nodes: Every node exactly once, dependencies first
        cycles: Skipped (origin_id, target_id) edges that closed a cycle
    """
    nodes: list[Node] = field(default_factory=list)
    cycles: list[tuple[int, int]] = field(default_factory=list)

    @property
    def node_ids(self) -> list[int]:
        return [node.id for node in self.nodes]

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


def resolve(nodes: Iterable[Node], link_lookup: LinkLookup) -> ExecutionOrder:
    """
    Resolve the execution order of a set of nodes.

    Args:
        nodes: Nodes in registration order
        link_lookup: Maps a link id to its Link (or None if dangling)

    Returns:
        ExecutionOrder with every node once and the detected cycle edges
    """
    node_list = list(nodes)
    by_id = {node.id: node for node in node_list}
    marks: dict[int, _Mark] = {}
    result = ExecutionOrder()

    for root in node_list:
        if root.id in marks:
            continue

        marks[root.id] = _Mark.IN_PROGRESS
        stack: list[tuple[Node, Iterator]] = [(root, iter(root.inputs))]

        while stack:
            node, pending_inputs = stack[-1]
            descended = False

            for socket in pending_inputs:
                if socket.link is None:
                    continue
                link = link_lookup(socket.link)
                if link is None:
                    continue
                origin = by_id.get(link.origin_id)
                if origin is None:
                    continue

                mark = marks.get(origin.id)
                if mark is None:
                    marks[origin.id] = _Mark.IN_PROGRESS
                    stack.append((origin, iter(origin.inputs)))
                    descended = True
                    break
                if mark is _Mark.IN_PROGRESS:
                    result.cycles.append((origin.id, node.id))

            if not descended:
                stack.pop()
                marks[node.id] = _Mark.DONE
                result.nodes.append(node)

    if result.cycles:
        logger.debug(f"Skipped cycle edges: {result.cycles}")

    return result
