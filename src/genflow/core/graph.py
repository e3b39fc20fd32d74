"""
Node Graph Model - Core data structures for the node-based workflow.

This module defines the fundamental building blocks:
- Node: A single unit with typed input/output sockets and properties
- Link: A wire from one node's output socket to another node's input
- GenerationState: Live state of a generator node's remote job
- NodeGraph: The complete graph containing nodes, links and groups
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator

from genflow.core.data_types import DataType
from genflow.core.node_types import NodeRole

if TYPE_CHECKING:
    from genflow.core.execution_order import ExecutionOrder


@dataclass
class Point2D:
    """2D point for node positioning on the canvas."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Size2D:
    """2D size for node dimensions."""
    width: float = 280.0
    height: float = 200.0


@dataclass
class NodeInput:
    """An input socket. Holds at most one link."""
    name: str
    type: str
    link: int | None = None
    label: str = ""

    def __post_init__(self):
        if not self.label:
            self.label = self.name


@dataclass
class NodeOutput:
    """An output socket. May fan out to several links."""
    name: str
    type: str
    links: list[int] = field(default_factory=list)
    label: str = ""

    def __post_init__(self):
        if not self.label:
            self.label = self.name


class GenerationPhase(Enum):
    """Phases of a generator node's job."""
    IDLE = "idle"
    SUBMITTING = "submitting"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


STATUS_READY = "Ready"
STATUS_SUBMITTING = "Submitting..."
STATUS_PROCESSING = "Processing..."
STATUS_COMPLETE = "✓ Complete"


@dataclass
class GenerationState:
    """
    Live state of one generation attempt.

    A new state replaces the old one on every run; it is never merged.

    Attributes:
        phase: Current phase
        request_payload: Body sent to the provider
        response_payload: Raw document the result was read from
        request_id: Provider request id
        result_url: First output URL once complete
        error_message: Human-readable failure, if any
        error: The captured exception, if any
        attempt_count: Polls that returned a non-terminal status
        started_at: Monotonic start time
        status: Status line shown on the node
    """
    phase: GenerationPhase = GenerationPhase.IDLE
    request_payload: dict[str, Any] | None = None
    response_payload: Any = None
    request_id: str | None = None
    result_url: str | None = None
    error_message: str | None = None
    error: Exception | None = field(default=None, repr=False)
    attempt_count: int = 0
    started_at: float | None = None
    status: str = STATUS_READY

    @property
    def is_active(self) -> bool:
        return self.phase in (GenerationPhase.SUBMITTING, GenerationPhase.PROCESSING)

    @property
    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def fail(self, error: Exception) -> None:
        """Move to ERROR, capturing the exception."""
        self.phase = GenerationPhase.ERROR
        self.error = error
        self.error_message = str(error)
        self.status = f"Error: {self.error_message}"

    @classmethod
    def restored(cls, result_url: str, status: str | None = None) -> GenerationState:
        """A COMPLETE state rebuilt from a saved result."""
        return cls(
            phase=GenerationPhase.COMPLETE,
            result_url=result_url,
            status=status or STATUS_COMPLETE,
        )


@dataclass
class Link:
    """
    A link (wire) between two nodes.

    Connects output socket origin_slot of origin_id to input socket
    target_slot of target_id.
    """
    id: int
    origin_id: int
    origin_slot: int
    target_id: int
    target_slot: int
    type: str = DataType.ANY.value


@dataclass
class NodeGroup:
    """A visual grouping of nodes on the canvas."""
    title: str = "Group"
    bounding: list[float] = field(default_factory=lambda: [0.0, 0.0, 200.0, 200.0])
    color: str = "#3f789e"
    font_size: int = 24

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "bounding": list(self.bounding),
            "color": self.color,
            "font_size": self.font_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NodeGroup:
        return cls(
            title=data.get("title", "Group"),
            bounding=list(data.get("bounding", [0.0, 0.0, 200.0, 200.0])),
            color=data.get("color", "#3f789e"),
            font_size=data.get("font_size", 24),
        )


@dataclass
class Node:
    """
    A single node in the workflow graph.

    Nodes have:
    - A unique integer ID and a type (references a NodeType)
    - Ordered input and output sockets
    - Persisted properties
    - Runtime state: output values, uncommitted widget edits, the value
      a viewer currently displays, the generation state and the run marker
    """
    id: int
    type_id: str
    role: NodeRole = NodeRole.OTHER
    title: str = ""
    inputs: list[NodeInput] = field(default_factory=list)
    outputs: list[NodeOutput] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)
    position: Point2D = field(default_factory=Point2D)
    size: Size2D = field(default_factory=Size2D)

    # Runtime state (only persisted through _-prefixed properties)
    generation: GenerationState | None = field(default=None, repr=False)
    output_values: list[Any] = field(default_factory=list, repr=False)
    widget_values: dict[str, Any] = field(default_factory=dict, repr=False)
    display_value: Any = field(default=None, repr=False)
    step_complete: bool = False

    def __post_init__(self):
        if len(self.output_values) < len(self.outputs):
            self.output_values.extend([None] * (len(self.outputs) - len(self.output_values)))

    # --- Sockets ---

    def find_input_slot(self, name: str) -> int:
        """Index of the input named name (or labelled name), -1 if absent."""
        for slot, inp in enumerate(self.inputs):
            if inp.name == name or inp.label == name:
                return slot
        return -1

    def find_output_slot(self, name: str) -> int:
        """Index of the output named name (or labelled name), -1 if absent."""
        for slot, out in enumerate(self.outputs):
            if out.name == name or out.label == name:
                return slot
        return -1

    def set_output_data(self, slot: int, value: Any) -> None:
        if slot < 0 or slot >= len(self.outputs):
            return
        self.output_values[slot] = value

    def get_output_data(self, slot: int) -> Any:
        if slot < 0 or slot >= len(self.output_values):
            return None
        return self.output_values[slot]

    # --- Properties ---

    def get_property(self, name: str, default: Any = None) -> Any:
        """Property value, preferring an uncommitted widget edit."""
        if name in self.widget_values:
            return self.widget_values[name]
        return self.properties.get(name, default)

    def set_property(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def set_widget_value(self, name: str, value: Any) -> None:
        """Record a UI edit that has not been committed to properties yet."""
        self.widget_values[name] = value

    def commit_widget_values(self) -> None:
        """Flush uncommitted widget edits into properties."""
        self.properties.update(self.widget_values)
        self.widget_values.clear()

    def effective_properties(self) -> dict[str, Any]:
        """Properties with uncommitted widget edits applied."""
        return {**self.properties, **self.widget_values}

    # --- Generation ---

    @property
    def is_generating(self) -> bool:
        return self.generation is not None and self.generation.is_active

    @property
    def status(self) -> str:
        if self.generation is None:
            return STATUS_READY
        return self.generation.status

    @property
    def result_url(self) -> str | None:
        if self.generation is None:
            return None
        return self.generation.result_url


class NodeGraph:
    """
    The complete node graph of a workflow.

    Contains nodes (in registration order), links between them and
    optional groups. Node and link ids are allocated from monotonically
    increasing counters.
    """

    def __init__(self, name: str = "Untitled"):
        self.name: str = name
        self._nodes: dict[int, Node] = {}
        self._links: dict[int, Link] = {}
        self._groups: list[NodeGroup] = []
        self.last_node_id: int = 0
        self.last_link_id: int = 0

    # --- Node operations ---

    @property
    def nodes(self) -> list[Node]:
        """All nodes in registration order."""
        return list(self._nodes.values())

    def add_node(self, node: Node, keep_id: bool = False) -> Node:
        """
        Add a node to the graph.

        Nodes with id <= 0 get the next free id unless keep_id is set,
        in which case the node's id is used as is (workflow import).

        Raises:
            ValueError: A node with the same id already exists
        """
        if node.id <= 0 and not keep_id:
            node.id = self.last_node_id + 1
        elif node.id in self._nodes:
            raise ValueError(f"Duplicate node id: {node.id}")
        self.last_node_id = max(self.last_node_id, node.id)
        self._nodes[node.id] = node
        return node

    def remove_node(self, node_id: int) -> Node | None:
        """
        Remove a node and all its links.

        Returns the removed node, or None if not found.
        """
        node = self._nodes.get(node_id)
        if node is None:
            return None
        for link in list(self._links.values()):
            if link.origin_id == node_id or link.target_id == node_id:
                self.remove_link(link.id)
        return self._nodes.pop(node_id)

    def get_node(self, node_id: int) -> Node | None:
        """Get a node by ID."""
        return self._nodes.get(node_id)

    # --- Link operations ---

    @property
    def links(self) -> list[Link]:
        """All links (copy)."""
        return list(self._links.values())

    def get_link(self, link_id: int | None) -> Link | None:
        if link_id is None:
            return None
        return self._links.get(link_id)

    def connect(
        self,
        origin_id: int,
        origin_slot: int,
        target_id: int,
        target_slot: int,
    ) -> Link | None:
        """
        Link an output socket to an input socket.

        An existing link on the target input is replaced. Returns None if
        either socket does not exist or the socket types are incompatible.
        """
        origin = self._nodes.get(origin_id)
        target = self._nodes.get(target_id)
        if origin is None or target is None:
            return None
        if not (0 <= origin_slot < len(origin.outputs) and 0 <= target_slot < len(target.inputs)):
            return None

        out_type = DataType.parse(origin.outputs[origin_slot].type)
        in_type = DataType.parse(target.inputs[target_slot].type)
        if not out_type.is_compatible_with(in_type):
            return None

        link = Link(
            id=self.last_link_id + 1,
            origin_id=origin_id,
            origin_slot=origin_slot,
            target_id=target_id,
            target_slot=target_slot,
            type=origin.outputs[origin_slot].type,
        )
        self.add_link(link)
        return link

    def add_link(self, link: Link) -> bool:
        """
        Add an existing link (e.g. from a document).

        Returns False if either endpoint node or socket does not exist,
        or the id is already used.
        """
        if link.id in self._links:
            return False
        origin = self._nodes.get(link.origin_id)
        target = self._nodes.get(link.target_id)
        if origin is None or target is None:
            return False
        if not 0 <= link.origin_slot < len(origin.outputs):
            return False
        if not 0 <= link.target_slot < len(target.inputs):
            return False

        # Inputs can only have one link
        target_input = target.inputs[link.target_slot]
        if target_input.link is not None and target_input.link in self._links:
            self.remove_link(target_input.link)

        self._links[link.id] = link
        target_input.link = link.id
        origin_output = origin.outputs[link.origin_slot]
        if link.id not in origin_output.links:
            origin_output.links.append(link.id)
        self.last_link_id = max(self.last_link_id, link.id)
        return True

    def remove_link(self, link_id: int) -> Link | None:
        """Remove a link by ID."""
        link = self._links.pop(link_id, None)
        if link is None:
            return None

        target = self._nodes.get(link.target_id)
        if target is not None and link.target_slot < len(target.inputs):
            if target.inputs[link.target_slot].link == link_id:
                target.inputs[link.target_slot].link = None

        origin = self._nodes.get(link.origin_id)
        if origin is not None and link.origin_slot < len(origin.outputs):
            links = origin.outputs[link.origin_slot].links
            if link_id in links:
                links.remove(link_id)

        return link

    def get_input_link(self, node_id: int, slot: int) -> Link | None:
        """Get the link feeding into a specific input."""
        node = self._nodes.get(node_id)
        if node is None or not 0 <= slot < len(node.inputs):
            return None
        return self.get_link(node.inputs[slot].link)

    def get_input_data(self, node_id: int, slot: int) -> Any:
        """Current value on the output socket feeding a node's input."""
        link = self.get_input_link(node_id, slot)
        if link is None:
            return None
        origin = self._nodes.get(link.origin_id)
        if origin is None:
            return None
        return origin.get_output_data(link.origin_slot)

    def get_output_links(self, node_id: int, slot: int | None = None) -> list[Link]:
        """Links leaving a node, from one output or from all of them."""
        node = self._nodes.get(node_id)
        if node is None:
            return []
        slots = range(len(node.outputs)) if slot is None else [slot]
        links: list[Link] = []
        for index in slots:
            if not 0 <= index < len(node.outputs):
                continue
            for link_id in node.outputs[index].links:
                link = self._links.get(link_id)
                if link is not None:
                    links.append(link)
        return links

    # --- Graph analysis ---

    def get_upstream_nodes(self, node_id: int) -> list[Node]:
        """Nodes directly feeding this node's inputs, in socket order."""
        node = self._nodes.get(node_id)
        if node is None:
            return []
        upstream: list[Node] = []
        for slot in range(len(node.inputs)):
            link = self.get_input_link(node_id, slot)
            origin = self._nodes.get(link.origin_id) if link else None
            if origin is not None and origin not in upstream:
                upstream.append(origin)
        return upstream

    def get_downstream_nodes(self, node_id: int) -> list[Node]:
        """Nodes directly linked from this node's outputs."""
        downstream: list[Node] = []
        for link in self.get_output_links(node_id):
            target = self._nodes.get(link.target_id)
            if target is not None and target not in downstream:
                downstream.append(target)
        return downstream

    def get_execution_order(self) -> ExecutionOrder:
        """Resolve a cycle-safe execution order for the whole graph."""
        from genflow.core.execution_order import resolve

        return resolve(self.nodes, self.get_link)

    def reset_step_markers(self) -> None:
        for node in self._nodes.values():
            node.step_complete = False

    # --- Group operations ---

    @property
    def groups(self) -> list[NodeGroup]:
        """Get all groups (read-only copy)."""
        return self._groups.copy()

    def add_group(self, group: NodeGroup) -> None:
        """Add a group to the graph."""
        self._groups.append(group)

    def remove_group(self, group: NodeGroup) -> NodeGroup | None:
        """Remove a group (does not remove the nodes)."""
        if group in self._groups:
            self._groups.remove(group)
            return group
        return None

    # --- Utility ---

    def clear(self) -> None:
        """Remove all nodes, links, and groups."""
        self._nodes.clear()
        self._links.clear()
        self._groups.clear()
        self.last_node_id = 0
        self.last_link_id = 0

    def __len__(self) -> int:
        """Return the number of nodes."""
        return len(self._nodes)

    def __contains__(self, node_id: int) -> bool:
        """Check if a node exists in the graph."""
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))
