"""
Workflow Documents - Save and load whole workflow graphs.

This module serializes a NodeGraph (including the results of finished
generations) to the LiteGraph-compatible JSON document and rebuilds
graphs from such documents, migrating node types that were renamed
since the document was written.
"""

from __future__ import annotations

import copy
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from genflow.core.data_types import MediaKind
from genflow.core.graph import (
    GenerationState,
    Link,
    Node,
    NodeGraph,
    NodeGroup,
    NodeInput,
    NodeOutput,
    Point2D,
    Size2D,
)
from genflow.core.node_types import NodeRegistry, NodeRole, NodeType
from genflow.errors import InvalidDocument


logger = logging.getLogger(__name__)

WORKFLOW_VERSION = 0.4

# Old type id -> current type id
NODE_TYPE_MIGRATIONS = MappingProxyType({
    "ai-tools/prompt": "ai-tools/text/prompt",
    "ai-tools/json_data": "ai-tools/text/json_data",
    "ai-tools/image_preview": "ai-tools/image/image_preview",
    "ai-tools/upload_image": "ai-tools/image/upload_image",
    "ai-tools/video_preview": "ai-tools/video/video_preview",
    "ai-tools/upload_video": "ai-tools/video/upload_video",
    "ai-tools/model_3d_preview": "ai-tools/3d/model_3d_preview",
    "ai-tools/upload_3d_model": "ai-tools/3d/upload_3d_model",
})

# Saved result of a generator, by produced media
GENERATOR_RESULT_KEYS = MappingProxyType({
    MediaKind.IMAGE: "_lastImageUrl",
    MediaKind.VIDEO: "_lastVideoUrl",
})
STATUS_KEY = "_status"

# URL shown by a preview (and by an upload), by media
MEDIA_URL_KEYS = MappingProxyType({
    MediaKind.IMAGE: "_imageUrl",
    MediaKind.VIDEO: "_videoUrl",
    MediaKind.MODEL_3D: "_modelUrl",
})

# Encoded file content of an upload, by media
MEDIA_DATA_KEYS = MappingProxyType({
    MediaKind.IMAGE: "_imageData",
    MediaKind.VIDEO: "_videoData",
    MediaKind.MODEL_3D: "_modelData",
})


@dataclass
class WorkflowDocument:
    """The persisted form of a workflow graph."""
    version: float = WORKFLOW_VERSION
    nodes: list[dict[str, Any]] = field(default_factory=list)
    links: list[dict[str, Any]] = field(default_factory=list)
    groups: list[dict[str, Any]] = field(default_factory=list)
    last_node_id: int = 0
    last_link_id: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "last_node_id": self.last_node_id,
            "last_link_id": self.last_link_id,
            "nodes": self.nodes,
            "links": self.links,
            "groups": self.groups,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# ============================================================================
# Migration
# ============================================================================

def migrate_node_types(data: dict[str, Any]) -> dict[str, Any]:
    """
    Rewrite renamed node types in place.

    Types without a migration entry are left untouched.
    """
    for node_data in data.get("nodes") or []:
        old_type = node_data.get("type")
        new_type = NODE_TYPE_MIGRATIONS.get(old_type)
        if new_type:
            logger.info(f"Migrating node type: {old_type} -> {new_type}")
            node_data["type"] = new_type
    return data


# ============================================================================
# Runtime state <-> properties
# ============================================================================

def _node_media(node_type: NodeType | None) -> MediaKind | None:
    if node_type is None:
        return None
    if node_type.generation is not None:
        return node_type.generation.media
    return node_type.media


def save_node_state(node: Node) -> None:
    """Copy a node's runtime state into its _-prefixed properties."""
    node.commit_widget_values()
    media = _node_media(NodeRegistry.instance().get(node.type_id))

    if node.role is NodeRole.GENERATOR:
        if node.result_url:
            key = GENERATOR_RESULT_KEYS.get(media or MediaKind.IMAGE, "_lastImageUrl")
            node.properties[key] = node.result_url
            node.properties[STATUS_KEY] = node.status

    elif node.role is NodeRole.PREVIEW:
        if node.display_value and media in MEDIA_URL_KEYS:
            node.properties[MEDIA_URL_KEYS[media]] = node.display_value

    elif node.role is NodeRole.UPLOAD:
        if node.display_value and media in MEDIA_DATA_KEYS:
            node.properties[MEDIA_DATA_KEYS[media]] = node.display_value
            node.properties[MEDIA_URL_KEYS[media]] = node.display_value


def restore_node_state(node: Node) -> None:
    """Rebuild a node's runtime state from its _-prefixed properties."""
    media = _node_media(NodeRegistry.instance().get(node.type_id))
    props = node.properties

    if node.role is NodeRole.GENERATOR:
        url = props.get("_lastImageUrl") or props.get("_lastVideoUrl")
        if url:
            node.generation = GenerationState.restored(url, props.get(STATUS_KEY))
            node.set_output_data(0, url)
        else:
            node.generation = None

    elif node.role is NodeRole.PREVIEW:
        url = props.get(MEDIA_URL_KEYS[media]) if media in MEDIA_URL_KEYS else None
        if url:
            node.display_value = url
            node.set_output_data(0, url)

    elif node.role is NodeRole.UPLOAD:
        if media in MEDIA_DATA_KEYS:
            value = props.get(MEDIA_DATA_KEYS[media]) or props.get(MEDIA_URL_KEYS[media])
            if value:
                node.display_value = value
                node.set_output_data(0, value)


# ============================================================================
# Export
# ============================================================================

def _serialize_node(node: Node) -> dict[str, Any]:
    return {
        "id": node.id,
        "type": node.type_id,
        "title": node.title,
        "pos": [node.position.x, node.position.y],
        "size": [node.size.width, node.size.height],
        "properties": copy.deepcopy(node.properties),
        "inputs": [
            {"name": socket.label, "type": socket.type, "link": socket.link}
            for socket in node.inputs
        ],
        "outputs": [
            {"name": socket.label, "type": socket.type, "links": list(socket.links)}
            for socket in node.outputs
        ],
    }


def _serialize_link(link: Link) -> dict[str, Any]:
    return {
        "id": link.id,
        "origin_id": link.origin_id,
        "origin_slot": link.origin_slot,
        "target_id": link.target_id,
        "target_slot": link.target_slot,
        "type": link.type,
    }


def export_workflow(graph: NodeGraph) -> WorkflowDocument:
    """
    Serialize a graph.

    Uncommitted widget edits are committed and runtime state is saved
    into properties first, so the document captures what is on screen.
    """
    for node in graph:
        save_node_state(node)

    return WorkflowDocument(
        nodes=[_serialize_node(node) for node in graph],
        links=[_serialize_link(link) for link in graph.links],
        groups=[group.to_dict() for group in graph.groups],
        last_node_id=graph.last_node_id,
        last_link_id=graph.last_link_id,
    )


# ============================================================================
# Import
# ============================================================================

def _validation_error(data: Any) -> str | None:
    if not isinstance(data, dict):
        return "Workflow must be a JSON object"
    nodes = data.get("nodes")
    if not isinstance(nodes, list):
        return "Workflow has no nodes array"
    for index, node_data in enumerate(nodes):
        if not isinstance(node_data, dict):
            return f"Node {index} is not an object"
        if node_data.get("id") is None or not node_data.get("type"):
            return f"Node {index} is missing id or type"
    for key in ("last_node_id", "last_link_id"):
        try:
            int(data.get(key) or 0)
        except (TypeError, ValueError):
            return f"Invalid {key}: {data[key]!r}"
    return None


def validate_workflow(data: Any) -> bool:
    """Check that data looks like a workflow document."""
    return _validation_error(data) is None


def _pair(value: Any, default: tuple[float, float]) -> tuple[float, float]:
    if isinstance(value, dict):
        value = [value.get("0"), value.get("1")]
    try:
        return float(value[0]), float(value[1])
    except (TypeError, ValueError, IndexError, KeyError):
        return default


def _build_node(node_data: dict[str, Any], registry: NodeRegistry) -> Node:
    try:
        node_id = int(node_data["id"])
    except (TypeError, ValueError) as e:
        raise InvalidDocument(f"Invalid node id: {node_data['id']!r}") from e

    type_id = node_data["type"]
    node_type = registry.get(type_id)

    if node_type is not None:
        node = node_type.create_node(node_id)
    else:
        logger.warning(f"Unknown node type {type_id} (node {node_id}), keeping it as-is")
        node = Node(
            id=node_id,
            type_id=type_id,
            role=NodeRole.OTHER,
            inputs=[
                NodeInput(str(i.get("name", "")), str(i.get("type", "*")))
                for i in node_data.get("inputs") or [] if isinstance(i, dict)
            ],
            outputs=[
                NodeOutput(str(o.get("name", "")), str(o.get("type", "*")))
                for o in node_data.get("outputs") or [] if isinstance(o, dict)
            ],
        )

    properties = node_data.get("properties")
    if isinstance(properties, dict):
        node.properties.update(copy.deepcopy(properties))

    node.title = node_data.get("title") or node.title or type_id
    node.position = Point2D(*_pair(node_data.get("pos"), (0.0, 0.0)))
    node.size = Size2D(*_pair(node_data.get("size"), (node.size.width, node.size.height)))
    return node


def _parse_link(raw: Any) -> Link | None:
    try:
        if isinstance(raw, dict):
            return Link(
                id=int(raw["id"]),
                origin_id=int(raw["origin_id"]),
                origin_slot=int(raw["origin_slot"]),
                target_id=int(raw["target_id"]),
                target_slot=int(raw["target_slot"]),
                type=str(raw.get("type", "*")),
            )
        if isinstance(raw, (list, tuple)) and len(raw) >= 5:
            return Link(
                id=int(raw[0]),
                origin_id=int(raw[1]),
                origin_slot=int(raw[2]),
                target_id=int(raw[3]),
                target_slot=int(raw[4]),
                type=str(raw[5]) if len(raw) > 5 and raw[5] is not None else "*",
            )
    except (KeyError, TypeError, ValueError):
        return None
    return None


def import_workflow(data: Any) -> NodeGraph:
    """
    Build a new graph from a workflow document.

    Generators with a saved result come back COMPLETE without any
    network call. Links whose endpoints do not exist are dropped.

    Raises:
        InvalidDocument: The document is not a valid workflow
    """
    error = _validation_error(data)
    if error:
        raise InvalidDocument(error)

    data = migrate_node_types(copy.deepcopy(data))
    registry = NodeRegistry.instance()
    graph = NodeGraph()

    for node_data in data["nodes"]:
        node = _build_node(node_data, registry)
        try:
            graph.add_node(node, keep_id=True)
        except ValueError as e:
            raise InvalidDocument(str(e)) from e

    for raw in data.get("links") or []:
        link = _parse_link(raw)
        if link is None or not graph.add_link(link):
            logger.warning(f"Dropping invalid link: {raw!r}")

    for group_data in data.get("groups") or []:
        if isinstance(group_data, dict):
            graph.add_group(NodeGroup.from_dict(group_data))

    graph.last_node_id = max(graph.last_node_id, int(data.get("last_node_id") or 0))
    graph.last_link_id = max(graph.last_link_id, int(data.get("last_link_id") or 0))

    for node in graph:
        restore_node_state(node)

    logger.debug(f"Imported workflow: {len(graph)} nodes, {len(graph.links)} links")
    return graph


# ============================================================================
# Manager
# ============================================================================

class WorkflowManager:
    """
    Owns the current graph and swaps it on import.

    A failed import leaves the current graph untouched.
    """

    def __init__(self, graph: NodeGraph | None = None):
        self.graph = graph if graph is not None else NodeGraph()

    def export_workflow(self) -> WorkflowDocument:
        return export_workflow(self.graph)

    def export_file(self, path: str | Path) -> Path:
        """
        Write the current graph to a JSON file.

        A directory path gets a timestamped workflow-<ms>.json inside it.
        """
        path = Path(path)
        if path.is_dir():
            path = path / f"workflow-{int(time.time() * 1000)}.json"

        document = self.export_workflow()
        with open(path, "w", encoding="utf-8") as f:
            f.write(document.to_json())

        logger.info(f"Exported workflow to {path}")
        return path

    def import_file(self, path: str | Path) -> NodeGraph:
        """
        Load a workflow file and make it the current graph.

        Raises:
            InvalidDocument: The file cannot be read or parsed
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise InvalidDocument(f"Failed to read workflow {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise InvalidDocument(f"Failed to parse workflow {path}: {e}") from e

        return self.load_workflow(data)

    def load_workflow(self, data: Any) -> NodeGraph:
        """Build a graph from data and swap it in."""
        graph = import_workflow(data)
        self.graph = graph
        return graph

    def create_backup(self) -> dict[str, Any]:
        return export_workflow(self.graph).to_dict()

    def restore_backup(self, data: dict[str, Any]) -> NodeGraph:
        return self.load_workflow(data)

    def validate_workflow(self, data: Any) -> bool:
        return validate_workflow(data)
