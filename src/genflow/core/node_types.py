"""
Node Type System - Definitions and registry for node types.

This module defines how node types are specified:
- InputDefinition: Describes an input socket
- OutputDefinition: Describes an output socket
- ParameterDefinition: Describes a configurable property
- GenerationProfile: How a generator node talks to providers
- NodeType: Complete definition of a node type
- NodeRegistry: Global registry of available node types
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from genflow.core.data_types import DataType, MediaKind, ParameterValue
from genflow.providers.base import Operation

if TYPE_CHECKING:
    from genflow.core.graph import Node


class ParameterType(Enum):
    """Types of node properties (determines UI widget)."""
    TEXT = "text"               # Single-line text input
    TEXT_MULTILINE = "text_multiline"  # Multi-line text area
    INTEGER = "integer"         # Integer spinner
    FLOAT = "float"             # Float spinner
    BOOLEAN = "boolean"         # Toggle
    ENUM = "enum"               # Combo box
    FILE_PATH = "file_path"     # File browser
    SEED = "seed"               # Seed input (-1 for random)


class NodeCategory(Enum):
    """Categories for organizing nodes in the library."""
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    MODEL_3D = "3d"
    TEXT_TO_IMAGE = "text-to-image"
    IMAGE_UPSCALER = "image-upscaler"
    IMAGE_EDIT = "image-edit"
    IMAGE_TO_VIDEO = "image-to-video"


class NodeRole(Enum):
    """
    How the orchestrator treats a node during a run.

    Assigned from the node type when the node is constructed.
    """
    PROMPT = "prompt"
    GENERATOR = "generator"
    PREVIEW = "preview"
    UPLOAD = "upload"
    OTHER = "other"


@dataclass
class InputDefinition:
    """
    Definition of an input socket on a node.

    Attributes:
        name: Socket identifier (used in code)
        label: Display label, stored as the socket name in documents
        data_type: Type of data accepted
        required: If True, generation fails while this input is empty
    """
    name: str
    label: str
    data_type: DataType
    required: bool = True
    description: str = ""


@dataclass
class OutputDefinition:
    """
    Definition of an output socket on a node.

    Attributes:
        name: Socket identifier (used in code)
        label: Display label, stored as the socket name in documents
        data_type: Type of data produced
    """
    name: str
    label: str
    data_type: DataType
    description: str = ""


@dataclass
class EnumOption:
    """A single option in an enum property."""
    value: Any
    label: str


@dataclass
class ParameterDefinition:
    """
    Definition of a configurable property on a node.

    Attributes:
        name: Property identifier
        label: Display label
        param_type: Type of property (determines widget)
        default: Default value
        min_value/max_value/step: Numeric range
        options: List of options (for enum type)
        description: Tooltip/description text
    """
    name: str
    label: str
    param_type: ParameterType
    default: ParameterValue = None
    min_value: float | None = None
    max_value: float | None = None
    step: float | None = None
    options: list[EnumOption] = field(default_factory=list)
    description: str = ""

    @classmethod
    def text(
        cls,
        name: str,
        label: str,
        default: str = "",
        multiline: bool = False,
        description: str = "",
    ) -> ParameterDefinition:
        """Factory for text property."""
        return cls(
            name=name,
            label=label,
            param_type=ParameterType.TEXT_MULTILINE if multiline else ParameterType.TEXT,
            default=default,
            description=description,
        )

    @classmethod
    def integer(
        cls,
        name: str,
        label: str,
        default: int = 0,
        min_value: int | None = None,
        max_value: int | None = None,
        description: str = "",
    ) -> ParameterDefinition:
        """Factory for integer property."""
        return cls(
            name=name,
            label=label,
            param_type=ParameterType.INTEGER,
            default=default,
            min_value=min_value,
            max_value=max_value,
            step=1,
            description=description,
        )

    @classmethod
    def float_param(
        cls,
        name: str,
        label: str,
        default: float = 0.0,
        min_value: float | None = None,
        max_value: float | None = None,
        step: float = 0.1,
        description: str = "",
    ) -> ParameterDefinition:
        """Factory for float property."""
        return cls(
            name=name,
            label=label,
            param_type=ParameterType.FLOAT,
            default=default,
            min_value=min_value,
            max_value=max_value,
            step=step,
            description=description,
        )

    @classmethod
    def boolean(
        cls,
        name: str,
        label: str,
        default: bool = False,
        description: str = "",
    ) -> ParameterDefinition:
        """Factory for boolean property."""
        return cls(
            name=name,
            label=label,
            param_type=ParameterType.BOOLEAN,
            default=default,
            description=description,
        )

    @classmethod
    def enum(
        cls,
        name: str,
        label: str,
        options: list[Any],
        default: Any = None,
        description: str = "",
    ) -> ParameterDefinition:
        """Factory for enum property. Options are plain values."""
        return cls(
            name=name,
            label=label,
            param_type=ParameterType.ENUM,
            default=default if default is not None else (options[0] if options else None),
            options=[EnumOption(value, str(value)) for value in options],
            description=description,
        )

    @classmethod
    def seed(
        cls,
        name: str = "seed",
        label: str = "Seed",
        default: int | None = -1,
        description: str = "Random seed (-1 for random)",
    ) -> ParameterDefinition:
        """Factory for seed property."""
        return cls(
            name=name,
            label=label,
            param_type=ParameterType.SEED,
            default=default,
            min_value=-1,
            max_value=2147483647,
            description=description,
        )

    @classmethod
    def file_path(
        cls,
        name: str,
        label: str,
        default: str = "",
        description: str = "",
    ) -> ParameterDefinition:
        """Factory for file path property."""
        return cls(
            name=name,
            label=label,
            param_type=ParameterType.FILE_PATH,
            default=default,
            description=description,
        )


@runtime_checkable
class NodeExecutor(Protocol):
    """Protocol for node execution functions."""

    async def __call__(
        self,
        inputs: dict[str, Any],
        parameters: dict[str, Any],
        node: Node,
    ) -> dict[str, Any]:
        """
        Execute the node.

        Args:
            inputs: Values pulled from linked inputs, by socket name
            parameters: Node properties, by name
            node: The node being executed

        Returns:
            Dictionary of output values by socket name
        """
        ...


ParamBuilder = Callable[[dict[str, Any], dict[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class GenerationProfile:
    """
    How a generator node type drives a provider.

    Attributes:
        operation: Provider operation to submit
        media: Kind of media produced (selects the polling policy
            and the persisted result key)
        default_provider: Provider used when the node has none set
        build_params: (inputs, properties) -> provider-agnostic params
    """
    operation: Operation
    media: MediaKind
    default_provider: str
    build_params: ParamBuilder


@dataclass
class NodeType:
    """
    Complete definition of a node type.

    NodeTypes are templates that define what a node does, its sockets
    and properties. Actual nodes in a graph reference a NodeType by id.
    """
    id: str  # Unique identifier, e.g., "ai-tools/text/prompt"
    name: str  # Display name, e.g., "Prompt"
    category: NodeCategory
    role: NodeRole = NodeRole.OTHER
    description: str = ""

    inputs: list[InputDefinition] = field(default_factory=list)
    outputs: list[OutputDefinition] = field(default_factory=list)
    parameters: list[ParameterDefinition] = field(default_factory=list)

    # The actual execution function
    executor: NodeExecutor | None = None

    # Set for GENERATOR nodes only
    generation: GenerationProfile | None = None

    # Media shown by preview nodes or produced by upload nodes
    media: MediaKind | None = None

    # UI hints
    size: tuple[float, float] = (280.0, 200.0)

    def get_default_parameters(self) -> dict[str, ParameterValue]:
        """Get default values for all properties."""
        return {p.name: p.default for p in self.parameters}

    def create_node(self, node_id: int = 0) -> Node:
        """Build a fresh node of this type with default sockets and properties."""
        from genflow.core.graph import Node, NodeInput, NodeOutput, Size2D

        return Node(
            id=node_id,
            type_id=self.id,
            role=self.role,
            title=self.name,
            inputs=[NodeInput(i.name, i.data_type.value, label=i.label) for i in self.inputs],
            outputs=[NodeOutput(o.name, o.data_type.value, label=o.label) for o in self.outputs],
            properties=self.get_default_parameters(),
            size=Size2D(*self.size),
        )


class NodeRegistry:
    """
    Global registry of available node types.

    Nodes register themselves with the registry; documents and the CLI
    use it to construct nodes by type id.
    """

    _instance: NodeRegistry | None = None

    def __new__(cls) -> NodeRegistry:
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._types = {}
        return cls._instance

    @classmethod
    def instance(cls) -> NodeRegistry:
        """Get the singleton instance."""
        return cls()

    def __init__(self):
        if not hasattr(self, '_types'):
            self._types: dict[str, NodeType] = {}

    def register(self, node_type: NodeType) -> None:
        """Register a node type."""
        self._types[node_type.id] = node_type

    def get(self, type_id: str) -> NodeType | None:
        """Get a node type by ID."""
        return self._types.get(type_id)

    def get_all(self) -> list[NodeType]:
        """Get all registered node types."""
        return list(self._types.values())

    def create_node(self, type_id: str, node_id: int = 0) -> Node:
        """
        Instantiate a node of a registered type.

        Raises:
            KeyError: Unknown type id
        """
        node_type = self._types.get(type_id)
        if node_type is None:
            raise KeyError(f"Unknown node type: {type_id}")
        return node_type.create_node(node_id)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, type_id: str) -> bool:
        return type_id in self._types

