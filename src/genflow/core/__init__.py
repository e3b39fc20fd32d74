"""
Core module - Graph model, execution and workflow documents.

This module provides the fundamental building blocks for GenFlow:
- Graph: Nodes, links and generation state
- Node Types: Node definitions and registry
- Execution: Ordering, generation jobs and full-workflow runs
- Workflow Documents: JSON export/import with type migration
"""

from genflow.core.graph import (
    GenerationPhase,
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

from genflow.core.data_types import (
    DataType,
    MediaFile,
    MediaKind,
    ParameterValue,
)

from genflow.core.node_types import (
    GenerationProfile,
    InputDefinition,
    NodeCategory,
    NodeExecutor,
    NodeRegistry,
    NodeRole,
    NodeType,
    OutputDefinition,
    ParameterDefinition,
    ParameterType,
)

from genflow.core.execution_order import ExecutionOrder, resolve

from genflow.core.generation import (
    IMAGE_POLLING,
    VIDEO_POLLING,
    GenerationJob,
    PollingPolicy,
)

from genflow.core.execution import (
    ExecutionProgress,
    RunContext,
    RunOutcome,
    RunStatus,
    WorkflowOrchestrator,
)

from genflow.core.workflow_document import (
    NODE_TYPE_MIGRATIONS,
    WorkflowDocument,
    WorkflowManager,
    export_workflow,
    import_workflow,
    validate_workflow,
)


__all__ = [
    # graph.py
    "GenerationPhase",
    "GenerationState",
    "Link",
    "Node",
    "NodeGraph",
    "NodeGroup",
    "NodeInput",
    "NodeOutput",
    "Point2D",
    "Size2D",
    # data_types.py
    "DataType",
    "MediaFile",
    "MediaKind",
    "ParameterValue",
    # node_types.py
    "GenerationProfile",
    "InputDefinition",
    "NodeCategory",
    "NodeExecutor",
    "NodeRegistry",
    "NodeRole",
    "NodeType",
    "OutputDefinition",
    "ParameterDefinition",
    "ParameterType",
    # execution_order.py
    "ExecutionOrder",
    "resolve",
    # generation.py
    "GenerationJob",
    "PollingPolicy",
    "IMAGE_POLLING",
    "VIDEO_POLLING",
    # execution.py
    "ExecutionProgress",
    "RunContext",
    "RunOutcome",
    "RunStatus",
    "WorkflowOrchestrator",
    # workflow_document.py
    "NODE_TYPE_MIGRATIONS",
    "WorkflowDocument",
    "WorkflowManager",
    "export_workflow",
    "import_workflow",
    "validate_workflow",
]
