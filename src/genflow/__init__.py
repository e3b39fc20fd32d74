"""
GenFlow - Node-graph workflows for remote AI image and video generation.

Usage:
    from genflow import WorkflowManager, WorkflowOrchestrator

    manager = WorkflowManager()
    graph = manager.import_file("workflow.json")
    outcome = asyncio.run(WorkflowOrchestrator().run_all(graph))
"""

__version__ = "0.1.0"

from genflow.core import (
    NodeGraph,
    NodeRegistry,
    RunContext,
    RunOutcome,
    RunStatus,
    WorkflowManager,
    WorkflowOrchestrator,
    export_workflow,
    import_workflow,
)
from genflow.nodes import register_all_nodes

# Built-in node types are available as soon as the package is imported
register_all_nodes()


__all__ = [
    "__version__",
    "NodeGraph",
    "NodeRegistry",
    "RunContext",
    "RunOutcome",
    "RunStatus",
    "WorkflowManager",
    "WorkflowOrchestrator",
    "export_workflow",
    "import_workflow",
    "register_all_nodes",
]
