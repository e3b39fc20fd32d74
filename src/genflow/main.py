"""
GenFlow - Command line entry point.

Usage:
    genflow run workflow.json -o finished.json
    genflow inspect workflow.json
    genflow migrate old.json -o new.json
    genflow nodes
    genflow configure --provider wavespeed --api-key KEY
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from genflow.core.execution import ExecutionProgress, RunContext, RunStatus, WorkflowOrchestrator
from genflow.core.graph import Node
from genflow.core.node_types import NodeRegistry
from genflow.core.workflow_document import WorkflowManager
from genflow.errors import InvalidDocument, NodeGenerationFailed, UnknownProvider
from genflow.nodes import register_all_nodes
from genflow.providers import ProviderConfig, get_registry


logger = logging.getLogger("genflow")


def _load_providers(config_path: Path | None):
    registry = get_registry()
    registry.load_config(config_path)
    return registry


def _print_progress(progress: ExecutionProgress) -> None:
    if progress.status is RunStatus.RUNNING and progress.node_id is None:
        print(f"{progress.message} ({progress.nodes_total} steps)")
    elif progress.status is RunStatus.FAILED:
        print(f"✗ {progress.message}: {progress.error}")
    elif progress.node_id is not None:
        print(f"[{progress.progress_percent:5.1f}%] {progress.message}")


def _print_node_update(node: Node) -> None:
    logger.debug(f"Node {node.id} ({node.title}): {node.status}")


# ============================================================================
# Commands
# ============================================================================

def cmd_run(args: argparse.Namespace) -> int:
    """Run every generator of a workflow file."""
    registry = _load_providers(args.config)
    manager = WorkflowManager()
    graph = manager.import_file(args.workflow)

    context = RunContext(
        registry=registry,
        on_progress=_print_progress,
        on_node_update=_print_node_update,
    )

    exit_code = 0
    try:
        outcome = asyncio.run(WorkflowOrchestrator().run_all(graph, context))
    except NodeGenerationFailed as e:
        print(f"✗ Error: {e}")
        exit_code = 1
    else:
        if outcome.status is RunStatus.NO_GENERATORS:
            print("No generator nodes in workflow")
        else:
            print("✓ Workflow complete")
            for node_id, url in outcome.results.items():
                node = graph.get_node(node_id)
                print(f"  • {node.title if node else node_id}: {url}")

    if args.output:
        path = manager.export_file(args.output)
        print(f"Saved workflow to: {path}")

    return exit_code


def cmd_inspect(args: argparse.Namespace) -> int:
    """Show execution order, roles and detected cycles."""
    graph = WorkflowManager().import_file(args.workflow)
    order = graph.get_execution_order()

    print(f"Nodes: {len(graph)}  Links: {len(graph.links)}  Groups: {len(graph.groups)}")
    print("\nExecution order:")
    for index, node in enumerate(order, start=1):
        print(f"  {index:>2}. [{node.id}] {node.title} ({node.type_id}) "
              f"role={node.role.value} status={node.status}")

    if order.cycles:
        print("\nCycles (skipped edges):")
        for origin_id, target_id in order.cycles:
            print(f"  • {origin_id} -> {target_id}")

    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    """Rewrite a workflow with current node types."""
    manager = WorkflowManager()
    manager.import_file(args.workflow)

    if args.output:
        path = manager.export_file(args.output)
        print(f"Saved migrated workflow to: {path}")
    else:
        print(manager.export_workflow().to_json())

    return 0


def cmd_nodes(args: argparse.Namespace) -> int:
    """List the available node types."""
    node_types = sorted(NodeRegistry.instance().get_all(), key=lambda t: t.id)
    for node_type in node_types:
        line = f"  {node_type.id}: {node_type.name} [{node_type.role.value}]"
        if node_type.generation:
            line += f" provider={node_type.generation.default_provider}"
        print(line)
    return 0


def cmd_configure(args: argparse.Namespace) -> int:
    """Store provider settings."""
    registry = _load_providers(args.config)
    if not registry.has_provider(args.provider):
        raise UnknownProvider(args.provider)

    provider_id = args.provider.lower()
    current = registry.get_config(provider_id)
    registry.set_config(provider_id, ProviderConfig(
        api_key=args.api_key if args.api_key is not None else current.api_key,
        enabled=not args.disable,
        base_url=args.base_url if args.base_url is not None else current.base_url,
        extra=current.extra,
    ))
    path = registry.save_config(args.config)

    print(f"✓ Saved {provider_id} configuration to {path}")
    print("Configured providers:")
    for pid in registry.list_providers():
        has_key = "✓" if registry.get_api_key(pid) else "✗"
        print(f"  {pid}: [{has_key}]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genflow",
        description="Run node-graph workflows against remote generation providers",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Provider config file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run all generators in a workflow")
    run.add_argument("workflow", type=Path, help="Workflow JSON file")
    run.add_argument("-o", "--output", type=Path, help="Write the finished workflow here")
    run.set_defaults(func=cmd_run)

    inspect = subparsers.add_parser("inspect", help="Show execution order and cycles")
    inspect.add_argument("workflow", type=Path, help="Workflow JSON file")
    inspect.set_defaults(func=cmd_inspect)

    migrate = subparsers.add_parser("migrate", help="Rewrite old node types")
    migrate.add_argument("workflow", type=Path, help="Workflow JSON file")
    migrate.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    migrate.set_defaults(func=cmd_migrate)

    nodes = subparsers.add_parser("nodes", help="List available node types")
    nodes.set_defaults(func=cmd_nodes)

    configure = subparsers.add_parser("configure", help="Store provider settings")
    configure.add_argument("--provider", required=True, help="Provider id (wavespeed, fal)")
    configure.add_argument("--api-key", default=None, help="API key")
    configure.add_argument("--base-url", default=None, help="Override the API base URL")
    configure.add_argument("--disable", action="store_true", help="Disable the provider")
    configure.set_defaults(func=cmd_configure)

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for GenFlow.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    register_all_nodes()

    try:
        return args.func(args)
    except InvalidDocument as e:
        print(f"✗ Invalid workflow: {e}")
        return 2
    except UnknownProvider as e:
        print(f"✗ Error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
