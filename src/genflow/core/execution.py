"""
Workflow Execution - Full-graph runs.

The orchestrator resolves the execution order, partitions the ordered
nodes by role and processes the partitions strictly in sequence:

    prompt nodes -> generator nodes -> preview nodes

Each generator's job is awaited to a terminal state before the next one
starts. All state of a single run lives in a RunContext.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable
from uuid import uuid4

from genflow.core.dataflow import execute_node
from genflow.core.generation import (
    CredentialLookup,
    GenerationJob,
    NodeCallback,
    SleepFunction,
    generation_profile,
    provider_name_for,
)
from genflow.core.graph import GenerationPhase, GenerationState, Node, NodeGraph
from genflow.core.node_types import NodeRole
from genflow.errors import ConfigurationError, NodeGenerationFailed
from genflow.providers.client import HttpTransport, ProviderClient
from genflow.providers.registry import ProviderRegistry, get_registry


logger = logging.getLogger(__name__)


class RunStatus(Enum):
    """Status of a workflow run."""
    RUNNING = auto()
    SUCCESS = auto()
    NO_GENERATORS = auto()
    FAILED = auto()


@dataclass
class ExecutionProgress:
    """Progress information for a run."""
    run_id: str
    status: RunStatus
    node_id: int | None = None
    node_title: str = ""
    role: NodeRole | None = None
    nodes_completed: int = 0
    nodes_total: int = 0
    message: str = ""
    error: str | None = None

    @property
    def progress_percent(self) -> float:
        if self.nodes_total == 0:
            return 0.0
        return (self.nodes_completed / self.nodes_total) * 100


@dataclass
class RunOutcome:
    """Result of a completed run."""
    status: RunStatus
    run_id: str = ""
    completed: list[int] = field(default_factory=list)
    results: dict[int, str] = field(default_factory=dict)
    cycles: list[tuple[int, int]] = field(default_factory=list)


class RunContext:
    """
    Everything a single run needs.

    Provides access to:
    - The provider registry and the credential lookup
    - The HTTP transport (a ProviderClient is created on demand and
      closed with the context)
    - The sleep function used between polls
    - Progress and node-update callbacks
    - The jobs started during this run
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        credentials: CredentialLookup | None = None,
        transport: HttpTransport | None = None,
        sleep: SleepFunction = asyncio.sleep,
        on_progress: Callable[[ExecutionProgress], None] | None = None,
        on_node_update: NodeCallback | None = None,
        run_id: str | None = None,
    ):
        self.run_id = run_id or uuid4().hex
        self.registry = registry or get_registry()
        self.credentials = credentials or self.registry.get_api_key
        self.sleep = sleep
        self._transport = transport
        self._owned_client: ProviderClient | None = None
        self._on_progress = on_progress
        self._on_node_update = on_node_update
        self.jobs: dict[int, GenerationJob] = {}

    @property
    def transport(self) -> HttpTransport:
        if self._transport is None:
            self._owned_client = ProviderClient()
            self._transport = self._owned_client
        return self._transport

    def report_progress(self, progress: ExecutionProgress) -> None:
        """Report progress to listeners."""
        if self._on_progress:
            self._on_progress(progress)

    def notify_node(self, node: Node) -> None:
        if self._on_node_update:
            self._on_node_update(node)

    def create_job(self, graph: NodeGraph, node: Node) -> GenerationJob:
        """
        Create the job for a generator node.

        Raises:
            UnknownProvider: The node's provider has no adapter
        """
        _, profile = generation_profile(node)
        adapter = self.registry.get_adapter(provider_name_for(node, profile))
        job = GenerationJob(
            graph,
            node,
            adapter,
            self.transport,
            self.credentials,
            sleep=self.sleep,
            on_update=self._on_node_update,
        )
        self.jobs[node.id] = job
        return job

    async def close(self) -> None:
        """Release the ProviderClient this context created, if any."""
        if self._owned_client is not None:
            await self._owned_client.close()
            self._owned_client = None
            self._transport = None


class WorkflowOrchestrator:
    """
    Runs a whole workflow graph.

    Features:
    - Deterministic, cycle-safe ordering
    - Sequential generator jobs (never two in flight)
    - Progress reporting
    - Abort on the first failed generator
    """

    async def run_all(self, graph: NodeGraph, context: RunContext | None = None) -> RunOutcome:
        """
        Run every generator in the graph.

        Returns:
            RunOutcome with status SUCCESS, or NO_GENERATORS when there
            is nothing to generate

        Raises:
            NodeGenerationFailed: A generator ended without a result
        """
        context = context or RunContext()
        try:
            return await self._run(graph, context)
        finally:
            await context.close()

    async def _run(self, graph: NodeGraph, context: RunContext) -> RunOutcome:
        graph.reset_step_markers()
        order = graph.get_execution_order()
        if order.cycles:
            logger.warning(f"Workflow contains cycles; skipped edges: {order.cycles}")

        prompts = [n for n in order if n.role is NodeRole.PROMPT]
        generators = [
            n for n in order
            if n.role is NodeRole.GENERATOR and not n.is_generating
        ]
        previews = [n for n in order if n.role is NodeRole.PREVIEW]

        if not generators:
            logger.info("No generator nodes to run")
            context.report_progress(ExecutionProgress(
                run_id=context.run_id,
                status=RunStatus.NO_GENERATORS,
                message="No generator nodes found",
            ))
            return RunOutcome(
                status=RunStatus.NO_GENERATORS,
                run_id=context.run_id,
                cycles=order.cycles,
            )

        total = len(prompts) + len(generators) + len(previews)
        completed: list[int] = []
        results: dict[int, str] = {}

        context.report_progress(ExecutionProgress(
            run_id=context.run_id,
            status=RunStatus.RUNNING,
            nodes_total=total,
            message="Starting workflow",
        ))

        for node in prompts:
            await execute_node(graph, node)
            self._step_done(context, node, completed, total)

        for node in generators:
            context.report_progress(ExecutionProgress(
                run_id=context.run_id,
                status=RunStatus.RUNNING,
                node_id=node.id,
                node_title=node.title,
                role=node.role,
                nodes_completed=len(completed),
                nodes_total=total,
                message=f"Generating {node.title}",
            ))

            state = await self._generate(graph, node, context)
            if state.phase is GenerationPhase.ERROR or not state.result_url:
                message = state.error_message or "No result"
                self._abort(graph, context, node, message, len(completed), total)
                raise NodeGenerationFailed(node.id, message)

            results[node.id] = state.result_url
            self._step_done(context, node, completed, total)

        for node in previews:
            await execute_node(graph, node)
            self._step_done(context, node, completed, total)

        context.report_progress(ExecutionProgress(
            run_id=context.run_id,
            status=RunStatus.SUCCESS,
            nodes_completed=total,
            nodes_total=total,
            message="Workflow complete",
        ))
        logger.info(f"Workflow run {context.run_id} complete: {len(results)} generated")

        return RunOutcome(
            status=RunStatus.SUCCESS,
            run_id=context.run_id,
            completed=completed,
            results=results,
            cycles=order.cycles,
        )

    async def _generate(self, graph: NodeGraph, node: Node, context: RunContext) -> GenerationState:
        try:
            job = context.create_job(graph, node)
        except ConfigurationError as e:
            state = GenerationState()
            state.fail(e)
            node.generation = state
            logger.warning(f"Node {node.id} failed: {state.error_message}")
            context.notify_node(node)
            return state
        return await job.run()

    def _step_done(
        self,
        context: RunContext,
        node: Node,
        completed: list[int],
        total: int,
    ) -> None:
        node.step_complete = True
        completed.append(node.id)
        context.report_progress(ExecutionProgress(
            run_id=context.run_id,
            status=RunStatus.RUNNING,
            node_id=node.id,
            node_title=node.title,
            role=node.role,
            nodes_completed=len(completed),
            nodes_total=total,
            message=f"Completed {node.title}",
        ))

    def _abort(
        self,
        graph: NodeGraph,
        context: RunContext,
        node: Node,
        message: str,
        done: int,
        total: int,
    ) -> None:
        graph.reset_step_markers()
        logger.warning(f"Workflow run {context.run_id} aborted at node {node.id}: {message}")
        context.report_progress(ExecutionProgress(
            run_id=context.run_id,
            status=RunStatus.FAILED,
            node_id=node.id,
            node_title=node.title,
            role=node.role,
            nodes_completed=done,
            nodes_total=total,
            message=f"Node {node.id} failed to generate",
            error=message,
        ))
