"""
Generation Jobs - Submit/poll lifecycle of one generator node.

A GenerationJob drives a single generator node through

    IDLE -> SUBMITTING -> PROCESSING -> COMPLETE | ERROR

against one provider adapter. The job owns every HTTP call; the adapter
only builds request bodies and reads replies. Node-level errors are
captured into the node's GenerationState and never escape run().
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import aiohttp

from genflow.core.data_types import MediaKind
from genflow.core.dataflow import gather_inputs, notify_downstream, refresh_origins
from genflow.core.graph import (
    STATUS_COMPLETE,
    STATUS_PROCESSING,
    STATUS_SUBMITTING,
    GenerationPhase,
    GenerationState,
    Node,
    NodeGraph,
)
from genflow.core.node_types import GenerationProfile, NodeRegistry, NodeType
from genflow.errors import (
    EmptyResult,
    GenerationFailed,
    GenerationTimeout,
    MissingCredential,
    MissingInput,
    NodeError,
    PollFailed,
    SubmitFailed,
)
from genflow.providers.base import JobStatus, ProviderAdapter, SubmitResponse
from genflow.providers.client import HttpTransport


logger = logging.getLogger(__name__)

CredentialLookup = Callable[[str], "str | None"]
SleepFunction = Callable[[float], Awaitable[Any]]
NodeCallback = Callable[[Node], None]


@dataclass(frozen=True)
class PollingPolicy:
    """Fixed-interval polling with an attempt ceiling."""
    interval: float
    max_attempts: int


IMAGE_POLLING = PollingPolicy(interval=2.0, max_attempts=60)
VIDEO_POLLING = PollingPolicy(interval=3.0, max_attempts=120)


def polling_for(media: MediaKind) -> PollingPolicy:
    return VIDEO_POLLING if media is MediaKind.VIDEO else IMAGE_POLLING


def generation_profile(node: Node) -> tuple[NodeType, GenerationProfile]:
    """
    Node type and generation profile of a generator node.

    Raises:
        ValueError: The node is not a registered generator
    """
    node_type = NodeRegistry.instance().get(node.type_id)
    if node_type is None or node_type.generation is None:
        raise ValueError(f"Node {node.id} ({node.type_id}) is not a generator")
    return node_type, node_type.generation


def provider_name_for(node: Node, profile: GenerationProfile) -> str:
    """The node's provider property, or the type's default provider."""
    return node.get_property("provider") or profile.default_provider


class GenerationJob:
    """
    Drives one generator node through a remote generation.

    Args:
        graph: Graph the node belongs to
        node: Generator node
        adapter: Adapter of the node's provider
        transport: HTTP transport (ProviderClient or a stand-in)
        credentials: provider id -> API key (or None)
        policy: Polling policy, defaults to the one for the node's media
        sleep: Delay function awaited between polls
        on_update: Called with the node on every state transition
    """

    def __init__(
        self,
        graph: NodeGraph,
        node: Node,
        adapter: ProviderAdapter,
        transport: HttpTransport,
        credentials: CredentialLookup,
        policy: PollingPolicy | None = None,
        sleep: SleepFunction = asyncio.sleep,
        on_update: NodeCallback | None = None,
    ):
        self.graph = graph
        self.node = node
        self.adapter = adapter
        self.transport = transport
        self.credentials = credentials
        self.node_type, self.profile = generation_profile(node)
        self.policy = policy or polling_for(self.profile.media)
        self._sleep = sleep
        self._on_update = on_update

    @property
    def state(self) -> GenerationState | None:
        return self.node.generation

    async def run(self) -> GenerationState:
        """
        Run the job to a terminal state.

        Calling run() while the node is already submitting or processing
        returns the live state without submitting again.
        """
        node = self.node
        if node.is_generating:
            logger.debug(f"Node {node.id} is already generating")
            return node.generation

        # Claim the node before the first suspension point
        state = GenerationState(
            phase=GenerationPhase.SUBMITTING,
            started_at=time.monotonic(),
            status=STATUS_SUBMITTING,
        )
        node.generation = state

        try:
            await self._execute(state)
        except NodeError as e:
            self._fail(state, e)
        except Exception as e:
            logger.exception(f"Unexpected error while generating node {node.id}")
            self._fail(state, e)

        return state

    # --- Lifecycle ---

    async def _execute(self, state: GenerationState) -> None:
        node = self.node
        operation = self.profile.operation

        await refresh_origins(self.graph, node)
        inputs = gather_inputs(self.graph, node)
        for definition in self.node_type.inputs:
            if definition.required and not inputs.get(definition.name):
                raise MissingInput(definition.label.lower())

        api_key = self.credentials(self.adapter.id)
        if not api_key:
            raise MissingCredential(self.adapter.id)

        url = self.adapter.endpoint_url(operation)

        params = self.profile.build_params(inputs, node.effective_properties())
        body = self.adapter.build_request_body(operation, params)
        state.request_payload = body
        self._publish_data(state)
        self._notify()

        logger.debug(f"Node {node.id}: submitting {operation.value} to {self.adapter.id}")
        headers = self.adapter.get_headers(api_key)
        try:
            response = await self.transport.post(url, body, headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SubmitFailed(None, str(e) or type(e).__name__) from e
        if not response.ok:
            raise SubmitFailed(response.status, response.text)

        submitted = self.adapter.parse_response(operation, response.data)
        state.request_id = submitted.request_id
        state.phase = GenerationPhase.PROCESSING
        state.status = STATUS_PROCESSING
        self._notify()

        await self._poll(state, submitted, {"Authorization": self.adapter.auth_header(api_key)})

    async def _poll(
        self,
        state: GenerationState,
        submitted: SubmitResponse,
        headers: dict[str, str],
    ) -> None:
        while True:
            data = await self._fetch(submitted.status_url, headers)
            update = self.adapter.parse_status(data)

            if update.status is JobStatus.FAILED:
                raise GenerationFailed(update.error_message or "Generation failed")

            if update.status is JobStatus.COMPLETED:
                if not update.outputs and update.followup_url:
                    data = await self._fetch(update.followup_url, headers)
                    update = self.adapter.parse_status(data)
                if not update.outputs:
                    raise EmptyResult(f"No {self.profile.media.value} in response")
                await self._complete(state, update.outputs[0], data)
                return

            state.attempt_count += 1
            if state.attempt_count >= self.policy.max_attempts:
                raise GenerationTimeout(state.attempt_count)

            elapsed = update.elapsed_seconds or state.elapsed
            state.status = f"{STATUS_PROCESSING} ({round(elapsed)}s)"
            self._notify()
            await self._sleep(self.policy.interval)

    async def _fetch(self, url: str, headers: dict[str, str]) -> Any:
        try:
            response = await self.transport.get(url, headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PollFailed(None, str(e) or type(e).__name__) from e
        if not response.ok:
            raise PollFailed(response.status, response.text)
        return response.data

    async def _complete(self, state: GenerationState, result_url: str, payload: Any) -> None:
        node = self.node
        state.phase = GenerationPhase.COMPLETE
        state.result_url = result_url
        state.response_payload = payload
        state.status = STATUS_COMPLETE

        node.set_output_data(0, result_url)
        self._publish_data(state)
        logger.info(f"Node {node.id} complete: {result_url}")
        self._notify()

        await notify_downstream(self.graph, node)

    def _fail(self, state: GenerationState, error: Exception) -> None:
        state.fail(error)
        logger.warning(f"Node {self.node.id} failed: {state.error_message}")
        self._notify()

    # --- Helpers ---

    def _publish_data(self, state: GenerationState) -> None:
        slot = self.node.find_output_slot("data")
        if slot >= 0:
            self.node.set_output_data(slot, {
                "request": state.request_payload,
                "response": state.response_payload,
            })

    def _notify(self) -> None:
        if self._on_update is not None:
            try:
                self._on_update(self.node)
            except Exception:
                logger.exception(f"Update callback failed for node {self.node.id}")
