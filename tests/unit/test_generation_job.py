"""
Tests for the submit/poll lifecycle of generator nodes.
"""

import asyncio

import aiohttp
import pytest

from genflow.core.generation import (
    IMAGE_POLLING,
    VIDEO_POLLING,
    GenerationJob,
    PollingPolicy,
    generation_profile,
    polling_for,
)
from genflow.core.data_types import MediaKind
from genflow.core.graph import GenerationPhase, NodeGraph
from genflow.core.node_types import NodeRegistry
from genflow.errors import GenerationTimeout, MissingCredential, MissingInput, SubmitFailed
from genflow.providers import FalAdapter, WavespeedAdapter


STATUS_URL = "https://api.wavespeed.ai/api/v3/predictions/task-1/result"
RESULT_URL = "https://cdn.wavespeed.ai/outputs/task-1.jpeg"


def submitted():
    return {"code": 200, "data": {"id": "task-1", "urls": {"get": STATUS_URL}}}


def status(value, outputs=None, **extra):
    return {"code": 200, "data": {"status": value, "outputs": outputs or [], **extra}}


def keys(provider_id):
    return "test-key"


def no_keys(provider_id):
    return None


def make_job(graph, node, transport, sleep, adapter=None, credentials=keys, **kwargs):
    return GenerationJob(
        graph,
        node,
        adapter or WavespeedAdapter(),
        transport,
        credentials,
        sleep=sleep,
        **kwargs,
    )


class TestPollingPolicy:
    """Tests for polling policy selection."""

    def test_policies(self):
        assert IMAGE_POLLING == PollingPolicy(interval=2.0, max_attempts=60)
        assert VIDEO_POLLING == PollingPolicy(interval=3.0, max_attempts=120)
        assert polling_for(MediaKind.IMAGE) is IMAGE_POLLING
        assert polling_for(MediaKind.VIDEO) is VIDEO_POLLING

    def test_generation_profile_rejects_non_generators(self):
        node = NodeRegistry.instance().create_node("ai-tools/text/prompt")
        with pytest.raises(ValueError):
            generation_profile(node)


class TestGenerationJob:
    """Tests for GenerationJob."""

    @pytest.mark.asyncio
    async def test_success(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(
            posts=[ok(submitted())],
            gets=[
                ok(status("processing", executionTime=1.4)),
                ok(status("completed", [RESULT_URL])),
            ],
        )
        updates = []

        state = await make_job(
            graph, generator, transport, sleeps,
            on_update=lambda node: updates.append(node.status),
        ).run()

        assert state.phase is GenerationPhase.COMPLETE
        assert state.result_url == RESULT_URL
        assert state.request_id == "task-1"
        assert state.attempt_count == 1
        assert generator.status == "✓ Complete"
        assert generator.get_output_data(0) == RESULT_URL
        assert "Processing... (1s)" in updates
        assert sleeps.delays == [2.0]

        url, body, headers = transport.post_calls[0]
        assert url == "https://api.wavespeed.ai/api/v3/wavespeed-ai/flux-schnell"
        assert body["prompt"] == "a lighthouse at dusk"
        assert body["size"] == "1024*1024"
        assert headers["Authorization"] == "Bearer test-key"
        assert transport.get_calls[0] == (STATUS_URL, {"Authorization": "Bearer test-key"})

    @pytest.mark.asyncio
    async def test_result_pushed_downstream(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(
            posts=[ok(submitted())],
            gets=[ok(status("completed", [RESULT_URL]))],
        )

        await make_job(graph, generator, transport, sleeps).run()

        assert preview.display_value == RESULT_URL
        assert preview.get_output_data(0) == RESULT_URL

    @pytest.mark.asyncio
    async def test_data_output_carries_request_and_response(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        completed = status("completed", [RESULT_URL])
        transport = transport_cls(posts=[ok(submitted())], gets=[ok(completed)])

        await make_job(graph, generator, transport, sleeps).run()

        data = generator.get_output_data(generator.find_output_slot("data"))
        assert data["request"]["prompt"] == "a lighthouse at dusk"
        assert data["response"] == completed

    @pytest.mark.asyncio
    async def test_uses_uncommitted_prompt_edit(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        prompt.set_widget_value("prompt", "a storm at sea")
        transport = transport_cls(
            posts=[ok(submitted())],
            gets=[ok(status("completed", [RESULT_URL]))],
        )

        await make_job(graph, generator, transport, sleeps).run()

        assert transport.post_calls[0][1]["prompt"] == "a storm at sea"

    @pytest.mark.asyncio
    async def test_missing_prompt(self, flux_graph, transport_cls, sleeps):
        graph, prompt, generator, preview = flux_graph
        prompt.set_property("prompt", "")
        transport = transport_cls(posts=[], gets=[])

        state = await make_job(graph, generator, transport, sleeps).run()

        assert state.phase is GenerationPhase.ERROR
        assert isinstance(state.error, MissingInput)
        assert generator.status == "Error: No prompt"
        assert transport.post_calls == []

    @pytest.mark.asyncio
    async def test_missing_credential(self, flux_graph, transport_cls, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(posts=[], gets=[])

        state = await make_job(graph, generator, transport, sleeps, credentials=no_keys).run()

        assert isinstance(state.error, MissingCredential)
        assert state.error_message == "No WAVESPEED API key"
        assert transport.post_calls == []

    @pytest.mark.asyncio
    async def test_submit_rejected(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(posts=[ok({"message": "unauthorized"}, status=401)], gets=[])

        state = await make_job(graph, generator, transport, sleeps).run()

        assert isinstance(state.error, SubmitFailed)
        assert state.error.status == 401
        assert state.error_message.startswith("Request failed: 401")
        assert transport.get_calls == []

    @pytest.mark.asyncio
    async def test_submit_connection_error(self, flux_graph, transport_cls, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(posts=[aiohttp.ClientConnectionError("refused")], gets=[])

        state = await make_job(graph, generator, transport, sleeps).run()

        assert isinstance(state.error, SubmitFailed)
        assert state.error_message == "Request failed: refused"

    @pytest.mark.asyncio
    async def test_poll_failure(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(posts=[ok(submitted())], gets=[ok({}, status=502)])

        state = await make_job(graph, generator, transport, sleeps).run()

        assert state.phase is GenerationPhase.ERROR
        assert state.error_message == "Poll failed: 502"

    @pytest.mark.asyncio
    async def test_provider_reports_failure(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(
            posts=[ok(submitted())],
            gets=[ok(status("failed", error="content policy violation"))],
        )

        state = await make_job(graph, generator, transport, sleeps).run()

        assert generator.status == "Error: content policy violation"
        assert preview.display_value is None

    @pytest.mark.asyncio
    async def test_completed_without_outputs(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(posts=[ok(submitted())], gets=[ok(status("completed"))])

        state = await make_job(graph, generator, transport, sleeps).run()

        assert state.error_message == "No image in response"

    @pytest.mark.asyncio
    async def test_timeout_after_max_attempts(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(posts=[ok(submitted())], gets=[ok(status("processing"))])

        state = await make_job(graph, generator, transport, sleeps).run()

        assert isinstance(state.error, GenerationTimeout)
        assert state.error_message == "Timeout waiting for result"
        assert state.attempt_count == 60
        assert len(transport.get_calls) == 60
        assert len(sleeps.delays) == 59

    @pytest.mark.asyncio
    async def test_custom_policy(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(posts=[ok(submitted())], gets=[ok(status("queued"))])

        state = await make_job(
            graph, generator, transport, sleeps,
            policy=PollingPolicy(interval=0.5, max_attempts=3),
        ).run()

        assert state.attempt_count == 3
        assert sleeps.delays == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_second_run_while_active_does_not_resubmit(self, flux_graph, transport_cls, ok):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(
            posts=[ok(submitted())],
            gets=[ok(status("processing")), ok(status("completed", [RESULT_URL]))],
        )

        async def sleep(delay):
            await asyncio.sleep(0)

        first = make_job(graph, generator, transport, sleep)
        second = make_job(graph, generator, transport, sleep)
        states = await asyncio.gather(first.run(), second.run())

        assert len(transport.post_calls) == 1
        assert states[0] is states[1]
        assert states[0].phase is GenerationPhase.COMPLETE

    @pytest.mark.asyncio
    async def test_rerun_replaces_state(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(
            posts=[ok(submitted())],
            gets=[ok(status("completed", [RESULT_URL]))],
        )

        first = await make_job(graph, generator, transport, sleeps).run()
        second = await make_job(graph, generator, transport, sleeps).run()

        assert second is not first
        assert generator.generation is second
        assert len(transport.post_calls) == 2

    @pytest.mark.asyncio
    async def test_raising_update_callback_does_not_escape(self, flux_graph, transport_cls, ok, sleeps):
        graph, prompt, generator, preview = flux_graph
        transport = transport_cls(
            posts=[ok(submitted())],
            gets=[ok(status("completed", [RESULT_URL]))],
        )

        def broken(node):
            raise RuntimeError("listener went away")

        state = await make_job(graph, generator, transport, sleeps, on_update=broken).run()

        assert state.phase is GenerationPhase.COMPLETE
        assert generator.result_url == RESULT_URL

    @pytest.mark.asyncio
    async def test_raising_update_callback_on_failure(self, flux_graph, transport_cls, sleeps):
        graph, prompt, generator, preview = flux_graph
        prompt.set_property("prompt", "")
        transport = transport_cls(posts=[], gets=[])

        def broken(node):
            raise RuntimeError("listener went away")

        state = await make_job(graph, generator, transport, sleeps, on_update=broken).run()

        assert state.phase is GenerationPhase.ERROR
        assert isinstance(state.error, MissingInput)
        assert generator.status == "Error: No prompt"


class TestFalFollowup:
    """Tests for result fetching on fal.ai."""

    @pytest.mark.asyncio
    async def test_completed_status_fetches_result(self, transport_cls, ok, sleeps):
        registry = NodeRegistry.instance()
        graph = NodeGraph()
        prompt = graph.add_node(registry.create_node("ai-tools/text/prompt"))
        generator = graph.add_node(
            registry.create_node("ai-providers/text-to-image/flux_schnell_fal")
        )
        graph.connect(prompt.id, 0, generator.id, 0)
        prompt.set_property("prompt", "a red fox")

        status_url = "https://queue.fal.run/fal-ai/flux-1/requests/req-1/status"
        response_url = "https://queue.fal.run/fal-ai/flux-1/requests/req-1"
        transport = transport_cls(
            posts=[ok({"request_id": "req-1", "status_url": status_url, "response_url": response_url})],
            gets=[
                ok({"status": "IN_PROGRESS"}),
                ok({"status": "COMPLETED", "response_url": response_url}),
                ok({"images": [{"url": "https://fal.media/fox.jpeg"}], "seed": 7}),
            ],
        )

        state = await make_job(graph, generator, transport, sleeps, adapter=FalAdapter()).run()

        assert state.result_url == "https://fal.media/fox.jpeg"
        assert [url for url, _ in transport.get_calls] == [status_url, status_url, response_url]
        assert transport.get_calls[0][1] == {"Authorization": "Key test-key"}

        body = transport.post_calls[0][1]
        assert body["image_size"] == "square_hd"
        assert body["acceleration"] == "regular"
        assert "seed" not in body
