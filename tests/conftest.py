from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    """
    Ensure `src/` is on sys.path so tests can import `genflow`
    without requiring an editable install.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"
    sys.path.insert(0, str(src_root))


class ScriptedTransport:
    """
    Stand-in HTTP transport that replays scripted responses.

    Items are HttpResponse objects or exceptions to raise. The last GET
    response repeats once the script runs out.
    """

    def __init__(self, posts=None, gets=None):
        self.post_script = list(posts or [])
        self.get_script = list(gets or [])
        self.post_calls: list[tuple[str, dict, dict]] = []
        self.get_calls: list[tuple[str, dict]] = []

    async def post(self, url, json_body, headers):
        self.post_calls.append((url, json_body, headers))
        return self._next(self.post_script)

    async def get(self, url, headers):
        self.get_calls.append((url, headers))
        return self._next(self.get_script)

    @staticmethod
    def _next(script):
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def transport_cls():
    return ScriptedTransport


@pytest.fixture
def ok():
    """Build a 200 HttpResponse around a JSON payload."""
    from genflow.providers.client import HttpResponse

    def build(data, status: int = 200):
        return HttpResponse(status=status, data=data, text=str(data))

    return build


@pytest.fixture
def sleeps():
    """Recording no-op sleep."""
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    sleep.delays = delays
    return sleep


@pytest.fixture
def flux_graph():
    """prompt -> flux schnell (wavespeed) -> image preview"""
    from genflow.core.graph import NodeGraph
    from genflow.core.node_types import NodeRegistry

    registry = NodeRegistry.instance()
    graph = NodeGraph()
    prompt = graph.add_node(registry.create_node("ai-tools/text/prompt"))
    generator = graph.add_node(
        registry.create_node("ai-providers/text-to-image/flux_schnell_wavespeed")
    )
    preview = graph.add_node(registry.create_node("ai-tools/image/image_preview"))
    graph.connect(prompt.id, 0, generator.id, 0)
    graph.connect(generator.id, 0, preview.id, 0)
    prompt.set_property("prompt", "a lighthouse at dusk")
    return graph, prompt, generator, preview


@pytest.fixture
def provider_registry(monkeypatch):
    """The global provider registry with no stored configuration."""
    from genflow.providers import get_registry

    monkeypatch.delenv("WAVESPEED_API_KEY", raising=False)
    monkeypatch.delenv("FAL_KEY", raising=False)
    registry = get_registry()
    registry.clear_configs()
    yield registry
    registry.clear_configs()
