"""
Generation Providers.

This package provides adapters for the remote generation services:
- Wavespeed: FLUX Schnell, Image Upscaler, Qwen Image Edit, Midjourney Video
- Fal: FLUX.1 Schnell, Clarity Upscaler, MiniMax Video-01

Usage:
    from genflow.providers import get_registry

    registry = get_registry()
    registry.load_config()

    adapter = registry.get_adapter("wavespeed")
    api_key = registry.get_api_key("wavespeed")
"""

from genflow.providers.base import (
    AuthScheme,
    JobStatus,
    Operation,
    ProviderAdapter,
    ProviderConfig,
    StatusUpdate,
    SubmitResponse,
)

from genflow.providers.client import HttpResponse, HttpTransport, ProviderClient

from genflow.providers.registry import (
    ProviderRegistry,
    get_registry,
)

# Import adapters to register them
from genflow.providers.wavespeed import WavespeedAdapter
from genflow.providers.fal import FalAdapter


# Auto-register adapters
def _register_providers():
    registry = get_registry()
    registry.register_provider(WavespeedAdapter)
    registry.register_provider(FalAdapter)

_register_providers()


__all__ = [
    # Base classes
    "ProviderAdapter",
    "ProviderConfig",
    "Operation",
    "AuthScheme",
    "JobStatus",
    "SubmitResponse",
    "StatusUpdate",
    # Transport
    "HttpResponse",
    "HttpTransport",
    "ProviderClient",
    # Registry
    "ProviderRegistry",
    "get_registry",
    # Adapters
    "WavespeedAdapter",
    "FalAdapter",
]
