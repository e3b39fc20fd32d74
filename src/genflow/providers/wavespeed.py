"""
Wavespeed Provider - Wavespeed AI hosted models.

Supports:
- FLUX Schnell: Text-to-image
- Image Upscaler: 2k/4k/8k upscaling
- Qwen Image Edit: Prompted image editing
- Midjourney Video: Image-to-video

API Reference: https://wavespeed.ai/docs
Note: Every reply is wrapped in {"code": 200, "data": {...}}
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from genflow.errors import InvalidResponse
from genflow.providers.base import (
    AuthScheme,
    JobStatus,
    Operation,
    ProviderAdapter,
    StatusUpdate,
    SubmitResponse,
    drop_none,
)


class WavespeedAdapter(ProviderAdapter):
    """
    Wavespeed AI adapter.

    Submit replies carry the task id and a polling URL under
    data.urls.get. The same URL returns the final outputs once the task
    completes, so no follow-up fetch is ever needed.
    """

    id = "wavespeed"
    name = "Wavespeed AI"
    base_url = "https://api.wavespeed.ai/api/v3"
    auth_scheme = AuthScheme.BEARER
    api_key_env = "WAVESPEED_API_KEY"

    endpoints = MappingProxyType({
        Operation.TEXT_TO_IMAGE: "/wavespeed-ai/flux-schnell",
        Operation.IMAGE_UPSCALE: "/wavespeed-ai/image-upscaler",
        Operation.IMAGE_EDIT: "/wavespeed-ai/qwen-image/edit",
        Operation.IMAGE_TO_VIDEO: "/midjourney/image-to-video",
    })

    status_map = MappingProxyType({
        "created": JobStatus.QUEUED,
        "pending": JobStatus.QUEUED,
        "queued": JobStatus.QUEUED,
        "processing": JobStatus.PROCESSING,
        "completed": JobStatus.COMPLETED,
        "succeeded": JobStatus.COMPLETED,
        "failed": JobStatus.FAILED,
        "error": JobStatus.FAILED,
    })

    def build_request_body(self, operation: Operation, params: dict[str, Any]) -> dict[str, Any]:
        body = drop_none(params)
        if operation is Operation.TEXT_TO_IMAGE:
            body.setdefault("strength", 0.8)
            body.setdefault("enable_sync_mode", False)
            body.setdefault("enable_base64_output", False)
        return body

    def parse_response(self, operation: Operation, data: Any) -> SubmitResponse:
        payload = self._unwrap(data)
        task_id = payload.get("id")
        urls = payload.get("urls") or {}
        status_url = urls.get("get") if isinstance(urls, dict) else None
        if not task_id or not status_url:
            raise InvalidResponse()
        return SubmitResponse(
            request_id=str(task_id),
            status_url=status_url,
            response_url=status_url,
        )

    def parse_status(self, data: Any) -> StatusUpdate:
        payload = self._unwrap(data, message="Invalid status response")
        outputs = payload.get("outputs") or []
        return StatusUpdate(
            status=self.map_status(payload.get("status")),
            outputs=[url for url in outputs if isinstance(url, str) and url],
            error_message=payload.get("error") or None,
            elapsed_seconds=float(payload.get("executionTime") or 0),
        )

    def _unwrap(self, data: Any, message: str = "Invalid response from API") -> dict[str, Any]:
        """Return the inner data object of a {"code": 200, "data": ...} reply."""
        envelope = self._require_mapping(data)
        payload = envelope.get("data")
        if envelope.get("code") != 200 or not isinstance(payload, dict):
            raise InvalidResponse(message)
        return payload
