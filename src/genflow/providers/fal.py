"""
Fal Provider - fal.ai queue API.

Supports:
- FLUX.1 Schnell: Text-to-image
- Clarity Upscaler: Image upscaling
- MiniMax Video-01: Image-to-video

API Reference: https://docs.fal.ai/model-endpoints/queue
Note: The queue status endpoint never returns outputs. A COMPLETED status
only points at response_url, which must be fetched separately.
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


class FalAdapter(ProviderAdapter):
    """
    fal.ai queue adapter.

    Handles both reply shapes the queue produces: a QueueStatus document
    while the request is pending, and the model's own result document
    (images, image or video) when the follow-up URL is fetched.
    """

    id = "fal"
    name = "Fal AI"
    base_url = "https://queue.fal.run"
    auth_scheme = AuthScheme.KEY
    api_key_env = "FAL_KEY"

    endpoints = MappingProxyType({
        Operation.TEXT_TO_IMAGE: "/fal-ai/flux-1/schnell",
        Operation.IMAGE_UPSCALE: "/fal-ai/clarity-upscaler",
        Operation.IMAGE_EDIT: "/fal-ai/flux-1/schnell",
        Operation.IMAGE_TO_VIDEO: "/fal-ai/minimax/video-01",
    })

    status_map = MappingProxyType({
        "in_queue": JobStatus.QUEUED,
        "in_progress": JobStatus.PROCESSING,
        "completed": JobStatus.COMPLETED,
        "failed": JobStatus.FAILED,
        "error": JobStatus.FAILED,
    })

    def build_request_body(self, operation: Operation, params: dict[str, Any]) -> dict[str, Any]:
        if operation is not Operation.TEXT_TO_IMAGE:
            return drop_none(params)

        body: dict[str, Any] = {
            "prompt": params.get("prompt"),
            "num_images": params.get("num_images") or 1,
            "output_format": params.get("output_format") or "jpeg",
            "num_inference_steps": params.get("num_inference_steps") or 4,
            "guidance_scale": params.get("guidance_scale") or 3.5,
        }
        if params.get("image_size"):
            body["image_size"] = params["image_size"]
        if params.get("acceleration"):
            body["acceleration"] = params["acceleration"]
        if params.get("enable_safety_checker") is not None:
            body["enable_safety_checker"] = params["enable_safety_checker"]

        seed = params.get("seed")
        if seed and seed != -1:
            body["seed"] = seed

        return body

    def parse_response(self, operation: Operation, data: Any) -> SubmitResponse:
        payload = self._require_mapping(data)
        request_id = payload.get("request_id")
        status_url = payload.get("status_url")
        if not request_id or not status_url:
            raise InvalidResponse()
        return SubmitResponse(
            request_id=str(request_id),
            status_url=status_url,
            response_url=payload.get("response_url"),
        )

    def parse_status(self, data: Any) -> StatusUpdate:
        payload = self._require_mapping(data)

        outputs = self._result_urls(payload)
        if outputs is not None:
            timings = payload.get("timings") or {}
            return StatusUpdate(
                status=JobStatus.COMPLETED,
                outputs=outputs,
                elapsed_seconds=float(timings.get("inference") or 0),
                seed=payload.get("seed"),
            )

        error = payload.get("error")
        if isinstance(error, dict):
            error = error.get("message")

        return StatusUpdate(
            status=self.map_status(payload.get("status")),
            outputs=[],
            error_message=error or None,
            followup_url=payload.get("response_url"),
        )

    def _result_urls(self, payload: dict[str, Any]) -> list[str] | None:
        """URLs of a final result document, or None for a queue status."""
        if isinstance(payload.get("images"), list):
            return [
                image["url"] for image in payload["images"]
                if isinstance(image, dict) and image.get("url")
            ]
        for key in ("image", "video"):
            media = payload.get(key)
            if isinstance(media, dict) and media.get("url"):
                return [media["url"]]
        return None
