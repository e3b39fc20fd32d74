"""
Provider Base - Abstract adapter contract shared by all generation services.

This module provides the foundation for all remote providers:
- Operation: Stable ids for the generation operations nodes can request
- ProviderAdapter: Abstract base class normalizing request/response shapes
- SubmitResponse/StatusUpdate: Canonical results of parsing provider replies

Adapters never perform I/O. The generation job owns the HTTP calls and only
asks the adapter how to build bodies and how to read replies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from genflow.errors import InvalidResponse, UnsupportedOperation


class Operation(Enum):
    """Generation operations, used as endpoint keys."""
    TEXT_TO_IMAGE = "text_to_image"
    IMAGE_UPSCALE = "image_upscale"
    IMAGE_EDIT = "image_edit"
    IMAGE_TO_VIDEO = "image_to_video"


class AuthScheme(Enum):
    """Authorization header schemes."""
    BEARER = "Bearer"
    KEY = "Key"


class JobStatus(Enum):
    """Canonical status of a remote job."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmitResponse:
    """Parsed reply to a submit call."""
    request_id: str
    status_url: str
    response_url: str | None = None


@dataclass(frozen=True)
class StatusUpdate:
    """
    Parsed reply to a status poll.

    Attributes:
        status: Canonical job status
        outputs: Result URLs (empty until the job completes)
        error_message: Provider-supplied failure message, if any
        elapsed_seconds: Provider-reported processing time
        followup_url: Where to fetch the result when a completed status
            carries no outputs
        seed: Seed reported by the provider, if any
    """
    status: JobStatus
    outputs: list[str] = field(default_factory=list)
    error_message: str | None = None
    elapsed_seconds: float = 0.0
    followup_url: str | None = None
    seed: int | None = None


@dataclass
class ProviderConfig:
    """User configuration for a provider."""
    api_key: str = ""
    enabled: bool = True
    base_url: str | None = None  # Override default URL
    extra: dict[str, Any] = field(default_factory=dict)


def drop_none(params: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of params without None values."""
    return {key: value for key, value in params.items() if value is not None}


class ProviderAdapter(ABC):
    """
    Abstract base class for provider adapters.

    Each adapter describes one remote service: where its endpoints live,
    how it authenticates, and how its request/response/status shapes map
    to the canonical ones. Subclasses fill in the class attributes and the
    three parsing/building methods.
    """

    # Provider identification
    id: str = ""
    name: str = ""
    base_url: str = ""
    auth_scheme: AuthScheme = AuthScheme.BEARER
    api_key_env: str = ""

    # Operation -> endpoint path
    endpoints: Mapping[Operation, str] = MappingProxyType({})

    # Native status (lower case) -> canonical status
    status_map: Mapping[str, JobStatus] = MappingProxyType({})

    def __init__(self, config: ProviderConfig | None = None):
        self.config = config or ProviderConfig()
        if self.config.base_url:
            self.base_url = self.config.base_url.rstrip("/")

    def supports(self, operation: Operation) -> bool:
        return operation in self.endpoints

    def endpoint_url(self, operation: Operation) -> str:
        """Full submit URL for an operation."""
        path = self.endpoints.get(operation)
        if path is None:
            raise UnsupportedOperation(self.id, operation.value)
        return f"{self.base_url}{path}"

    def auth_header(self, api_key: str) -> str:
        return f"{self.auth_scheme.value} {api_key}"

    def get_headers(self, api_key: str) -> dict[str, str]:
        """Headers for submit and poll requests."""
        return {
            "Authorization": self.auth_header(api_key),
            "Content-Type": "application/json",
        }

    def map_status(self, raw_status: Any) -> JobStatus:
        """
        Map a native status value to a canonical one.

        Unknown values map to PROCESSING so that polling continues
        instead of failing on a status the table does not know yet.
        """
        if raw_status is None:
            return JobStatus.PROCESSING
        return self.status_map.get(str(raw_status).strip().lower(), JobStatus.PROCESSING)

    @abstractmethod
    def build_request_body(self, operation: Operation, params: dict[str, Any]) -> dict[str, Any]:
        """
        Turn normalized node parameters into the provider's request body.

        Args:
            operation: Operation being submitted
            params: Provider-agnostic parameters built by the node

        Returns:
            JSON-serializable request body
        """
        ...

    @abstractmethod
    def parse_response(self, operation: Operation, data: Any) -> SubmitResponse:
        """
        Parse the reply to a submit call.

        Raises:
            InvalidResponse: Required fields are missing
        """
        ...

    @abstractmethod
    def parse_status(self, data: Any) -> StatusUpdate:
        """
        Parse the reply to a status poll or a result fetch.

        Raises:
            InvalidResponse: The reply is not a status document at all
        """
        ...

    def _require_mapping(self, data: Any) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise InvalidResponse(f"Invalid response from {self.name}")
        return data
