"""
Errors - Exception hierarchy shared by the providers and the workflow core.

Node-level errors (NodeError and subclasses) are captured into the node's
GenerationState by the generation job and never escape it. Orchestration
errors abort a workflow run, document errors abort an import.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base exception for all GenFlow errors."""
    pass


# --- Node-level errors ---

class NodeError(WorkflowError):
    """Error raised while running a single node."""
    pass


class MissingInput(NodeError):
    """A required input socket has no value."""

    def __init__(self, input_name: str):
        self.input_name = input_name
        super().__init__(f"No {input_name}")


class ConfigurationError(NodeError):
    """Provider configuration is incomplete."""
    pass


class MissingCredential(ConfigurationError):
    """No API key available for a provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"No {provider.upper()} API key")


class UnknownProvider(ConfigurationError):
    """No adapter registered under the requested provider name."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Unknown provider: {provider}")


class UnsupportedOperation(ConfigurationError):
    """Provider has no endpoint for the requested operation."""

    def __init__(self, provider: str, operation: str):
        self.provider = provider
        self.operation = operation
        super().__init__(f"{provider} does not support {operation}")


class ProviderError(NodeError):
    """Base exception for remote provider failures."""
    pass


class SubmitFailed(ProviderError):
    """The submit call returned a non-success status or never completed."""

    def __init__(self, status: int | None, body: str = ""):
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"Request failed: {body}")
        else:
            super().__init__(f"Request failed: {status} - {body}")


class PollFailed(ProviderError):
    """A status poll returned a non-success status or never completed."""

    def __init__(self, status: int | None, detail: str = ""):
        self.status = status
        self.detail = detail
        if status is None:
            super().__init__(f"Poll failed: {detail}")
        else:
            super().__init__(f"Poll failed: {status}")


class InvalidResponse(ProviderError):
    """Provider response is missing required fields."""

    def __init__(self, message: str = "Invalid response from API"):
        super().__init__(message)


class EmptyResult(ProviderError):
    """Provider reported completion without any output."""

    def __init__(self, message: str = "No output in response"):
        super().__init__(message)


class GenerationFailed(ProviderError):
    """Provider reported the generation as failed."""

    def __init__(self, message: str = "Generation failed"):
        super().__init__(message)


class GenerationTimeout(ProviderError):
    """Polling reached its attempt ceiling."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Timeout waiting for result")


# --- Orchestration errors ---

class NodeGenerationFailed(WorkflowError):
    """A generator node failed during a workflow run."""

    def __init__(self, node_id: int, message: str = ""):
        self.node_id = node_id
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"Node {node_id} failed to generate{detail}")


# --- Document errors ---

class InvalidDocument(WorkflowError):
    """A workflow document could not be imported."""
    pass
