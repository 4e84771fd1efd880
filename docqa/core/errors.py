"""
Application errors for clean API error handling.

Every failure of an external collaborator (PDF fetch, embeddings, vector store,
LLM, web search) is raised as an UpstreamError so the request boundary can
return a uniform 500 without leaking detail to the client.
"""


class UpstreamError(Exception):
    """Raised when an external service call fails."""

    def __init__(self, service: str, message: str) -> None:
        self.service = service
        self.message = message
        super().__init__(f"{service}: {message}")


class UpstreamTimeoutError(UpstreamError):
    """Raised when a call exceeds its timeout or the request deadline has passed."""


class RequestCancelledError(UpstreamError):
    """Raised when the request's cancellation token was triggered."""


class ServiceUnavailableError(UpstreamError):
    """Raised when a required service (e.g. vector store, embeddings API) is misconfigured."""
