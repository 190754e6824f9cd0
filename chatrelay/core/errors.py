"""Error taxonomy for the relay.

Architectural role:
    Core modules raise these exceptions where a failure is detected. The HTTP
    adapter translates them once, at the boundary, into the OpenAI-style
    `{"error": {"message", "type"}}` envelope.

Status mapping:
    - `UnknownModel`        -> 400 `invalid_request_error`
    - `InvalidInput`        -> 400 `invalid_request_error`
    - `ProtocolMismatch`    -> 502 `upstream_error`
    - `UpstreamUnavailable` -> 502 `upstream_error`

Retry behavior:
    None of these errors is retried inside the relay.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for errors with a well-defined HTTP representation."""

    status_code = 500
    error_type = "server_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"error": {"message": self.message, "type": self.error_type}}


class UnknownModel(RelayError):
    """Requested model id matches neither a canonical id nor an alias."""

    status_code = 400
    error_type = "invalid_request_error"


class InvalidInput(RelayError):
    """Request body, message list or prompt text is unusable."""

    status_code = 400
    error_type = "invalid_request_error"


class ProtocolMismatch(RelayError):
    """Upstream answered successfully but with an unexpected shape."""

    status_code = 502
    error_type = "upstream_error"


class UpstreamUnavailable(RelayError):
    """Upstream returned a non-success status or the transport failed.

    Attributes:
        status: Upstream HTTP status, when one was received.
        detail: Upstream response body (diagnostics only).
    """

    status_code = 502
    error_type = "upstream_error"

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        detail: str = "",
    ) -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail
