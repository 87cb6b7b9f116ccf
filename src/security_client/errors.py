"""Error hierarchy for the security client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Literal

FailureKind = Literal["request_build", "transport", "server", "parse"]


@dataclass(slots=True)
class RequestDetails:
    operation: str
    method: str
    path: str
    status_code: int | None = None
    reason: str | None = None
    response_body: Any | None = None


class SecurityClientError(Exception):
    """Base class for all client errors."""

    kind: ClassVar[FailureKind]


class RequestBuildError(SecurityClientError):
    """Raised when a request cannot be converted into a wire call."""

    kind = "request_build"

    def __init__(self, message: str, *, operation: str) -> None:
        super().__init__(message)
        self.operation = operation


class TransportError(SecurityClientError):
    """Raised on network/transport failures."""

    kind = "transport"


class ClientTimeoutError(TransportError):
    """Raised when request times out."""


class RequestCancelledError(TransportError):
    """Raised when an in-flight request is cancelled."""


class ApiError(SecurityClientError):
    """Raised when the cluster answers with a status the operation does not accept."""

    kind = "server"

    def __init__(self, message: str, *, details: RequestDetails) -> None:
        super().__init__(message)
        self.details = details

    @property
    def status_code(self) -> int | None:
        return self.details.status_code

    @property
    def reason(self) -> str | None:
        return self.details.reason


class AuthError(ApiError):
    """Raised for authentication/authorization failures."""


class ValidationError(ApiError):
    """Raised for invalid request payloads."""


class NotFoundError(ApiError):
    """Raised when requested resource does not exist."""


class ConflictError(ApiError):
    """Raised when request conflicts with current state."""


class ServerError(ApiError):
    """Raised for server-side failures."""


class ResponseParseError(SecurityClientError):
    """Raised when a successful response body does not match the expected shape."""

    kind = "parse"

    def __init__(
        self,
        *,
        operation: str,
        model_name: str,
        errors: Any,
        status_code: int | None = None,
        raw_sample: Any | None = None,
    ) -> None:
        super().__init__(f"{operation} response could not be parsed as {model_name}")
        self.operation = operation
        self.model_name = model_name
        self.errors = errors
        self.status_code = status_code
        self.raw_sample = raw_sample


def classify_api_error(details: RequestDetails) -> ApiError:
    status = details.status_code or 0
    message = f"{details.operation} failed with status {status}"
    if details.reason:
        message = f"{message}: {details.reason}"

    if status in (401, 403):
        return AuthError(message, details=details)
    if status == 400:
        return ValidationError(message, details=details)
    if status == 404:
        return NotFoundError(message, details=details)
    if status == 409:
        return ConflictError(message, details=details)
    if status >= 500:
        return ServerError(message, details=details)

    return ApiError(message, details=details)
