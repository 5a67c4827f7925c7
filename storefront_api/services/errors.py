"""Domain errors raised by services and translated to HTTP errors by routes."""

from typing import Any


class ServiceError(RuntimeError):
    """Base class for expected, user-facing service failures."""

    code = "SERVICE_ERROR"
    status_code = 400

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class NotFoundError(ServiceError):
    code = "NOT_FOUND"
    status_code = 404


class ValidationFailedError(ServiceError):
    code = "VALIDATION_FAILED"
    status_code = 400


class InsufficientPointsError(ServiceError):
    code = "INSUFFICIENT_POINTS"
    status_code = 400

    def __init__(self, available: int, required: int) -> None:
        super().__init__(
            f"Insufficient points. Available: {available}, Required: {required}",
            detail={"available": available, "required": required},
        )
        self.available = available
        self.required = required
