"""Error envelope shared by every route."""

from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response.

    Format: { "error": { "code": "NOT_FOUND", "message": "...", "detail": {...} | null } }
    """

    error: ErrorDetail


def error_content(code: str, message: str, detail: dict[str, Any] | None = None) -> dict[str, Any]:
    """Serialized ``ErrorResponse`` ready for a JSONResponse."""
    return ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump()
