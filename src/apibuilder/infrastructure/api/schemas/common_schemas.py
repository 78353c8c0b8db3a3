"""Shared response envelopes.

Every success body carries ``success: true``; every error body carries a
human ``error`` message and a machine ``code``.
"""

from typing import Any, Generic, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DataResponse(BaseModel, Generic[T]):
    """``{success, data}`` envelope."""

    success: bool = True
    data: T


class MessageResponse(BaseModel):
    """``{success, message}`` envelope."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Error body returned for every non-2xx answer."""

    error: str
    code: str
    fields: list[str] | None = None
    details: list[dict[str, Any]] | None = None


def error_response(status_code: int, error: str, code: str, **extra: Any) -> JSONResponse:
    """Build a JSON error response with the standard ``{error, code}`` body."""
    content: dict[str, Any] = {"error": error, "code": code}
    content.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=status_code, content=content)
