"""Unified API response envelopes.

Success:
{
    "data": { ... },
    "meta": {"page": 1, "limit": 20, "total": 57, "totalPages": 3},   // list endpoints only
    "filters": {"estado": "valida"}                                  // list endpoints only
}

Error:
{
    "error": "Banca no encontrada: ...",
    "details": [{"field": "nombre", "message": "..."}]               // validation only
}
"""

from typing import Any

from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer

from src.lt_common.pagination import PaginationMeta


class ApiResponse(BaseModel):
    data: Any = None
    meta: PaginationMeta | None = None
    filters: dict[str, Any] | None = None

    @model_serializer(mode="wrap")
    def _omit_empty_sections(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload: dict[str, Any] = handler(self)
        return {k: v for k, v in payload.items() if k == "data" or v is not None}


class FieldErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: list[FieldErrorDetail] | None = None

    @model_serializer(mode="wrap")
    def _omit_empty_details(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload: dict[str, Any] = handler(self)
        if payload.get("details") is None:
            payload.pop("details", None)
        return payload


def success_response(
    data: Any = None,
    meta: PaginationMeta | None = None,
    filters: dict[str, Any] | None = None,
) -> ApiResponse:
    return ApiResponse(data=data, meta=meta, filters=filters)


def error_response(
    message: str, details: list[dict[str, Any]] | None = None
) -> ErrorResponse:
    return ErrorResponse(
        error=message,
        details=[FieldErrorDetail(**d) for d in details] if details is not None else None,
    )
