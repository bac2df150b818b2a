from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from uniview.models import ApiError, ApiResponse, ResponseMeta


def _meta(request: Request | None) -> ResponseMeta:
    request_id = getattr(request.state, "request_id", None) if request is not None else None
    return ResponseMeta(request_id=request_id)


def envelope(
    success: bool,
    data: Any = None,
    error: ApiError | None = None,
    request: Request | None = None,
) -> dict[str, Any]:
    body = ApiResponse(success=success, data=data, error=error, meta=_meta(request))
    return body.model_dump(by_alias=True, mode="json", exclude_none=True)


def ok(data: Any, request: Request | None = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(envelope(True, data=data, request=request), status_code=status_code)


def fail(
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
    request: Request | None = None,
) -> JSONResponse:
    error = ApiError(code=code, message=message, details=details)
    return JSONResponse(envelope(False, error=error, request=request), status_code=status_code)
