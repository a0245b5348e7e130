import logging
import traceback
from collections import defaultdict
from typing import Any, Dict, List

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from comicapi.core.exceptions import BaseAPIException, InternalServerError
from comicapi.schemas.base import envelope

logger = logging.getLogger("comicapi")

# 401/403 은 원인을 노출하지 않음
_GENERIC_MESSAGES = {401: "Access denied", 403: "Access denied"}


def _request_context(request: Request) -> Dict[str, Any]:
    client = request.client.host if request.client else "-"
    # 쿼리스트링에 토큰이 실릴 수 있으므로 path 만 기록
    return {
        "method": request.method,
        "path": request.url.path,
        "client": client,
    }


async def handle_base_api_exception(request: Request, exc: BaseAPIException):
    ctx = _request_context(request)
    line = (
        f"[{type(exc).__name__}] {ctx['method']} {ctx['path']} from {ctx['client']}"
        f" -> {exc.status_code}: {exc.message}"
    )
    if exc.status_code >= 500:
        logger.error(line)
    else:
        logger.warning(line)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    ctx = _request_context(request)
    error_msg = (
        f"[HTTPException] {ctx['method']} {ctx['path']} from {ctx['client']}"
        f" -> {exc.status_code}: {exc.detail}"
    )
    if exc.status_code >= 500:
        tb_str = "".join(traceback.format_tb(exc.__traceback__))
        logger.error(f"{error_msg}\n\nStack Trace:\n{tb_str}")
    else:
        logger.warning(error_msg)

    if isinstance(exc.detail, dict) and "statusCode" in exc.detail:
        content = exc.detail
    else:
        message = _GENERIC_MESSAGES.get(exc.status_code, str(exc.detail))
        content = envelope(exc.status_code, message)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


def _field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = defaultdict(list)
    for err in exc.errors():
        # ("body", "email") -> "email"
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        errors[".".join(loc) or "request"].append(err.get("msg", "Invalid value"))
    return dict(errors)


async def handle_validation_error(request: Request, exc: RequestValidationError):
    ctx = _request_context(request)
    errors = _field_errors(exc)
    # 입력값(비밀번호 등)은 남기지 않고 필드명만 기록
    logger.warning(
        f"[ValidationError] {ctx['method']} {ctx['path']} from {ctx['client']}"
        f" -> 400: {sorted(errors)}"
    )
    return JSONResponse(
        status_code=400, content=envelope(400, "Validation failed", errors)
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    ctx = _request_context(request)

    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        f"\n{'=' * 80}\n"
        f"[Unhandled Error] {ctx['method']} {ctx['path']} from {ctx['client']}\n"
        f"Exception Type: {type(exc).__name__}\n"
        f"Exception Message: {str(exc)}\n\n"
        f"Full Stack Trace:\n{tb_str}"
        f"{'=' * 80}"
    )

    internal = InternalServerError()
    return JSONResponse(status_code=internal.status_code, content=internal.detail)


def register_exception_handlers(app) -> None:
    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
