import logging
import traceback
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from rewardapi.config import settings

from .exceptions import InternalServerError

logger = logging.getLogger("rewardapi")


def _request_context(request: Request) -> Dict[str, Any]:
    client = request.client.host if request.client else "-"
    return {
        "method": request.method,
        "url": str(request.url),
        "client": client,
        # 게이트웨이가 넣어준 사용자 식별자 (없으면 -)
        "user": request.headers.get(settings.TRUSTED_USER_HEADER) or "-",
    }


async def handle_base_api_exception(request, exc):
    ctx = _request_context(request)
    message = (
        f"[{exc.error_code}] {ctx['method']} {ctx['url']} user={ctx['user']} "
        f"from {ctx['client']} -> {exc.status_code}: {exc.message}"
    )
    if exc.details:
        message = f"{message} {exc.details}"
    # 4xx 는 잔액 부족, 중복 수령 같은 정상 거절
    if exc.status_code >= 500:
        logger.error(message)
    else:
        logger.warning(message)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)  # type: ignore[arg-type]


async def handle_http_exception(request, exc):
    ctx = _request_context(request)
    error_msg = f"[HTTPException] {ctx['method']} {ctx['url']} user={ctx['user']} from {ctx['client']} -> {exc.status_code}: {exc.detail}"

    if getattr(exc, "status_code", 500) >= 500:
        # 500번대 에러는 스택 트레이스 포함
        tb_str = ''.join(traceback.format_tb(exc.__traceback__))
        logger.error(f"{error_msg}\n\nStack Trace:\n{tb_str}")
    else:
        logger.warning(error_msg)

    if isinstance(exc.detail, dict) and "error" in exc.detail:  # type: ignore[truthy-bool]
        content = exc.detail  # type: ignore[assignment]
    else:
        content = {
            "success": False,
            "error": {
                "code": "HTTP_ERROR",
                "message": str(exc.detail),
                "details": {},
            },
        }
    return JSONResponse(status_code=exc.status_code, content=content)


async def handle_validation_error(request, exc):
    ctx = _request_context(request)
    logger.warning(
        f"[ValidationError] {ctx['method']} {ctx['url']} user={ctx['user']} from {ctx['client']} -> 422: {exc.errors()}"
    )
    content = {
        "success": False,
        "error": {
            "code": "VALIDATION_001",
            "message": "Validation failed",
            "details": {"errors": jsonable_errors(exc.errors())},
        },
    }
    return JSONResponse(status_code=422, content=content)


def jsonable_errors(errors):
    # pydantic v2 에러의 ctx에는 예외 객체가 들어갈 수 있음
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in errors
    ]


async def handle_unexpected_error(request, exc):
    ctx = _request_context(request)

    tb_str = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        f"[Unhandled Error] {ctx['method']} {ctx['url']} user={ctx['user']} from {ctx['client']}\n"
        f"Exception Type: {type(exc).__name__}\n"
        f"Exception Message: {str(exc)}\n\n"
        f"Full Stack Trace:\n{tb_str}"
    )

    internal = InternalServerError()
    return JSONResponse(status_code=internal.status_code, content=internal.detail)  # type: ignore[arg-type]
