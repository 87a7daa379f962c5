"""
中间件模块 - 全局错误处理和请求/响应处理
统一的错误响应格式
"""
import time
import traceback
from typing import Any, Callable, Dict
from uuid import uuid4

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from duplicate_review.core.config import get_settings
from duplicate_review.core.errors import BaseApplicationError, ErrorCode
from duplicate_review.core.logging import LogEvent, create_request_logger


class RequestContextMiddleware(BaseHTTPMiddleware):
    """为每个请求生成请求ID并记录处理时间"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id
        logger = create_request_logger(request_id)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                LogEvent.REQUEST_FAILED,
                method=request.method,
                path=request.url.path,
                error=str(exc),
            )
            raise

        process_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        logger.info(
            LogEvent.REQUEST_COMPLETED,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(process_time * 1000, 2),
        )
        return response


def _error_response(request: Request, status_code: int, error: Dict[str, Any]) -> JSONResponse:
    """创建统一的错误响应"""
    request_id = getattr(request.state, "request_id", None)
    content = {"error": {**error, "request_id": request_id}}
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    """处理自定义应用异常"""
    return _error_response(request, exc.status_code, exc.to_dict())


async def error_handler(request: Request, exc: Exception) -> JSONResponse:
    """全局错误处理"""
    if isinstance(exc, BaseApplicationError):
        return await application_error_handler(request, exc)

    # 未处理的异常，开发模式下返回详细信息
    details = {"type": type(exc).__name__}
    if get_settings().is_development:
        details["traceback"] = traceback.format_exc()
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {
            "code": ErrorCode.INTERNAL_ERROR.value,
            "message": "An unexpected error occurred",
            "details": details,
        },
    )
