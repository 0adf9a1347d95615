"""
statuswatch 错误类型与 API 错误响应 (Error types and API error responses)

探测本身从不抛异常，服务离线只是一个 online=False 的结果。这里的异常只来自三处：
统计查询找不到服务（404）、注册表写入被拒绝（409 / 422）、以及 API 边界上的 HTTP 错误。
所有错误响应都使用同一个 JSON 结构：{error, message, detail, status_code}。

Probes never raise; an offline service is just a result with online=False.
Errors here come from stats lookups, rejected registry writes and the HTTP layer,
and every error response shares the {error, message, detail, status_code} body.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BusinessError(Exception):
    """statuswatch 错误基类，子类决定 HTTP 状态码和 error 代码。"""
    status_code: int = 400
    error: str = "business_error"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        # detail 通常是相关的服务 id
        self.detail = detail
        super().__init__(message)


class NotFoundError(BusinessError):
    """服务不存在，或历史中没有它的检查记录。"""
    status_code = 404
    error = "not_found"


class ValidationError(BusinessError):
    """服务定义缺少协议字段（url / host / port）。"""
    status_code = 422
    error = "validation_error"


class ConflictError(BusinessError):
    """服务 id 已被占用。"""
    status_code = 409
    error = "conflict"


class UnsupportedKindError(ValidationError):
    """服务类型无法识别 (Unrecognized service kind)"""
    error = "unsupported_kind"

    def __init__(self, kind: str, service_id: Optional[str] = None):
        self.kind = kind
        self.service_id = service_id
        super().__init__(f"Unsupported service type: {kind!r}", detail=service_id)


def error_response(status_code: int, error: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "detail": detail, "status_code": status_code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """把 statuswatch 错误、路由层 HTTP 错误和未处理异常统一转换为 JSON 错误响应。

    HTTP 错误按 Starlette 的基类注册，这样未知路由（404）和不允许的方法（405）
    也走同一种响应格式。
    """

    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError) -> JSONResponse:
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.error)
        return error_response(exc.status_code, exc.error, exc.message, exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, "internal_server_error", "Internal server error")
