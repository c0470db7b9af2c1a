"""
统一错误处理模块
提供标准化的错误响应格式和错误处理中间件

主要功能：
- 统一的错误响应格式
- 自动异常捕获和日志记录
- HTTP状态码映射
"""

import traceback
from typing import Dict, Any, Optional
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from .exceptions import BaseApplicationError
from .database import db_manager


class ErrorResponse:
    """标准错误响应格式"""

    def __init__(self, error_code: str, message: str,
                 details: Optional[Dict[str, Any]] = None,
                 http_status: int = 400):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "success": False,
            "error_code": self.error_code,
            "message": self.message,
            "details": jsonable_encoder(self.details)
        }

    def to_json_response(self) -> JSONResponse:
        """转换为FastAPI JSONResponse"""
        return JSONResponse(
            status_code=self.http_status,
            content=self.to_dict()
        )


class ErrorHandler:
    """全局错误处理器"""

    # 错误代码到HTTP状态码的映射
    ERROR_CODE_STATUS_MAP = {
        "VALIDATION_ERROR": 422,
        "INTERNAL_ERROR": 500,
        "DATABASE_ERROR": 500,

        # 目录相关错误
        "DISH_NOT_FOUND": 404,
        "DISH_UNAVAILABLE": 404,
        "MENU_ITEM_NOT_FOUND": 404,
        "CATALOG_INTEGRITY_ERROR": 500,

        # 定制相关错误
        "UNKNOWN_ELEMENT": 400,
        "UNKNOWN_REPLACEMENT": 400,
        "CUSTOMIZATION_INVALID": 409,
        "SESSION_NOT_FOUND": 404,
        "LINE_NOT_FOUND": 404,
        "SESSION_CLOSED": 409,

        # 订单相关错误
        "ORDER_NOT_FOUND": 404,
        "ORDER_NOT_EDITABLE": 409,
        "INVALID_QUANTITY": 400,
    }

    @classmethod
    def handle_application_error(cls, error: BaseApplicationError, db=None) -> ErrorResponse:
        """处理应用业务异常"""
        http_status = cls.ERROR_CODE_STATUS_MAP.get(error.error_code, 400)

        if http_status >= 500:
            cls._log_system_error({
                "type": type(error).__name__,
                "error_code": error.error_code,
                "message": error.message,
            }, db)

        return ErrorResponse(
            error_code=error.error_code,
            message=error.message,
            details=error.details,
            http_status=http_status
        )

    @classmethod
    def handle_http_exception(cls, error: HTTPException) -> ErrorResponse:
        """处理FastAPI HTTP异常"""
        return ErrorResponse(
            error_code="HTTP_ERROR",
            message=str(error.detail),
            details={"status_code": error.status_code},
            http_status=error.status_code
        )

    @classmethod
    def handle_validation_error(cls, error: Exception) -> ErrorResponse:
        """处理Pydantic验证错误"""
        errors = error.errors() if isinstance(error, RequestValidationError) else str(error)
        return ErrorResponse(
            error_code="VALIDATION_ERROR",
            message="请求参数验证失败",
            details={"validation_errors": errors},
            http_status=422
        )

    @classmethod
    def handle_unknown_error(cls, error: Exception, db=None) -> ErrorResponse:
        """处理未知异常"""
        error_msg = str(error) if str(error) else "系统内部错误"

        cls._log_system_error({
            "type": type(error).__name__,
            "message": str(error),
            "traceback": traceback.format_exc()
        }, db)

        return ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=error_msg,
            details={"error_type": type(error).__name__},
            http_status=500
        )

    @classmethod
    def _log_system_error(cls, error_details: Dict[str, Any], db=None):
        """记录系统错误到数据库"""
        try:
            (db or db_manager).log_action("system_error", error_details)
        except Exception:
            # 数据库日志写不了时只能打印到控制台
            print(f"Failed to log error to database: {error_details}")


def _request_db(request: Request):
    """取应用绑定的数据库管理器，未绑定时使用全局实例"""
    return getattr(request.app.state, "db", None) or db_manager


async def application_error_handler(request: Request, exc: BaseApplicationError) -> JSONResponse:
    """应用异常处理中间件"""
    error_response = ErrorHandler.handle_application_error(exc, _request_db(request))
    return error_response.to_json_response()


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP异常处理中间件"""
    error_response = ErrorHandler.handle_http_exception(exc)
    return error_response.to_json_response()


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """验证异常处理中间件"""
    error_response = ErrorHandler.handle_validation_error(exc)
    return error_response.to_json_response()


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """通用异常处理中间件"""
    error_response = ErrorHandler.handle_unknown_error(exc, _request_db(request))
    return error_response.to_json_response()
