"""
错误处理模块 - 定义自定义异常类和错误处理逻辑
清晰的错误分类和有意义的错误消息
"""
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status


class ErrorCode(str, Enum):
    """错误代码枚举"""
    # 客户端错误
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # 服务端错误
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # 外部服务错误
    DETECTION_BACKEND_ERROR = "DETECTION_BACKEND_ERROR"


class BaseApplicationError(Exception):
    """应用基础异常类"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "code": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


# 客户端错误 (4xx)
class ResourceNotFoundError(BaseApplicationError):
    """资源不存在错误"""
    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = f"{resource_type} not found"
        details = {"resource_type": resource_type}
        if resource_id:
            details["resource_id"] = resource_id
            message = f"{resource_type} with id '{resource_id}' not found"

        super().__init__(
            message=message,
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
            details=details,
            status_code=status.HTTP_404_NOT_FOUND
        )


# 服务端错误 (5xx)
class ServiceUnavailableError(BaseApplicationError):
    """服务不可用错误"""
    def __init__(self, service_name: str, reason: Optional[str] = None):
        message = f"{service_name} service is currently unavailable"
        details = {"service": service_name}
        if reason:
            message = f"{message}: {reason}"
            details["reason"] = reason

        super().__init__(
            message=message,
            error_code=ErrorCode.SERVICE_UNAVAILABLE,
            details=details,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


# 外部服务错误
class DetectionBackendError(BaseApplicationError):
    """检测后端错误"""
    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message=f"Detection backend error: {message}",
            error_code=ErrorCode.DETECTION_BACKEND_ERROR,
            details=details,
            status_code=status.HTTP_502_BAD_GATEWAY
        )
