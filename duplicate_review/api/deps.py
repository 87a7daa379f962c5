from typing import Optional

from fastapi import Header, Request

from duplicate_review.core.errors import ServiceUnavailableError
from duplicate_review.services import ServiceFactory
from duplicate_review.services.comparison_view import ComparisonViewService
from duplicate_review.services.detection_client import BackendSession, DetectionBackendClient


def get_view_service() -> ComparisonViewService:
    """获取比对视图服务单例"""
    return ServiceFactory.get_comparison_view_service()


def get_detection_client(request: Request) -> DetectionBackendClient:
    """获取应用生命周期内共享的检测后端客户端"""
    client = getattr(request.app.state, "detection_client", None)
    if client is None:
        raise ServiceUnavailableError("Detection backend", "client not initialized")
    return client


def get_backend_session(authorization: Optional[str] = Header(default=None)) -> BackendSession:
    """把调用方的凭据显式转交给检测后端"""
    return BackendSession.from_authorization(authorization)
