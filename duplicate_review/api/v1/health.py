from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request

from duplicate_review.core.config import get_settings
from duplicate_review.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """
    健康检查

    返回应用的基本健康状态
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.project_name,
        "version": settings.version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check(request: Request) -> Dict[str, Any]:
    """
    就绪检查

    检测后端客户端必须已经创建
    """
    client = getattr(request.app.state, "detection_client", None)
    if client is None:
        logger.warning("Readiness check failed", reason="detection client missing")
        raise HTTPException(status_code=503, detail="Service not ready: detection client missing")
    return {
        "ready": True,
        "detection_backend": client.base_url,
    }


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """
    存活检查

    简单的存活探针，用于Kubernetes等容器编排工具
    """
    return {"status": "alive"}
