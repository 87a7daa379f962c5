from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from duplicate_review.api.v1 import comparison, health
from duplicate_review.core.config import get_settings
from duplicate_review.core.errors import BaseApplicationError
from duplicate_review.core.logging import LogEvent, configure_logging, get_logger
from duplicate_review.core.middleware import (
    RequestContextMiddleware,
    application_error_handler,
    error_handler,
)
from duplicate_review.services import ServiceFactory

settings = get_settings()
configure_logging(level=settings.log_level, json_logs=settings.json_logs)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info(
        LogEvent.APP_STARTED,
        version=settings.version,
        environment=settings.environment,
        api_prefix=settings.api_v1_prefix,
        detection_backend=settings.detection_base_url,
    )
    app.state.detection_client = ServiceFactory.create_detection_client()
    try:
        yield
    finally:
        await app.state.detection_client.aclose()
        app.state.detection_client = None
        logger.info(LogEvent.APP_STOPPED)


app = FastAPI(
    title=settings.project_name,
    version=settings.version,
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# 中间件配置 - 安全的 CORS 设置
origins = settings.get_cors_origins()
# 浏览器规范：当 allow_origins 为 "*" 时，不能允许 credentials
allow_credentials = settings.cors_allow_credentials and origins != ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)

# 错误处理
app.add_exception_handler(BaseApplicationError, application_error_handler)
app.add_exception_handler(Exception, error_handler)

# 路由注册
app.include_router(
    health.router,
    prefix=f"{settings.api_v1_prefix}/health",
    tags=["health"]
)
app.include_router(comparison.router)

# Prometheus监控
Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """根路径"""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs",
        "api_prefix": settings.api_v1_prefix,
        "endpoints": {
            "health": f"{settings.api_v1_prefix}/health",
            "comparison": f"{settings.api_v1_prefix}/comparison",
            "metrics": "/metrics",
        },
    }

