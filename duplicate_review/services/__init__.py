"""
服务模块 - 提供统一的服务访问接口
"""

from duplicate_review.services.base_service import BaseService, singleton
from duplicate_review.services.service_factory import ServiceFactory

__all__ = [
    'BaseService',
    'singleton',
    'ServiceFactory',
]
