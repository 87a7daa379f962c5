"""
服务工厂 - 统一的服务创建和管理
"""
from typing import TYPE_CHECKING

# 避免循环导入，使用TYPE_CHECKING
if TYPE_CHECKING:
    from duplicate_review.services.comparison_view import ComparisonViewService
    from duplicate_review.services.detection_client import DetectionBackendClient


class ServiceFactory:
    """
    服务工厂 - 提供统一的服务访问接口

    视图服务是单例；检测后端客户端持有连接池，由应用生命周期创建和关闭
    """

    @staticmethod
    def get_comparison_view_service() -> 'ComparisonViewService':
        """获取比对视图服务"""
        from duplicate_review.services.comparison_view import ComparisonViewService
        return ComparisonViewService()

    @staticmethod
    def create_detection_client() -> 'DetectionBackendClient':
        """创建检测后端客户端"""
        from duplicate_review.services.detection_client import DetectionBackendClient
        return DetectionBackendClient.from_settings()
