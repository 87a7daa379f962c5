"""
配置管理 - 使用Pydantic Settings实现环境变量管理
所有配置项来自环境变量或本地 .env 文件
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类 - 所有配置项通过环境变量管理"""

    # API配置
    api_v1_prefix: str = Field(default="/api/v1", description="API路由前缀")
    project_name: str = Field(default="Duplicate Review Service", description="项目名称")
    version: str = Field(default="1.0.0", description="版本号")
    environment: str = Field(default="development", description="运行环境: development / production")

    # 日志配置
    log_level: str = Field(default="INFO", description="日志级别")
    json_logs: bool = Field(default=False, description="是否输出JSON格式日志")

    # 检测后端 (外部服务，提供比对结果JSON)
    detection_base_url: str = Field(
        default="http://localhost:3000/api",
        description="Detection backend base URL",
    )
    detection_timeout: float = Field(default=30.0, description="请求超时时间(秒)")
    detection_max_retries: int = Field(default=3, description="最大重试次数")

    # 候选文档分级阈值 (duplicateRate, 0-100)
    status_high_threshold: float = Field(default=50.0, description="high 等级下限")
    status_medium_threshold: float = Field(default=25.0, description="medium 等级下限")
    # 没有可定位的高亮时，重复率超过该值仍视为存在高亮
    highlight_fallback_rate: float = Field(default=10.0, description="高亮回退阈值")

    # CORS 配置
    cors_allow_origins: str = Field(default="http://localhost:5173", description="允许的跨域来源，逗号分隔")
    cors_allow_credentials: bool = Field(default=False, description="是否允许携带凭据")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # 忽略未定义的环境变量
    )

    @property
    def is_development(self) -> bool:
        """是否为开发模式"""
        return self.environment.lower() == "development"

    def get_cors_origins(self) -> list[str]:
        """返回允许的 CORS 来源列表"""
        raw = (self.cors_allow_origins or "").strip()
        if not raw:
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]

    def get_status_thresholds(self) -> tuple[float, float]:
        """(high, medium) thresholds used to derive a candidate's status tier."""
        return self.status_high_threshold, self.status_medium_threshold


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置单例
    使用lru_cache确保全局只有一个Settings实例
    """
    return Settings()
