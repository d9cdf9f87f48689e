"""
Capability Hub 配置

使用 pydantic-settings 管理环境变量配置
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # 基础配置
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # 服务配置
    HOST: str = "0.0.0.0"
    PORT: int = 8002

    # CORS 配置
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # AnyAPI 出站调用配置
    ANYAPI_TIMEOUT_SECONDS: float = 30.0
    ANYAPI_USER_AGENT: str = "agent-capability-hub/0.1.0"

    # Hub 配置
    HUB_NAME: str = "capability-hub"
    HUB_VERSION: str = "0.1.0"
    HUB_MAX_CONCURRENT_ACTIONS: int = 10  # 仅作提示，不做强制限流
    HUB_DEFAULT_TIMEOUT_SECONDS: float = 30.0  # 同上，仅在状态中展示

    # License 配置
    MCP_HUB_ENABLED: bool = True
    ALLOWED_CAPABILITIES: List[str] = ["*"]

    # 默认 Agent
    DEFAULT_AGENT_ID: str = "default-agent"

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
