"""
License / Feature Flag 闸门

核心层只需要一个布尔判断：某个 capability / 工具服务器是否允许执行
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional

from capability_hub.core.config import settings
from capability_hub.core.logging import get_logger

logger = get_logger(__name__)

WILDCARD = "*"


@dataclass(frozen=True)
class FeatureFlags:
    """功能开关"""

    mcp_hub: bool = False
    allowed_capabilities: List[str] = field(default_factory=list)

    def summary(self) -> str:
        if not self.mcp_hub:
            return "BASE (no features)"
        if WILDCARD in self.allowed_capabilities:
            caps = "all"
        elif self.allowed_capabilities:
            caps = ",".join(self.allowed_capabilities)
        else:
            caps = "none"
        return f"mcpHub(caps:{caps})"


_features: Optional[FeatureFlags] = None


def get_features() -> FeatureFlags:
    """获取当前功能开关（首次调用时从配置加载）"""
    global _features
    if _features is None:
        _features = FeatureFlags(
            mcp_hub=settings.MCP_HUB_ENABLED,
            allowed_capabilities=list(settings.ALLOWED_CAPABILITIES),
        )
    return _features


def set_features(features: FeatureFlags) -> None:
    """设置功能开关（启动时或测试中调用）"""
    global _features
    _features = replace(features, allowed_capabilities=list(features.allowed_capabilities))
    logger.info("features_loaded", features=_features.summary())


def reset_features() -> None:
    """重置为配置值（用于测试）"""
    global _features
    _features = None


def is_capability_allowed(capability_id: str) -> bool:
    """判断 capability 是否允许执行"""
    features = get_features()

    # MCP Hub 必须先开启
    if not features.mcp_hub:
        return False

    if WILDCARD in features.allowed_capabilities:
        return True

    return capability_id in features.allowed_capabilities
