"""
Capability 注册表
"""

from typing import Any, Callable, Dict, List, Optional

from capability_hub.capabilities.anyapi import AnyApiCapability
from capability_hub.capabilities.base import (
    Capability,
    CapabilityContext,
    CapabilityExecutionResult,
)
from capability_hub.core.errors import (
    CapabilityNotLicensedError,
    UnknownCapabilityError,
)
from capability_hub.core.licensing import is_capability_allowed
from capability_hub.core.logging import get_logger

logger = get_logger(__name__)


class CapabilityRegistry:
    """Capability 注册表，执行前经过 License 闸门"""

    def __init__(self, license_gate: Optional[Callable[[str], bool]] = None):
        self.license_gate = license_gate or is_capability_allowed
        self._capabilities: Dict[str, Capability] = {}

    def register(self, capability: Capability) -> None:
        self._capabilities[capability.id] = capability
        logger.info("capability_registered", capability_id=capability.id)

    def get(self, capability_id: str) -> Optional[Capability]:
        return self._capabilities.get(capability_id)

    def ids(self) -> List[str]:
        return list(self._capabilities.keys())

    def list(self) -> List[Dict[str, str]]:
        return [c.describe() for c in self._capabilities.values()]

    async def execute(
        self,
        capability_id: str,
        action: str,
        params: Optional[Dict[str, Any]],
        context: CapabilityContext,
    ) -> CapabilityExecutionResult:
        """执行 capability 动作，失败以结果返回"""
        capability = self.get(capability_id)
        if capability is None:
            return CapabilityExecutionResult.from_error(
                UnknownCapabilityError(capability_id, self.ids())
            )

        if not self.license_gate(capability_id):
            logger.warning("capability_not_licensed", capability_id=capability_id)
            return CapabilityExecutionResult.from_error(CapabilityNotLicensedError(capability_id))

        return await capability.execute(action, params or {}, context)


# 全局注册表实例
_capability_registry: Optional[CapabilityRegistry] = None


def get_capability_registry() -> CapabilityRegistry:
    """获取 Capability 注册表单例"""
    global _capability_registry
    if _capability_registry is None:
        _capability_registry = CapabilityRegistry()
        _capability_registry.register(AnyApiCapability())
    return _capability_registry


def reset_capability_registry() -> None:
    """重置注册表（用于测试）"""
    global _capability_registry
    _capability_registry = None
