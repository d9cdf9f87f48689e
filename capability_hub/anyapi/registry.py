"""
API 注册表

进程内的 API 定义目录。写操作在锁内以写时复制（copy-on-write）方式替换映射，
读操作直接读取当前快照，不会看到半构造的定义
"""

import threading
from typing import Any, Dict, Iterable, List, Optional

from capability_hub.anyapi.definitions import BUILTIN_APIS
from capability_hub.anyapi.models import APIDefinition
from capability_hub.core.errors import DuplicateAPIRegistrationError
from capability_hub.core.logging import get_logger

logger = get_logger(__name__)


class APIRegistry:
    """API 定义注册表"""

    def __init__(self, definitions: Optional[Iterable[APIDefinition]] = None):
        self._lock = threading.Lock()
        self._apis: Dict[str, APIDefinition] = {}
        for definition in definitions or ():
            self.register(definition)

    def register(self, definition: APIDefinition) -> APIDefinition:
        """
        注册 API 定义

        同一 id 只允许注册一次；检查与插入在同一把锁内完成，
        并发注册同一 id 时只有一个成功

        Raises:
            DuplicateAPIRegistrationError: id 已存在
        """
        stored = definition.model_copy(deep=True)

        with self._lock:
            if stored.id in self._apis:
                raise DuplicateAPIRegistrationError(stored.id)
            snapshot = dict(self._apis)
            snapshot[stored.id] = stored
            self._apis = snapshot

        logger.info(
            "api_registered",
            api_id=stored.id,
            api_name=stored.name,
            endpoints=len(stored.endpoints),
        )
        return stored

    def get(self, api_id: str) -> Optional[APIDefinition]:
        """获取 API 定义"""
        return self._apis.get(api_id)

    def __contains__(self, api_id: str) -> bool:
        return api_id in self._apis

    def __len__(self) -> int:
        return len(self._apis)

    def list(self) -> List[APIDefinition]:
        """列出所有 API 定义"""
        return list(self._apis.values())

    def ids(self) -> List[str]:
        return list(self._apis.keys())

    def search(self, term: str) -> List[APIDefinition]:
        """按 id / name / description 做大小写不敏感的子串匹配"""
        needle = term.lower()
        return [
            api for api in self.list()
            if needle in api.id.lower()
            or needle in api.name.lower()
            or needle in api.description.lower()
        ]

    def summary(self) -> Dict[str, Any]:
        """注册表概览"""
        apis = self.list()
        return {
            "total": len(apis),
            "public": sum(1 for a in apis if not a.requires_auth),
            "authenticated": sum(1 for a in apis if a.requires_auth),
            "apis": [
                {
                    "id": a.id,
                    "name": a.name,
                    "requiresAuth": a.requires_auth,
                    "endpointCount": len(a.endpoints),
                }
                for a in apis
            ],
        }


# 全局注册表实例
_api_registry: Optional[APIRegistry] = None


def get_api_registry() -> APIRegistry:
    """获取内置 API 注册表单例"""
    global _api_registry
    if _api_registry is None:
        _api_registry = APIRegistry(BUILTIN_APIS)
    return _api_registry


def reset_api_registry() -> None:
    """重置注册表（用于测试）"""
    global _api_registry
    _api_registry = None
