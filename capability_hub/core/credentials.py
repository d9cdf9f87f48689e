"""
凭证解析

核心层只消费已解密的字符串，不负责持久化或加密。
解析顺序：Agent 级凭证（外部存储回调）→ 环境变量 {APIID}_API_KEY
"""

import os
import re
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Mapping, Optional

from capability_hub.core.logging import get_logger

logger = get_logger(__name__)

AgentKeyLookup = Callable[[str, str], Awaitable[Optional[str]]]


def api_key_env_var(api_id: str) -> str:
    """API ID 对应的环境变量名，例如 openweather -> OPENWEATHER_API_KEY"""
    return f"{re.sub(r'[^A-Z0-9]', '_', api_id.upper())}_API_KEY"


class CredentialResolver(ABC):
    """凭证解析接口"""

    @abstractmethod
    async def resolve(self, agent_id: Optional[str], capability_id: str) -> Optional[str]:
        """
        解析凭证

        Args:
            agent_id: Agent ID（可为空）
            capability_id: Capability / API ID

        Returns:
            凭证字符串；未配置时返回 None
        """
        pass


class EnvCredentialResolver(CredentialResolver):
    """Agent 级回调优先，环境变量兜底"""

    def __init__(
        self,
        agent_lookup: Optional[AgentKeyLookup] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.agent_lookup = agent_lookup
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ if self._environ is not None else os.environ

    async def resolve(self, agent_id: Optional[str], capability_id: str) -> Optional[str]:
        if self.agent_lookup and agent_id:
            value = await self.agent_lookup(agent_id, capability_id)
            if value:
                logger.debug("credential_resolved", source="agent", capability_id=capability_id)
                return value

        env_var = api_key_env_var(capability_id)
        value = self.environ.get(env_var)
        if value:
            logger.debug("credential_resolved", source="env", env_var=env_var)
            return value

        return None
