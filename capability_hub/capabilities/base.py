"""
Capability 基础定义
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from capability_hub.core.errors import CapabilityError


class CapabilityContext(BaseModel):
    """Capability 调用上下文"""

    agent_id: str = Field(..., description="Agent ID")
    conversation_id: Optional[int] = Field(None, description="会话 ID（可选）")
    external_user_id: Optional[str] = Field(None, description="外部用户 ID（可选）")


class CapabilityExecutionResult(BaseModel):
    """Capability 执行结果"""

    success: bool
    data: Optional[Any] = None
    summary: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def from_error(cls, error: CapabilityError, data: Optional[Any] = None) -> "CapabilityExecutionResult":
        return cls(
            success=False,
            error=error.message,
            error_code=error.error_code.value,
            data=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = self.model_dump(exclude_none=True)
        if "error_code" in result:
            result["errorCode"] = result.pop("error_code")
        return result


class Capability(ABC):
    """面向 Agent 的可授权能力"""

    id: str = ""
    name: str = ""
    description: str = ""

    @abstractmethod
    async def execute(
        self,
        action: str,
        params: Dict[str, Any],
        context: CapabilityContext,
    ) -> CapabilityExecutionResult:
        """
        执行动作

        Args:
            action: 动作标识，具体格式由各 Capability 定义
            params: 扁平参数
            context: 调用上下文

        Returns:
            执行结果；失败时 success=False，不抛出异常
        """
        pass

    def describe(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "description": self.description}
