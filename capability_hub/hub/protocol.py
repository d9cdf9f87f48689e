"""
工具服务器协议

定义工具服务器（Provider）的标准接口、工具描述与调用结果格式
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from capability_hub.core.errors import (
    CapabilityError,
    ErrorCode,
    SchemaValidationError,
    UnknownToolError,
    issues_from_validation_error,
)
from capability_hub.core.logging import get_logger

logger = get_logger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MCPTool:
    """工具定义，输入 schema 由 Pydantic 模型描述"""

    name: str
    description: str
    input_schema: Type[BaseModel]

    def json_schema(self) -> Dict[str, Any]:
        return self.input_schema.model_json_schema(by_alias=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.json_schema(),
        }


@dataclass
class ToolResponse:
    """工具调用结果"""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, **metadata: Any) -> "ToolResponse":
        return cls(success=True, data=data, metadata=dict(metadata))

    @classmethod
    def from_error(cls, error: CapabilityError) -> "ToolResponse":
        return cls(
            success=False,
            error=error.message,
            error_code=error.error_code.value,
            data=error.details or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        if self.error_code is not None:
            result["errorCode"] = self.error_code
        if self.metadata:
            result["metadata"] = self.metadata
        return result


ToolHandler = Callable[[Any], Awaitable[ToolResponse]]


class ToolServer(ABC):
    """
    工具服务器基类

    子类声明 name / version / description / tools，并通过 handlers()
    提供工具名到处理函数的映射。execute_tool 统一完成：
    1. 查找工具
    2. 按输入 schema 校验参数（收集全部问题）
    3. 分发到处理函数
    4. 将错误转换为 ToolResponse
    """

    name: str = ""
    version: str = "1.0.0"
    description: str = ""

    def __init__(self):
        self._initialized = False

    @property
    @abstractmethod
    def tools(self) -> List[MCPTool]:
        """工具列表"""
        pass

    @abstractmethod
    def handlers(self) -> Dict[str, ToolHandler]:
        """工具名 -> 处理函数（参数为校验后的输入模型）"""
        pass

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        self._initialized = False

    @property
    def is_healthy(self) -> bool:
        return self._initialized

    def list_tools(self) -> List[MCPTool]:
        return list(self.tools)

    def get_tool(self, name: str) -> Optional[MCPTool]:
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    async def execute_tool(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> ToolResponse:
        """执行工具调用，任何失败都以 success=False 的结果返回"""
        start_time = time.time()
        log = logger.bind(server=self.name, tool=tool_name)

        try:
            tool = self.get_tool(tool_name)
            handler = self.handlers().get(tool_name)
            if tool is None or handler is None:
                raise UnknownToolError(tool_name, self.name, [t.name for t in self.tools])

            try:
                validated = tool.input_schema.model_validate(arguments or {})
            except ValidationError as e:
                raise SchemaValidationError(issues_from_validation_error(e)) from e

            log.debug("tool_call_start")
            response = await handler(validated)

        except CapabilityError as e:
            log.warning("tool_call_failed", error_code=e.error_code.value, error=e.message)
            return ToolResponse.from_error(e)

        except Exception as e:
            log.exception("tool_call_error", error_type=type(e).__name__)
            return ToolResponse(
                success=False,
                error=str(e) or type(e).__name__,
                error_code=ErrorCode.INTERNAL_ERROR.value,
            )

        latency_ms = int((time.time() - start_time) * 1000)
        log.info("tool_call_completed", success=response.success, latency_ms=latency_ms)
        return response


# ============================================================
# Hub 相关结构
# ============================================================


@dataclass
class HubConfig:
    """Hub 配置"""

    name: str
    version: str
    max_concurrent_actions: int = 10  # 仅作状态展示，不强制
    default_timeout: float = 30.0  # 同上


@dataclass
class ActionResult:
    """一次 (server, tool, arguments) 调度的结果"""

    server: str
    tool: str
    arguments: Dict[str, Any]
    response: ToolResponse

    @property
    def success(self) -> bool:
        return self.response.success

    def to_dict(self) -> Dict[str, Any]:
        return {
            "server": self.server,
            "tool": self.tool,
            "arguments": self.arguments,
            "success": self.success,
            "response": self.response.to_dict(),
        }


@dataclass
class HubEvent:
    """Hub 事件"""

    type: str
    server: str
    tool: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "timestamp": self.timestamp,
            "server": self.server,
            "tool": self.tool,
            "data": self.data,
            "error": self.error,
        }


HubEventListener = Callable[[HubEvent], Any]
