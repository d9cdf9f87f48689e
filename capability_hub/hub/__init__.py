"""
Hub 模块

工具服务器协议与编排
"""

from capability_hub.hub.orchestrator import HubOrchestrator, get_orchestrator
from capability_hub.hub.protocol import (
    ActionResult,
    HubConfig,
    HubEvent,
    MCPTool,
    ToolResponse,
    ToolServer,
)

__all__ = [
    "HubOrchestrator",
    "get_orchestrator",
    "ActionResult",
    "HubConfig",
    "HubEvent",
    "MCPTool",
    "ToolResponse",
    "ToolServer",
]
