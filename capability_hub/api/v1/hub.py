"""
Hub API

工具服务器状态、工具列表与工具执行
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from capability_hub.core.licensing import get_features
from capability_hub.hub.orchestrator import HubOrchestrator, get_orchestrator

router = APIRouter()


class ToolExecuteRequest(BaseModel):
    """工具执行请求"""

    server: str = Field(..., min_length=1, description="工具服务器名称")
    tool: str = Field(..., min_length=1, description="工具名称")
    arguments: Dict[str, Any] = Field(default_factory=dict, description="工具参数")


@router.get("/status")
async def get_hub_status(
    orchestrator: HubOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Hub 状态"""
    features = get_features()
    return {
        "enabled": features.mcp_hub,
        "features": features.summary(),
        "hub": orchestrator.get_hub_status(),
    }


@router.get("/tools")
async def list_tools(
    orchestrator: HubOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """所有已注册服务器的工具"""
    return {"tools": orchestrator.get_all_tools()}


@router.post("/execute")
async def execute_tool(
    request: ToolExecuteRequest,
    orchestrator: HubOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    执行工具

    失败（服务器不存在、未授权、工具不存在、参数错误）以 success=false 返回
    """
    result = await orchestrator.execute_action(request.server, request.tool, request.arguments)
    return result.to_dict()
