"""
Capability API

列出可用 capability，并以 "apiId.endpointName" 动作直接执行 AnyAPI
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from capability_hub.anyapi.models import CamelModel
from capability_hub.capabilities.base import CapabilityContext
from capability_hub.capabilities.registry import CapabilityRegistry, get_capability_registry
from capability_hub.core.config import settings

router = APIRouter()


class CapabilityListResponse(BaseModel):
    """Capability 列表"""

    capabilities: List[Dict[str, str]]


class AnyApiExecuteRequest(CamelModel):
    """AnyAPI 执行请求"""

    action: Optional[str] = Field(None, description="动作，格式 apiId.endpointName")
    params: Dict[str, Any] = Field(default_factory=dict, description="扁平参数")
    agent_id: Optional[str] = Field(None, description="Agent ID")
    conversation_id: Optional[int] = Field(None, description="会话 ID")
    external_user_id: Optional[str] = Field(None, description="外部用户 ID")


@router.get("", response_model=CapabilityListResponse)
async def list_capabilities(
    registry: CapabilityRegistry = Depends(get_capability_registry),
) -> Dict[str, Any]:
    """列出所有 capability"""
    return {"capabilities": registry.list()}


@router.post("/anyapi/execute")
async def execute_anyapi(
    request: AnyApiExecuteRequest,
    registry: CapabilityRegistry = Depends(get_capability_registry),
) -> Dict[str, Any]:
    """
    执行 AnyAPI 动作

    失败（动作格式错误、未知 API、缺参数、未配置凭证、上游错误）
    以 success=false 返回，HTTP 状态仍为 200
    """
    if not request.action:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="action is required (e.g., coingecko.simple_price)",
        )

    context = CapabilityContext(
        agent_id=request.agent_id or settings.DEFAULT_AGENT_ID,
        conversation_id=request.conversation_id,
        external_user_id=request.external_user_id,
    )

    result = await registry.execute("anyapi", request.action, request.params, context)
    return result.to_dict()
