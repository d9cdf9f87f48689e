"""
API 路由模块

统一注册所有 API 路由
"""

from fastapi import APIRouter

from capability_hub.api.v1 import capabilities, hub

router = APIRouter()

# Capability 直接执行
router.include_router(capabilities.router, prefix="/v1/capabilities", tags=["Capability"])

# 工具服务器 Hub
router.include_router(hub.router, prefix="/v1/mcp", tags=["Hub"])
