"""
AnyAPI 模块

通用 REST API 调用：
- API 定义注册表（内置目录 + 运行时自定义）
- 请求校验、构建与执行
- 面向 LLM 的 4 个工具
"""

from capability_hub.anyapi.client import APIClient, get_api_client
from capability_hub.anyapi.models import (
    APICallRequest,
    APICallResponse,
    APIDefinition,
    APIEndpoint,
    APIParameter,
    AuthType,
    HTTPMethod,
)
from capability_hub.anyapi.registry import APIRegistry, get_api_registry
from capability_hub.anyapi.server import AnyAPIServer

__all__ = [
    "APIClient",
    "get_api_client",
    "APICallRequest",
    "APICallResponse",
    "APIDefinition",
    "APIEndpoint",
    "APIParameter",
    "AuthType",
    "HTTPMethod",
    "APIRegistry",
    "get_api_registry",
    "AnyAPIServer",
]
