"""
AnyAPI 工具服务器

通用 REST API 工具服务器，对外提供 4 个工具：
- make_api_call: 调用注册表中任意 API 的任意端点
- list_available_apis: 列出可用 API（可按认证要求、描述关键词过滤）
- get_api_documentation: 单个 API 的结构化文档
- add_custom_api: 运行时注册自定义 API，注册后立即可调用
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from capability_hub.anyapi.client import APIClient, get_api_client, render_body
from capability_hub.anyapi.models import (
    APICallRequest,
    APIDefinition,
    APIEndpoint,
)
from capability_hub.anyapi.registry import APIRegistry, get_api_registry
from capability_hub.anyapi.schemas import (
    AddCustomAPIInput,
    GetAPIDocumentationInput,
    ListAvailableAPIsInput,
    MakeAPICallInput,
)
from capability_hub.core.errors import (
    InvalidAPIDefinitionError,
    UnknownAPIError,
    UpstreamHTTPError,
    issues_from_validation_error,
)
from capability_hub.core.logging import get_logger
from capability_hub.hub.protocol import MCPTool, ToolHandler, ToolResponse, ToolServer

logger = get_logger(__name__)


class AnyAPIServer(ToolServer):
    """AnyAPI 工具服务器"""

    name = "anyapi"
    version = "1.0.0"
    description = (
        "Universal REST API server - make HTTP API calls to any registered API "
        "through AI-friendly tools. Supports CoinGecko, OpenWeatherMap, "
        "REST Countries, JSONPlaceholder, GitHub and custom APIs."
    )

    def __init__(
        self,
        registry: Optional[APIRegistry] = None,
        client: Optional[APIClient] = None,
    ):
        super().__init__()
        self.registry = registry if registry is not None else get_api_registry()
        self.client = client if client is not None else get_api_client()
        self._tools = [
            MCPTool(
                name="make_api_call",
                description=(
                    "Make an HTTP API call to any registered API with full control over "
                    "method, parameters, headers, and body. Handles authentication automatically."
                ),
                input_schema=MakeAPICallInput,
            ),
            MCPTool(
                name="list_available_apis",
                description=(
                    "List all available APIs in the registry with their authentication "
                    "requirements, endpoints, and capabilities. Filter by category or "
                    "authentication requirement."
                ),
                input_schema=ListAvailableAPIsInput,
            ),
            MCPTool(
                name="get_api_documentation",
                description=(
                    "Get detailed documentation for a specific API including all available "
                    "endpoints, parameters, examples, and authentication requirements."
                ),
                input_schema=GetAPIDocumentationInput,
            ),
            MCPTool(
                name="add_custom_api",
                description=(
                    "Register a custom API definition at runtime. Allows adding new APIs "
                    "via JSON configuration without code changes."
                ),
                input_schema=AddCustomAPIInput,
            ),
        ]

    @property
    def tools(self) -> List[MCPTool]:
        return self._tools

    def handlers(self) -> Dict[str, ToolHandler]:
        return {
            "make_api_call": self._make_api_call,
            "list_available_apis": self._list_available_apis,
            "get_api_documentation": self._get_api_documentation,
            "add_custom_api": self._add_custom_api,
        }

    async def initialize(self) -> None:
        summary = self.registry.summary()
        logger.info(
            "anyapi_server_initialized",
            version=self.version,
            total=summary["total"],
            public=summary["public"],
            authenticated=summary["authenticated"],
        )
        for api in summary["apis"]:
            logger.info(
                "anyapi_api_available",
                api_id=api["id"],
                api_name=api["name"],
                requires_auth=api["requiresAuth"],
                endpoints=api["endpointCount"],
            )
        await super().initialize()

    async def shutdown(self) -> None:
        logger.info("anyapi_server_shutdown")
        await super().shutdown()

    def _require_api(self, api_id: str) -> APIDefinition:
        api = self.registry.get(api_id)
        if api is None:
            raise UnknownAPIError(api_id, self.registry.ids())
        return api

    # ============================================================
    # 工具处理函数
    # ============================================================

    async def _make_api_call(self, args: MakeAPICallInput) -> ToolResponse:
        api = self._require_api(args.api_id)

        request = APICallRequest(
            api_id=args.api_id,
            endpoint=args.endpoint,
            method=args.method,
            path_params=args.path_params,
            query_params=args.query_params,
            body=args.body,
            headers=args.headers,
            access_token=args.access_token,
        )

        response = await self.client.call(api, request)

        if response.is_error:
            error = UpstreamHTTPError(response.status_code, response.data, render_body(response.data))
            return ToolResponse(
                success=False,
                error=error.message,
                error_code=error.error_code.value,
                data={"statusCode": response.status_code, "data": response.data},
            )

        return ToolResponse.ok(
            {
                "statusCode": response.status_code,
                "data": response.data,
                "responseTime": response.response_time,
                "api": {"id": api.id, "name": api.name},
                "endpoint": response.endpoint,
                "metadata": {
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                    "rateLimit": api.rate_limit.to_public() if api.rate_limit else None,
                },
            }
        )

    async def _list_available_apis(self, args: ListAvailableAPIsInput) -> ToolResponse:
        apis = self.registry.list()

        if args.requires_auth is not None:
            apis = [a for a in apis if a.requires_auth == args.requires_auth]

        if args.category:
            keyword = args.category.lower()
            apis = [a for a in apis if keyword in a.description.lower()]

        items = [
            {
                "id": api.id,
                "name": api.name,
                "description": api.description,
                "requiresAuth": api.requires_auth,
                "authType": api.auth_type.value if api.auth_type else None,
                "baseUrl": api.base_url,
                "endpointCount": len(api.endpoints),
                "endpoints": [
                    {
                        "name": e.name,
                        "method": e.method.value,
                        "path": e.path,
                        "description": e.description,
                    }
                    for e in api.endpoints
                ],
                "rateLimit": api.rate_limit.to_public() if api.rate_limit else None,
            }
            for api in apis
        ]

        return ToolResponse.ok(
            {
                "total": len(items),
                "authenticated": sum(1 for i in items if i["requiresAuth"]),
                "public": sum(1 for i in items if not i["requiresAuth"]),
                "apis": items,
            }
        )

    async def _get_api_documentation(self, args: GetAPIDocumentationInput) -> ToolResponse:
        api = self._require_api(args.api_id)

        if api.requires_auth:
            instructions = (
                f"Provide API key/token in 'accessToken' parameter. "
                f"Auth type: {api.auth_type.value}"
            )
        else:
            instructions = "No authentication required - this is a public API"

        return ToolResponse.ok(
            {
                "id": api.id,
                "name": api.name,
                "description": api.description,
                "baseUrl": api.base_url,
                "authentication": {
                    "required": api.requires_auth,
                    "type": api.auth_type.value if api.auth_type else "none",
                    "headerName": api.auth_header_name,
                    "queryParam": api.auth_query_param,
                    "instructions": instructions,
                },
                "rateLimit": (
                    api.rate_limit.to_public()
                    if api.rate_limit
                    else {"note": "No rate limit information available"}
                ),
                "commonHeaders": dict(api.common_headers),
                "endpoints": [self._document_endpoint(api, e) for e in api.endpoints],
                "totalEndpoints": len(api.endpoints),
            }
        )

    @staticmethod
    def _document_endpoint(api: APIDefinition, endpoint: APIEndpoint) -> Dict[str, Any]:
        return {
            "name": endpoint.name,
            "method": endpoint.method.value,
            "path": endpoint.path,
            "description": endpoint.description,
            "parameters": {
                "path": [p.to_public() for p in endpoint.parameters],
                "query": [p.to_public() for p in endpoint.query_params],
                "body": [p.to_public() for p in endpoint.body_params],
            },
            "exampleRequest": endpoint.example_request,
            "exampleResponse": endpoint.example_response,
            "usage": {
                "tool": "make_api_call",
                "args": {
                    "apiId": api.id,
                    "endpoint": endpoint.name,
                    "method": endpoint.method.value,
                    **(endpoint.example_request or {}),
                },
            },
        }

    async def _add_custom_api(self, args: AddCustomAPIInput) -> ToolResponse:
        try:
            definition = APIDefinition(
                id=args.id,
                name=args.name,
                description=args.description,
                base_url=args.normalized_base_url(),
                requires_auth=args.requires_auth,
                auth_type=args.auth_type,
                auth_header_name=args.auth_header_name,
                auth_query_param=args.auth_query_param,
                rate_limit=args.rate_limit,
                common_headers=args.common_headers,
                endpoints=args.endpoints,
            )
        except ValidationError as e:
            raise InvalidAPIDefinitionError(issues_from_validation_error(e)) from e

        # 重复 id 由注册表在锁内拒绝
        stored = self.registry.register(definition)

        logger.info("custom_api_added", api_id=stored.id, endpoints=len(stored.endpoints))

        return ToolResponse.ok(
            {
                "message": f"Successfully registered API '{stored.name}' ({stored.id})",
                "api": {
                    "id": stored.id,
                    "name": stored.name,
                    "endpointCount": len(stored.endpoints),
                },
            }
        )
