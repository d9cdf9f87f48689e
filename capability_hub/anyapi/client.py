"""
API Client

无状态的请求构建与执行器：
1. 校验请求（端点、必填参数、凭证），不做任何网络 I/O
2. 路径参数替换、查询串构建、请求头合并与认证注入
3. 执行 HTTP 调用并归一化响应

上游 >= 400 的状态码按正常响应返回，由调用方判断；
网络层错误（DNS、连接拒绝、超时）统一包装为 TransportError
"""

import json
import time
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import httpx

from capability_hub.anyapi.models import (
    APICallRequest,
    APICallResponse,
    APIDefinition,
    APIEndpoint,
    AuthType,
    BODY_METHODS,
    HTTPMethod,
)
from capability_hub.core.config import settings
from capability_hub.core.errors import (
    EndpointNotFoundError,
    MissingCredentialError,
    MissingParameterError,
    TransportError,
)
from capability_hub.core.logging import get_logger

logger = get_logger(__name__)

# 与 encodeURIComponent 保持一致的保留字符
PATH_SAFE_CHARS = "!*'()"
QUERY_SAFE_CHARS = ",:"


def stringify(value: Any) -> str:
    """将参数值转换为 URL 中使用的字符串"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def render_body(data: Any) -> str:
    """将上游响应体渲染为可读文本"""
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


def merge_headers(*layers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """按优先级从低到高合并请求头，键名大小写不敏感，后者覆盖前者"""
    merged: Dict[str, str] = {}
    for layer in layers:
        for key, value in (layer or {}).items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value
    return merged


def has_header(headers: Dict[str, str], name: str) -> bool:
    return any(k.lower() == name.lower() for k in headers)


class APIClient:
    """通用 REST API 客户端"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        user_agent: Optional[str] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.ANYAPI_TIMEOUT_SECONDS
        self.user_agent = user_agent or settings.ANYAPI_USER_AGENT
        self._transport = transport

    # ============================================================
    # 校验
    # ============================================================

    def resolve_endpoint(self, api: APIDefinition, name_or_path: str) -> APIEndpoint:
        """按名称或原始路径解析端点"""
        endpoint = api.get_endpoint(name_or_path)
        if endpoint is None:
            raise EndpointNotFoundError(name_or_path, api.name, api.endpoint_names)
        return endpoint

    def check_parameters(
        self,
        endpoint: APIEndpoint,
        request: APICallRequest,
    ) -> None:
        """检查端点声明的必填 path / query / body 参数"""
        for param in endpoint.parameters:
            value = request.path_params.get(param.name)
            if param.required and (value is None or stringify(value) == ""):
                raise MissingParameterError(param.name, "path", endpoint.name)

        for param in endpoint.query_params:
            if param.required and request.query_params.get(param.name) is None:
                raise MissingParameterError(param.name, "query", endpoint.name)

        body = request.body if isinstance(request.body, dict) else {}
        for param in endpoint.body_params:
            if param.required and body.get(param.name) is None:
                raise MissingParameterError(param.name, "body", endpoint.name)

    def check_credentials(self, api: APIDefinition, request: APICallRequest) -> None:
        """受保护的 API 必须携带 accessToken"""
        if api.requires_auth and not request.access_token:
            raise MissingCredentialError(api.name)

    def validate_request(self, api: APIDefinition, request: APICallRequest) -> APIEndpoint:
        """
        校验请求（不做网络 I/O）

        Returns:
            解析出的端点

        Raises:
            EndpointNotFoundError / MissingParameterError / MissingCredentialError
        """
        endpoint = self.resolve_endpoint(api, request.endpoint)
        self.check_parameters(endpoint, request)
        self.check_credentials(api, request)
        return endpoint

    # ============================================================
    # 请求构建
    # ============================================================

    @staticmethod
    def build_path(endpoint: APIEndpoint, path_params: Dict[str, Any]) -> str:
        """替换 {name} 占位符，值做百分号编码"""
        path = endpoint.path
        for key, value in path_params.items():
            if value is None:
                continue
            path = path.replace(
                "{" + key + "}",
                quote(stringify(value), safe=PATH_SAFE_CHARS),
            )
        return path

    @staticmethod
    def build_query(api: APIDefinition, request: APICallRequest) -> Dict[str, str]:
        """构建查询参数：query 认证参数优先写入，其余参数跳过空值"""
        query: Dict[str, str] = {}

        if api.auth_type == AuthType.QUERY and api.auth_query_param and request.access_token:
            query[api.auth_query_param] = request.access_token

        for key, value in request.query_params.items():
            if value is not None:
                query[key] = stringify(value)

        return query

    def build_url(
        self,
        api: APIDefinition,
        endpoint: APIEndpoint,
        request: APICallRequest,
    ) -> str:
        """构建完整 URL"""
        url = f"{api.base_url.rstrip('/')}{self.build_path(endpoint, request.path_params)}"
        query = self.build_query(api, request)
        if query:
            url = f"{url}?{urlencode(query, safe=QUERY_SAFE_CHARS)}"
        return url

    def build_headers(
        self,
        api: APIDefinition,
        endpoint: APIEndpoint,
        request: APICallRequest,
    ) -> Dict[str, str]:
        """合并请求头并注入认证：commonHeaders < endpoint.headers < request.headers"""
        headers = merge_headers(api.common_headers, endpoint.headers, request.headers)

        token = request.access_token
        if token:
            if api.auth_type == AuthType.BEARER:
                headers = merge_headers(headers, {"Authorization": f"Bearer {token}"})
            elif api.auth_type == AuthType.APIKEY and api.auth_header_name:
                headers = merge_headers(headers, {api.auth_header_name: token})
            elif api.auth_type == AuthType.BASIC:
                headers = merge_headers(headers, {"Authorization": f"Basic {token}"})

        if not has_header(headers, "User-Agent"):
            headers["User-Agent"] = self.user_agent

        return headers

    @staticmethod
    def effective_method(endpoint: APIEndpoint, request: APICallRequest) -> HTTPMethod:
        return request.method or endpoint.method

    # ============================================================
    # 执行
    # ============================================================

    async def execute_request(
        self,
        api: APIDefinition,
        request: APICallRequest,
    ) -> APICallResponse:
        """
        执行 HTTP 调用

        Raises:
            EndpointNotFoundError: 端点不存在
            TransportError: 网络层失败
        """
        endpoint = self.resolve_endpoint(api, request.endpoint)
        method = self.effective_method(endpoint, request)
        url = self.build_url(api, endpoint, request)
        headers = self.build_headers(api, endpoint, request)

        content: Optional[bytes] = None
        if method in BODY_METHODS and request.body is not None:
            content = json.dumps(request.body, ensure_ascii=False).encode("utf-8")
            if not has_header(headers, "Content-Type"):
                headers["Content-Type"] = "application/json"

        # 日志与响应中不带查询串，避免泄露 query 认证参数
        public_url = url.split("?", 1)[0]
        log = logger.bind(api_id=api.id, endpoint=endpoint.name)
        log.info("api_call_start", method=method.value, url=public_url)

        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.request(
                    method.value,
                    url,
                    headers=headers,
                    content=content,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            log.warning(
                "api_call_transport_error",
                error_type=type(e).__name__,
                error=str(e),
                latency_ms=latency_ms,
            )
            raise TransportError(e) from e

        response_time = int((time.perf_counter() - start_time) * 1000)

        log.info(
            "api_call_completed",
            status_code=response.status_code,
            latency_ms=response_time,
        )

        return APICallResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            data=self._parse_body(response),
            response_time=response_time,
            api_id=api.id,
            endpoint=endpoint.name,
            method=method,
            url=public_url,
        )

    async def call(self, api: APIDefinition, request: APICallRequest) -> APICallResponse:
        """校验后执行"""
        self.validate_request(api, request)
        return await self.execute_request(api, request)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """JSON 响应解析为对象，其余返回原始文本"""
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                logger.warning("api_response_invalid_json", content_type=content_type)
        return response.text


# 全局客户端实例
_api_client: Optional[APIClient] = None


def get_api_client() -> APIClient:
    """获取 API Client 单例"""
    global _api_client
    if _api_client is None:
        _api_client = APIClient()
    return _api_client
