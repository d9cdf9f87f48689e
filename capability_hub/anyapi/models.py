"""
AnyAPI 数据模型

API 定义、端点、参数以及单次调用的请求/响应。
属性使用 snake_case，对外（LLM / JSON）使用 camelCase 别名
"""

import re
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")

ParamType = Literal["string", "number", "boolean", "object", "array"]


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


BODY_METHODS = {HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH}


class AuthType(str, Enum):
    """认证方式"""

    BEARER = "bearer"  # Authorization: Bearer <token>
    APIKEY = "apikey"  # <authHeaderName>: <token>
    BASIC = "basic"    # Authorization: Basic <token>（token 需预先编码）
    QUERY = "query"    # ?<authQueryParam>=<token>
    CUSTOM = "custom"  # 由调用方自行通过 headers 传递


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_public(self) -> Dict[str, Any]:
        """导出为 camelCase 字典，省略空值"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class APIParameter(CamelModel):
    """API 参数定义"""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ParamType = "string"
    required: bool = False
    description: str = ""
    default: Optional[Any] = None
    enum: Optional[List[str]] = None


class APIEndpoint(CamelModel):
    """API 端点定义"""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    method: HTTPMethod = HTTPMethod.GET
    description: str = ""
    parameters: List[APIParameter] = Field(default_factory=list)  # 路径参数
    query_params: List[APIParameter] = Field(default_factory=list)
    body_params: List[APIParameter] = Field(default_factory=list)
    headers: Dict[str, str] = Field(default_factory=dict)
    example_request: Optional[Dict[str, Any]] = None
    example_response: Optional[Any] = None

    @model_validator(mode="after")
    def _check_placeholders(self) -> "APIEndpoint":
        declared = {p.name for p in self.parameters}
        undeclared = [
            name for name in PLACEHOLDER_PATTERN.findall(self.path)
            if name not in declared
        ]
        if undeclared:
            raise ValueError(
                f"endpoint '{self.name}' path '{self.path}' uses undeclared "
                f"path parameter(s): {', '.join(undeclared)}"
            )
        return self


class RateLimit(CamelModel):
    """限流信息（仅作提示，不强制）"""

    model_config = ConfigDict(frozen=True)

    requests_per_minute: Optional[int] = None
    requests_per_day: Optional[int] = None


class APIDefinition(CamelModel):
    """外部 REST API 定义"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    base_url: str
    requires_auth: bool = False
    auth_type: Optional[AuthType] = None
    auth_header_name: Optional[str] = None
    auth_query_param: Optional[str] = None
    rate_limit: Optional[RateLimit] = None
    common_headers: Dict[str, str] = Field(default_factory=dict)
    endpoints: List[APIEndpoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_auth_policy(self) -> "APIDefinition":
        if self.requires_auth and self.auth_type is None:
            raise ValueError(f"API '{self.id}' requires auth but declares no authType")
        if self.auth_type == AuthType.APIKEY and not self.auth_header_name:
            raise ValueError(f"API '{self.id}' uses apikey auth but declares no authHeaderName")
        if self.auth_type == AuthType.QUERY and not self.auth_query_param:
            raise ValueError(f"API '{self.id}' uses query auth but declares no authQueryParam")

        names = [e.name for e in self.endpoints]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"API '{self.id}' declares duplicate endpoint names: {', '.join(duplicates)}"
            )
        return self

    def get_endpoint(self, name_or_path: str) -> Optional[APIEndpoint]:
        """按名称查找端点，找不到再按原始路径查找"""
        for endpoint in self.endpoints:
            if endpoint.name == name_or_path:
                return endpoint
        for endpoint in self.endpoints:
            if endpoint.path == name_or_path:
                return endpoint
        return None

    @property
    def endpoint_names(self) -> List[str]:
        return [e.name for e in self.endpoints]


class APICallRequest(CamelModel):
    """已解析的单次调用请求"""

    api_id: str
    endpoint: str  # 端点名称或原始路径
    method: Optional[HTTPMethod] = None
    path_params: Dict[str, Any] = Field(default_factory=dict)
    query_params: Dict[str, Any] = Field(default_factory=dict)
    body: Optional[Any] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    access_token: Optional[str] = Field(default=None, repr=False)


class APICallResponse(CamelModel):
    """单次调用响应"""

    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    data: Any = None
    response_time: int  # 毫秒
    api_id: str
    endpoint: str
    method: HTTPMethod = HTTPMethod.GET
    url: str = ""

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400
