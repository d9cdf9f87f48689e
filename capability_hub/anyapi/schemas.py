"""
AnyAPI 工具输入 Schema

所有工具输入通过 Pydantic v2 校验，字段对外使用 camelCase
"""

from typing import Any, Dict, List, Optional

from pydantic import AnyHttpUrl, Field, model_validator

from capability_hub.anyapi.models import (
    APIEndpoint,
    AuthType,
    CamelModel,
    HTTPMethod,
    RateLimit,
)


class MakeAPICallInput(CamelModel):
    """make_api_call 输入"""

    api_id: str = Field(..., min_length=1, description="ID of the API to call (e.g., 'coingecko', 'github')")
    endpoint: str = Field(..., min_length=1, description="Endpoint name or path (e.g., 'simple_price' or '/simple/price')")
    method: Optional[HTTPMethod] = Field(None, description="HTTP method, defaults to the endpoint's declared method")
    access_token: Optional[str] = Field(None, description="Access token or API key, required when the API requires authentication")
    path_params: Dict[str, Any] = Field(default_factory=dict, description="Path parameters (e.g., {'id': 'bitcoin'})")
    query_params: Dict[str, Any] = Field(default_factory=dict, description="Query parameters (e.g., {'vs_currency': 'usd'})")
    body: Optional[Any] = Field(None, description="Request body for POST/PUT/PATCH requests")
    headers: Dict[str, str] = Field(default_factory=dict, description="Additional HTTP headers")


class ListAvailableAPIsInput(CamelModel):
    """list_available_apis 输入"""

    requires_auth: Optional[bool] = Field(None, description="Filter by authentication requirement")
    category: Optional[str] = Field(None, description="Filter by keyword found in the API description (e.g., 'crypto', 'weather')")


class GetAPIDocumentationInput(CamelModel):
    """get_api_documentation 输入"""

    api_id: str = Field(..., min_length=1, description="ID of the API to document")


class AddCustomAPIInput(CamelModel):
    """add_custom_api 输入"""

    id: str = Field(..., min_length=1, description="Unique API identifier")
    name: str = Field(..., min_length=1, description="Human-readable API name")
    description: str = Field(..., description="What the API does")
    base_url: AnyHttpUrl = Field(..., description="Base URL, e.g. https://api.example.com/v1")
    requires_auth: bool = Field(False, description="Whether calls require an access token")
    auth_type: Optional[AuthType] = Field(None, description="bearer, apikey, basic, query or custom")
    auth_header_name: Optional[str] = Field(None, description="Header name for apikey auth")
    auth_query_param: Optional[str] = Field(None, description="Query parameter name for query auth")
    rate_limit: Optional[RateLimit] = Field(None, description="Advisory rate limit information")
    common_headers: Dict[str, str] = Field(default_factory=dict, description="Headers sent with every request")
    endpoints: List[APIEndpoint] = Field(..., min_length=1, description="Endpoint definitions")

    @model_validator(mode="after")
    def _check_auth_policy(self) -> "AddCustomAPIInput":
        if self.requires_auth and self.auth_type is None:
            raise ValueError("authType is required when requiresAuth is true")
        if self.auth_type == AuthType.APIKEY and not self.auth_header_name:
            raise ValueError("authHeaderName is required for apikey auth")
        if self.auth_type == AuthType.QUERY and not self.auth_query_param:
            raise ValueError("authQueryParam is required for query auth")

        names = [e.name for e in self.endpoints]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate endpoint names: {', '.join(duplicates)}")
        return self

    def normalized_base_url(self) -> str:
        return str(self.base_url).rstrip("/")
