"""
AnyAPI Capability

以 "apiId.endpointName" 形式的动作调用预先审核的 API 集合。
扁平参数按端点声明分配到 path / query / body，
凭证按 Agent -> 环境变量 {APIID}_API_KEY 的顺序解析，
请求构建与执行复用 APIClient 的同一条流水线
"""

from typing import Any, Dict, List, Optional, Tuple

from capability_hub.anyapi.client import APIClient, get_api_client, render_body
from capability_hub.anyapi.definitions import CURATED_APIS
from capability_hub.anyapi.models import (
    APICallRequest,
    APICallResponse,
    APIDefinition,
    APIEndpoint,
    APIParameter,
)
from capability_hub.anyapi.registry import APIRegistry
from capability_hub.capabilities.base import (
    Capability,
    CapabilityContext,
    CapabilityExecutionResult,
)
from capability_hub.core.credentials import (
    CredentialResolver,
    EnvCredentialResolver,
    api_key_env_var,
)
from capability_hub.core.errors import (
    CapabilityError,
    CredentialNotConfiguredError,
    ErrorCode,
    MalformedActionError,
    UnknownAPIError,
    UpstreamHTTPError,
)
from capability_hub.core.logging import get_logger

logger = get_logger(__name__)


def parse_action(action: str) -> Tuple[str, str]:
    """拆分 "apiId.endpointName"，只按第一个 "." 拆分"""
    api_id, sep, endpoint_name = action.partition(".")
    if not sep or not api_id or not endpoint_name:
        raise MalformedActionError(action)
    return api_id, endpoint_name


def _pick(declared: List[APIParameter], params: Dict[str, Any]) -> Dict[str, Any]:
    """按声明提取参数；必填参数的空字符串视为缺失"""
    picked: Dict[str, Any] = {}
    for param in declared:
        value = params.get(param.name)
        if value is None:
            continue
        if param.required and value == "":
            continue
        picked[param.name] = value
    return picked


class AnyApiCapability(Capability):
    """通用 HTTP API 调用能力"""

    id = "anyapi"
    name = "AnyAPI"
    description = (
        "Generic HTTP API caller for a curated set of safe public APIs "
        "(CoinGecko, OpenWeather, GitHub, etc.)."
    )

    def __init__(
        self,
        registry: Optional[APIRegistry] = None,
        client: Optional[APIClient] = None,
        credentials: Optional[CredentialResolver] = None,
    ):
        self.registry = registry if registry is not None else APIRegistry(CURATED_APIS)
        self.client = client if client is not None else get_api_client()
        self.credentials = credentials if credentials is not None else EnvCredentialResolver()

    def build_request(
        self,
        api: APIDefinition,
        endpoint: APIEndpoint,
        params: Dict[str, Any],
    ) -> APICallRequest:
        """将扁平参数按端点声明分配到 path / query / body"""
        body = _pick(endpoint.body_params, params)
        return APICallRequest(
            api_id=api.id,
            endpoint=endpoint.name,
            path_params=_pick(endpoint.parameters, params),
            query_params=_pick(endpoint.query_params, params),
            body=body if endpoint.body_params else None,
        )

    async def execute(
        self,
        action: str,
        params: Dict[str, Any],
        context: CapabilityContext,
    ) -> CapabilityExecutionResult:
        log = logger.bind(capability=self.id, action=action, agent_id=context.agent_id)

        try:
            api_id, endpoint_name = parse_action(action)

            api = self.registry.get(api_id)
            if api is None:
                raise UnknownAPIError(api_id, self.registry.ids())

            endpoint = self.client.resolve_endpoint(api, endpoint_name)
            request = self.build_request(api, endpoint, params or {})
            self.client.check_parameters(endpoint, request)

            if api.requires_auth:
                token = await self.credentials.resolve(context.agent_id, api.id)
                if not token:
                    raise CredentialNotConfiguredError(api.id, api_key_env_var(api.id))
                request.access_token = token

            response = await self.client.call(api, request)

        except CapabilityError as e:
            log.warning("capability_action_failed", error_code=e.error_code.value, error=e.message)
            return CapabilityExecutionResult.from_error(e)

        except Exception as e:
            log.exception("capability_action_error", error_type=type(e).__name__)
            return CapabilityExecutionResult(
                success=False,
                error=str(e) or "AnyAPI call failed",
                error_code=ErrorCode.INTERNAL_ERROR.value,
            )

        return self._to_result(api, endpoint, response)

    @staticmethod
    def _to_result(
        api: APIDefinition,
        endpoint: APIEndpoint,
        response: APICallResponse,
    ) -> CapabilityExecutionResult:
        summary = (
            f"Called {api.name} ({api.id}). "
            f"Endpoint {endpoint.name}. HTTP {response.status_code}."
        )

        if response.is_error:
            error = UpstreamHTTPError(response.status_code, response.data, render_body(response.data))
            return CapabilityExecutionResult(
                success=False,
                data=response.data,
                summary=summary,
                error=error.message,
                error_code=error.error_code.value,
            )

        return CapabilityExecutionResult(success=True, data=response.data, summary=summary)
