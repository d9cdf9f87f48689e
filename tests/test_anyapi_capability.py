"""
AnyAPI Capability 测试
"""

import pytest

from capability_hub.anyapi.models import APIDefinition, APIEndpoint, APIParameter
from capability_hub.anyapi.registry import APIRegistry
from capability_hub.capabilities.anyapi import AnyApiCapability, parse_action
from capability_hub.capabilities.base import CapabilityContext
from capability_hub.capabilities.registry import CapabilityRegistry, get_capability_registry
from capability_hub.core.credentials import EnvCredentialResolver
from capability_hub.core.errors import MalformedActionError


@pytest.fixture
def context():
    return CapabilityContext(agent_id="agent-1")


@pytest.fixture
def capability(api_client):
    return AnyApiCapability(
        client=api_client,
        credentials=EnvCredentialResolver(environ={}),
    )


class TestParseAction:
    """动作解析"""

    def test_split_on_first_dot(self):
        assert parse_action("coingecko.simple_price") == ("coingecko", "simple_price")
        assert parse_action("github.search.extra") == ("github", "search.extra")

    @pytest.mark.parametrize("action", ["coingecko", "coingecko.", ".simple_price", ""])
    def test_malformed(self, action):
        with pytest.raises(MalformedActionError):
            parse_action(action)


class TestAnyApiCapability:
    """Capability 执行"""

    @pytest.mark.asyncio
    async def test_simple_price(self, capability, context, upstream):
        upstream.json_body = {"bitcoin": {"usd": 45000}}

        result = await capability.execute(
            "coingecko.simple_price",
            {"ids": "bitcoin", "vs_currencies": "usd", "unrelated": "x"},
            context,
        )

        assert result.success is True
        assert result.data == {"bitcoin": {"usd": 45000}}
        assert result.summary == "Called CoinGecko (coingecko). Endpoint simple_price. HTTP 200."
        assert dict(upstream.last.url.params) == {"ids": "bitcoin", "vs_currencies": "usd"}

    @pytest.mark.asyncio
    async def test_malformed_action(self, capability, context, upstream):
        result = await capability.execute("coingecko", {}, context)
        assert result.success is False
        assert result.error_code == "MALFORMED_ACTION"
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_api_outside_curated_set(self, capability, context):
        result = await capability.execute("jsonplaceholder.get_posts", {}, context)
        assert result.error_code == "UNKNOWN_API"

    @pytest.mark.asyncio
    async def test_unknown_endpoint(self, capability, context):
        result = await capability.execute("coingecko.ping", {}, context)
        assert result.error_code == "ENDPOINT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_empty_required_param_is_missing(self, capability, context, upstream):
        result = await capability.execute(
            "github.search_repositories",
            {"q": ""},
            context,
        )
        assert result.error_code == "MISSING_PARAMETER"
        assert "q" in result.error
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_credential_not_configured(self, capability, context, upstream):
        result = await capability.execute(
            "openweather.current_weather",
            {"q": "London"},
            context,
        )

        assert result.success is False
        assert result.error_code == "CREDENTIAL_NOT_CONFIGURED"
        assert "OPENWEATHER_API_KEY" in result.error
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_env_credential_injected(self, api_client, context, upstream):
        capability = AnyApiCapability(
            client=api_client,
            credentials=EnvCredentialResolver(environ={"OPENWEATHER_API_KEY": "k1"}),
        )

        result = await capability.execute(
            "openweather.current_weather",
            {"q": "London", "units": "metric"},
            context,
        )

        assert result.success is True
        assert upstream.last.url.params["appid"] == "k1"
        assert upstream.last.url.params["q"] == "London"

    @pytest.mark.asyncio
    async def test_agent_credential_preferred(self, api_client, upstream):
        async def lookup(agent_id, capability_id):
            return f"{agent_id}-{capability_id}-key"

        capability = AnyApiCapability(
            client=api_client,
            credentials=EnvCredentialResolver(
                agent_lookup=lookup,
                environ={"OPENWEATHER_API_KEY": "env-key"},
            ),
        )

        await capability.execute(
            "openweather.current_weather",
            {"q": "Paris"},
            CapabilityContext(agent_id="agent-7"),
        )

        assert upstream.last.url.params["appid"] == "agent-7-openweather-key"

    @pytest.mark.asyncio
    async def test_upstream_error(self, capability, context, upstream):
        upstream.status_code = 503
        upstream.json_body = {"error": "unavailable"}

        result = await capability.execute("github.search_repositories", {"q": "httpx"}, context)

        assert result.success is False
        assert result.error_code == "UPSTREAM_HTTP_ERROR"
        assert result.summary.endswith("HTTP 503.")
        assert result.data == {"error": "unavailable"}


class TestOwnedRegistry:
    """Capability 使用传入的注册表实例"""

    @pytest.mark.asyncio
    async def test_empty_registry_kept(self, api_client, context, upstream):
        own = APIRegistry()
        capability = AnyApiCapability(registry=own, client=api_client)

        assert capability.registry is own

        result = await capability.execute("coingecko.simple_price", {"ids": "bitcoin"}, context)

        assert result.error_code == "UNKNOWN_API"
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_registered_api_is_callable(self, api_client, context, upstream):
        own = APIRegistry()
        capability = AnyApiCapability(registry=own, client=api_client)
        own.register(
            APIDefinition(
                id="notes",
                name="Notes",
                base_url="https://notes.example.com",
                endpoints=[
                    APIEndpoint(
                        name="get_note",
                        path="/notes/{noteId}",
                        parameters=[APIParameter(name="noteId", required=True)],
                    )
                ],
            )
        )
        upstream.json_body = {"id": "n1"}

        result = await capability.execute("notes.get_note", {"noteId": "n1"}, context)

        assert result.success is True
        assert str(upstream.last.url) == "https://notes.example.com/notes/n1"


class TestCapabilityRegistry:
    """注册表与 License 闸门"""

    @pytest.mark.asyncio
    async def test_license_denied(self, capability, context, upstream):
        registry = CapabilityRegistry(license_gate=lambda _: False)
        registry.register(capability)

        result = await registry.execute("anyapi", "coingecko.simple_price", {}, context)

        assert result.success is False
        assert result.error_code == "CAPABILITY_NOT_LICENSED"
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_unknown_capability(self, context):
        registry = CapabilityRegistry(license_gate=lambda _: True)
        result = await registry.execute("weather", "x.y", {}, context)
        assert result.error_code == "UNKNOWN_CAPABILITY"

    def test_default_registry_lists_anyapi(self):
        capabilities = get_capability_registry().list()
        assert capabilities == [
            {
                "id": "anyapi",
                "name": "AnyAPI",
                "description": AnyApiCapability.description,
            }
        ]

    def test_result_to_dict_uses_camel_error_code(self):
        from capability_hub.capabilities.base import CapabilityExecutionResult

        result = CapabilityExecutionResult(success=False, error="boom", error_code="INTERNAL_ERROR")
        assert result.to_dict() == {"success": False, "error": "boom", "errorCode": "INTERNAL_ERROR"}
