"""
核心基础设施测试：License 闸门、凭证解析、错误
"""

import pytest
from pydantic import BaseModel, ValidationError

from capability_hub.core.credentials import EnvCredentialResolver, api_key_env_var
from capability_hub.core.errors import (
    ErrorCode,
    SchemaValidationError,
    TransportError,
    UnknownAPIError,
    issues_from_validation_error,
)
from capability_hub.core.licensing import (
    FeatureFlags,
    get_features,
    is_capability_allowed,
    set_features,
)


class TestLicensing:
    """License 闸门"""

    def test_hub_disabled_denies_everything(self):
        set_features(FeatureFlags(mcp_hub=False, allowed_capabilities=["*"]))
        assert is_capability_allowed("anyapi") is False

    def test_wildcard_allows_all(self):
        set_features(FeatureFlags(mcp_hub=True, allowed_capabilities=["*"]))
        assert is_capability_allowed("anyapi") is True
        assert is_capability_allowed("anything") is True

    def test_explicit_list(self):
        set_features(FeatureFlags(mcp_hub=True, allowed_capabilities=["anyapi"]))
        assert is_capability_allowed("anyapi") is True
        assert is_capability_allowed("weather") is False

    def test_defaults_from_settings(self):
        features = get_features()
        assert features.mcp_hub is True
        assert features.allowed_capabilities == ["*"]

    def test_summary(self):
        assert FeatureFlags().summary() == "BASE (no features)"
        assert FeatureFlags(mcp_hub=True, allowed_capabilities=["a", "b"]).summary() == "mcpHub(caps:a,b)"


class TestCredentials:
    """凭证解析"""

    def test_env_var_name(self):
        assert api_key_env_var("openweather") == "OPENWEATHER_API_KEY"
        assert api_key_env_var("my-api.v2") == "MY_API_V2_API_KEY"

    @pytest.mark.asyncio
    async def test_env_lookup(self):
        resolver = EnvCredentialResolver(environ={"GITHUB_API_KEY": "ghp"})
        assert await resolver.resolve("agent-1", "github") == "ghp"
        assert await resolver.resolve("agent-1", "openweather") is None

    @pytest.mark.asyncio
    async def test_empty_value_is_not_configured(self):
        resolver = EnvCredentialResolver(environ={"GITHUB_API_KEY": ""})
        assert await resolver.resolve(None, "github") is None

    @pytest.mark.asyncio
    async def test_agent_lookup_falls_back_to_env(self):
        async def lookup(agent_id, capability_id):
            return None

        resolver = EnvCredentialResolver(agent_lookup=lookup, environ={"GITHUB_API_KEY": "env"})
        assert await resolver.resolve("agent-1", "github") == "env"


class TestErrors:
    """错误分类"""

    def test_unknown_api_lists_available(self):
        error = UnknownAPIError("stripe", ["coingecko", "github"])
        assert error.error_code == ErrorCode.UNKNOWN_API
        assert "coingecko, github" in error.message
        assert error.to_dict()["error_code"] == "UNKNOWN_API"

    def test_transport_error_message(self):
        error = TransportError(ConnectionRefusedError("refused"))
        assert error.message == "HTTP request failed: refused"

    def test_issues_collects_every_field(self):
        class Sample(BaseModel):
            a: int
            b: str

        with pytest.raises(ValidationError) as exc_info:
            Sample.model_validate({"a": "x"})

        issues = issues_from_validation_error(exc_info.value)
        assert [i["path"] for i in issues] == ["a", "b"]

        error = SchemaValidationError(issues)
        assert error.message.startswith("Validation error: a: ")
        assert error.details["issues"] == issues
