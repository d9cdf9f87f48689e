"""
HTTP 路由测试
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from capability_hub.anyapi.server import AnyAPIServer
from capability_hub.capabilities.anyapi import AnyApiCapability
from capability_hub.capabilities.registry import CapabilityRegistry, get_capability_registry
from capability_hub.core.credentials import EnvCredentialResolver
from capability_hub.core.licensing import FeatureFlags, set_features
from capability_hub.hub.orchestrator import HubOrchestrator, get_orchestrator
from capability_hub.main import create_app


@pytest.fixture
def hub(registry, api_client):
    orchestrator = HubOrchestrator(license_gate=lambda _: True)
    asyncio.run(orchestrator.register_server(AnyAPIServer(registry=registry, client=api_client)))
    return orchestrator


@pytest.fixture
def capabilities(api_client):
    registry = CapabilityRegistry(license_gate=lambda _: True)
    registry.register(
        AnyApiCapability(client=api_client, credentials=EnvCredentialResolver(environ={}))
    )
    return registry


@pytest.fixture
def client(hub, capabilities):
    app = create_app()
    app.dependency_overrides[get_orchestrator] = lambda: hub
    app.dependency_overrides[get_capability_registry] = lambda: capabilities
    return TestClient(app)


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCapabilityRoutes:
    """Capability 路由"""

    def test_list(self, client):
        response = client.get("/api/v1/capabilities")
        assert response.status_code == 200
        assert response.json()["capabilities"][0]["id"] == "anyapi"

    def test_execute(self, client, upstream):
        upstream.json_body = {"bitcoin": {"usd": 1}}

        response = client.post(
            "/api/v1/capabilities/anyapi/execute",
            json={
                "action": "coingecko.simple_price",
                "params": {"ids": "bitcoin", "vs_currencies": "usd"},
                "agentId": "agent-9",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == {"bitcoin": {"usd": 1}}
        assert body["summary"].startswith("Called CoinGecko")

    def test_missing_action_is_400(self, client, upstream):
        response = client.post("/api/v1/capabilities/anyapi/execute", json={"params": {}})
        assert response.status_code == 400
        assert "action is required" in response.json()["detail"]
        assert upstream.requests == []

    def test_failure_reported_in_body(self, client):
        response = client.post(
            "/api/v1/capabilities/anyapi/execute",
            json={"action": "openweather.current_weather", "params": {"q": "Oslo"}},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["errorCode"] == "CREDENTIAL_NOT_CONFIGURED"


class TestHubRoutes:
    """Hub 路由"""

    def test_tools(self, client):
        response = client.get("/api/v1/mcp/tools")
        tools = response.json()["tools"]
        assert len(tools) == 4
        assert all(t["server"] == "anyapi" for t in tools)

    def test_status(self, client):
        body = client.get("/api/v1/mcp/status").json()
        assert body["enabled"] is True
        assert body["hub"]["serverCount"] == 1
        assert body["hub"]["totalTools"] == 4

    def test_execute(self, client, upstream):
        response = client.post(
            "/api/v1/mcp/execute",
            json={
                "server": "anyapi",
                "tool": "list_available_apis",
                "arguments": {"requiresAuth": True},
            },
        )

        body = response.json()
        assert body["success"] is True
        assert body["server"] == "anyapi"
        assert body["response"]["data"]["total"] == 1
        assert "executionTime" in body["response"]["metadata"]

    def test_execute_unknown_server(self, client):
        body = client.post(
            "/api/v1/mcp/execute",
            json={"server": "nope", "tool": "x"},
        ).json()
        assert body["success"] is False
        assert body["response"]["errorCode"] == "UNKNOWN_PROVIDER"


class TestLifespan:
    """应用生命周期"""

    def test_registers_anyapi_when_licensed(self):
        with TestClient(create_app()) as client:
            tools = client.get("/api/v1/mcp/tools").json()["tools"]
            assert {t["tool"]["name"] for t in tools} == {
                "make_api_call",
                "list_available_apis",
                "get_api_documentation",
                "add_custom_api",
            }
        assert get_orchestrator().list_servers() == []

    def test_skips_hub_when_disabled(self):
        set_features(FeatureFlags(mcp_hub=False))
        with TestClient(create_app()) as client:
            assert client.get("/api/v1/mcp/tools").json() == {"tools": []}
