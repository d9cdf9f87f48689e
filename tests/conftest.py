"""
测试配置和 fixtures
"""

from typing import Any, List, Optional

import httpx
import pytest

from capability_hub.anyapi.client import APIClient
from capability_hub.anyapi.definitions import BUILTIN_APIS
from capability_hub.anyapi.registry import APIRegistry, reset_api_registry
from capability_hub.capabilities.registry import reset_capability_registry
from capability_hub.core.licensing import reset_features
from capability_hub.hub.orchestrator import reset_orchestrator


class UpstreamStub:
    """伪上游：记录收到的请求并返回预设响应"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.json_body: Any = {"ok": True}
        self.text_body: Optional[str] = None
        self.content_type: Optional[str] = None
        self.error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text_body is not None:
            return httpx.Response(
                self.status_code,
                text=self.text_body,
                headers={"content-type": self.content_type or "text/plain"},
            )
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture(autouse=True)
def reset_singletons():
    """每个测试前后重置进程级单例"""
    reset_api_registry()
    reset_orchestrator()
    reset_capability_registry()
    reset_features()
    yield
    reset_api_registry()
    reset_orchestrator()
    reset_capability_registry()
    reset_features()


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def api_client(upstream: UpstreamStub) -> APIClient:
    return APIClient(timeout=5.0, transport=upstream.transport)


@pytest.fixture
def registry() -> APIRegistry:
    return APIRegistry(BUILTIN_APIS)
