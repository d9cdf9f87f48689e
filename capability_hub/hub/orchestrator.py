"""
Hub 编排器

维护 工具服务器名 -> 服务器实例 的映射，负责：
1. 服务器注册 / 注销（执行 initialize / shutdown 生命周期）
2. 汇总所有工具
3. 路由 (server, tool, arguments) 调用，记录耗时并发出事件
"""

import asyncio
import inspect
import time
from typing import Any, Callable, Dict, List, Optional

from capability_hub.core.config import settings
from capability_hub.core.errors import (
    CapabilityError,
    CapabilityNotLicensedError,
    ErrorCode,
    ProviderInitError,
    UnknownProviderError,
)
from capability_hub.core.licensing import is_capability_allowed
from capability_hub.core.logging import get_logger
from capability_hub.hub.protocol import (
    ActionResult,
    HubConfig,
    HubEvent,
    HubEventListener,
    ToolResponse,
    ToolServer,
)

logger = get_logger(__name__)

LicenseGate = Callable[[str], bool]


class HubOrchestrator:
    """工具服务器编排器"""

    def __init__(
        self,
        config: Optional[HubConfig] = None,
        license_gate: Optional[LicenseGate] = None,
    ):
        self.config = config or HubConfig(
            name=settings.HUB_NAME,
            version=settings.HUB_VERSION,
            max_concurrent_actions=settings.HUB_MAX_CONCURRENT_ACTIONS,
            default_timeout=settings.HUB_DEFAULT_TIMEOUT_SECONDS,
        )
        self.license_gate = license_gate or is_capability_allowed
        self._servers: Dict[str, ToolServer] = {}
        self._listeners: List[HubEventListener] = []
        self._lock = asyncio.Lock()

    # ============================================================
    # 服务器生命周期
    # ============================================================

    async def register_server(self, server: ToolServer) -> None:
        """
        注册工具服务器

        先执行 initialize()，成功后才写入映射

        Raises:
            ProviderInitError: 初始化失败，服务器不会被注册
        """
        log = logger.bind(server=server.name)

        init_error: Optional[Exception] = None
        previous: Optional[ToolServer] = None

        async with self._lock:
            try:
                await server.initialize()
            except Exception as e:
                init_error = e
            else:
                previous = self._servers.get(server.name)
                servers = dict(self._servers)
                servers[server.name] = server
                self._servers = servers

        # 事件在锁外分发，监听器可再次调用 register / unregister
        if init_error is not None:
            error = str(init_error)
            log.error("server_init_failed", error_type=type(init_error).__name__, error=error)
            await self._emit(HubEvent(type="server.error", server=server.name, error=error))
            raise ProviderInitError(server.name, error or type(init_error).__name__) from init_error

        if previous is not None and previous is not server:
            log.warning("server_replaced")
            await self._safe_shutdown(previous)

        log.info("server_registered", version=server.version, tools=len(server.tools))
        await self._emit(
            HubEvent(
                type="server.registered",
                server=server.name,
                data={"version": server.version, "tools": [t.name for t in server.tools]},
            )
        )

    async def unregister_server(self, name: str) -> bool:
        """注销工具服务器，返回是否存在"""
        async with self._lock:
            server = self._servers.get(name)
            if server is None:
                return False
            servers = dict(self._servers)
            del servers[name]
            self._servers = servers

        await self._safe_shutdown(server)
        logger.info("server_unregistered", server=name)
        await self._emit(HubEvent(type="server.unregistered", server=name))
        return True

    async def shutdown(self) -> None:
        """关闭所有服务器"""
        async with self._lock:
            servers = list(self._servers.values())
            self._servers = {}

        for server in servers:
            await self._safe_shutdown(server)

        logger.info("hub_shutdown", servers=len(servers))

    async def _safe_shutdown(self, server: ToolServer) -> None:
        try:
            await server.shutdown()
        except Exception as e:
            logger.error(
                "server_shutdown_failed",
                server=server.name,
                error_type=type(e).__name__,
                error=str(e),
            )
            await self._emit(HubEvent(type="server.error", server=server.name, error=str(e)))

    def get_server(self, name: str) -> Optional[ToolServer]:
        return self._servers.get(name)

    def list_servers(self) -> List[str]:
        return list(self._servers.keys())

    # ============================================================
    # 工具
    # ============================================================

    def get_all_tools(self) -> List[Dict[str, Any]]:
        """所有服务器的工具，附带所属服务器名"""
        return [
            {"server": name, "tool": tool.to_dict()}
            for name, server in self._servers.items()
            for tool in server.list_tools()
        ]

    async def execute_action(
        self,
        server_name: str,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> ActionResult:
        """
        路由一次工具调用

        失败（服务器不存在、未授权、工具不存在、参数错误、执行错误）
        都以 success=False 的 ActionResult 返回
        """
        arguments = dict(arguments or {})
        start_time = time.time()
        log = logger.bind(server=server_name, tool=tool_name)

        await self._emit(
            HubEvent(type="tool.called", server=server_name, tool=tool_name, data=arguments)
        )

        try:
            server = self._servers.get(server_name)
            if server is None:
                raise UnknownProviderError(server_name, self.list_servers())
            if not self.license_gate(server_name):
                raise CapabilityNotLicensedError(server_name)

            response = await server.execute_tool(tool_name, arguments)

        except CapabilityError as e:
            log.warning("action_rejected", error_code=e.error_code.value, error=e.message)
            response = ToolResponse.from_error(e)

        except Exception as e:
            log.exception("action_error", error_type=type(e).__name__)
            response = ToolResponse(
                success=False,
                error=str(e) or type(e).__name__,
                error_code=ErrorCode.INTERNAL_ERROR.value,
            )

        execution_time = int((time.time() - start_time) * 1000)
        response.metadata = {
            **response.metadata,
            "executionTime": execution_time,
            "server": server_name,
            "tool": tool_name,
        }

        if response.success:
            log.info("action_completed", execution_time_ms=execution_time)
            await self._emit(
                HubEvent(
                    type="tool.completed",
                    server=server_name,
                    tool=tool_name,
                    data={"executionTime": execution_time},
                )
            )
        else:
            log.info("action_failed", execution_time_ms=execution_time, error_code=response.error_code)
            await self._emit(
                HubEvent(
                    type="tool.error",
                    server=server_name,
                    tool=tool_name,
                    error=response.error,
                    data={"executionTime": execution_time, "errorCode": response.error_code},
                )
            )

        return ActionResult(
            server=server_name,
            tool=tool_name,
            arguments=arguments,
            response=response,
        )

    # ============================================================
    # 状态与事件
    # ============================================================

    def get_hub_status(self) -> Dict[str, Any]:
        """Hub 状态"""
        servers = list(self._servers.values())
        details = [
            {
                "name": s.name,
                "version": s.version,
                "description": s.description,
                "toolCount": len(s.tools),
                "healthy": s.is_healthy,
            }
            for s in servers
        ]
        return {
            "name": self.config.name,
            "version": self.config.version,
            "serverCount": len(servers),
            "totalTools": sum(d["toolCount"] for d in details),
            "healthy": all(d["healthy"] for d in details),
            # 仅作展示，不参与调度
            "maxConcurrentActions": self.config.max_concurrent_actions,
            "defaultTimeout": self.config.default_timeout,
            "servers": details,
        }

    def add_listener(self, listener: HubEventListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: HubEventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _emit(self, event: HubEvent) -> None:
        """分发事件，监听器异常只记录日志"""
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(
                    "hub_listener_failed",
                    event_type=event.type,
                    error_type=type(e).__name__,
                    error=str(e),
                )


# 全局编排器实例
_orchestrator: Optional[HubOrchestrator] = None


def get_orchestrator() -> HubOrchestrator:
    """获取 Hub 编排器单例"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = HubOrchestrator()
    return _orchestrator


def reset_orchestrator() -> None:
    """重置编排器（用于测试）"""
    global _orchestrator
    _orchestrator = None
