"""
Agent Capability Hub 主入口

职责:
- 通用 REST API 调用（AnyAPI）
- 工具服务器注册与调度（Hub）
- Capability 直接执行
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from capability_hub import __version__
from capability_hub.anyapi.server import AnyAPIServer
from capability_hub.api import router as api_router
from capability_hub.core.config import settings
from capability_hub.core.errors import CapabilityError
from capability_hub.core.licensing import get_features, is_capability_allowed
from capability_hub.core.logging import get_logger, setup_logging
from capability_hub.hub.orchestrator import get_orchestrator

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理"""
    setup_logging()

    features = get_features()
    logger.info("service_starting", env=settings.ENV, features=features.summary())

    orchestrator = get_orchestrator()
    if features.mcp_hub and is_capability_allowed(AnyAPIServer.name):
        try:
            await orchestrator.register_server(AnyAPIServer())
        except CapabilityError as e:
            logger.error("anyapi_server_unavailable", error=e.message)
    else:
        logger.info("hub_disabled", features=features.summary())

    yield

    await orchestrator.shutdown()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="Agent Capability Hub",
        description="通用 REST API 调用 × 工具服务器调度 × Agent Capability",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict:
        """健康检查端点"""
        return {"status": "healthy", "service": settings.HUB_NAME, "version": __version__}

    return app


app = create_app()
