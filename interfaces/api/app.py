"""FastAPI 应用工厂"""

from typing import Optional

from fastapi import FastAPI

from infrastructure.containers import Bootstrap, bootstrap
from interfaces.api.dependencies import wire_container
from interfaces.api.routes import mail_router


def create_app(boot: Optional[Bootstrap] = None) -> FastAPI:
    """
    创建 FastAPI 应用并连接 DI 容器

    Args:
        boot: 已装配的容器，默认调用 bootstrap()

    Returns:
        FastAPI 实例
    """
    boot = boot or bootstrap()
    settings = boot.config.settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )
    app.state.bootstrap = boot

    wire_container(boot)
    app.include_router(mail_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        """健康检查"""
        return {"status": "healthy"}

    return app
