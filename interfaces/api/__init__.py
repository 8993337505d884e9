"""
API 接口层

提供 FastAPI 应用工厂和依赖注入胶水代码。

用法：
    from interfaces.api import create_app

    app = create_app()
"""

from interfaces.api.app import create_app

__all__ = [
    "create_app",
]
