"""
REST API 路由

定义 REST API 端点。
"""

from interfaces.api.routes.mail import router as mail_router

__all__ = ["mail_router"]
