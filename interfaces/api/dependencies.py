"""
FastAPI 依赖

通过 set_*_getter 注册获取器（通常来自 DI 容器的 Provider），
路由中使用 Depends(get_*) 获取服务实例。

用法：
    from fastapi import Depends, FastAPI
    from infrastructure.containers import bootstrap
    from interfaces.api.dependencies import get_email_sender, wire_container

    wire_container(bootstrap())
    app = FastAPI()

    @app.post("/mail")
    async def send(sender: EmailSender = Depends(get_email_sender)):
        ...
"""

from typing import Callable, Optional

from fastapi import HTTPException, status

from application.mail.services.email_sender import EmailSender
from domain.mail.services.configured_email_service import ConfiguredEmailService
from domain.mail.services.email_client_service import EmailClientService
from infrastructure.containers import Bootstrap


# ============ 服务获取器 ============

_email_client_service_getter: Optional[Callable[[], EmailClientService]] = None
_configured_email_service_getter: Optional[Callable[[], ConfiguredEmailService]] = None
_email_sender_getter: Optional[Callable[[], EmailSender]] = None


def _unavailable(name: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"{name} is not configured",
    )


def set_email_client_service_getter(getter: Callable[[], EmailClientService]) -> None:
    """设置邮件客户端服务获取器"""
    global _email_client_service_getter
    _email_client_service_getter = getter


def get_email_client_service() -> EmailClientService:
    """获取邮件客户端服务实例"""
    if _email_client_service_getter is None:
        raise _unavailable("Email client service")
    return _email_client_service_getter()


def set_configured_email_service_getter(getter: Callable[[], ConfiguredEmailService]) -> None:
    """设置预配置邮件服务获取器"""
    global _configured_email_service_getter
    _configured_email_service_getter = getter


def get_configured_email_service() -> ConfiguredEmailService:
    """获取预配置邮件服务实例"""
    if _configured_email_service_getter is None:
        raise _unavailable("Configured email service")
    return _configured_email_service_getter()


def set_email_sender_getter(getter: Callable[[], EmailSender]) -> None:
    """设置邮件发送服务获取器"""
    global _email_sender_getter
    _email_sender_getter = getter


def get_email_sender() -> EmailSender:
    """获取邮件发送服务实例"""
    if _email_sender_getter is None:
        raise _unavailable("Email sender")
    return _email_sender_getter()


def wire_container(boot: Bootstrap) -> None:
    """将 DI 容器的 Provider 注册为获取器"""
    set_email_client_service_getter(boot.infra.incoming_client_service)
    set_configured_email_service_getter(boot.app.configured_email_service)
    set_email_sender_getter(boot.app.email_sender)


def reset_getters() -> None:
    """清除全部获取器"""
    global _email_client_service_getter, _configured_email_service_getter, _email_sender_getter
    _email_client_service_getter = None
    _configured_email_service_getter = None
    _email_sender_getter = None
