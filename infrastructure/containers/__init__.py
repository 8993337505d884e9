"""
依赖注入容器

用法：
    from infrastructure.containers import bootstrap

    boot = bootstrap()
    sender = boot.app.email_sender()
    await sender.send_email("Hi", "<p>Hi</p>", "a@example.com", "b@example.com")

替换配置提供者：
    register_configuration_provider(
        boot.infra, StaticEmailConfigurationProvider, configuration=my_configuration
    )
"""

from dataclasses import dataclass
from typing import Any, Optional, Type

from dependency_injector import providers

from domain.mail.services.email_configuration_provider import EmailConfigurationProvider
from infrastructure.config.settings import Settings
from .application import AppContainer
from .config import ConfigContainer
from .infrastructure import InfraContainer


@dataclass
class Bootstrap:
    """已装配的容器集合"""

    config: ConfigContainer
    infra: InfraContainer
    app: AppContainer


def bootstrap(settings: Optional[Settings] = None) -> Bootstrap:
    """
    创建并装配容器

    Args:
        settings: 自定义配置，默认使用 get_settings()

    Returns:
        Bootstrap 实例
    """
    config = ConfigContainer()
    if settings is not None:
        config.settings.override(providers.Object(settings))

    infra = InfraContainer(config=config)
    app = AppContainer(config=config, infra=infra)
    return Bootstrap(config=config, infra=infra, app=app)


def register_configuration_provider(
    infra: InfraContainer,
    provider_cls: Type[EmailConfigurationProvider],
    **kwargs: Any,
) -> None:
    """
    替换邮件配置提供者（每次请求新实例）

    Args:
        infra: 基础设施容器
        provider_cls: 配置提供者类
        **kwargs: 传给提供者构造函数的参数
    """
    infra.configuration_provider.override(providers.Factory(provider_cls, **kwargs))


__all__ = [
    "AppContainer",
    "Bootstrap",
    "ConfigContainer",
    "InfraContainer",
    "bootstrap",
    "register_configuration_provider",
]
