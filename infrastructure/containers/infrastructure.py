"""
基础设施容器（InfraContainer）

管理邮件协议客户端服务与配置提供者。
依赖 ConfigContainer 获取配置。
"""

from dependency_injector import containers, providers

from infrastructure.mail.providers import (
    SettingsEmailConfigurationProvider,
    build_client_configuration,
)
from infrastructure.mail.services.email_client_service_impl import EmailClientServiceImpl
from infrastructure.mail.services.pop3_client_service_impl import Pop3ClientServiceImpl


class InfraContainer(containers.DeclarativeContainer):
    """基础设施容器 - 管理技术实现"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # ============ 配置提供者 ============

    # 邮件配置提供者（每次请求新实例，可通过 register_configuration_provider 替换）
    configuration_provider = providers.Factory(
        SettingsEmailConfigurationProvider,
        settings=config.settings,
    )

    # 由设置直接构建的客户端配置
    client_configuration = providers.Factory(
        build_client_configuration,
        settings=config.settings,
    )

    # ============ 邮件客户端服务 ============

    # IMAP + SMTP 客户端服务（每次请求新实例）
    email_client_service = providers.Factory(
        EmailClientServiceImpl,
        configuration=client_configuration,
        timeout=config.settings.provided.mail_timeout,
    )

    # POP3 + SMTP 客户端服务
    pop3_client_service = providers.Factory(
        Pop3ClientServiceImpl,
        configuration=client_configuration,
        timeout=config.settings.provided.mail_timeout,
    )

    # 按 mail_incoming_protocol 选择收件服务
    incoming_client_service = providers.Selector(
        config.settings.provided.mail_incoming_protocol,
        imap=email_client_service,
        pop3=pop3_client_service,
    )
