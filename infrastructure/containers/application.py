"""
应用容器（AppContainer）

管理应用层服务：邮件发送服务与预配置邮件服务。
依赖 InfraContainer 获取基础设施。
"""

from dependency_injector import containers, providers

from application.mail.services.configured_email_sender import ConfiguredEmailSender
from infrastructure.mail.services.configured_email_service_impl import ConfiguredEmailServiceImpl


class AppContainer(containers.DeclarativeContainer):
    """应用容器 - 管理应用层服务"""

    # 依赖配置容器
    config = providers.DependenciesContainer()

    # 依赖基础设施容器
    infra = providers.DependenciesContainer()

    # ============ 应用服务 ============

    # 邮件发送服务：首次发送时从配置提供者加载配置
    email_sender = providers.Factory(
        ConfiguredEmailSender,
        client=infra.email_client_service,
        config_provider=infra.configuration_provider,
    )

    # 预配置邮件服务：构造时固定配置，发送失败记录在 last_error
    configured_email_service = providers.Factory(
        ConfiguredEmailServiceImpl,
        configuration=infra.client_configuration,
        timeout=config.settings.provided.mail_timeout,
    )
