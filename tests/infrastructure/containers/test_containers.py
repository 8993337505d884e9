"""依赖注入容器测试"""

import pytest

from application.mail.services.configured_email_sender import ConfiguredEmailSender
from domain.mail.value_objects.client_configuration import ClientConfiguration
from infrastructure.config.settings import Settings
from infrastructure.containers import bootstrap, register_configuration_provider
from infrastructure.mail.clients.pop3_spool import Pop3MailSpool
from infrastructure.mail.providers import (
    SettingsEmailConfigurationProvider,
    StaticEmailConfigurationProvider,
)
from infrastructure.mail.services.configured_email_service_impl import ConfiguredEmailServiceImpl
from infrastructure.mail.services.email_client_service_impl import EmailClientServiceImpl
from infrastructure.mail.services.pop3_client_service_impl import Pop3ClientServiceImpl


def create_settings(**values) -> Settings:
    values.setdefault("mail_host", "mail.example.com")
    values.setdefault("mail_port", 587)
    return Settings(_env_file=None, **values)


class TestInfraContainer:
    """基础设施容器测试"""

    def test_settings_override(self):
        """测试使用自定义配置"""
        settings = create_settings()

        boot = bootstrap(settings)

        assert boot.config.settings() is settings

    def test_email_client_service(self):
        """测试客户端服务使用设置中的配置"""
        boot = bootstrap(create_settings(mail_timeout=5))

        service = boot.infra.email_client_service()

        assert isinstance(service, EmailClientServiceImpl)
        assert service.configuration.endpoint == "mail.example.com:587"

    def test_factory_returns_new_instances(self):
        """测试每次请求返回新实例"""
        boot = bootstrap(create_settings())

        assert boot.infra.email_client_service() is not boot.infra.email_client_service()

    @pytest.mark.parametrize(
        "protocol, expected",
        [("imap", EmailClientServiceImpl), ("pop3", Pop3ClientServiceImpl)],
    )
    def test_incoming_client_service_selector(self, protocol, expected):
        """测试按 mail_incoming_protocol 选择收件服务"""
        boot = bootstrap(create_settings(mail_incoming_protocol=protocol))

        service = boot.infra.incoming_client_service()

        assert type(service) is expected

    def test_pop3_service_uses_spool(self):
        """测试 POP3 服务使用邮件池"""
        boot = bootstrap(create_settings(mail_incoming_protocol="pop3"))

        service = boot.infra.incoming_client_service()

        assert isinstance(service._incoming_factory(), Pop3MailSpool)

    def test_default_configuration_provider(self):
        """测试默认配置提供者读取设置"""
        boot = bootstrap(create_settings())

        assert isinstance(boot.infra.configuration_provider(), SettingsEmailConfigurationProvider)

    @pytest.mark.asyncio
    async def test_register_configuration_provider(self):
        """测试替换配置提供者"""
        boot = bootstrap(create_settings())
        configuration = ClientConfiguration(host="other.example.com", port=25)

        register_configuration_provider(
            boot.infra, StaticEmailConfigurationProvider, configuration=configuration
        )
        provider = boot.infra.configuration_provider()

        assert isinstance(provider, StaticEmailConfigurationProvider)
        assert await provider.get_configuration() is configuration


class TestAppContainer:
    """应用容器测试"""

    def test_email_sender(self):
        """测试发送服务装配客户端和配置提供者"""
        boot = bootstrap(create_settings())

        sender = boot.app.email_sender()

        assert isinstance(sender, ConfiguredEmailSender)
        assert isinstance(sender.client, EmailClientServiceImpl)
        assert sender.is_configured is False

    def test_configured_email_service(self):
        """测试预配置邮件服务"""
        boot = bootstrap(create_settings(mail_requires_auth=True))

        service = boot.app.configured_email_service()

        assert isinstance(service, ConfiguredEmailServiceImpl)
        assert service.configuration.requires_auth is True
        assert service.last_error is None
