"""ConfiguredEmailSender 单元测试"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from application.mail.services.configured_email_sender import ConfiguredEmailSender
from domain.common.exceptions import MailConnectionException
from domain.mail.services.email_client_service import EmailClientService
from domain.mail.services.email_configuration_provider import EmailConfigurationProvider
from domain.mail.value_objects.client_configuration import ClientConfiguration


@pytest.fixture
def configuration() -> ClientConfiguration:
    return ClientConfiguration(host="smtp.example.com", port=587, use_ssl=True)


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=EmailClientService)


@pytest.fixture
def provider(configuration) -> MagicMock:
    provider = MagicMock(spec=EmailConfigurationProvider)
    provider.get_configuration = AsyncMock(return_value=configuration)
    return provider


class TestConfiguredEmailSender:
    """邮件发送服务测试"""

    @pytest.mark.asyncio
    async def test_send_email_loads_configuration_once(self, client, provider, configuration):
        """测试首次发送时加载配置，之后不再加载"""
        sender = ConfiguredEmailSender(client, provider)

        await sender.send_email("Hi", "<p>Hi</p>", "a@x.com", "b@x.com")
        await sender.send_email("Again", "<p>Again</p>", "a@x.com", "b@x.com")

        provider.get_configuration.assert_awaited_once()
        assert client.configuration is configuration
        assert client.send.await_count == 2
        message = client.send.await_args_list[0].args[0]
        assert message["Subject"] == "Hi"
        assert message.get_content_type() == "text/html"

    @pytest.mark.asyncio
    async def test_concurrent_first_sends_load_once(self, client, provider):
        """测试并发的首次发送只加载一次配置"""
        sender = ConfiguredEmailSender(client, provider)

        await asyncio.gather(*[
            sender.send_email(f"Hi {i}", "body", "a@x.com", "b@x.com") for i in range(5)
        ])

        provider.get_configuration.assert_awaited_once()
        assert client.send.await_count == 5

    @pytest.mark.asyncio
    async def test_change_configuration_skips_provider(self, client, provider):
        """测试替换配置后不再从提供者加载"""
        sender = ConfiguredEmailSender(client, provider)
        replacement = ClientConfiguration(host="other.example.com", port=25)

        sender.change_configuration(replacement)
        await sender.send_email("Hi", "body", "a@x.com", "b@x.com")

        provider.get_configuration.assert_not_called()
        assert client.configuration is replacement
        assert sender.is_configured is True

    @pytest.mark.asyncio
    async def test_change_configuration_after_load(self, client, provider):
        """测试加载后替换配置，后续发送使用新配置"""
        sender = ConfiguredEmailSender(client, provider)
        await sender.send_email("Hi", "body", "a@x.com", "b@x.com")
        replacement = ClientConfiguration(host="other.example.com", port=25)

        sender.change_configuration(replacement)
        await sender.send_email("Again", "body", "a@x.com", "b@x.com")

        assert client.configuration is replacement
        provider.get_configuration.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, client, provider):
        """测试配置提供者的错误传播给调用方"""
        provider.get_configuration.side_effect = RuntimeError("settings unavailable")
        sender = ConfiguredEmailSender(client, provider)

        with pytest.raises(RuntimeError):
            await sender.send_email("Hi", "body", "a@x.com", "b@x.com")

        assert sender.is_configured is False
        client.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_error_propagates(self, client, provider):
        """测试发送错误传播给调用方"""
        client.send.side_effect = MailConnectionException("unreachable")
        sender = ConfiguredEmailSender(client, provider)

        with pytest.raises(MailConnectionException):
            await sender.send_email("Hi", "body", "a@x.com", "b@x.com")
