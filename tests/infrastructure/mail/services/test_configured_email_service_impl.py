"""ConfiguredEmailServiceImpl 单元测试"""

import pytest
from unittest.mock import MagicMock

from domain.common.exceptions import (
    MailAuthenticationException,
    MailConnectionException,
    MailServiceException,
    MailTlsException,
)
from domain.mail.services.mail_clients import MailTransport
from domain.mail.value_objects.client_configuration import ClientConfiguration
from infrastructure.mail.services.configured_email_service_impl import ConfiguredEmailServiceImpl


@pytest.fixture
def transport() -> MagicMock:
    return MagicMock(spec=MailTransport)


def create_service(transport: MagicMock, **overrides) -> ConfiguredEmailServiceImpl:
    """创建使用模拟发件客户端的服务"""
    configuration = ClientConfiguration(
        host="smtp.example.com",
        port=587,
        use_ssl=True,
        user_name="user",
        password="secret",
        requires_auth=True,
    ).replace(**overrides)
    return ConfiguredEmailServiceImpl(configuration, transport_factory=lambda: transport)


class TestSendEmail:
    """send_email 测试"""

    @pytest.mark.asyncio
    async def test_success(self, transport):
        """测试发送成功返回 True"""
        service = create_service(transport)

        result = await service.send_email("a@x.com", "b@x.com", "Hi", "<p>Hi</p>")

        assert result is True
        assert service.last_error is None
        message = transport.send.await_args.args[0]
        assert message["Subject"] == "Hi"
        assert message["From"] == "a@x.com"
        assert message.get_content_type() == "text/html"

    @pytest.mark.asyncio
    async def test_invalid_address_returns_false(self, transport):
        """测试无效地址返回 False 且不连接"""
        service = create_service(transport)

        result = await service.send_email("a@x.com", "not an address@@", "Hi", "body")

        assert result is False
        assert service.last_error is not None
        transport.connect.assert_not_called()


class TestErrorClassification:
    """错误分类测试"""

    @pytest.mark.asyncio
    async def test_authentication_required(self, transport):
        """测试认证失败且要求认证时的错误描述"""
        original = MailAuthenticationException("535 bad credentials", "smtp.example.com", 587)
        transport.authenticate.side_effect = original
        service = create_service(transport)

        result = await service.send_email("a@x.com", "b@x.com", "Hi", "body")

        assert result is False
        assert isinstance(service.last_error, MailAuthenticationException)
        assert service.last_error_message == "The SMTP server requires authentication."
        assert service.last_error.__cause__ is original

    @pytest.mark.asyncio
    async def test_authentication_error_without_requires_auth_is_kept(self, transport):
        """测试未要求认证时认证错误原样保存"""
        original = MailAuthenticationException("530 authentication required")
        transport.send.side_effect = original
        service = create_service(transport, requires_auth=False)

        assert await service.send_email("a@x.com", "b@x.com", "Hi", "body") is False
        assert service.last_error is original

    @pytest.mark.asyncio
    async def test_ssl_not_supported(self, transport):
        """测试 TLS 失败且启用 SSL 时的错误描述"""
        transport.connect.side_effect = MailTlsException("STARTTLS extension not supported")
        service = create_service(transport)

        assert await service.send_email("a@x.com", "b@x.com", "Hi", "body") is False
        assert service.last_error_message == "The SMTP server does not support SSL."

    @pytest.mark.asyncio
    async def test_host_not_reachable(self, transport):
        """测试连接失败时的错误描述"""
        transport.connect.side_effect = MailConnectionException("Connection refused")
        service = create_service(transport, host="smtp.invalid")

        assert await service.send_email("a@x.com", "b@x.com", "Hi", "body") is False
        assert service.last_error_message == "The SMTP host smtp.invalid is not reachable."

    @pytest.mark.asyncio
    async def test_other_errors_are_kept(self, transport):
        """测试其他错误原样保存"""
        original = MailServiceException("554 message rejected")
        transport.send.side_effect = original
        service = create_service(transport)

        assert await service.send_email("a@x.com", "b@x.com", "Hi", "body") is False
        assert service.last_error is original
        assert service.last_error_message == "554 message rejected"

    @pytest.mark.asyncio
    async def test_last_error_is_reset_on_success(self, transport):
        """测试成功发送后清除上次错误"""
        transport.send.side_effect = [MailServiceException("busy"), None]
        service = create_service(transport)

        await service.send_email("a@x.com", "b@x.com", "Hi", "body")
        assert service.last_error is not None

        assert await service.send_email("a@x.com", "b@x.com", "Hi", "body") is True
        assert service.last_error is None
