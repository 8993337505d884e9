"""Pop3MailSpool 单元测试"""

import poplib
import pytest
from unittest.mock import MagicMock, Mock, patch

from domain.common.exceptions import (
    InvalidOperationException,
    MailAuthenticationException,
    MailConnectionException,
    MailServiceException,
    MailTlsException,
)
from infrastructure.mail.clients.pop3_spool import Pop3MailSpool


POP3_CLASS = "infrastructure.mail.clients.pop3_spool.poplib.POP3"
POP3_SSL_CLASS = "infrastructure.mail.clients.pop3_spool.poplib.POP3_SSL"

HEADER_LINES = [b"Subject: Hi", b"From: a@x.com", b"To: b@x.com", b""]


def create_mock_pop(capabilities=None) -> MagicMock:
    """创建模拟的 poplib 连接"""
    pop = MagicMock()
    pop.capa.return_value = capabilities if capabilities is not None else {}
    pop.stat.return_value = (2, 2048)
    pop.top.return_value = (b"+OK", HEADER_LINES, 40)
    pop.retr.return_value = (b"+OK", HEADER_LINES + [b"Hello there"], 60)
    return pop


async def connect_spool(pop: MagicMock) -> Pop3MailSpool:
    """使用模拟连接并登录"""
    with patch(POP3_SSL_CLASS, return_value=pop):
        spool = Pop3MailSpool()
        await spool.connect("pop.example.com", 995, True)
    await spool.authenticate("user", "secret")
    return spool


class TestPop3MailSpoolConnect:
    """连接与认证测试"""

    @pytest.mark.asyncio
    async def test_connect_ssl(self):
        """测试使用 POP3_SSL 连接"""
        pop = create_mock_pop()
        with patch(POP3_SSL_CLASS, return_value=pop) as pop_class:
            spool = Pop3MailSpool(timeout=5)
            await spool.connect("pop.example.com", 0, True, ssl_context="ctx")

        pop_class.assert_called_once_with("pop.example.com", 995, timeout=5, context="ctx")
        pop.capa.assert_not_called()
        assert spool.is_connected is True

    @pytest.mark.asyncio
    async def test_plain_connection_upgrades_with_stls(self):
        """测试服务器支持时使用 STLS 升级"""
        pop = create_mock_pop({"STLS": []})
        with patch(POP3_CLASS, return_value=pop):
            await Pop3MailSpool().connect("pop.example.com", 110, False)

        pop.stls.assert_called_once_with(context=None)

    @pytest.mark.asyncio
    async def test_plain_connection_without_stls(self):
        """测试服务器不支持 STLS 时保持明文连接"""
        pop = create_mock_pop({"USER": []})
        with patch(POP3_CLASS, return_value=pop):
            await Pop3MailSpool().connect("pop.example.com", 110, False)

        pop.stls.assert_not_called()

    @pytest.mark.asyncio
    async def test_stls_failure_is_tls_error(self):
        """测试 STLS 失败转换为 MailTlsException"""
        pop = create_mock_pop({"STLS": []})
        pop.stls.side_effect = poplib.error_proto("-ERR TLS not available")
        with patch(POP3_CLASS, return_value=pop):
            with pytest.raises(MailTlsException):
                await Pop3MailSpool().connect("pop.example.com", 110, False)

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        """测试连接被拒绝转换为 MailConnectionException"""
        with patch(POP3_SSL_CLASS, side_effect=ConnectionRefusedError("refused")):
            spool = Pop3MailSpool()
            with pytest.raises(MailConnectionException) as exc_info:
                await spool.connect("pop.example.com", 995, True)

        assert exc_info.value.port == 995
        assert spool.is_connected is False

    @pytest.mark.asyncio
    async def test_authenticate_reads_count(self):
        """测试登录后通过 STAT 读取邮件数量"""
        pop = create_mock_pop()
        spool = await connect_spool(pop)

        pop.user.assert_called_once_with("user")
        pop.pass_.assert_called_once_with("secret")
        assert spool.count == 2

    @pytest.mark.asyncio
    async def test_authentication_rejected(self):
        """测试密码错误转换为 MailAuthenticationException"""
        pop = create_mock_pop()
        pop.pass_.side_effect = poplib.error_proto("-ERR invalid password")
        with patch(POP3_SSL_CLASS, return_value=pop):
            spool = Pop3MailSpool()
            await spool.connect("pop.example.com", 995, True)

        with pytest.raises(MailAuthenticationException):
            await spool.authenticate("user", "wrong")

    @pytest.mark.asyncio
    async def test_bad_greeting_is_service_error(self):
        """测试服务器问候异常转换为 MailServiceException"""
        with patch(POP3_CLASS, side_effect=poplib.error_proto("-ERR service unavailable")):
            spool = Pop3MailSpool()
            with pytest.raises(MailServiceException):
                await spool.connect("pop.example.com", 110, False)

        assert spool.is_connected is False


class TestPop3MailSpoolCount:
    """邮件数量测试"""

    @pytest.mark.asyncio
    async def test_refresh_count_without_authentication(self):
        """测试未认证时也能通过 STAT 读取邮件数量"""
        pop = create_mock_pop()
        pop.stat.return_value = (7, 1000)
        with patch(POP3_CLASS, return_value=pop):
            spool = Pop3MailSpool()
            await spool.connect("pop.example.com", 110, False)

        count = await spool.refresh_count()

        assert count == 7
        assert spool.count == 7
        pop.stat.assert_called_once()

    @pytest.mark.asyncio
    async def test_stat_rejected_before_login_is_authentication_error(self):
        """测试服务器要求先认证时转换为 MailAuthenticationException"""
        pop = create_mock_pop()
        pop.stat.side_effect = poplib.error_proto("-ERR authenticate first")
        with patch(POP3_CLASS, return_value=pop):
            spool = Pop3MailSpool()
            await spool.connect("pop.example.com", 110, False)

        with pytest.raises(MailAuthenticationException) as exc_info:
            await spool.refresh_count()

        assert "authenticate first" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_stat_failure_after_login_is_service_error(self):
        """测试认证后 STAT 失败转换为 MailServiceException"""
        pop = create_mock_pop()
        spool = await connect_spool(pop)
        pop.stat.side_effect = poplib.error_proto("-ERR maildrop locked")

        with pytest.raises(MailServiceException) as exc_info:
            await spool.refresh_count()

        assert not isinstance(exc_info.value, MailAuthenticationException)

    @pytest.mark.asyncio
    async def test_refresh_count_sees_new_messages(self):
        """测试每次刷新都重新读取服务器上的数量"""
        pop = create_mock_pop()
        spool = await connect_spool(pop)
        pop.stat.return_value = (5, 4096)

        assert await spool.refresh_count() == 5
        assert pop.stat.call_count == 2


class TestPop3MailSpoolMessages:
    """邮件获取测试"""

    @pytest.mark.asyncio
    async def test_get_message_headers_uses_top(self):
        """测试使用 TOP n 0 获取邮件头"""
        pop = create_mock_pop()
        spool = await connect_spool(pop)

        headers = await spool.get_message_headers(1)

        pop.top.assert_called_once_with(2, 0)
        assert headers["Subject"] == "Hi"

    @pytest.mark.asyncio
    async def test_get_message_reports_progress(self):
        """测试使用 RETR 获取完整邮件并报告进度"""
        pop = create_mock_pop()
        spool = await connect_spool(pop)
        progress = Mock()

        message = await spool.get_message(0, progress)

        pop.retr.assert_called_once_with(1)
        assert message.get_content().strip() == "Hello there"
        progress.report.assert_called_once()
        done, total = progress.report.call_args.args
        assert done == total > 0

    @pytest.mark.asyncio
    async def test_protocol_error_is_service_error(self):
        """测试服务器返回错误转换为 MailServiceException"""
        pop = create_mock_pop()
        pop.retr.side_effect = poplib.error_proto("-ERR no such message")
        spool = await connect_spool(pop)

        with pytest.raises(MailServiceException):
            await spool.get_message(5)

    @pytest.mark.asyncio
    async def test_connection_lost_is_connection_error(self):
        """测试获取时连接中断转换为 MailConnectionException"""
        pop = create_mock_pop()
        pop.top.side_effect = ConnectionResetError("reset by peer")
        spool = await connect_spool(pop)

        with pytest.raises(MailConnectionException):
            await spool.get_message_headers(0)

    @pytest.mark.asyncio
    async def test_requires_connection(self):
        """测试未连接时获取邮件抛出异常"""
        with pytest.raises(InvalidOperationException):
            await Pop3MailSpool().get_message_headers(0)

    @pytest.mark.asyncio
    async def test_disconnect_quits(self):
        """测试断开时发送 QUIT"""
        pop = create_mock_pop()
        spool = await connect_spool(pop)

        await spool.disconnect()

        pop.quit.assert_called_once()
        assert spool.is_connected is False
        assert spool.count == 0

    @pytest.mark.asyncio
    async def test_disconnect_without_quit_closes(self):
        """测试 quit=False 时直接关闭连接"""
        pop = create_mock_pop()
        spool = await connect_spool(pop)

        await spool.disconnect(quit=False)

        pop.close.assert_called_once()
        pop.quit.assert_not_called()
