"""SMTP 发件客户端（aiosmtplib 适配器）"""

import asyncio
import logging
import ssl
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from domain.common.exceptions import (
    InvalidOperationException,
    MailAuthenticationException,
    MailConnectionException,
    MailServiceException,
    MailTlsException,
)
from domain.mail.services.mail_clients import MailTransport


# 服务器要求认证时返回的 SMTP 状态码
SMTP_AUTHENTICATION_REQUIRED = 530


def _caused_by_tls(exc: BaseException) -> bool:
    """异常链中是否包含 SSL 错误"""
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, ssl.SSLError):
            return True
        current = current.__cause__ or current.__context__
    return False


class SmtpMailTransport(MailTransport):
    """
    SMTP 发件客户端

    使用 aiosmtplib 实现 MailTransport，TLS 行为：
    - use_ssl=True 且端口 465：直接 TLS（implicit TLS）
    - use_ssl=True 其他端口：强制 STARTTLS
    - use_ssl=False：服务器支持时机会性 STARTTLS

    引擎抛出的异常被转换为领域异常（连接、认证、TLS）。
    """

    DEFAULT_PORT = 25
    IMPLICIT_TLS_PORT = 465
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)
        self._smtp: Optional[aiosmtplib.SMTP] = None
        self._host: Optional[str] = None
        self._port: Optional[int] = None

    @property
    def is_connected(self) -> bool:
        return self._smtp is not None and self._smtp.is_connected

    async def connect(
        self,
        host: str,
        port: int,
        use_ssl: bool,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> None:
        port = port or (self.IMPLICIT_TLS_PORT if use_ssl else self.DEFAULT_PORT)
        self._host, self._port = host, port

        if use_ssl and port == self.IMPLICIT_TLS_PORT:
            smtp = aiosmtplib.SMTP(
                hostname=host, port=port, use_tls=True, start_tls=False,
                tls_context=ssl_context, timeout=self._timeout,
            )
        elif use_ssl:
            smtp = aiosmtplib.SMTP(
                hostname=host, port=port, use_tls=False, start_tls=True,
                tls_context=ssl_context, timeout=self._timeout,
            )
        else:
            smtp = aiosmtplib.SMTP(
                hostname=host, port=port, use_tls=False, start_tls=None,
                tls_context=ssl_context, timeout=self._timeout,
            )

        self._logger.debug(f"Connecting to SMTP server {host}:{port} (use_ssl={use_ssl})")
        try:
            await smtp.connect()
        except aiosmtplib.SMTPException as e:
            raise self._translate_error(e) from e
        except ssl.SSLError as e:
            raise MailTlsException(f"TLS handshake failed: {e}", host, port) from e
        except (OSError, asyncio.TimeoutError) as e:
            raise MailConnectionException(f"Failed to connect: {e}", host, port) from e

        self._smtp = smtp
        self._logger.info(f"Connected to SMTP server {host}:{port}")

    async def authenticate(self, user_name: Optional[str], password: Optional[str]) -> None:
        smtp = self._require_connection("authenticate")
        self._logger.debug(f"Authenticating to SMTP server as {user_name}")
        try:
            await smtp.login(user_name or "", password or "")
        except aiosmtplib.SMTPException as e:
            raise self._translate_error(e) from e

    async def send(self, message: EmailMessage) -> None:
        smtp = self._require_connection("send")
        try:
            await smtp.send_message(message)
        except aiosmtplib.SMTPException as e:
            raise self._translate_error(e) from e

        self._logger.debug(f"Message {message.get('Message-ID', '')} sent")

    async def disconnect(self, quit: bool = True) -> None:
        smtp, self._smtp = self._smtp, None
        if smtp is None:
            return

        try:
            if quit and smtp.is_connected:
                await smtp.quit()
        finally:
            if smtp.is_connected:
                smtp.close()
        self._logger.debug(f"Disconnected from SMTP server {self._host}:{self._port}")

    def _require_connection(self, operation: str) -> aiosmtplib.SMTP:
        if self._smtp is None:
            raise InvalidOperationException(
                operation=operation,
                reason="SMTP client is not connected",
            )
        return self._smtp

    def _translate_error(self, exc: aiosmtplib.SMTPException) -> MailServiceException:
        """将 aiosmtplib 异常转换为领域异常"""
        message = str(exc)

        if isinstance(exc, aiosmtplib.SMTPAuthenticationError):
            return MailAuthenticationException(message, self._host, self._port)

        if getattr(exc, "code", None) == SMTP_AUTHENTICATION_REQUIRED:
            return MailAuthenticationException(message, self._host, self._port)

        if isinstance(exc, aiosmtplib.SMTPRecipientsRefused) and any(
            r.code == SMTP_AUTHENTICATION_REQUIRED for r in exc.recipients
        ):
            return MailAuthenticationException(message, self._host, self._port)

        if _caused_by_tls(exc) or "STARTTLS" in message.upper():
            return MailTlsException(message, self._host, self._port)

        if isinstance(exc, (aiosmtplib.SMTPConnectError, aiosmtplib.SMTPServerDisconnected)):
            return MailConnectionException(message, self._host, self._port)

        return MailServiceException(message, self._host, self._port)
