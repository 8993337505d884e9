"""预配置邮件服务实现"""

import logging
from email.message import EmailMessage
from typing import Iterable, Optional, Union

from domain.common.exceptions import (
    MailAuthenticationException,
    MailConnectionException,
    MailServiceException,
    MailTlsException,
)
from domain.mail.services.configured_email_service import ConfiguredEmailService
from domain.mail.value_objects.client_configuration import ClientConfiguration
from infrastructure.mail.services.email_client_service_impl import (
    EmailClientServiceImpl,
    IncomingClientFactory,
    TransportFactory,
)


class ConfiguredEmailServiceImpl(EmailClientServiceImpl, ConfiguredEmailService):
    """
    预配置邮件服务实现

    构造时固定配置，发送路径从不抛出异常：失败时返回 False，
    并把分类后的错误保存在 last_error 中。

    错误分类：
    - 认证失败且配置要求认证："The SMTP server requires authentication."
    - TLS 失败且配置启用 SSL："The SMTP server does not support SSL."
    - 连接失败："The SMTP host {host} is not reachable."
    - 其他错误原样保存
    """

    def __init__(
        self,
        configuration: ClientConfiguration,
        incoming_factory: Optional[IncomingClientFactory] = None,
        transport_factory: Optional[TransportFactory] = None,
        timeout: float = EmailClientServiceImpl.DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(
            configuration=configuration,
            incoming_factory=incoming_factory,
            transport_factory=transport_factory,
            timeout=timeout,
            logger=logger,
        )
        self._last_error: Optional[BaseException] = None

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    @property
    def last_error_message(self) -> Optional[str]:
        """最近一次错误的可读描述"""
        return None if self._last_error is None else str(self._last_error)

    async def send_email(
        self,
        from_email: str,
        to_email: str,
        subject: str,
        body: str,
    ) -> bool:
        try:
            message = self.create_message(subject, body, from_email, to_email)
        except Exception as e:
            self._last_error = e
            self._logger.error(f"Failed to build email '{subject}': {e}")
            return False

        return await self.send_message(message)

    async def send_message(self, messages: Union[EmailMessage, Iterable[EmailMessage]]) -> bool:
        self._last_error = None
        try:
            await self.send(messages)
        except Exception as e:
            self._last_error = self._classify(e)
            self._logger.error(f"Failed to send email: {self._last_error}")
            return False

        return True

    def _classify(self, error: Exception) -> Exception:
        """将协议错误转换为面向用户的错误描述"""
        configuration = self.configuration
        if configuration is None or not isinstance(error, MailServiceException):
            return error

        if isinstance(error, MailAuthenticationException) and configuration.requires_auth:
            classified: MailServiceException = MailAuthenticationException(
                "The SMTP server requires authentication.",
                configuration.host,
                configuration.port,
            )
        elif isinstance(error, MailTlsException) and configuration.use_ssl:
            classified = MailTlsException(
                "The SMTP server does not support SSL.",
                configuration.host,
                configuration.port,
            )
        elif isinstance(error, MailConnectionException):
            classified = MailConnectionException(
                f"The SMTP host {configuration.host} is not reachable.",
                configuration.host,
                configuration.port,
            )
        else:
            return error

        classified.__cause__ = error
        return classified
