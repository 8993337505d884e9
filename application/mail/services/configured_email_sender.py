"""使用配置提供者的邮件发送服务"""

import asyncio
import logging
from email.message import EmailMessage
from typing import Optional

from application.mail.services.email_sender import EmailSender
from domain.mail.services.email_client_service import EmailClientService
from domain.mail.services.email_configuration_provider import EmailConfigurationProvider
from domain.mail.services.message_factory import create_message
from domain.mail.value_objects.client_configuration import ClientConfiguration


class ConfiguredEmailSender(EmailSender):
    """
    邮件发送服务

    首次发送时从配置提供者加载一次配置并写入客户端服务；
    之后只有 change_configuration 会替换配置。发送错误直接传播。
    """

    def __init__(
        self,
        client: EmailClientService,
        config_provider: EmailConfigurationProvider,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化邮件发送服务

        Args:
            client: 邮件客户端服务
            config_provider: 配置提供者
            logger: 可选的日志记录器
        """
        self._client = client
        self._config_provider = config_provider
        self._logger = logger or logging.getLogger(__name__)
        self._configured = False
        self._configure_lock = asyncio.Lock()

    @property
    def client(self) -> EmailClientService:
        return self._client

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def send_email(self, subject: str, body: str, from_: str, to: str) -> None:
        message = create_message(subject, body, from_, to)
        await self.send_email_message(message)

    async def send_email_message(self, message: EmailMessage) -> None:
        await self._ensure_configured()
        self._logger.info(f"Sending email '{message.get('Subject', '')}' to {message.get('To', '')}")
        await self._client.send(message)

    def change_configuration(self, configuration: ClientConfiguration) -> None:
        self._client.configuration = configuration
        self._configured = True
        self._logger.info(f"Email configuration changed to {configuration.endpoint}")

    async def _ensure_configured(self) -> None:
        if self._configured:
            return

        async with self._configure_lock:
            if self._configured:
                return
            configuration = await self._config_provider.get_configuration()
            self._client.configuration = configuration
            self._configured = True
            self._logger.debug(f"Email configuration loaded: {configuration}")
