"""邮件客户端服务实现"""

import logging
import ssl
import threading
from email.message import EmailMessage
from functools import partial
from typing import Callable, Iterable, List, Optional, Union

from domain.common.events import AsyncEvent
from domain.common.exceptions import UnsupportedOperationException
from domain.mail.services.email_client_service import (
    EmailClientService,
    HeadersCallback,
    MessageCallback,
)
from domain.mail.services.mail_clients import (
    MailService,
    MailSpool,
    MailStore,
    MailTransport,
    TransferProgress,
)
from domain.mail.services.message_factory import create_message
from domain.mail.value_objects.client_configuration import ClientConfiguration
from domain.mail.value_objects.header_summary import HeaderSummary
from domain.mail.value_objects.mail_folder_info import MailFolderInfo
from domain.mail.value_objects.send_event_args import SendEventArgs
from domain.mail.value_objects.special_folder import SpecialFolder
from infrastructure.mail.clients.connection import connect_client, dispose_client
from infrastructure.mail.clients.imap_store import ImapMailStore
from infrastructure.mail.clients.smtp_transport import SmtpMailTransport
from infrastructure.mail.services import mail_paging


IncomingClientFactory = Callable[[], MailService]
TransportFactory = Callable[[], MailTransport]


class EmailClientServiceImpl(EmailClientService):
    """
    邮件客户端服务实现

    每次操作都新建连接，操作结束（包括异常和任务取消）时断开。
    收件客户端按能力分派：MailStore 走文件夹形态，MailSpool 走邮件池形态。

    使用示例:
        service = EmailClientServiceImpl(configuration)
        service.success.subscribe(lambda args: print("sent", len(args.messages)))
        await service.send(message)
    """

    DEFAULT_TIMEOUT = 30.0

    create_message = staticmethod(create_message)

    def __init__(
        self,
        configuration: Optional[ClientConfiguration] = None,
        incoming_factory: Optional[IncomingClientFactory] = None,
        transport_factory: Optional[TransportFactory] = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化邮件客户端服务

        Args:
            configuration: 客户端配置，可稍后通过 configuration 属性设置
            incoming_factory: 创建未连接收件客户端的工厂，默认 IMAP
            transport_factory: 创建未连接发件客户端的工厂，默认 SMTP
            timeout: 网络操作超时（秒）
            logger: 可选的日志记录器
        """
        self._logger = logger or logging.getLogger(__name__)
        self._configuration = configuration
        self._configuration_lock = threading.Lock()
        self._incoming_factory = incoming_factory or partial(
            ImapMailStore, timeout=timeout, logger=self._logger
        )
        self._transport_factory = transport_factory or partial(
            SmtpMailTransport, timeout=timeout, logger=self._logger
        )
        self._message_client: Optional[MailService] = None

        self.success: AsyncEvent[SendEventArgs] = AsyncEvent()
        self.error: AsyncEvent[SendEventArgs] = AsyncEvent()

    # ============ 配置 ============

    @property
    def configuration(self) -> Optional[ClientConfiguration]:
        with self._configuration_lock:
            return self._configuration

    @configuration.setter
    def configuration(self, value: Optional[ClientConfiguration]) -> None:
        with self._configuration_lock:
            self._configuration = value
        self._logger.debug(f"Email client configuration changed: {value}")

    # ============ 客户端创建 ============

    async def create_incoming_client(
        self, ssl_context: Optional[ssl.SSLContext] = None
    ) -> MailService:
        return await self._connect(self._incoming_factory(), ssl_context)

    async def create_outgoing_client(
        self, ssl_context: Optional[ssl.SSLContext] = None
    ) -> MailTransport:
        return await self._connect(self._transport_factory(), ssl_context)

    async def _connect(self, client, ssl_context: Optional[ssl.SSLContext]):
        configuration = self.configuration
        try:
            return await connect_client(client, configuration, ssl_context)
        except Exception:
            await dispose_client(client)
            raise

    # ============ 发件 ============

    async def send(self, messages: Union[EmailMessage, Iterable[EmailMessage]]) -> None:
        batch: List[EmailMessage] = (
            [messages] if isinstance(messages, EmailMessage) else list(messages)
        )

        client: Optional[MailTransport] = None
        try:
            client = await self.create_outgoing_client()

            for message in batch:
                try:
                    await client.send(message)
                    await self.success.emit(SendEventArgs.create(message))
                except Exception as e:
                    if not self.error.has_subscribers:
                        raise
                    self._logger.warning(f"Failed to send message {message.get('Message-ID', '')}: {e}")
                    await self.error.emit(SendEventArgs.create(message, e))

        except Exception as e:
            if not self.error.has_subscribers:
                raise
            self._logger.warning(f"Failed to send {len(batch)} message(s): {e}")
            await self.error.emit(SendEventArgs.create(batch, e))

        finally:
            await dispose_client(client)

    # ============ 收件 ============

    async def count_messages(self, ssl_context: Optional[ssl.SSLContext] = None) -> int:
        client = await self.create_incoming_client(ssl_context)
        try:
            if isinstance(client, MailStore):
                return (await mail_paging.open_folder(client)).count
            spool = self._require_spool(client)
            await spool.refresh_count()
            return spool.count
        finally:
            await dispose_client(client)

    async def receive_all(
        self,
        folder: Optional[SpecialFolder] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> List[EmailMessage]:
        client = await self.create_incoming_client(ssl_context)
        try:
            if isinstance(client, MailStore):
                mail_folder = await mail_paging.open_folder(client, folder)
                return await mail_paging.get_folder_messages(mail_folder, progress)
            return await mail_paging.get_spool_messages(self._require_spool(client), progress)
        finally:
            await dispose_client(client)

    async def receive_headers(
        self,
        callback: HeadersCallback,
        folder: Optional[SpecialFolder] = None,
        start_index: int = 0,
        end_index: int = -1,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> int:
        client = await self.create_incoming_client(ssl_context)
        try:
            if isinstance(client, MailStore):
                mail_folder = await mail_paging.open_folder(client, folder)
                return await mail_paging.receive_folder_headers(
                    mail_folder, callback, start_index, end_index, progress
                )
            return await mail_paging.receive_spool_headers(
                self._require_spool(client), callback, start_index, end_index, progress
            )
        finally:
            await dispose_client(client)

    async def receive_messages(
        self,
        callback: MessageCallback,
        folder: Optional[SpecialFolder] = None,
        start_index: int = 0,
        end_index: int = -1,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> int:
        client = await self.create_incoming_client(ssl_context)
        try:
            if isinstance(client, MailStore):
                mail_folder = await mail_paging.open_folder(client, folder)
                return await mail_paging.receive_folder_messages(
                    mail_folder, callback, start_index, end_index, progress
                )
            return await mail_paging.receive_spool_messages(
                self._require_spool(client), callback, start_index, end_index, progress
            )
        finally:
            await dispose_client(client)

    async def receive_header(
        self,
        index: int,
        folder: Optional[SpecialFolder] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> HeaderSummary:
        client = await self.create_incoming_client(ssl_context)
        try:
            if isinstance(client, MailStore):
                mail_folder = await mail_paging.open_folder(client, folder)
                return await mail_paging.receive_folder_header(mail_folder, index, progress)

            spool = self._require_spool(client)
            if progress is not None:
                raise UnsupportedOperationException(
                    "Progress reporting is not supported when receiving headers from a mail spool"
                )
            return await mail_paging.receive_spool_header(spool, index)
        finally:
            await dispose_client(client)

    async def receive_message(
        self,
        index: int,
        folder: Optional[SpecialFolder] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> EmailMessage:
        # 缓存的连接在每次调用结束时都会被释放，下次调用重新连接
        try:
            if self._message_client is None:
                self._message_client = await self.create_incoming_client(ssl_context)
            client = self._message_client

            if isinstance(client, MailStore):
                mail_folder = await mail_paging.open_folder(client, folder)
                mail_paging.resolve_range(mail_folder.count, index, -1, parameter="index")
                return await mail_folder.get_message(index, progress)

            spool = self._require_spool(client)
            await spool.refresh_count()
            mail_paging.resolve_range(spool.count, index, -1, parameter="index")
            return await spool.get_message(index, progress)
        finally:
            client, self._message_client = self._message_client, None
            await dispose_client(client)

    async def list_folders(
        self, ssl_context: Optional[ssl.SSLContext] = None
    ) -> List[MailFolderInfo]:
        client = await self.create_incoming_client(ssl_context)
        try:
            if not isinstance(client, MailStore):
                raise UnsupportedOperationException(
                    "A mail spool has no folders"
                )

            folders = await client.list_folders()
            return [
                MailFolderInfo(
                    name=folder.name,
                    count=folder.count,
                    unread=folder.unread,
                    recent=folder.recent,
                    display_name=getattr(folder, "display_name", folder.name),
                    ordinal=ordinal,
                )
                for ordinal, folder in enumerate(folders)
            ]
        finally:
            await dispose_client(client)

    @staticmethod
    def _require_spool(client: MailService) -> MailSpool:
        if not isinstance(client, MailSpool):
            raise UnsupportedOperationException(
                f"Unsupported incoming mail client: {type(client).__name__}"
            )
        return client
