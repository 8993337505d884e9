"""邮件客户端服务接口"""

import ssl
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Awaitable, Callable, Iterable, List, Optional, Union

from domain.common.events import AsyncEvent
from domain.mail.services.mail_clients import (
    MailService,
    MailTransport,
    TransferProgress,
)
from domain.mail.value_objects.client_configuration import ClientConfiguration
from domain.mail.value_objects.header_summary import HeaderSummary
from domain.mail.value_objects.mail_folder_info import MailFolderInfo
from domain.mail.value_objects.received_message import ReceivedMessage
from domain.mail.value_objects.send_event_args import SendEventArgs
from domain.mail.value_objects.special_folder import SpecialFolder


# 回调返回真值表示提前结束迭代
HeadersCallback = Callable[[HeaderSummary], Union[bool, None, Awaitable[Optional[bool]]]]
MessageCallback = Callable[[ReceivedMessage], Union[bool, None, Awaitable[Optional[bool]]]]


class EmailClientService(ABC):
    """
    邮件客户端服务接口

    用统一的多态接口封装三种访问形态：
    - 文件夹形态的收件（IMAP，默认收件箱，只读打开）
    - 邮件池形态的收件（POP3）
    - 发件（SMTP）

    所有操作都是异步的；取消通过 asyncio 任务取消完成，
    连接在任何退出路径上都会被断开。
    """

    success: AsyncEvent[SendEventArgs]
    """邮件发送成功事件"""

    error: AsyncEvent[SendEventArgs]
    """发送错误事件，没有订阅者时异常会被重新抛出"""

    @property
    @abstractmethod
    def configuration(self) -> Optional[ClientConfiguration]:
        """当前客户端配置"""
        raise NotImplementedError

    @configuration.setter
    @abstractmethod
    def configuration(self, value: Optional[ClientConfiguration]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send(self, messages: Union[EmailMessage, Iterable[EmailMessage]]) -> None:
        """
        依次发送一封或多封邮件

        每封邮件发送成功后触发 success 事件。存在 error 订阅者时，
        单封邮件的错误被报告后继续发送下一封；否则第一个错误中止整批并抛出。
        """
        raise NotImplementedError

    @abstractmethod
    async def count_messages(self, ssl_context: Optional[ssl.SSLContext] = None) -> int:
        """获取收件箱或邮件池中的邮件数"""
        raise NotImplementedError

    @abstractmethod
    async def receive_all(
        self,
        folder: Optional[SpecialFolder] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> List[EmailMessage]:
        """接收指定文件夹（默认收件箱）或邮件池中的全部邮件"""
        raise NotImplementedError

    @abstractmethod
    async def receive_headers(
        self,
        callback: HeadersCallback,
        folder: Optional[SpecialFolder] = None,
        start_index: int = 0,
        end_index: int = -1,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> int:
        """
        按索引顺序接收邮件头

        Args:
            callback: 每收到一封邮件头调用一次，返回真值时提前结束
            folder: 特殊文件夹，None 表示收件箱
            start_index: 起始索引（包含），必须满足 0 <= start_index < count
            end_index: 结束索引（不包含），<= 0 或 >= count 时取 count
            ssl_context: 服务器证书校验使用的 SSL 上下文
            progress: 进度报告（邮件池形态不支持）

        Returns:
            扫描范围内的槽位数（end_index - start_index），与提前结束无关

        Raises:
            MessageIndexOutOfRangeException: start_index 越界
            UnsupportedOperationException: 对邮件池请求进度报告
        """
        raise NotImplementedError

    @abstractmethod
    async def receive_messages(
        self,
        callback: MessageCallback,
        folder: Optional[SpecialFolder] = None,
        start_index: int = 0,
        end_index: int = -1,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> int:
        """按索引顺序接收完整邮件，范围语义同 receive_headers"""
        raise NotImplementedError

    @abstractmethod
    async def receive_header(
        self,
        index: int,
        folder: Optional[SpecialFolder] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> HeaderSummary:
        """接收单封邮件的头部"""
        raise NotImplementedError

    @abstractmethod
    async def receive_message(
        self,
        index: int,
        folder: Optional[SpecialFolder] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        progress: Optional[TransferProgress] = None,
    ) -> EmailMessage:
        """接收单封完整邮件"""
        raise NotImplementedError

    @abstractmethod
    async def list_folders(self, ssl_context: Optional[ssl.SSLContext] = None) -> List[MailFolderInfo]:
        """
        列出文件夹及其计数

        Raises:
            UnsupportedOperationException: 邮件池形态没有文件夹
        """
        raise NotImplementedError

    @abstractmethod
    async def create_incoming_client(
        self, ssl_context: Optional[ssl.SSLContext] = None
    ) -> MailService:
        """创建并返回已连接的收件客户端，调用方负责断开"""
        raise NotImplementedError

    @abstractmethod
    async def create_outgoing_client(
        self, ssl_context: Optional[ssl.SSLContext] = None
    ) -> MailTransport:
        """创建并返回已连接的发件客户端，调用方负责断开"""
        raise NotImplementedError
