"""邮件协议引擎接口

描述本库所依赖的外部协议引擎能力。线路协议、TLS 协商和 MIME 解析全部由引擎完成，
这里只定义调用契约，具体适配器在基础设施层。

三种客户端形态：
- MailStore：按文件夹组织的收件（IMAP），文件夹需先以只读方式打开
- MailSpool：平铺、按序号访问的收件（POP3），没有文件夹概念
- MailTransport：发件（SMTP）
"""

import ssl
from abc import ABC, abstractmethod
from email.message import EmailMessage, Message
from typing import List, Optional, Protocol

from domain.mail.value_objects.special_folder import SpecialFolder


class TransferProgress(Protocol):
    """传输进度报告接口"""

    def report(self, bytes_transferred: int, total_size: Optional[int] = None) -> None:
        """
        报告传输进度

        Args:
            bytes_transferred: 已传输字节数
            total_size: 总字节数，未知时为 None
        """
        ...


class MailService(ABC):
    """邮件服务客户端基类"""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """是否已连接"""
        raise NotImplementedError

    @abstractmethod
    async def connect(
        self,
        host: str,
        port: int,
        use_ssl: bool,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> None:
        """
        连接服务器

        Raises:
            MailConnectionException: 主机不可达
            MailTlsException: TLS 握手失败
        """
        raise NotImplementedError

    @abstractmethod
    async def authenticate(self, user_name: Optional[str], password: Optional[str]) -> None:
        """
        登录认证

        Raises:
            MailAuthenticationException: 认证失败
        """
        raise NotImplementedError

    @abstractmethod
    async def disconnect(self, quit: bool = True) -> None:
        """断开连接，quit 为 True 时先发送退出命令"""
        raise NotImplementedError


class MailTransport(MailService):
    """发件客户端"""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        """发送一封完整的邮件"""
        raise NotImplementedError


class MailFolder(ABC):
    """收件文件夹"""

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def is_open(self) -> bool:
        raise NotImplementedError

    @property
    @abstractmethod
    def count(self) -> int:
        """邮件总数（打开文件夹后可用）"""
        raise NotImplementedError

    @property
    def unread(self) -> int:
        """未读邮件数"""
        return 0

    @property
    def recent(self) -> int:
        """最近投递的邮件数"""
        return 0

    @abstractmethod
    async def open(self, read_only: bool = True) -> int:
        """打开文件夹，返回邮件总数"""
        raise NotImplementedError

    @abstractmethod
    async def get_headers(
        self, index: int, progress: Optional[TransferProgress] = None
    ) -> Message:
        """获取指定索引邮件的头部"""
        raise NotImplementedError

    @abstractmethod
    async def get_message(
        self, index: int, progress: Optional[TransferProgress] = None
    ) -> EmailMessage:
        """获取指定索引的完整邮件"""
        raise NotImplementedError

    def get_unique_id(self, index: int) -> Optional[int]:
        """获取已取回邮件的唯一标识，未知时返回 None"""
        return None


class MailStore(MailService):
    """按文件夹组织的收件客户端"""

    @property
    @abstractmethod
    def inbox(self) -> MailFolder:
        raise NotImplementedError

    @abstractmethod
    async def get_folder(self, special_folder: SpecialFolder) -> MailFolder:
        """
        获取特殊文件夹

        Raises:
            UnsupportedOperationException: 服务器没有该特殊文件夹
        """
        raise NotImplementedError

    @abstractmethod
    async def list_folders(self) -> List[MailFolder]:
        """列出所有文件夹（已刷新状态计数）"""
        raise NotImplementedError


class MailSpool(MailService):
    """平铺、按序号访问的收件客户端"""

    @property
    @abstractmethod
    def count(self) -> int:
        """邮件总数（认证后可用）"""
        raise NotImplementedError

    async def refresh_count(self) -> int:
        """重新从服务器读取邮件总数，默认直接返回 count"""
        return self.count

    @abstractmethod
    async def get_message_headers(self, index: int) -> Message:
        """获取指定索引邮件的头部"""
        raise NotImplementedError

    @abstractmethod
    async def get_message(
        self, index: int, progress: Optional[TransferProgress] = None
    ) -> EmailMessage:
        """获取指定索引的完整邮件"""
        raise NotImplementedError
