"""预配置邮件服务接口"""

from abc import abstractmethod
from email.message import EmailMessage
from typing import Iterable, Optional, Union

from domain.mail.services.email_client_service import EmailClientService


class ConfiguredEmailService(EmailClientService):
    """
    预配置邮件服务接口

    构造时固定客户端配置，发送失败不抛出异常，
    而是返回 False 并记录最近一次错误。
    """

    @property
    @abstractmethod
    def last_error(self) -> Optional[BaseException]:
        """最近一次发送尝试的错误，成功时为 None"""
        raise NotImplementedError

    @abstractmethod
    async def send_email(
        self,
        from_email: str,
        to_email: str,
        subject: str,
        body: str,
    ) -> bool:
        """
        使用简单字段构造并发送邮件

        Args:
            from_email: 发件人，逗号或分号分隔的地址列表
            to_email: 收件人，逗号或分号分隔的地址列表
            subject: 主题
            body: 正文（HTML）

        Returns:
            True 表示发送成功，否则为 False
        """
        raise NotImplementedError

    @abstractmethod
    async def send_message(self, messages: Union[EmailMessage, Iterable[EmailMessage]]) -> bool:
        """发送一封或多封邮件，成功返回 True"""
        raise NotImplementedError
