"""发送事件参数值对象"""

from dataclasses import dataclass
from email.message import EmailMessage
from typing import Iterable, Optional, Tuple, Union


@dataclass(frozen=True)
class SendEventArgs:
    """
    发送事件参数

    描述一次批量发送的结果：成功事件携带已发送的邮件，
    错误事件携带未能发送的邮件及发生的错误。

    Attributes:
        messages: 已发送或未能发送的邮件
        error: 发生的错误（成功时为 None）
    """

    messages: Tuple[EmailMessage, ...]
    error: Optional[BaseException] = None

    @classmethod
    def create(
        cls,
        messages: Union[EmailMessage, Iterable[EmailMessage]],
        error: Optional[BaseException] = None,
    ) -> "SendEventArgs":
        """从单封邮件或邮件集合创建事件参数"""
        if isinstance(messages, EmailMessage):
            return cls(messages=(messages,), error=error)
        return cls(messages=tuple(messages), error=error)

    @property
    def succeeded(self) -> bool:
        """是否为成功事件"""
        return self.error is None
