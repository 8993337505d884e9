"""已接收邮件值对象"""

from dataclasses import dataclass
from email.message import EmailMessage


@dataclass(frozen=True)
class ReceivedMessage:
    """
    分页接收时传给回调的邮件

    Attributes:
        message_index: 邮件索引（从 0 开始）
        message_count: 接收开始时的邮件总数
        message: 完整邮件
    """

    message_index: int
    message_count: int
    message: EmailMessage
