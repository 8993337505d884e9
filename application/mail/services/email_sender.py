"""邮件发送应用服务接口"""

from abc import ABC, abstractmethod
from email.message import EmailMessage

from domain.mail.value_objects.client_configuration import ClientConfiguration


class EmailSender(ABC):
    """
    邮件发送应用服务接口

    调用方只关心发送本身，客户端配置由服务在首次使用时加载。
    """

    @abstractmethod
    async def send_email(self, subject: str, body: str, from_: str, to: str) -> None:
        """
        构造并发送一封 HTML 邮件

        Args:
            subject: 主题
            body: HTML 正文
            from_: 发件人，逗号或分号分隔的地址列表
            to: 收件人，逗号或分号分隔的地址列表
        """
        pass

    @abstractmethod
    async def send_email_message(self, message: EmailMessage) -> None:
        """发送已构造好的邮件"""
        pass

    @abstractmethod
    def change_configuration(self, configuration: ClientConfiguration) -> None:
        """替换客户端配置，后续发送使用新配置"""
        pass
