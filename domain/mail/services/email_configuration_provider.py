"""邮件配置提供者接口"""

from abc import ABC, abstractmethod

from domain.mail.value_objects.client_configuration import ClientConfiguration


class EmailConfigurationProvider(ABC):
    """
    邮件配置提供者接口

    从内存、应用设置或外部存储获取客户端配置。
    获取过程可能涉及 I/O，因此是异步的；任何错误都直接传播给调用方。
    """

    @abstractmethod
    async def get_configuration(self) -> ClientConfiguration:
        """获取客户端配置"""
        raise NotImplementedError
