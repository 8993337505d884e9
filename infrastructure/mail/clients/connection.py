"""邮件客户端连接辅助函数"""

import logging
import ssl
from typing import Optional, TypeVar

from domain.common.exceptions import InvalidOperationException
from domain.mail.services.mail_clients import MailService
from domain.mail.value_objects.client_configuration import ClientConfiguration

TClient = TypeVar("TClient", bound=MailService)

_logger = logging.getLogger(__name__)


def create_ssl_context(validate_certificates: bool = True) -> ssl.SSLContext:
    """
    创建 SSL 上下文

    Args:
        validate_certificates: 是否校验服务器证书。
            关闭后接受任意证书（仅用于开发环境或自签名证书的服务器）

    Returns:
        SSL 上下文
    """
    context = ssl.create_default_context()
    if not validate_certificates:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


async def connect_client(
    client: TClient,
    configuration: Optional[ClientConfiguration],
    ssl_context: Optional[ssl.SSLContext] = None,
) -> TClient:
    """
    使用配置连接客户端

    仅当 requires_auth 为 True 时才进行认证。

    Args:
        client: 未连接的客户端
        configuration: 客户端配置
        ssl_context: 自定义 SSL 上下文，None 时按配置的 validate_certificates 创建

    Returns:
        已连接（并按需认证）的客户端

    Raises:
        InvalidOperationException: 未设置配置
    """
    if configuration is None:
        raise InvalidOperationException(
            operation="connect",
            reason="Email client configuration is not set",
        )

    context = ssl_context or create_ssl_context(configuration.validate_certificates)

    await client.connect(
        configuration.host,
        configuration.port,
        configuration.use_ssl,
        ssl_context=context,
    )

    if configuration.requires_auth:
        await client.authenticate(configuration.user_name, configuration.password)

    return client


async def dispose_client(client: Optional[MailService]) -> None:
    """
    断开并释放客户端

    client 为 None 时直接返回。断开过程中的错误只记录不抛出，
    以免掩盖调用方正在传播的异常。
    """
    if client is None:
        return

    try:
        await client.disconnect(quit=True)
    except Exception as e:
        _logger.debug(f"Error during disconnect: {e}")
