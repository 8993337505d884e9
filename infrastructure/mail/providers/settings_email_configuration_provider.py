"""应用设置配置提供者"""

import logging
from typing import Optional

from domain.mail.services.email_configuration_provider import EmailConfigurationProvider
from domain.mail.value_objects.client_configuration import ClientConfiguration
from domain.mail.value_objects.encrypted_password import EncryptedPassword
from infrastructure.config.settings import Settings


def build_client_configuration(settings: Settings) -> ClientConfiguration:
    """
    从 Settings.mail_* 字段构建客户端配置

    mail_password_encrypted 为 True 时，mail_password 是 Fernet 令牌，
    使用 encryption_key 解密。

    Raises:
        InvalidValueObjectException: 端口无效或密码无法解密
    """
    password = settings.mail_password
    if password and settings.mail_password_encrypted:
        password = EncryptedPassword.from_token(password).decrypt(settings.encryption_key)

    return ClientConfiguration(
        host=settings.mail_host,
        port=settings.mail_port,
        use_ssl=settings.mail_use_ssl,
        user_name=settings.mail_user_name,
        password=password,
        requires_auth=settings.mail_requires_auth,
        remove_oauth2=settings.mail_remove_oauth2,
        validate_certificates=settings.mail_validate_certificates,
    )


class SettingsEmailConfigurationProvider(EmailConfigurationProvider):
    """从应用设置构建客户端配置，错误直接传播"""

    def __init__(self, settings: Settings, logger: Optional[logging.Logger] = None):
        self._settings = settings
        self._logger = logger or logging.getLogger(__name__)

    async def get_configuration(self) -> ClientConfiguration:
        configuration = build_client_configuration(self._settings)
        self._logger.debug(f"Loaded email configuration from settings: {configuration}")
        return configuration
