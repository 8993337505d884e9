"""邮件配置提供者实现"""

from .settings_email_configuration_provider import (
    SettingsEmailConfigurationProvider,
    build_client_configuration,
)
from .static_email_configuration_provider import StaticEmailConfigurationProvider

__all__ = [
    "SettingsEmailConfigurationProvider",
    "StaticEmailConfigurationProvider",
    "build_client_configuration",
]
