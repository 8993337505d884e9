"""
应用配置管理

使用 pydantic-settings 管理环境变量和配置
"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    应用配置类

    自动从环境变量和 .env 文件读取配置
    """

    # ========== 应用环境 ==========
    app_env: Literal["test", "dev", "staging", "prod"] = "dev"
    app_name: str = "MailClientTools"
    app_version: str = "1.0.0"
    debug: bool = False

    # ========== 日志配置 ==========
    log_level: str = "INFO"
    log_file: str = ""

    # ========== 安全配置 ==========
    # Fernet 密钥，用于解密 mail_password
    encryption_key: str = ""

    # ========== 邮件服务器配置 ==========
    mail_host: str = ""
    mail_port: int = 0
    mail_use_ssl: bool = False
    mail_user_name: Optional[str] = None
    mail_password: Optional[str] = None
    mail_password_encrypted: bool = False  # mail_password 是否为 Fernet 令牌
    mail_requires_auth: bool = False
    mail_remove_oauth2: bool = False
    mail_validate_certificates: bool = True
    mail_timeout: float = 30.0
    mail_incoming_protocol: Literal["imap", "pop3"] = "imap"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # 忽略未定义的环境变量
    )

    @property
    def is_test(self) -> bool:
        """是否为测试环境"""
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        """是否为生产环境"""
        return self.app_env == "prod"

    @property
    def uses_pop3(self) -> bool:
        """收件是否使用 POP3"""
        return self.mail_incoming_protocol == "pop3"


# 全局配置实例（单例）
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    获取配置实例（单例模式）

    Returns:
        Settings 实例
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
