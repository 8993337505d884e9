"""加密密码值对象"""

from dataclasses import dataclass
from typing import Union

from cryptography.fernet import Fernet, InvalidToken

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


def _fernet(encryption_key: Union[str, bytes]) -> Fernet:
    key = encryption_key if isinstance(encryption_key, bytes) else encryption_key.encode()
    return Fernet(key)


@dataclass(frozen=True)
class EncryptedPassword(BaseValueObject):
    """
    加密密码值对象

    配置文件或环境变量中保存的 Fernet 令牌，使用时才解密为明文。

    Attributes:
        token: Fernet 加密令牌
    """

    token: bytes

    def validate(self) -> None:
        if not self.token:
            raise InvalidValueObjectException(
                value_object_type="EncryptedPassword",
                value=None,
                reason="Encrypted password cannot be empty",
            )

    @classmethod
    def from_token(cls, token: Union[str, bytes]) -> "EncryptedPassword":
        """从配置中的令牌字符串创建"""
        return cls(token=token.encode() if isinstance(token, str) else token)

    @classmethod
    def from_plain(
        cls,
        plain_password: str,
        encryption_key: Union[str, bytes],
    ) -> "EncryptedPassword":
        """
        加密明文密码

        Args:
            plain_password: 明文密码
            encryption_key: Fernet 密钥（32 字节 base64 编码）

        Raises:
            InvalidValueObjectException: 密码为空或密钥无效
        """
        if not plain_password:
            raise InvalidValueObjectException(
                value_object_type="EncryptedPassword",
                value=None,
                reason="Password cannot be empty",
            )

        try:
            return cls(token=_fernet(encryption_key).encrypt(plain_password.encode("utf-8")))
        except (ValueError, TypeError) as e:
            raise InvalidValueObjectException(
                value_object_type="EncryptedPassword",
                value="[REDACTED]",
                reason=f"Failed to encrypt password: {e}",
            ) from e

    def decrypt(self, encryption_key: Union[str, bytes]) -> str:
        """
        解密为明文密码

        Raises:
            InvalidValueObjectException: 密钥错误或令牌损坏
        """
        try:
            return _fernet(encryption_key).decrypt(self.token).decode("utf-8")
        except InvalidToken as e:
            raise InvalidValueObjectException(
                value_object_type="EncryptedPassword",
                value="[ENCRYPTED]",
                reason="Failed to decrypt password: invalid key or corrupted data",
            ) from e
        except (ValueError, TypeError) as e:
            raise InvalidValueObjectException(
                value_object_type="EncryptedPassword",
                value="[ENCRYPTED]",
                reason=f"Failed to decrypt password: {e}",
            ) from e

    def __repr__(self) -> str:
        return "EncryptedPassword([ENCRYPTED])"

    def __str__(self) -> str:
        return "[ENCRYPTED]"
