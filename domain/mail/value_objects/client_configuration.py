"""邮件客户端配置值对象"""

from dataclasses import dataclass, fields
from dataclasses import replace as dataclass_replace
from typing import Any, Dict, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


# 宿主应用配置节中的字段名（PascalCase）到值对象字段的映射
_SETTINGS_KEYS: Dict[str, str] = {
    "Host": "host",
    "Port": "port",
    "UseSsl": "use_ssl",
    "UserName": "user_name",
    "Password": "password",
    "RequiresAuth": "requires_auth",
    "RemoveOAuth2": "remove_oauth2",
    "ValidateCertificates": "validate_certificates",
}

_BOOL_FIELDS = ("use_ssl", "requires_auth", "remove_oauth2", "validate_certificates")

_BOOL_ADAPTER = TypeAdapter(bool)


@dataclass(frozen=True)
class ClientConfiguration(BaseValueObject):
    """
    邮件客户端配置值对象

    封装连接邮件服务器（SMTP / IMAP / POP3）所需的参数。
    凭证是否为空不在本地校验，由协议引擎在认证时判断。

    Attributes:
        host: 服务器主机名或 IP 地址
        port: 服务器端口，0 表示使用协议默认端口
        use_ssl: 是否使用 SSL/TLS 安全连接
        user_name: 用户名
        password: 密码
        requires_auth: 服务器是否需要认证
        remove_oauth2: 是否移除 OAuth2 认证机制
        validate_certificates: 是否校验服务器证书，默认 True
    """

    host: str = ""
    port: int = 0
    use_ssl: bool = False
    user_name: Optional[str] = None
    password: Optional[str] = None
    requires_auth: bool = False
    remove_oauth2: bool = False
    validate_certificates: bool = True

    def validate(self) -> None:
        """验证配置的有效性"""
        if not isinstance(self.port, int) or not 0 <= self.port <= 65535:
            raise InvalidValueObjectException(
                value_object_type="ClientConfiguration",
                value=self.port,
                reason=f"Invalid port number: {self.port}. Must be between 0 and 65535",
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ClientConfiguration":
        """
        从宿主应用的配置节创建配置

        同时接受 PascalCase（Host, Port, UseSsl, UserName, Password,
        RequiresAuth, RemoveOAuth2）和 snake_case 字段名，未知字段被忽略。
        布尔字段接受字符串形式（"true" / "false"）。

        Args:
            mapping: 配置字典

        Returns:
            ClientConfiguration 实例
        """
        names = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in mapping.items():
            name = _SETTINGS_KEYS.get(key, key)
            if name in names:
                values[name] = value
        if values.get("port") in (None, ""):
            values.pop("port", None)
        else:
            values["port"] = int(values["port"])
        for name in _BOOL_FIELDS:
            if name in values:
                values[name] = _to_bool(name, values[name])
        return cls(**values)

    def replace(self, **changes: Any) -> "ClientConfiguration":
        """返回修改了指定字段的新配置"""
        return dataclass_replace(self, **changes)

    @property
    def endpoint(self) -> str:
        """返回 host:port 形式的地址"""
        return f"{self.host}:{self.port}"

    def __repr__(self) -> str:
        """安全的字符串表示，不暴露密码"""
        return (
            f"ClientConfiguration(host={self.host!r}, port={self.port}, "
            f"use_ssl={self.use_ssl}, user_name={self.user_name!r}, "
            f"requires_auth={self.requires_auth}, remove_oauth2={self.remove_oauth2}, "
            f"validate_certificates={self.validate_certificates})"
        )

    __str__ = __repr__


def _to_bool(name: str, value: Any) -> bool:
    """将配置节中的布尔值（"true" / "false" / "1" / "0" 等）转换为 bool"""
    try:
        return _BOOL_ADAPTER.validate_python(value)
    except ValidationError as e:
        raise InvalidValueObjectException(
            value_object_type="ClientConfiguration",
            value=value,
            reason=f"Invalid boolean value for {name}: {value!r}",
        ) from e
