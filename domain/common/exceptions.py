"""领域异常定义"""

from typing import Any, Optional


class DomainException(Exception):
    """
    领域异常基类

    Attributes:
        message: 错误信息
        code: 错误代码
    """

    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)


class InvalidValueObjectException(DomainException):
    """值对象校验失败"""

    default_code = "INVALID_VALUE_OBJECT"

    def __init__(self, value_object_type: str, value: Any, reason: str):
        self.value_object_type = value_object_type
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {value_object_type}: {reason}")


class InvalidOperationException(DomainException):
    """非法操作"""

    default_code = "INVALID_OPERATION"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Invalid operation '{operation}': {reason}")


class UnsupportedOperationException(DomainException):
    """
    不支持的操作

    例如：对 POP3 邮件池请求进度报告，或客户端类型无法识别。
    """

    default_code = "UNSUPPORTED_OPERATION"


class MessageIndexOutOfRangeException(DomainException, IndexError):
    """邮件索引越界"""

    default_code = "INDEX_OUT_OF_RANGE"

    def __init__(self, index: int, count: int, parameter: str = "start_index"):
        self.index = index
        self.count = count
        self.parameter = parameter
        super().__init__(
            f"{parameter}={index} is out of range (message count: {count})"
        )


class MailServiceException(DomainException):
    """
    邮件服务异常基类

    由协议引擎适配器抛出，携带服务器地址便于诊断。

    Attributes:
        server: 服务器地址
        port: 服务器端口
    """

    default_code = "MAIL_SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        server: Optional[str] = None,
        port: Optional[int] = None,
        code: Optional[str] = None,
    ):
        self.server = server
        self.port = port
        super().__init__(message, code)


class MailConnectionException(MailServiceException):
    """无法连接邮件服务器（主机不可达、连接被拒绝、超时）"""

    default_code = "MAIL_CONNECTION_FAILED"


class MailAuthenticationException(MailServiceException):
    """服务器拒绝认证或要求认证"""

    default_code = "MAIL_AUTHENTICATION_FAILED"


class MailTlsException(MailServiceException):
    """TLS 握手失败或服务器不支持 TLS"""

    default_code = "MAIL_TLS_FAILED"
