"""邮件构建工具"""

import re
from email.errors import HeaderParseError
from email.headerregistry import Address
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from domain.common.exceptions import InvalidValueObjectException
from domain.mail.value_objects.header_summary import parse_address_name
from domain.mail.value_objects.text_format import TextFormat


AddressList = Union[str, Mapping[str, Optional[str]], Iterable[str]]
Attachment = Tuple[str, bytes, str]

_ADDRESS_SEPARATORS = re.compile(r"[,;]")


def parse_address_list(addresses: AddressList) -> List[Address]:
    """
    解析收件人列表

    支持：
    - 逗号或分号分隔的字符串："Jane Doe" <jane@example.com>; bob@example.com
    - 地址到显示名的映射：{"jane@example.com": "Jane Doe"}
    - 地址字符串的可迭代对象

    Raises:
        InvalidValueObjectException: 地址格式无效
    """
    if isinstance(addresses, str):
        items = [item for item in _ADDRESS_SEPARATORS.split(addresses) if item.strip()]
        pairs = [parse_address_name(item) for item in items]
    elif isinstance(addresses, Mapping):
        pairs = [(name or "", address) for address, name in addresses.items()]
    else:
        pairs = [parse_address_name(item) for item in addresses]

    result: List[Address] = []
    for name, address in pairs:
        try:
            result.append(Address(display_name=name, addr_spec=address.strip()))
        except (ValueError, IndexError, HeaderParseError) as e:
            raise InvalidValueObjectException(
                value_object_type="Address",
                value=address,
                reason=f"Invalid email address: {e}",
            ) from e
    return result


def create_message(
    subject: str,
    body: str,
    from_: AddressList,
    to: AddressList,
    body_format: TextFormat = TextFormat.HTML,
    message_id: Optional[str] = None,
    attachments: Iterable[Attachment] = (),
) -> EmailMessage:
    """
    构建待发送的邮件

    Args:
        subject: 主题
        body: 正文
        from_: 发件人
        to: 收件人
        body_format: 正文格式，默认 HTML
        message_id: 邮件 ID，为空时自动生成
        attachments: (文件名, 数据, MIME 类型) 元组

    Returns:
        EmailMessage 实例
    """
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = parse_address_list(from_)
    message["To"] = parse_address_list(to)
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = message_id if message_id and message_id.strip() else make_msgid()
    message.set_content(body, subtype=TextFormat(body_format).value)

    add_attachments(message, *attachments)
    return message


def add_attachments(message: EmailMessage, *attachments: Attachment) -> EmailMessage:
    """向邮件添加附件，content_type 形如 "application/pdf" """
    for file_name, data, content_type in attachments:
        maintype, _, subtype = (content_type or "application/octet-stream").partition("/")
        message.add_attachment(
            data,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=file_name,
        )
    return message
