"""邮件头摘要值对象"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.message import Message
from email.utils import parsedate_to_datetime
from functools import cached_property
from typing import Optional, Tuple

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


# 日期无法解析时返回的哨兵值
MIN_DATE = datetime.min.replace(tzinfo=timezone.utc)

# John Doe <john.doe@example.com>
# <jane.fondue@example.com>
# "Maurice Jackson" <mauricejackson@example.com>
# user977@example.com
_ADDRESS_NAME_PATTERN = re.compile(r"(?P<name>[^<]+)?<(?P<email>[^>]+)|(?P<bare>.+)")

# 日期末尾的时区注释："(UTC)"、"(Pacific Standard Time)"，或数字时差后的 "CEST"
_BRACKETED_ZONE = re.compile(r"\s*\([^)]*\)\s*$")
_NAMED_ZONE_AFTER_OFFSET = re.compile(r"(?P<offset>[+-]\d{4})\s+[A-Z]{1,5}\s*$")


def parse_address_name(value: Optional[str]) -> Tuple[str, str]:
    """
    将地址头拆分为显示名和邮件地址

    匹配 `可选的(带引号)名称 <地址>` 形式；没有尖括号时整个字符串视为地址，名称为空。

    Args:
        value: 原始头部值

    Returns:
        (name, address) 元组，无法解析时返回 ("", "")
    """
    if not value:
        return "", ""

    match = _ADDRESS_NAME_PATTERN.match(value.strip())
    if not match:
        return "", ""

    if match.group("email") is not None:
        name = (match.group("name") or "").strip(' "')
        return name, match.group("email").strip()

    return "", match.group("bare").strip()


def strip_timezone_annotation(value: str) -> str:
    """去除日期字符串末尾的时区注释"""
    value = _BRACKETED_ZONE.sub("", value.strip())
    return _NAMED_ZONE_AFTER_OFFSET.sub(r"\g<offset>", value)


def parse_header_date(value: Optional[str]) -> datetime:
    """
    解析邮件 Date 头

    Args:
        value: 原始日期字符串

    Returns:
        带时区的 datetime，无法解析时返回 MIN_DATE
    """
    if not value:
        return MIN_DATE

    try:
        parsed = parsedate_to_datetime(strip_timezone_annotation(value))
    except (TypeError, ValueError, IndexError, OverflowError):
        return MIN_DATE

    if parsed is None:
        return MIN_DATE
    if parsed.tzinfo is None:
        # "-0000" 表示时区未知，按 UTC 处理
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, eq=False)
class HeaderSummary(BaseValueObject):
    """
    邮件头摘要值对象

    对已解析邮件头的只读、面向展示的视图。派生字段惰性计算并缓存，
    重复计算结果相同；解析失败时回退为空字符串或 MIN_DATE，不抛出异常。

    Attributes:
        message_index: 邮件在文件夹或邮件池中的索引（从 0 开始）
        message_count: 文件夹或邮件池中的邮件总数
        headers: 解析后的邮件头
        unique_id: 服务器分配的唯一标识（IMAP UID），未知时为 None
    """

    message_index: int
    message_count: int
    headers: Message
    unique_id: Optional[int] = None

    def validate(self) -> None:
        """验证索引的有效性"""
        if self.message_index < 0:
            raise InvalidValueObjectException(
                value_object_type="HeaderSummary",
                value=self.message_index,
                reason="Message index cannot be negative",
            )

    def header(self, name: str) -> str:
        """获取指定头部的值，不存在时返回空字符串"""
        try:
            value = self.headers.get(name)
            text = "" if value is None else str(value)
        except (TypeError, ValueError, IndexError, OverflowError):
            # 结构化头部解析失败时回退为原始值
            return next(
                (str(raw) for key, raw in self.headers.raw_items() if key.lower() == name.lower()),
                "",
            )
        return text

    @property
    def message_id(self) -> str:
        return self.header("Message-ID")

    @property
    def date(self) -> str:
        return self.header("Date")

    @property
    def from_(self) -> str:
        return self.header("From")

    @property
    def to(self) -> str:
        return self.header("To")

    @property
    def cc(self) -> str:
        return self.header("Cc")

    @property
    def subject(self) -> str:
        return self.header("Subject")

    @property
    def return_path(self) -> str:
        return self.header("Return-Path")

    @property
    def content_type(self) -> str:
        return self.header("Content-Type")

    @property
    def content_language(self) -> str:
        return self.header("Content-Language")

    @property
    def mime_version(self) -> str:
        return self.header("MIME-Version")

    @property
    def x_mailer(self) -> str:
        return self.header("X-Mailer")

    @cached_property
    def normalized_date(self) -> datetime:
        """解析后的日期，无法解析时为 MIN_DATE"""
        return parse_header_date(self.date)

    def friendly_date(self, to_local_time: bool = False) -> str:
        """
        返回便于展示的短日期

        当年的日期省略年份（"Mon, 16/12"），其他年份包含年份（"Mon, 16/12/2024"）。
        日期无法解析时返回原始值。

        Args:
            to_local_time: 是否转换为本地时间
        """
        parsed = self.normalized_date
        if parsed == MIN_DATE:
            return self.date

        if to_local_time:
            parsed = parsed.astimezone()

        if parsed.year != datetime.now().year:
            return parsed.strftime("%a, %d/%m/%Y")
        return parsed.strftime("%a, %d/%m")

    @cached_property
    def _from_parts(self) -> Tuple[str, str]:
        return parse_address_name(self.from_)

    @cached_property
    def _to_parts(self) -> Tuple[str, str]:
        return parse_address_name(self.to)

    @property
    def from_name(self) -> str:
        return self._from_parts[0]

    @property
    def from_address(self) -> str:
        return self._from_parts[1]

    @property
    def to_name(self) -> str:
        return self._to_parts[0]

    @property
    def to_address(self) -> str:
        return self._to_parts[1]

    @property
    def from_name_or_address(self) -> str:
        """发件人名称，名称为空白时返回发件人地址"""
        return self.from_address if not self.from_name.strip() else self.from_name
