"""邮件文件夹信息值对象"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional


@total_ordering
@dataclass(eq=False)
class MailFolderInfo:
    """
    邮件文件夹信息

    按 ordinal 比较与计算哈希，用于展示列表排序。

    Attributes:
        name: 文件夹完整名称
        count: 邮件总数
        unread: 未读邮件数
        recent: 最近投递的邮件数
        display_name: 展示名称
        ordinal: 展示序号
    """

    name: str
    count: int = 0
    unread: int = 0
    recent: int = 0
    display_name: Optional[str] = field(default=None)
    ordinal: int = 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MailFolderInfo):
            return NotImplemented
        return self.ordinal == other.ordinal

    def __lt__(self, other: "MailFolderInfo") -> bool:
        if not isinstance(other, MailFolderInfo):
            return NotImplemented
        return self.ordinal < other.ordinal

    def __hash__(self) -> int:
        return hash(self.ordinal)

    def __str__(self) -> str:
        return self.name
