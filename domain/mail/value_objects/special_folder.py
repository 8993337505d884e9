"""特殊文件夹枚举"""

from enum import Enum


class SpecialFolder(str, Enum):
    """
    特殊文件夹枚举

    值为 IMAP SPECIAL-USE 属性（RFC 6154），收件箱除外。
    """

    INBOX = "INBOX"
    """收件箱"""

    ALL = "\\All"
    """所有邮件"""

    ARCHIVE = "\\Archive"
    """归档"""

    DRAFTS = "\\Drafts"
    """草稿箱"""

    FLAGGED = "\\Flagged"
    """已加星标"""

    JUNK = "\\Junk"
    """垃圾邮件"""

    SENT = "\\Sent"
    """已发送"""

    TRASH = "\\Trash"
    """已删除"""
