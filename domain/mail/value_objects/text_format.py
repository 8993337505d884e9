"""邮件正文格式枚举"""

from enum import Enum


class TextFormat(str, Enum):
    """正文格式，值为 MIME text 子类型"""

    HTML = "html"
    PLAIN = "plain"
