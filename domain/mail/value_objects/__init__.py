"""邮件值对象模块"""

from domain.mail.value_objects.client_configuration import ClientConfiguration
from domain.mail.value_objects.encrypted_password import EncryptedPassword
from domain.mail.value_objects.header_summary import (
    MIN_DATE,
    HeaderSummary,
    parse_address_name,
    parse_header_date,
)
from domain.mail.value_objects.mail_folder_info import MailFolderInfo
from domain.mail.value_objects.received_message import ReceivedMessage
from domain.mail.value_objects.send_event_args import SendEventArgs
from domain.mail.value_objects.special_folder import SpecialFolder
from domain.mail.value_objects.text_format import TextFormat

__all__ = [
    "MIN_DATE",
    "ClientConfiguration",
    "EncryptedPassword",
    "HeaderSummary",
    "MailFolderInfo",
    "ReceivedMessage",
    "SendEventArgs",
    "SpecialFolder",
    "TextFormat",
    "parse_address_name",
    "parse_header_date",
]
