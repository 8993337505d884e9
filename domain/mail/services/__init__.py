"""邮件领域服务模块"""

from domain.mail.services.configured_email_service import ConfiguredEmailService
from domain.mail.services.email_client_service import (
    EmailClientService,
    HeadersCallback,
    MessageCallback,
)
from domain.mail.services.email_configuration_provider import EmailConfigurationProvider
from domain.mail.services.mail_clients import (
    MailFolder,
    MailService,
    MailSpool,
    MailStore,
    MailTransport,
    TransferProgress,
)
from domain.mail.services.message_factory import (
    add_attachments,
    create_message,
    parse_address_list,
)

__all__ = [
    "ConfiguredEmailService",
    "EmailClientService",
    "EmailConfigurationProvider",
    "HeadersCallback",
    "MailFolder",
    "MailService",
    "MailSpool",
    "MailStore",
    "MailTransport",
    "MessageCallback",
    "TransferProgress",
    "add_attachments",
    "create_message",
    "parse_address_list",
]
