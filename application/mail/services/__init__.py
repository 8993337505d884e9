"""邮件应用服务"""

from application.mail.services.email_sender import EmailSender
from application.mail.services.configured_email_sender import ConfiguredEmailSender

__all__ = ["EmailSender", "ConfiguredEmailSender"]
