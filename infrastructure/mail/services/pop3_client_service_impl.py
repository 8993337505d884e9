"""POP3 邮件客户端服务实现"""

import logging
from functools import partial
from typing import Optional

from domain.mail.value_objects.client_configuration import ClientConfiguration
from infrastructure.mail.clients.imap_store import ImapMailStore
from infrastructure.mail.clients.pop3_spool import Pop3MailSpool
from infrastructure.mail.services.email_client_service_impl import (
    EmailClientServiceImpl,
    TransportFactory,
)


class Pop3ClientServiceImpl(EmailClientServiceImpl):
    """
    POP3 邮件客户端服务

    默认以邮件池形态（POP3）收件；use_imap_client=True 时改用 IMAP。
    邮件池没有文件夹，folder 参数被忽略，list_folders 不受支持。
    """

    def __init__(
        self,
        configuration: Optional[ClientConfiguration] = None,
        use_imap_client: bool = False,
        transport_factory: Optional[TransportFactory] = None,
        timeout: float = EmailClientServiceImpl.DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        logger = logger or logging.getLogger(__name__)
        incoming_cls = ImapMailStore if use_imap_client else Pop3MailSpool
        super().__init__(
            configuration=configuration,
            incoming_factory=partial(incoming_cls, timeout=timeout, logger=logger),
            transport_factory=transport_factory,
            timeout=timeout,
            logger=logger,
        )
        self.use_imap_client = use_imap_client
