"""POP3 收件客户端（poplib 适配器）"""

import asyncio
import logging
import poplib
import ssl
from email import policy
from email.message import EmailMessage, Message
from email.parser import BytesParser
from functools import partial
from typing import Callable, List, Optional, TypeVar

from domain.common.exceptions import (
    InvalidOperationException,
    MailAuthenticationException,
    MailConnectionException,
    MailServiceException,
    MailTlsException,
)
from domain.mail.services.mail_clients import MailSpool, TransferProgress


T = TypeVar("T")


class Pop3MailSpool(MailSpool):
    """
    POP3 收件客户端

    poplib 是阻塞实现，所有命令都在线程池中执行。索引从 0 开始，对应 POP3 序号 index + 1。
    use_ssl=True 时使用 POP3_SSL；否则服务器支持时升级为 STLS。
    """

    DEFAULT_PORT = 110
    DEFAULT_SSL_PORT = 995
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)
        self._pop: Optional[poplib.POP3] = None
        self._count = 0
        self._authenticated = False
        self._host: Optional[str] = None
        self._port: Optional[int] = None

    @property
    def is_connected(self) -> bool:
        return self._pop is not None

    @property
    def count(self) -> int:
        return self._count

    async def connect(
        self,
        host: str,
        port: int,
        use_ssl: bool,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> None:
        port = port or (self.DEFAULT_SSL_PORT if use_ssl else self.DEFAULT_PORT)
        self._host, self._port = host, port

        self._logger.debug(f"Connecting to POP3 server {host}:{port} (use_ssl={use_ssl})")
        try:
            if use_ssl:
                pop = await self._run(
                    partial(poplib.POP3_SSL, host, port, timeout=self._timeout, context=ssl_context)
                )
            else:
                pop = await self._run(partial(poplib.POP3, host, port, timeout=self._timeout))
                await self._start_tls(pop, ssl_context)
        except ssl.SSLError as e:
            raise MailTlsException(f"TLS handshake failed: {e}", host, port) from e
        except OSError as e:
            raise MailConnectionException(f"Failed to connect: {e}", host, port) from e
        except poplib.error_proto as e:
            raise MailServiceException(f"Unexpected POP3 greeting: {e}", host, port) from e

        self._pop = pop
        self._logger.info(f"Connected to POP3 server {host}:{port}")

    async def _start_tls(self, pop: poplib.POP3, ssl_context: Optional[ssl.SSLContext]) -> None:
        try:
            capabilities = await self._run(pop.capa)
        except poplib.error_proto:
            return

        if "STLS" not in capabilities:
            return

        try:
            await self._run(partial(pop.stls, context=ssl_context))
        except poplib.error_proto as e:
            raise MailTlsException(f"STLS failed: {e}", self._host, self._port) from e
        self._logger.debug("POP3 connection upgraded with STLS")

    async def authenticate(self, user_name: Optional[str], password: Optional[str]) -> None:
        pop = self._require_connection("authenticate")
        self._logger.debug(f"Authenticating to POP3 server as {user_name}")
        try:
            await self._run(partial(pop.user, user_name or ""))
            await self._run(partial(pop.pass_, password or ""))
        except poplib.error_proto as e:
            raise MailAuthenticationException(
                f"POP3 login failed: {e}", self._host, self._port
            ) from e
        except OSError as e:
            raise MailConnectionException(
                f"POP3 connection lost during login: {e}", self._host, self._port
            ) from e

        self._authenticated = True
        await self.refresh_count()

    async def refresh_count(self) -> int:
        """
        通过 STAT 重新读取邮件数量

        Raises:
            MailAuthenticationException: 服务器要求先认证
            MailServiceException: 服务器返回错误
        """
        pop = self._require_connection("refresh_count")
        try:
            count, _ = await self._run(pop.stat)
        except poplib.error_proto as e:
            if not self._authenticated:
                raise MailAuthenticationException(
                    f"POP3 STAT rejected before login: {e}", self._host, self._port
                ) from e
            raise MailServiceException(f"POP3 STAT failed: {e}", self._host, self._port) from e
        except OSError as e:
            raise MailConnectionException(
                f"POP3 connection lost during STAT: {e}", self._host, self._port
            ) from e

        self._count = count
        return count

    async def disconnect(self, quit: bool = True) -> None:
        pop, self._pop = self._pop, None
        self._count = 0
        self._authenticated = False
        if pop is None:
            return

        if quit:
            await self._run(pop.quit)
        else:
            await self._run(pop.close)
        self._logger.debug(f"Disconnected from POP3 server {self._host}:{self._port}")

    async def get_message_headers(self, index: int) -> Message:
        pop = self._require_connection("get_message_headers")
        lines = await self._command(partial(pop.top, index + 1, 0), index)
        return BytesParser(policy=policy.default).parsebytes(
            self._join(lines), headersonly=True
        )

    async def get_message(
        self, index: int, progress: Optional[TransferProgress] = None
    ) -> EmailMessage:
        pop = self._require_connection("get_message")
        lines = await self._command(partial(pop.retr, index + 1), index)
        data = self._join(lines)
        if progress is not None:
            progress.report(len(data), len(data))
        return BytesParser(policy=policy.default).parsebytes(data)

    async def _command(self, command: Callable[[], tuple], index: int) -> List[bytes]:
        try:
            _, lines, _ = await self._run(command)
        except poplib.error_proto as e:
            raise MailServiceException(
                f"Failed to retrieve message {index}: {e}", self._host, self._port
            ) from e
        except OSError as e:
            raise MailConnectionException(
                f"POP3 connection lost while retrieving message {index}: {e}",
                self._host,
                self._port,
            ) from e
        return lines

    @staticmethod
    def _join(lines: List[bytes]) -> bytes:
        return b"\r\n".join(lines) + b"\r\n"

    async def _run(self, func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    def _require_connection(self, operation: str) -> poplib.POP3:
        if self._pop is None:
            raise InvalidOperationException(
                operation=operation,
                reason="POP3 client is not connected",
            )
        return self._pop
