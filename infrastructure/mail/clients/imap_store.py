"""IMAP 收件客户端（imaplib 适配器）"""

import asyncio
import imaplib
import logging
import re
import ssl
from email import policy
from email.message import EmailMessage, Message
from email.parser import BytesParser
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from domain.common.exceptions import (
    InvalidOperationException,
    MailAuthenticationException,
    MailConnectionException,
    MailServiceException,
    MailTlsException,
    UnsupportedOperationException,
)
from domain.mail.services.mail_clients import (
    MailFolder,
    MailStore,
    TransferProgress,
)
from domain.mail.value_objects.special_folder import SpecialFolder


T = TypeVar("T")

# (\HasNoChildren \Sent) "/" "Sent Items"
_LIST_LINE = re.compile(
    r'^\((?P<flags>[^)]*)\)\s+(?P<delimiter>"(?:[^"\\]|\\.)*"|NIL)\s+(?P<name>.+)$'
)
_LITERAL_SUFFIX = re.compile(rb"\{\d+\}$")
_STATUS_ITEM = re.compile(r"(MESSAGES|UNSEEN|RECENT)\s+(\d+)")
_FETCH_UID = re.compile(rb"UID\s+(\d+)")

# 取邮件头和完整邮件时不设置 \Seen 标记
HEADER_FETCH_ITEMS = "(UID BODY.PEEK[HEADER])"
MESSAGE_FETCH_ITEMS = "(UID BODY.PEEK[])"


def _decode(line) -> str:
    if isinstance(line, tuple):
        # 名称以字面量形式返回：(b'(\\HasNoChildren) "/" {4}', b'Sent')
        prefix, literal = line[0], line[1]
        line = _LITERAL_SUFFIX.sub(b"", prefix) + b'"' + literal + b'"'
    if isinstance(line, (bytes, bytearray)):
        return bytes(line).decode("utf-8", errors="replace")
    return str(line)


def _join(lines) -> str:
    return " ".join(_decode(line) for line in lines if line is not None)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return value


def _quote(name: str) -> str:
    """命令参数中的文件夹名总是加引号"""
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def parse_list_line(line: str) -> Optional[Tuple[Tuple[str, ...], Optional[str], str]]:
    """
    解析 LIST 响应行

    Returns:
        (flags, delimiter, name)，无法解析时返回 None
    """
    match = _LIST_LINE.match(line.strip())
    if not match:
        return None

    flags = tuple(match.group("flags").split())
    delimiter = match.group("delimiter")
    delimiter = None if delimiter == "NIL" else _unquote(delimiter)
    return flags, delimiter, _unquote(match.group("name"))


def extract_literal(data) -> Tuple[Optional[bytes], Optional[int]]:
    """
    从 FETCH 响应中取出字面量数据和 UID

    imaplib 把带字面量的响应表示为 (前缀, 数据) 元组，例如
    [(b'1 (UID 42 BODY[HEADER] {120}', b'Subject: ...'), b')']
    """
    literal: Optional[bytes] = None
    uid: Optional[int] = None

    for item in data:
        if isinstance(item, tuple):
            prefix, payload = item[0], item[1]
            if literal is None:
                literal = bytes(payload)
        else:
            prefix = item
        if isinstance(prefix, bytes) and uid is None:
            match = _FETCH_UID.search(prefix)
            if match:
                uid = int(match.group(1))

    return literal, uid


class ImapMailFolder(MailFolder):
    """
    IMAP 文件夹

    文件夹以只读方式（EXAMINE）打开，索引从 0 开始，对应 IMAP 序号 index + 1。
    """

    def __init__(
        self,
        store: "ImapMailStore",
        name: str,
        flags: Tuple[str, ...] = (),
        delimiter: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._store = store
        self._name = name
        self._flags = flags
        self._delimiter = delimiter
        self._logger = logger or logging.getLogger(__name__)
        self._is_open = False
        self._count = 0
        self._unread = 0
        self._recent = 0
        self._unique_ids: Dict[int, int] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def display_name(self) -> str:
        """不含父路径的文件夹名"""
        if self._delimiter and self._delimiter in self._name:
            return self._name.rsplit(self._delimiter, 1)[-1]
        return self._name

    @property
    def flags(self) -> Tuple[str, ...]:
        return self._flags

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def count(self) -> int:
        return self._count

    @property
    def unread(self) -> int:
        return self._unread

    @property
    def recent(self) -> int:
        return self._recent

    @property
    def selectable(self) -> bool:
        return "\\Noselect" not in self._flags and "\\NonExistent" not in self._flags

    async def open(self, read_only: bool = True) -> int:
        typ, data = await self._store.execute(
            "open", lambda imap: imap.select(_quote(self._name), readonly=read_only)
        )
        if typ != "OK":
            raise MailServiceException(
                f"Failed to open folder {self._name}: {_join(data)}",
                self._store.host,
                self._store.port,
            )

        self._count = int(data[0] or 0)
        _, recent = await self._store.execute("open", lambda imap: imap.response("RECENT"))
        self._recent = int(recent[-1] or 0) if recent else 0

        self._is_open = True
        self._unique_ids.clear()
        self._logger.debug(f"Opened folder {self._name} with {self._count} message(s)")
        return self._count

    async def refresh_status(self) -> None:
        """通过 STATUS 命令刷新计数，不打开文件夹"""
        typ, data = await self._store.execute(
            "status", lambda imap: imap.status(_quote(self._name), "(MESSAGES UNSEEN RECENT)")
        )
        if typ != "OK":
            self._logger.warning(f"STATUS failed for folder {self._name}")
            return

        for key, value in _STATUS_ITEM.findall(_join(data)):
            if key == "MESSAGES":
                self._count = int(value)
            elif key == "UNSEEN":
                self._unread = int(value)
            else:
                self._recent = int(value)

    async def get_headers(
        self, index: int, progress: Optional[TransferProgress] = None
    ) -> Message:
        data = await self._fetch(index, HEADER_FETCH_ITEMS, progress)
        return BytesParser(policy=policy.default).parsebytes(data, headersonly=True)

    async def get_message(
        self, index: int, progress: Optional[TransferProgress] = None
    ) -> EmailMessage:
        data = await self._fetch(index, MESSAGE_FETCH_ITEMS, progress)
        return BytesParser(policy=policy.default).parsebytes(data)

    def get_unique_id(self, index: int) -> Optional[int]:
        return self._unique_ids.get(index)

    async def _fetch(
        self, index: int, items: str, progress: Optional[TransferProgress]
    ) -> bytes:
        if not self._is_open:
            raise InvalidOperationException(
                operation="fetch",
                reason=f"Folder {self._name} is not open",
            )

        typ, data = await self._store.execute(
            "fetch", lambda imap: imap.fetch(str(index + 1), items)
        )
        if typ != "OK":
            raise MailServiceException(
                f"Failed to fetch message {index} from {self._name}",
                self._store.host,
                self._store.port,
            )

        literal, uid = extract_literal(data)
        if literal is None:
            raise MailServiceException(
                f"Message {index} not found in {self._name}",
                self._store.host,
                self._store.port,
            )

        if uid is not None:
            self._unique_ids[index] = uid
        if progress is not None:
            progress.report(len(literal), len(literal))
        return literal

    def __repr__(self) -> str:
        return f"ImapMailFolder(name={self._name!r}, count={self._count})"


class ImapMailStore(MailStore):
    """
    IMAP 收件客户端

    imaplib 是阻塞实现，所有命令都在线程池中执行。
    use_ssl=True 时使用 IMAP4_SSL；否则服务器支持时使用 STARTTLS 升级。
    """

    DEFAULT_PORT = 143
    DEFAULT_SSL_PORT = 993
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)
        self._imap: Optional[imaplib.IMAP4] = None
        self._inbox: Optional[ImapMailFolder] = None
        self.host: Optional[str] = None
        self.port: Optional[int] = None

    @property
    def is_connected(self) -> bool:
        return self._imap is not None

    @property
    def inbox(self) -> MailFolder:
        self.require_client("inbox")
        if self._inbox is None:
            self._inbox = ImapMailFolder(self, SpecialFolder.INBOX.value, logger=self._logger)
        return self._inbox

    async def connect(
        self,
        host: str,
        port: int,
        use_ssl: bool,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> None:
        port = port or (self.DEFAULT_SSL_PORT if use_ssl else self.DEFAULT_PORT)
        self.host, self.port = host, port

        self._logger.debug(f"Connecting to IMAP server {host}:{port} (use_ssl={use_ssl})")
        try:
            if use_ssl:
                imap = await self._run(
                    partial(
                        imaplib.IMAP4_SSL,
                        host,
                        port,
                        ssl_context=ssl_context,
                        timeout=self._timeout,
                    )
                )
            else:
                imap = await self._run(partial(imaplib.IMAP4, host, port, timeout=self._timeout))
                await self._start_tls(imap, ssl_context)
        except ssl.SSLError as e:
            raise MailTlsException(f"TLS handshake failed: {e}", host, port) from e
        except imaplib.IMAP4.error as e:
            raise MailConnectionException(f"Unexpected server greeting: {e}", host, port) from e
        except OSError as e:
            raise MailConnectionException(f"Failed to connect: {e}", host, port) from e

        self._imap = imap
        self._logger.info(f"Connected to IMAP server {host}:{port}")

    async def _start_tls(self, imap: imaplib.IMAP4, ssl_context: Optional[ssl.SSLContext]) -> None:
        if "STARTTLS" not in imap.capabilities:
            return

        try:
            await self._run(partial(imap.starttls, ssl_context=ssl_context))
        except imaplib.IMAP4.error as e:
            raise MailTlsException(f"STARTTLS failed: {e}", self.host, self.port) from e
        self._logger.debug("IMAP connection upgraded with STARTTLS")

    async def authenticate(self, user_name: Optional[str], password: Optional[str]) -> None:
        imap = self.require_client("authenticate")
        self._logger.debug(f"Authenticating to IMAP server as {user_name}")
        try:
            await self._run(partial(imap.login, user_name or "", password or ""))
        except imaplib.IMAP4.error as e:
            raise MailAuthenticationException(
                f"IMAP login failed: {e}", self.host, self.port
            ) from e

    async def disconnect(self, quit: bool = True) -> None:
        imap, self._imap = self._imap, None
        self._inbox = None
        if imap is None:
            return

        if quit:
            await self._run(imap.logout)
        else:
            await self._run(imap.shutdown)
        self._logger.debug(f"Disconnected from IMAP server {self.host}:{self.port}")

    async def get_folder(self, special_folder: SpecialFolder) -> MailFolder:
        if special_folder == SpecialFolder.INBOX:
            return self.inbox

        for folder in await self._list():
            if special_folder.value in folder.flags:
                return folder

        raise UnsupportedOperationException(
            f"The server does not provide a {special_folder.name.lower()} folder"
        )

    async def list_folders(self) -> List[MailFolder]:
        folders: List[MailFolder] = []
        for folder in await self._list():
            if folder.selectable:
                await folder.refresh_status()
            folders.append(folder)
        return folders

    async def _list(self) -> List[ImapMailFolder]:
        typ, data = await self.execute("list", lambda imap: imap.list())
        if typ != "OK":
            raise MailServiceException("Failed to list folders", self.host, self.port)

        folders: List[ImapMailFolder] = []
        for line in data:
            if line is None:
                continue
            parsed = parse_list_line(_decode(line))
            if parsed is None:
                continue
            flags, delimiter, name = parsed
            if name.upper() == SpecialFolder.INBOX.value:
                folders.append(self.inbox)
                continue
            folders.append(ImapMailFolder(self, name, flags, delimiter, logger=self._logger))
        return folders

    async def execute(self, operation: str, command: Callable[[imaplib.IMAP4], T]) -> T:
        """
        在线程池中对当前连接执行 imaplib 命令

        Raises:
            InvalidOperationException: 未连接
            MailServiceException: 服务器返回 BAD 或连接中断
        """
        imap = self.require_client(operation)
        try:
            return await self._run(partial(command, imap))
        except imaplib.IMAP4.error as e:
            raise MailServiceException(f"IMAP {operation} failed: {e}", self.host, self.port) from e
        except OSError as e:
            raise MailConnectionException(
                f"IMAP connection lost during {operation}: {e}", self.host, self.port
            ) from e

    async def _run(self, func: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    def require_client(self, operation: str) -> imaplib.IMAP4:
        if self._imap is None:
            raise InvalidOperationException(
                operation=operation,
                reason="IMAP client is not connected",
            )
        return self._imap
