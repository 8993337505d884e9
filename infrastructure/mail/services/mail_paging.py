"""
分页与迭代工具

在已连接的收件客户端上按索引范围接收邮件头或完整邮件。范围规则：
- 每次调用前重新读取邮件数（两次调用之间可能变化）
- start_index 必须满足 0 <= start_index < count，否则在任何获取之前抛出越界异常
- end_index <= 0 或 >= count 时取 count
- 回调返回真值时在当前索引处结束迭代（当前索引已被处理）
- 返回值为 end_index - start_index，而不是实际访问的数量
"""

import inspect
from email.message import EmailMessage
from typing import Any, List, Optional, Tuple

from domain.common.exceptions import (
    MessageIndexOutOfRangeException,
    UnsupportedOperationException,
)
from domain.mail.services.email_client_service import HeadersCallback, MessageCallback
from domain.mail.services.mail_clients import (
    MailFolder,
    MailSpool,
    MailStore,
    TransferProgress,
)
from domain.mail.value_objects.header_summary import HeaderSummary
from domain.mail.value_objects.received_message import ReceivedMessage
from domain.mail.value_objects.special_folder import SpecialFolder


def resolve_range(
    count: int, start_index: int, end_index: int, parameter: str = "start_index"
) -> Tuple[int, int]:
    """
    计算有效的 [start, end) 范围

    Raises:
        MessageIndexOutOfRangeException: start_index 越界
    """
    if start_index < 0 or start_index >= count:
        raise MessageIndexOutOfRangeException(start_index, count, parameter)

    if end_index <= 0 or end_index >= count:
        end_index = count
    return start_index, end_index


async def invoke_callback(callback, item: Any) -> bool:
    """调用同步或异步回调，返回是否需要结束迭代"""
    result = callback(item)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


async def open_folder(
    store: MailStore, folder: Optional[SpecialFolder] = None
) -> MailFolder:
    """获取文件夹（默认收件箱）并以只读方式打开"""
    mail_folder = store.inbox if folder is None else await store.get_folder(folder)
    if not mail_folder.is_open:
        await mail_folder.open(read_only=True)
    return mail_folder


async def receive_folder_headers(
    mail_folder: MailFolder,
    callback: HeadersCallback,
    start_index: int = 0,
    end_index: int = -1,
    progress: Optional[TransferProgress] = None,
) -> int:
    """在已打开的文件夹上接收邮件头"""
    count = mail_folder.count
    start, end = resolve_range(count, start_index, end_index)

    for index in range(start, end):
        headers = await mail_folder.get_headers(index, progress)
        summary = HeaderSummary(
            message_index=index,
            message_count=count,
            headers=headers,
            unique_id=mail_folder.get_unique_id(index),
        )
        if await invoke_callback(callback, summary):
            break

    return end - start


async def receive_spool_headers(
    spool: MailSpool,
    callback: HeadersCallback,
    start_index: int = 0,
    end_index: int = -1,
    progress: Optional[TransferProgress] = None,
) -> int:
    """
    在邮件池上接收邮件头

    Raises:
        UnsupportedOperationException: 请求了进度报告
    """
    if progress is not None:
        raise UnsupportedOperationException(
            "Progress reporting is not supported when receiving headers from a mail spool"
        )

    await spool.refresh_count()
    count = spool.count
    start, end = resolve_range(count, start_index, end_index)

    for index in range(start, end):
        headers = await spool.get_message_headers(index)
        summary = HeaderSummary(message_index=index, message_count=count, headers=headers)
        if await invoke_callback(callback, summary):
            break

    return end - start


async def receive_folder_messages(
    mail_folder: MailFolder,
    callback: MessageCallback,
    start_index: int = 0,
    end_index: int = -1,
    progress: Optional[TransferProgress] = None,
) -> int:
    """在已打开的文件夹上接收完整邮件"""
    count = mail_folder.count
    start, end = resolve_range(count, start_index, end_index)

    for index in range(start, end):
        message = await mail_folder.get_message(index, progress)
        if await invoke_callback(callback, ReceivedMessage(index, count, message)):
            break

    return end - start


async def receive_spool_messages(
    spool: MailSpool,
    callback: MessageCallback,
    start_index: int = 0,
    end_index: int = -1,
    progress: Optional[TransferProgress] = None,
) -> int:
    """在邮件池上接收完整邮件"""
    await spool.refresh_count()
    count = spool.count
    start, end = resolve_range(count, start_index, end_index)

    for index in range(start, end):
        message = await spool.get_message(index, progress)
        if await invoke_callback(callback, ReceivedMessage(index, count, message)):
            break

    return end - start


async def receive_folder_header(
    mail_folder: MailFolder,
    index: int,
    progress: Optional[TransferProgress] = None,
) -> HeaderSummary:
    """接收文件夹中单封邮件的头部"""
    count = mail_folder.count
    resolve_range(count, index, -1, parameter="index")

    headers = await mail_folder.get_headers(index, progress)
    return HeaderSummary(
        message_index=index,
        message_count=count,
        headers=headers,
        unique_id=mail_folder.get_unique_id(index),
    )


async def receive_spool_header(spool: MailSpool, index: int) -> HeaderSummary:
    """接收邮件池中单封邮件的头部"""
    await spool.refresh_count()
    count = spool.count
    resolve_range(count, index, -1, parameter="index")

    headers = await spool.get_message_headers(index)
    return HeaderSummary(message_index=index, message_count=count, headers=headers)


async def get_folder_messages(
    mail_folder: MailFolder, progress: Optional[TransferProgress] = None
) -> List[EmailMessage]:
    """接收文件夹中的全部邮件"""
    return [await mail_folder.get_message(index, progress) for index in range(mail_folder.count)]


async def get_spool_messages(
    spool: MailSpool, progress: Optional[TransferProgress] = None
) -> List[EmailMessage]:
    """接收邮件池中的全部邮件"""
    await spool.refresh_count()
    return [await spool.get_message(index, progress) for index in range(spool.count)]
