"""邮件 API 路由"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from domain.common.exceptions import (
    MailServiceException,
    MessageIndexOutOfRangeException,
    UnsupportedOperationException,
)
from domain.mail.services.configured_email_service import ConfiguredEmailService
from domain.mail.services.email_client_service import EmailClientService
from domain.mail.value_objects.header_summary import HeaderSummary
from interfaces.api.dependencies import (
    get_configured_email_service,
    get_email_client_service,
)


router = APIRouter(prefix="/mail", tags=["Mail"])


# ============ Request/Response DTOs ============

class SendEmailRequest(BaseModel):
    """
    发送邮件请求

    Attributes:
        from_email: 发件人，逗号或分号分隔
        to_email: 收件人，逗号或分号分隔
        subject: 主题
        body: HTML 正文
    """

    from_email: str = Field(..., description="发件人", min_length=1)
    to_email: str = Field(..., description="收件人", min_length=1)
    subject: str = Field(default="", description="主题")
    body: str = Field(default="", description="HTML 正文")


class SendEmailResponse(BaseModel):
    """发送结果"""

    success: bool = Field(..., description="是否发送成功")
    error: Optional[str] = Field(default=None, description="失败原因")


class MessageCountResponse(BaseModel):
    """邮件数"""

    count: int = Field(..., description="收件箱邮件数")


class HeaderSummaryResponse(BaseModel):
    """邮件头摘要"""

    index: int = Field(..., description="邮件索引")
    unique_id: Optional[int] = Field(default=None, description="服务器唯一标识")
    message_id: str = Field(default="", description="Message-ID")
    subject: str = Field(default="", description="主题")
    from_name: str = Field(default="", description="发件人名称")
    from_address: str = Field(default="", description="发件人地址")
    to_address: str = Field(default="", description="收件人地址")
    date: str = Field(default="", description="展示日期")

    @classmethod
    def from_summary(cls, summary: HeaderSummary) -> "HeaderSummaryResponse":
        return cls(
            index=summary.message_index,
            unique_id=summary.unique_id,
            message_id=summary.message_id,
            subject=summary.subject,
            from_name=summary.from_name_or_address,
            from_address=summary.from_address,
            to_address=summary.to_address,
            date=summary.friendly_date(),
        )


class FolderResponse(BaseModel):
    """文件夹信息"""

    name: str = Field(..., description="文件夹名称")
    display_name: Optional[str] = Field(default=None, description="展示名称")
    count: int = Field(default=0, description="邮件总数")
    unread: int = Field(default=0, description="未读数")
    recent: int = Field(default=0, description="最近投递数")


def _mail_error(e: MailServiceException) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"message": e.message, "error_code": e.code},
    )


# ============ API Endpoints ============

@router.post("/send", response_model=SendEmailResponse)
async def send_email(
    request: SendEmailRequest,
    service: ConfiguredEmailService = Depends(get_configured_email_service),
) -> SendEmailResponse:
    """发送一封 HTML 邮件，失败原因在响应中返回"""
    success = await service.send_email(
        request.from_email, request.to_email, request.subject, request.body
    )
    error = None if success or service.last_error is None else str(service.last_error)
    return SendEmailResponse(success=success, error=error)


@router.get("/count", response_model=MessageCountResponse)
async def count_messages(
    service: EmailClientService = Depends(get_email_client_service),
) -> MessageCountResponse:
    """收件箱邮件数"""
    try:
        return MessageCountResponse(count=await service.count_messages())
    except MailServiceException as e:
        raise _mail_error(e)


@router.get("/headers", response_model=List[HeaderSummaryResponse])
async def list_headers(
    start: int = Query(default=0, ge=0, description="起始索引"),
    end: int = Query(default=-1, description="结束索引（不包含），<= 0 表示到末尾"),
    service: EmailClientService = Depends(get_email_client_service),
) -> List[HeaderSummaryResponse]:
    """按索引范围列出收件箱邮件头"""
    summaries: List[HeaderSummaryResponse] = []
    try:
        await service.receive_headers(
            lambda summary: summaries.append(HeaderSummaryResponse.from_summary(summary)),
            start_index=start,
            end_index=end,
        )
    except MessageIndexOutOfRangeException as e:
        raise HTTPException(
            status_code=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            detail=e.message,
        )
    except MailServiceException as e:
        raise _mail_error(e)
    return summaries


@router.get("/folders", response_model=List[FolderResponse])
async def list_folders(
    service: EmailClientService = Depends(get_email_client_service),
) -> List[FolderResponse]:
    """列出文件夹（仅 IMAP）"""
    try:
        folders = await service.list_folders()
    except UnsupportedOperationException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except MailServiceException as e:
        raise _mail_error(e)

    return [
        FolderResponse(
            name=folder.name,
            display_name=folder.display_name,
            count=folder.count,
            unread=folder.unread,
            recent=folder.recent,
        )
        for folder in sorted(folders)
    ]
