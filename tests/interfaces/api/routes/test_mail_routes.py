"""邮件 API 路由测试"""

import pytest
from email.message import EmailMessage
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from domain.common.exceptions import (
    MailConnectionException,
    MessageIndexOutOfRangeException,
    UnsupportedOperationException,
)
from domain.mail.services.configured_email_service import ConfiguredEmailService
from domain.mail.services.email_client_service import EmailClientService
from domain.mail.value_objects.header_summary import HeaderSummary
from domain.mail.value_objects.mail_folder_info import MailFolderInfo
from interfaces.api.dependencies import (
    get_configured_email_service,
    get_email_client_service,
)
from interfaces.api.routes import mail_router


def create_summary(index: int) -> HeaderSummary:
    headers = EmailMessage()
    headers["Subject"] = f"Message {index}"
    headers["From"] = "Jane Doe <jane@example.com>"
    headers["To"] = "bob@example.com"
    headers["Message-ID"] = f"<{index}@example.com>"
    return HeaderSummary(message_index=index, message_count=3, headers=headers, unique_id=100 + index)


@pytest.fixture
def client_service() -> MagicMock:
    return MagicMock(spec=EmailClientService)


@pytest.fixture
def configured_service() -> MagicMock:
    return MagicMock(spec=ConfiguredEmailService)


@pytest.fixture
def client(client_service, configured_service) -> TestClient:
    app = FastAPI()
    app.include_router(mail_router, prefix="/api/v1")
    app.dependency_overrides[get_email_client_service] = lambda: client_service
    app.dependency_overrides[get_configured_email_service] = lambda: configured_service
    return TestClient(app)


class TestSendEndpoint:
    """POST /mail/send 测试"""

    def test_send_success(self, client, configured_service):
        """测试发送成功"""
        configured_service.send_email = AsyncMock(return_value=True)

        response = client.post("/api/v1/mail/send", json={
            "from_email": "a@x.com",
            "to_email": "b@x.com",
            "subject": "Hi",
            "body": "<p>Hi</p>",
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "error": None}
        configured_service.send_email.assert_awaited_once_with("a@x.com", "b@x.com", "Hi", "<p>Hi</p>")

    def test_send_failure_returns_reason(self, client, configured_service):
        """测试发送失败时返回错误描述"""
        configured_service.send_email = AsyncMock(return_value=False)
        configured_service.last_error = MailConnectionException(
            "The SMTP host smtp.example.com is not reachable."
        )

        response = client.post("/api/v1/mail/send", json={"from_email": "a@x.com", "to_email": "b@x.com"})

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "error": "The SMTP host smtp.example.com is not reachable.",
        }

    def test_send_validation_error(self, client):
        """测试缺少收件人时返回 422"""
        response = client.post("/api/v1/mail/send", json={"from_email": "a@x.com", "to_email": ""})

        assert response.status_code == 422


class TestReceiveEndpoints:
    """收件接口测试"""

    def test_count(self, client, client_service):
        """测试获取邮件数"""
        client_service.count_messages = AsyncMock(return_value=12)

        response = client.get("/api/v1/mail/count")

        assert response.status_code == 200
        assert response.json() == {"count": 12}

    def test_count_server_error(self, client, client_service):
        """测试服务器错误返回 502"""
        client_service.count_messages = AsyncMock(
            side_effect=MailConnectionException("unreachable", "imap.example.com", 993)
        )

        response = client.get("/api/v1/mail/count")

        assert response.status_code == 502
        assert response.json()["detail"]["error_code"] == "MAIL_CONNECTION_FAILED"

    def test_headers(self, client, client_service):
        """测试按范围列出邮件头"""

        async def receive_headers(callback, start_index=0, end_index=-1, **kwargs):
            for index in range(start_index, 3):
                callback(create_summary(index))
            return 3 - start_index

        client_service.receive_headers = AsyncMock(side_effect=receive_headers)

        response = client.get("/api/v1/mail/headers", params={"start": 1})

        assert response.status_code == 200
        body = response.json()
        assert [item["index"] for item in body] == [1, 2]
        assert body[0]["subject"] == "Message 1"
        assert body[0]["from_name"] == "Jane Doe"
        assert body[0]["from_address"] == "jane@example.com"
        assert body[0]["unique_id"] == 101
        assert client_service.receive_headers.await_args.kwargs["end_index"] == -1

    def test_headers_out_of_range(self, client, client_service):
        """测试起始索引越界返回 416"""
        client_service.receive_headers = AsyncMock(
            side_effect=MessageIndexOutOfRangeException(5, 3)
        )

        response = client.get("/api/v1/mail/headers", params={"start": 5})

        assert response.status_code == 416

    def test_folders_sorted_by_ordinal(self, client, client_service):
        """测试文件夹按序号排序返回"""
        client_service.list_folders = AsyncMock(return_value=[
            MailFolderInfo(name="Sent", count=2, ordinal=1),
            MailFolderInfo(name="INBOX", count=5, unread=1, ordinal=0),
        ])

        response = client.get("/api/v1/mail/folders")

        assert response.status_code == 200
        assert [folder["name"] for folder in response.json()] == ["INBOX", "Sent"]

    def test_folders_unsupported(self, client, client_service):
        """测试邮件池不支持文件夹时返回 400"""
        client_service.list_folders = AsyncMock(
            side_effect=UnsupportedOperationException("A mail spool has no folders")
        )

        response = client.get("/api/v1/mail/folders")

        assert response.status_code == 400
        assert response.json()["detail"] == "A mail spool has no folders"
