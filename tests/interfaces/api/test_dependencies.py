"""FastAPI 依赖与应用工厂测试"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from application.mail.services.configured_email_sender import ConfiguredEmailSender
from infrastructure.config.settings import Settings
from infrastructure.containers import bootstrap
from infrastructure.mail.services.configured_email_service_impl import ConfiguredEmailServiceImpl
from infrastructure.mail.services.pop3_client_service_impl import Pop3ClientServiceImpl
from interfaces.api import create_app
from interfaces.api import dependencies
from interfaces.api.dependencies import (
    get_configured_email_service,
    get_email_client_service,
    get_email_sender,
    reset_getters,
    set_email_sender_getter,
    wire_container,
)


@pytest.fixture(autouse=True)
def clean_getters():
    """每个测试前后清除获取器"""
    reset_getters()
    yield
    reset_getters()


def create_settings(**values) -> Settings:
    values.setdefault("mail_host", "mail.example.com")
    return Settings(_env_file=None, **values)


class TestGetters:
    """服务获取器测试"""

    @pytest.mark.parametrize(
        "getter",
        [get_email_client_service, get_configured_email_service, get_email_sender],
    )
    def test_unset_getter_is_unavailable(self, getter):
        """测试未设置获取器时返回 503"""
        with pytest.raises(HTTPException) as exc_info:
            getter()

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail.endswith("is not configured")

    def test_set_getter(self):
        """测试设置获取器"""
        sender = object()
        set_email_sender_getter(lambda: sender)

        assert get_email_sender() is sender

    def test_wire_container(self):
        """测试连接 DI 容器的 Provider"""
        wire_container(bootstrap(create_settings(mail_incoming_protocol="pop3")))

        assert isinstance(get_email_client_service(), Pop3ClientServiceImpl)
        assert isinstance(get_configured_email_service(), ConfiguredEmailServiceImpl)
        assert isinstance(get_email_sender(), ConfiguredEmailSender)

    def test_reset_getters(self):
        """测试清除获取器"""
        wire_container(bootstrap(create_settings()))

        reset_getters()

        assert dependencies._email_sender_getter is None
        with pytest.raises(HTTPException):
            get_email_client_service()


class TestCreateApp:
    """应用工厂测试"""

    def test_health(self):
        """测试健康检查与应用元数据"""
        boot = bootstrap(create_settings(app_name="MailTest", app_version="2.0.0"))

        app = create_app(boot)
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert app.title == "MailTest"
        assert app.version == "2.0.0"
        assert app.state.bootstrap is boot

    def test_routes_are_registered(self):
        """测试注册邮件路由"""
        app = create_app(bootstrap(create_settings()))

        paths = {route.path for route in app.routes}

        assert {"/api/v1/mail/send", "/api/v1/mail/count", "/api/v1/mail/headers", "/api/v1/mail/folders"} <= paths
