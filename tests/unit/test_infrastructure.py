import os
from starlette.requests import Request

from app.core.config import Settings
from app.core.logging_config import build_logging_config
from app.core.request_context import get_client_ip, get_request_context


def make_request(headers=None, client=("203.0.113.9", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/hr/attendance/check-in",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestRequestContext:
    def test_forwarded_for_wins(self):
        request = make_request({"X-Forwarded-For": "10.1.1.1, 172.16.0.1", "X-Real-IP": "10.2.2.2"})
        assert get_client_ip(request) == "10.1.1.1"

    def test_real_ip_then_peer(self):
        assert get_client_ip(make_request({"X-Real-IP": "10.2.2.2"})) == "10.2.2.2"
        assert get_client_ip(make_request()) == "203.0.113.9"
        assert get_client_ip(make_request(client=None)) is None

    def test_context_fields(self):
        context = get_request_context(make_request({"User-Agent": "pytest", "X-Request-Id": "req-1"}))
        assert context == {
            "ip_address": "203.0.113.9",
            "user_agent": "pytest",
            "endpoint": "POST /api/v1/hr/attendance/check-in",
            "request_id": "req-1",
        }


class TestLoggingConfig:
    def test_handlers_per_category(self, tmp_path):
        config = build_logging_config(str(tmp_path), "DEBUG")
        assert config["handlers"]["error_file"]["level"] == "ERROR"
        assert config["handlers"]["audit_file"]["filename"].startswith(os.path.join(str(tmp_path), "audit"))
        assert config["loggers"]["access"]["propagate"] is False
        assert config["loggers"][""]["level"] == "DEBUG"


class TestSettings:
    def test_single_database_url(self):
        database_fields = [name for name in Settings.model_fields if name.startswith("DATABASE")]
        assert database_fields == ["DATABASE_URL"]
