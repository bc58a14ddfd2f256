"""
Tests for middleware modules
"""

import json
import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from slowapi.util import get_remote_address
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from search_dashboard.middleware.logging import (
    RequestIdFilter,
    StructuredFormatter,
    StructuredLoggingMiddleware,
    request_id_var,
    setup_structured_logging,
)
from search_dashboard.middleware.rate_limit import configure_rate_limiting, limiter
from search_dashboard.middleware.security_headers import DEFAULT_CSP, SecurityHeadersMiddleware


def _make_app(**security_options) -> FastAPI:
    app = FastAPI()

    @app.get("/test")
    async def test_route():
        return {"message": "test"}

    app.add_middleware(SecurityHeadersMiddleware, **security_options)
    app.add_middleware(StructuredLoggingMiddleware)
    return app


class TestSecurityHeadersMiddleware:
    """Test security headers middleware"""

    def test_security_headers_present(self):
        response = TestClient(_make_app(enable_hsts=False)).get("/test")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Content-Security-Policy"] == DEFAULT_CSP
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert "camera=()" in response.headers["Permissions-Policy"]
        assert "Strict-Transport-Security" not in response.headers

    def test_hsts_when_enabled(self):
        response = TestClient(_make_app(enable_hsts=True)).get("/test")

        assert response.headers["Strict-Transport-Security"] == "max-age=31536000; includeSubDomains; preload"

    def test_csp_allows_chart_library(self):
        assert "https://cdn.jsdelivr.net" in DEFAULT_CSP

    def test_headers_on_application_responses(self, client):
        response = client.get("/admin/login")

        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in response.headers


class TestStructuredLoggingMiddleware:
    """Test request ID propagation and access logging"""

    def test_request_id_generated(self):
        response = TestClient(_make_app()).get("/test")

        assert len(response.headers["X-Request-ID"]) == 36

    def test_request_id_echoed(self):
        response = TestClient(_make_app()).get("/test", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_access_line_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="search_dashboard.access"):
            TestClient(_make_app()).get("/test")

        records = [r for r in caplog.records if r.name == "search_dashboard.access"]
        assert len(records) == 1
        assert records[0].status_code == 200
        assert records[0].client_ip == "testclient"
        assert "GET /test - 200" in records[0].getMessage()

    def test_forwarded_for_from_untrusted_peer_ignored(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="search_dashboard.access"):
            client.get("/admin/login", headers={"X-Forwarded-For": "203.0.113.7"})

        records = [r for r in caplog.records if r.name == "search_dashboard.access"]
        assert records[-1].client_ip == "testclient"

    def test_logged_address_matches_rate_limit_key(self, caplog):
        app = FastAPI()

        @app.get("/whoami")
        async def whoami(request: Request):
            return {"key": get_remote_address(request)}

        app.add_middleware(StructuredLoggingMiddleware)
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

        with caplog.at_level(logging.INFO, logger="search_dashboard.access"):
            response = TestClient(app).get("/whoami", headers={"X-Forwarded-For": "203.0.113.7"})

        records = [r for r in caplog.records if r.name == "search_dashboard.access"]
        assert response.json() == {"key": "203.0.113.7"}
        assert records[-1].client_ip == "203.0.113.7"

    def test_health_checks_not_logged(self, client, caplog, monkeypatch):
        from search_dashboard.routes import monitoring

        async def healthy():
            return {"status": "healthy", "message": "ok"}

        monkeypatch.setattr(monitoring, "check_database", healthy)

        with caplog.at_level(logging.INFO, logger="search_dashboard.access"):
            client.get("/live")
            client.get("/ready")

        assert not [r for r in caplog.records if r.name == "search_dashboard.access"]

    @pytest.mark.asyncio
    async def test_authenticated_user_logged(self, admin_client, caplog, setup_test_database):
        with caplog.at_level(logging.INFO, logger="search_dashboard.access"):
            admin_client.get("/api/stats")

        records = [r for r in caplog.records if r.name == "search_dashboard.access"]
        assert records[-1].user == "admin@example.com"


class TestStructuredFormatter:
    def test_json_output(self):
        record = logging.LogRecord("search_dashboard.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
        record.request_id = "req-1"
        record.path = "/api/stats"
        record.status_code = 401

        output = json.loads(StructuredFormatter().format(record))

        assert output["message"] == "hello world"
        assert output["level"] == "WARNING"
        assert output["request_id"] == "req-1"
        assert output["path"] == "/api/stats"
        assert output["status_code"] == 401
        assert "user" not in output

    def test_request_id_filter(self):
        token = request_id_var.set("req-filter")
        try:
            record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", (), None)
            assert RequestIdFilter().filter(record) is True
            assert record.request_id == "req-filter"
        finally:
            request_id_var.reset(token)


class TestLoggingSetup:
    @pytest.fixture
    def restore_root_handlers(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_file_handlers_created(self, tmp_path, restore_root_handlers):
        setup_structured_logging(log_level="info", json_format=True, log_dir=str(tmp_path / "logs"))

        logging.getLogger("search_dashboard.test").error("disk check")
        for handler in logging.getLogger().handlers:
            handler.flush()

        combined = (tmp_path / "logs" / "combined.log").read_text()
        errors = (tmp_path / "logs" / "error.log").read_text()
        assert json.loads(combined.splitlines()[-1])["message"] == "disk check"
        assert "disk check" in errors

    def test_error_log_only_has_errors(self, tmp_path, restore_root_handlers):
        setup_structured_logging(log_level="INFO", json_format=False, log_dir=str(tmp_path))

        logging.getLogger("search_dashboard.test").info("just info")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "just info" in (tmp_path / "combined.log").read_text()
        assert "just info" not in (tmp_path / "error.log").read_text()


class TestRateLimitConfiguration:
    def test_limiter_installed(self):
        app = FastAPI()
        configure_rate_limiting(app)

        assert app.state.limiter is limiter

    def test_limiter_disabled_in_tests(self):
        assert limiter.enabled is False
