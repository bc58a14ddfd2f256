"""
Tests for custom exception classes and the global exception handlers

Tests exception initialization, status codes and details, and the JSON
error format produced by the handlers in and outside production.
"""

import pytest
from fastapi import FastAPI, HTTPException, status
from fastapi.testclient import TestClient

from search_dashboard.config import settings
from search_dashboard.exception_handlers import (
    GENERIC_SERVER_ERROR,
    create_error_response,
    get_error_type,
    get_http_error_code,
    register_exception_handlers,
)
from search_dashboard.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DashboardError,
    ErrorCode,
    LoginRedirect,
    StorageUnavailableError,
)


class TestDashboardError:
    """Test base DashboardError class"""

    def test_defaults(self):
        exc = DashboardError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {}
        assert exc.error_code == ErrorCode.INTERNAL_ERROR

    def test_custom_values(self):
        exc = DashboardError("Teapot", status_code=418, details={"brew": "tea"}, error_code=ErrorCode.UNKNOWN_ERROR)
        assert exc.status_code == 418
        assert exc.details == {"brew": "tea"}
        assert exc.error_code == ErrorCode.UNKNOWN_ERROR


class TestSpecificErrors:
    def test_configuration_error(self):
        exc = ConfigurationError(problems=["secret_key: too short"])
        assert exc.message == "Invalid configuration"
        assert exc.error_code == ErrorCode.CONFIGURATION_INVALID
        assert exc.details == {"problems": ["secret_key: too short"]}
        assert isinstance(exc, DashboardError)

    def test_configuration_error_without_problems(self):
        assert ConfigurationError("Admin credentials not configured").details == {}

    def test_authentication_error(self):
        exc = AuthenticationError()
        assert exc.message == "Unauthorized"
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc.error_code == ErrorCode.AUTH_REQUIRED

    def test_storage_unavailable_error(self):
        exc = StorageUnavailableError(operation="timeline", reason="connection reset")
        assert exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert exc.error_code == ErrorCode.STORAGE_UNAVAILABLE
        assert exc.details == {"operation": "timeline", "reason": "connection reset"}

    def test_login_redirect_is_not_an_error_response(self):
        exc = LoginRedirect("/admin/login?next=/dashboard")
        assert exc.location == "/admin/login?next=/dashboard"
        assert not isinstance(exc, DashboardError)


class TestErrorResponseHelpers:
    def test_error_types(self):
        assert get_error_type(401) == "Unauthorized"
        assert get_error_type(503) == "Service Unavailable"
        assert get_error_type(418) == "Error"

    def test_http_error_codes(self):
        assert get_http_error_code(404) == "RESOURCE_NOT_FOUND"
        assert get_http_error_code(429) == "RATE_LIMIT_EXCEEDED"
        assert get_http_error_code(418) == "UNKNOWN_ERROR"

    def test_create_error_response_shape(self):
        response = create_error_response(
            status_code=401,
            message="Unauthorized",
            error_code=ErrorCode.AUTH_REQUIRED,
            path="/api/stats",
        )
        assert response.status_code == 401
        assert response.body == (
            b'{"error":{"status_code":401,"message":"Unauthorized","type":"Unauthorized",'
            b'"error_code":"AUTH_REQUIRED","path":"/api/stats"}}'
        )

    def test_production_masks_server_errors(self, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")

        response = create_error_response(status_code=503, message="db password leaked", details={"reason": "x"})

        assert b"db password leaked" not in response.body
        assert GENERIC_SERVER_ERROR.encode() in response.body
        assert b"details" not in response.body

    def test_production_keeps_client_errors(self, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")

        response = create_error_response(status_code=401, message="Unauthorized")

        assert b"Unauthorized" in response.body


class TestExceptionHandlers:
    """Handlers registered on a small application"""

    @pytest.fixture
    def handler_client(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/storage")
        async def storage():
            raise StorageUnavailableError(operation="total", reason="connection refused")

        @app.get("/crash")
        async def crash():
            raise RuntimeError("boom")

        @app.get("/forbidden")
        async def forbidden():
            raise HTTPException(status_code=403, detail="Nope", headers={"X-Reason": "test"})

        @app.get("/redirect")
        async def redirect():
            raise LoginRedirect("/admin/login?next=/redirect")

        @app.get("/items")
        async def items(limit: int):
            return {"limit": limit}

        return TestClient(app, raise_server_exceptions=False)

    def test_dashboard_error(self, handler_client):
        response = handler_client.get("/storage")

        assert response.status_code == 503
        error = response.json()["error"]
        assert error["error_code"] == "STORAGE_UNAVAILABLE"
        assert error["details"] == {"operation": "total", "reason": "connection refused"}
        assert error["path"] == "/storage"

    def test_unhandled_exception(self, handler_client):
        response = handler_client.get("/crash")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["message"] == "RuntimeError: boom"
        assert error["error_code"] == "INTERNAL_ERROR"

    def test_unhandled_exception_in_production(self, handler_client, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")

        response = handler_client.get("/crash")

        assert response.status_code == 500
        assert response.json()["error"]["message"] == GENERIC_SERVER_ERROR
        assert "boom" not in response.text

    def test_http_exception(self, handler_client):
        response = handler_client.get("/forbidden")

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Nope"
        assert response.headers["X-Reason"] == "test"

    def test_login_redirect(self, handler_client):
        response = handler_client.get("/redirect", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/admin/login?next=/redirect"

    def test_validation_error(self, handler_client):
        response = handler_client.get("/items", params={"limit": "many"})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["error_code"] == "VALIDATION_FAILED"
        assert error["details"]["validation_errors"][0]["field"] == "query.limit"
