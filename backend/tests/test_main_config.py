"""Unit tests for settings parsing and app wiring in main.py."""

import pytest
from pydantic import ValidationError

from models.config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(SECRET_KEY="k")
        assert settings.MERGE_SESSION_TTL_MINUTES == 30
        assert settings.RESET_CODE_EXPIRY_MINUTES == 15
        assert settings.RESET_CODE_LENGTH == 6
        assert settings.PASSWORD_MIN_LENGTH == 6
        assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 30 * 24 * 60
        assert settings.EXPOSE_RESET_CODE is False

    def test_cors_origins_comma_separated(self):
        settings = Settings(
            SECRET_KEY="k", CORS_ORIGINS="http://a.test, http://b.test"
        )
        assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]

    def test_country_code_plus_stripped(self):
        assert Settings(SECRET_KEY="k", PHONE_COUNTRY_CODE="+44").PHONE_COUNTRY_CODE == "44"

    def test_country_code_must_be_digits(self):
        with pytest.raises(ValidationError):
            Settings(SECRET_KEY="k", PHONE_COUNTRY_CODE="IN")

    def test_secret_key_required(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        with pytest.raises(ValidationError):
            Settings()  # type: ignore[call-arg]


class TestAppWiring:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_routes_mounted_under_api(self, client):
        paths = {route.path for route in client.app.routes}
        assert "/api/auth/login" in paths
        assert "/api/auth/merge-accounts" in paths
        assert "/api/auth/reset-password" in paths
        assert "/api/admin/password-status/{account_id}" in paths
