"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from careflow.core.config import Settings


def make_settings(**overrides):
    values = {"DATABASE_URL": "postgresql://test", "JWT_SECRET_KEY": "test-key"}
    values.update(overrides)
    return Settings(**values)


def test_prod_settings_rejects_wildcard_origins():
    """Production requires explicit CORS origins"""
    settings = make_settings(JWT_SECRET_KEY="a" * 32, APP_ENV="prod", ALLOWED_ORIGINS="*")

    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        settings.validate_production()


def test_prod_settings_rejects_short_jwt_secret():
    settings = make_settings(JWT_SECRET_KEY="short", APP_ENV="prod", ALLOWED_ORIGINS="https://care.example.com")

    with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
        settings.validate_production()


def test_local_settings_allows_wildcard_origins():
    settings = make_settings(APP_ENV="local", ALLOWED_ORIGINS="*")

    settings.validate_production()  # Should pass for local
    assert settings.get_allowed_origins_list() == ["*"]


def test_get_allowed_origins_list():
    settings = make_settings(ALLOWED_ORIGINS="https://example.com, https://app.example.com,")

    assert settings.get_allowed_origins_list() == ["https://example.com", "https://app.example.com"]


def test_unknown_app_env_rejected():
    with pytest.raises(ValidationError):
        make_settings(APP_ENV="qa")


def test_log_level_normalised():
    assert make_settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_sync_defaults():
    settings = make_settings()

    assert settings.SYNC_MAX_RETRIES == 3
    assert settings.ROLE_MAPPING_CACHE_TTL_SECONDS == 300
    assert settings.DEFAULT_INTERNAL_ROLE == "Carer"
    assert settings.SYNC_SIGNATURE_HEADER == "X-NovumFlow-Signature"


def test_rule_admin_roles_parsed():
    settings = make_settings(RULE_ADMIN_ROLES="Admin, HR_Manager ,")

    assert settings.get_rule_admin_roles() == ["admin", "hr_manager"]
