"""Settings parsing and startup validation."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from showcase.config import Settings


def test_lists_are_split_and_trimmed():
    s = Settings(admin_roles="admin, editor ,", cors_origins="http://a.test, http://b.test")
    assert s.admin_roles_list == ["admin", "editor"]
    assert s.cors_origins_list == ["http://a.test", "http://b.test"]


def test_log_level_is_upper_cased():
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_bad_log_level_rejected():
    with pytest.raises(PydanticValidationError):
        Settings(log_level="chatty")


def test_token_ttl_must_be_positive():
    with pytest.raises(PydanticValidationError):
        Settings(token_ttl_minutes=0)
    assert Settings(token_ttl_minutes=15).token_ttl_minutes == 15


def test_bootstrap_password_checked_when_email_set():
    with pytest.raises(ValueError, match="BOOTSTRAP_ADMIN_PASSWORD"):
        Settings(bootstrap_admin_email="root@example.com", bootstrap_admin_password="123").validate_required_for_production()

    Settings(
        bootstrap_admin_email="root@example.com", bootstrap_admin_password="long-enough"
    ).validate_required_for_production()


def test_empty_admin_roles_flagged():
    with pytest.raises(ValueError, match="ADMIN_ROLES"):
        Settings(admin_roles=" , ").validate_required_for_production()
