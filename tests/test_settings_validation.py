from __future__ import annotations

import pytest

from meeting_relay.settings import Settings
from tests.util_stubs import make_settings


def test_defaults_pass_with_warnings_only(monkeypatch):
    for name in ("WEBHOOK_SECRET", "OPENAI_API_KEY", "SLACK_WEBHOOK_URL", "REQUIRE_SIGNATURE", "SUMMARY_FAILURE_MODE"):
        monkeypatch.delenv(name, raising=False)

    messages = Settings(_env_file=None).validate_configuration()

    assert messages
    assert all(m.startswith("WARNING:") for m in messages)


def test_required_signature_without_secret_is_an_error():
    messages = make_settings(REQUIRE_SIGNATURE=True, WEBHOOK_SECRET="").validate_configuration()
    assert "ERROR: WEBHOOK_SECRET is required when REQUIRE_SIGNATURE=true" in messages


def test_unknown_failure_mode_fails_fast():
    settings = make_settings(SUMMARY_FAILURE_MODE="retry")
    assert any(m.startswith("ERROR: SUMMARY_FAILURE_MODE") for m in settings.validate_configuration())
    with pytest.raises(SystemExit):
        settings.validate_and_fail_fast()


def test_env_vars_are_read(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("REQUIRE_SIGNATURE", "true")
    monkeypatch.setenv("SIGNATURE_HEADER", "X-Meeting-Signature")

    settings = Settings(_env_file=None)

    assert settings.PORT == 8080
    assert settings.REQUIRE_SIGNATURE is True
    assert settings.signature_headers() == ["X-Meeting-Signature", "X-Hub-Signature-256"]
