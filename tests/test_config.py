"""Tests for Settings: cookie secrets must come from the environment."""

import pytest
from pydantic import ValidationError

from teaminsight.config import Settings


def test_missing_session_secrets_fail_validation(monkeypatch):
    monkeypatch.delenv("TEAM_SESSION_SECRET", raising=False)
    monkeypatch.delenv("LECTURER_SESSION_SECRET", raising=False)
    with pytest.raises(ValidationError) as exc:
        Settings(_env_file=None)
    fields = {err["loc"][0] for err in exc.value.errors()}
    assert fields == {"team_session_secret", "lecturer_session_secret"}


def test_placeholder_team_secret_is_rejected(monkeypatch):
    monkeypatch.setenv("TEAM_SESSION_SECRET", "change-me-team")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_blank_lecturer_secret_is_rejected(monkeypatch):
    monkeypatch.setenv("LECTURER_SESSION_SECRET", "   ")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_secrets_read_from_environment(monkeypatch):
    monkeypatch.setenv("TEAM_SESSION_SECRET", "team-key-from-env")
    monkeypatch.setenv("LECTURER_SESSION_SECRET", "lecturer-key-from-env")
    settings = Settings(_env_file=None)
    assert settings.team_session_secret == "team-key-from-env"
    assert settings.lecturer_session_secret == "lecturer-key-from-env"
    assert settings.session_token_algorithm == "HS256"
