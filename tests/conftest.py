"""Root conftest - shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or secrets
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TEAM_SESSION_SECRET", "test-team-secret")
os.environ.setdefault("LECTURER_SESSION_SECRET", "test-lecturer-secret")
os.environ.setdefault("LOG_FORMAT", "text")
