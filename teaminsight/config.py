"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Lecturer policy (profiles, weekly instructions) lives in the database,
      not here; these are deployment-level knobs only

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Cookie secrets have no default: a missing one fails Settings() instead of
      verifying cookies against a known key
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://teaminsight:teaminsight@db:5432/teaminsight"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Anthropic
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 120
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 60_000

    # Reflection oracle
    reflection_model: str = "claude-sonnet-4-5"
    reflection_max_tokens: int = 2048
    summary_max_tokens: int = 4096

    # Reflection flow
    reflection_max_turns: int = 16
    recent_summaries_days: int = 14
    recent_summaries_limit: int = 3
    reflection_locale: str = "he"

    # Cookie verification (issuance lives in the auth service)
    team_session_secret: str
    lecturer_session_secret: str
    session_token_algorithm: str = "HS256"

    @field_validator("team_session_secret", "lecturer_session_secret")
    @classmethod
    def reject_placeholder_secret(cls, v: str) -> str:
        """Cookie keys verify HMAC signatures: blank or placeholder keys are refused at startup."""
        if not v.strip() or v.strip().lower().startswith("change-me"):
            raise ValueError("session secret must be set to a private value")
        return v

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
