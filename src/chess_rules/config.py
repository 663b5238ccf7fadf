"""Service configuration.

Settings are read from environment variables prefixed ``CHESS_RULES_``
(or a ``.env`` file), e.g. ``CHESS_RULES_PORT=9000``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESS_RULES_", env_file=".env", env_file_encoding="utf-8", extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = "INFO"

    # Upper bound on concurrently stored games
    max_sessions: int = Field(default=1000, ge=1)
