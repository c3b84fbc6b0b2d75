# cinema_tokens/core/config.py
from functools import lru_cache
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class RedisStoreSettings(BaseModel):
    """Connection parameters for one Redis-backed store"""
    host: str = "localhost"
    port: int = 6379
    password: Optional[str] = None
    db: int = 0
    # Seconds between liveness probes
    timer: float = Field(default=5.0, gt=0)
    socket_timeout: float = 5.0


class Settings(BaseSettings):
    """Application settings"""
    APP_NAME: str = "cinema-tokens"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILE: str = "cinema_tokens.log"

    # One store instance per backend, each with its own probe loop
    SESSION_REDIS: RedisStoreSettings = Field(default_factory=lambda: RedisStoreSettings(db=0))
    CSRF_REDIS: RedisStoreSettings = Field(default_factory=lambda: RedisStoreSettings(db=1))
    NEAR_FILMS_REDIS: RedisStoreSettings = Field(default_factory=lambda: RedisStoreSettings(db=2))

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "extra": "ignore"
    }


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance"""
    return Settings()


def describe_store(name: str, cfg: RedisStoreSettings) -> str:
    """One-line description of a store config without the password"""
    auth = "with password" if cfg.password else "no password"
    return f"{name}: {cfg.host}:{cfg.port}/{cfg.db} ({auth}, probe every {cfg.timer}s)"
