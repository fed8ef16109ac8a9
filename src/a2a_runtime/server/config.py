"""Server settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from a2a_runtime.server.events.event_queue import OverflowPolicy


class A2AServerSettings(BaseSettings):
    """Runtime settings loaded from ``A2A_``-prefixed environment variables."""

    host: str = '0.0.0.0'
    port: int = Field(default=10000, ge=1, le=65535)
    rpc_url: str = '/'
    agent_card_url: str = '/.well-known/agent.json'

    redis_host: str | None = None
    redis_port: int = 6379
    redis_username: str | None = None
    redis_password: str | None = None
    redis_ssl: bool = False
    redis_db: int = Field(default=0, ge=0)

    subscriber_queue_size: int = Field(default=0, ge=0)
    subscriber_overflow: OverflowPolicy = OverflowPolicy.DROP
    notification_timeout: float = Field(default=30.0, gt=0)
    notification_connect_timeout: float = Field(default=15.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix='A2A_',
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8',
    )


@lru_cache(maxsize=1)
def get_settings() -> A2AServerSettings:
    return A2AServerSettings()
