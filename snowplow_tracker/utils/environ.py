from functools import lru_cache
from typing import Any, Literal

from pydantic import model_serializer
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Environ", "environ"]


class Environ(BaseSettings):
    """A L{BaseSettings} subclass for storing environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    SNOWPLOW_TRACKER_ENABLED: bool = True
    SNOWPLOW_TRACKER_NAMESPACE: str | None = None
    SNOWPLOW_TRACKER_APP_ID: str | None = None
    SNOWPLOW_TRACKER_PLATFORM: str = "srv"
    SNOWPLOW_TRACKER_ENCODE_BASE64: bool = True
    SNOWPLOW_TRACKER_EMITTER: str | None = None
    SNOWPLOW_TRACKER_DEBUG: bool = False

    SNOWPLOW_DISABLE_SETUP_LOGGING: bool = False

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = (
        "INFO"
    )

    @model_serializer(when_used="always", mode="plain")
    def _serialize_environ(self) -> dict[str, Any]:
        return {}


@lru_cache(maxsize=1)
def _load_environ() -> Environ:
    """Return a cached Environ instance, reading .env and os.environ
    once."""
    return Environ()


class _EnvironProxy:
    def __getattr__(self, name: str) -> Any:
        _load_environ.cache_clear()
        real = _load_environ()
        return getattr(real, name)

    def __repr__(self) -> str:
        return "<EnvironProxy loading from .env>"


environ = _EnvironProxy()
