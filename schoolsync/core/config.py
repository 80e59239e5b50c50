"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Store settings are validated when first loaded, not
at import time, so a missing endpoint degrades to "no connection"
instead of crashing the importer.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORE_BACKENDS = ("rest", "memory")


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings are optional with defaults except the store endpoint and
    access key, which validate_store requires for the "rest" backend.
    """

    # App
    app_name: str = "schoolsync"
    app_version: str = "1.0.0"
    debug: bool = False

    # Remote store: "rest" (network API) or "memory" (process-local)
    store_backend: str = "rest"
    store_url: str = ""
    store_api_key: SecretStr = SecretStr("")
    store_schema: str = "public"
    store_timeout_seconds: float = 30.0

    # Live change feed (server-sent events), relative to store_url
    realtime_path: str = "/realtime/v1/changes"
    realtime_reconnect_seconds: float = 5.0

    # Bootstrap: default administrative accounts created on first start
    seed_default_accounts: bool = True
    default_account_password: SecretStr = SecretStr("password")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_store(self) -> "Settings":
        """Validate the store backend and its required endpoint settings.

        - rest: STORE_URL and STORE_API_KEY required.
        - memory: nothing required.
        """
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"store_backend must be 'rest' or 'memory', got: {self.store_backend!r}"
            )
        if self.store_backend == "rest":
            if not self.store_url:
                raise ValueError(
                    "STORE_URL is required when store_backend is 'rest'. "
                    "Set in environment or .env file."
                )
            if not self.store_api_key.get_secret_value():
                raise ValueError(
                    "STORE_API_KEY is required when store_backend is 'rest'. "
                    "Use the project's anonymous (public) access key."
                )
        if self.realtime_reconnect_seconds < 0:
            raise ValueError("realtime_reconnect_seconds must be >= 0")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
