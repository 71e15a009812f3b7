from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CURRENCY_CODES_FILE = (
    Path(__file__).resolve().parent.parent / "data" / "currency_codes.json"
)


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    FX_RATES_API_URL, CACHE_BACKEND, REDIS_URL, RATES_CACHE_TTL_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Currencyify"
    debug: bool = False
    version: str = "0.1.0"
    api_prefix: str = "/api/v1/currencyify"

    # Remote FX rates provider
    # Allowed: 'fxratesapi' (HTTP API), 'static' (built-in fixed table for offline use)
    rate_provider: str = "fxratesapi"
    fx_rates_api_url: AnyHttpUrl = "https://api.fxratesapi.com/latest"  # type: ignore[assignment]
    fx_rates_resolution: str = "1m"
    fx_rates_places: int = 6
    http_timeout_seconds: float = 5.0

    # Rate cache
    # Allowed: 'memory' (per-process dict), 'redis'
    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout_seconds: float = 1.0
    rates_cache_ttl_seconds: int = 3600  # 1 hour
    inflight_wait_timeout_seconds: float = 10.0

    # Reference ISO currency codes
    currency_codes_file: Optional[Path] = None  # packaged default if not provided

    def init_post_load(self) -> None:
        """Finalize derived fields and validate enumerated choices."""
        if self.currency_codes_file is None:
            self.currency_codes_file = DEFAULT_CURRENCY_CODES_FILE
        allowed_providers = {"fxratesapi", "static"}
        if self.rate_provider not in allowed_providers:
            raise ValueError(
                f"Unsupported rate_provider '{self.rate_provider}'. Allowed: {allowed_providers}"
            )
        allowed_backends = {"memory", "redis"}
        if self.cache_backend not in allowed_backends:
            raise ValueError(
                f"Unsupported cache_backend '{self.cache_backend}'. Allowed: {allowed_backends}"
            )
        if self.rates_cache_ttl_seconds <= 0:
            raise ValueError("rates_cache_ttl_seconds must be positive")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
