"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class SDKSettings(BaseSettings):
    """SDK configuration loaded from environment variables (PEYDEY_*)"""

    model_config = SettingsConfigDict(
        env_prefix="PEYDEY_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = False
    version: str = "1.0.0"

    # External Services
    wps_endpoint: str = "https://wps.peydey.ae"
    directory_endpoint: str = "https://auth.peydey.ae"

    # Locale
    currency: str = "AED"
    country: str = "UAE"

    # Service
    service_name: str = "peydey-sdk"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    http_max_retries: int = 3
    http_backoff_base: float = 0.5  # Exponential backoff base in seconds
    authority_timeout_seconds: float = 30.0

    # Simulated latency of the in-memory doubles
    authority_latency_seconds: float = 0.1
    directory_latency_seconds: float = 0.2

    history_limit: int = 10
    finished_withdrawal_retention: int = 1000  # finished requests kept for status lookups


settings = SDKSettings()
