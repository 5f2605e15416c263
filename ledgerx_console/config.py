"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Console configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGERX_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Remote LedgerX API
    api_base_url: str = "http://localhost:8080"
    health_path: str = "/health"

    # Service
    service_name: str = "ledgerx-console"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    http_max_connections: int = 100

    # Readiness probing
    health_check_timeout_seconds: float = 15.0
    wake_retry_interval_seconds: float = 30.0
    wake_max_wait_seconds: float = 300.0
    ready_flash_seconds: float = 1.5

    # Dashboard
    poll_interval_seconds: float = 2.0
    balance_flash_seconds: float = 0.7
    recent_transactions_size: int = 20
    account_a: str = "ACC-A-001"
    account_b: str = "ACC-B-001"
    default_currency: str = "USD"

    # Stress test
    stress_transfer_amount: float = 1.0
    default_batch_size: int = 50
    max_batch_size: int = 100


settings = Settings()
