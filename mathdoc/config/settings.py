from pydantic_settings import BaseSettings, SettingsConfigDict

_MIB = 1024 * 1024


class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MATHDOC_", env_file=".env", extra="ignore"
    )

    app_env: str = "dev"
    log_level: str = "INFO"

    api_base: str = "https://eu-central-1.api.mathpix.com/v3"
    app_id: str = ""
    app_key: str = ""

    request_timeout_seconds: float = 30.0
    upload_timeout_seconds: float = 300.0
    verify_tls: bool = True

    poll_interval_seconds: float = 2.0
    max_status_polls: int = 150
    backoff_after_polls: int = 30
    backoff_multiplier: float = 1.5

    max_image_size_bytes: int = 10 * _MIB
    max_pdf_size_bytes: int = 512 * _MIB
    max_office_size_bytes: int = 100 * _MIB

    capture_debug_snapshots: bool = True
