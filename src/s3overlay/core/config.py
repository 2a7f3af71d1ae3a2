"""Configuration management for s3overlay."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "s3overlay"
    otel_exporter_endpoint: str = "http://localhost:4317"
    presign_expiry_seconds: int = 1200

    model_config = {
        "env_prefix": "S3OVERLAY_",
        "case_sensitive": False,
    }


settings = Settings()
