from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "tradedocs"
    db_username: str = "tradedocs"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_connect_timeout_seconds: float = 10.0
    db_auto_migrate: bool = False

    blob_store: str = "postgres"
    blob_files_root: str = "/app/files"

    pdf_engine: str = "pdfplumber"

    extraction_provider: str = "openai"
    extraction_api_key: str = ""
    extraction_model_name: str = ""
    extraction_base_url: str = ""
    extraction_timeout_seconds: int = 60
    extraction_probe_timeout_seconds: int = 5
    extraction_temperature: float = 0.0
    extraction_retry_backoff_seconds: float = 1.0

    max_upload_bytes: int = 20 * 1024 * 1024

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    admin_api_token: str = ""

    orphan_grace_hours: int = 24

    certificate_exporter_name: str = ""
    certificate_exporter_address: str = ""
    certificate_origin_country: str = "U.S.A."
