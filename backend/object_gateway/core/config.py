from functools import lru_cache
from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        protected_namespaces=(),
    )

    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")

    s3_endpoint: HttpUrl | None = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_access_key: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    s3_secret_key: str | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    s3_region: str | None = Field(default=None, alias="AWS_REGION")
    s3_bucket: str = Field(default="object-gateway", alias="AWS_BUCKET_NAME")

    presign_ttl: int = Field(default=3600, gt=0, alias="PRESIGN_TTL_SECONDS")
    presign_max_ttl: int = Field(default=604800, gt=0, alias="PRESIGN_MAX_TTL_SECONDS")
    presign_clock_skew: int = Field(default=30, ge=0, alias="PRESIGN_CLOCK_SKEW_SECONDS")

    list_default_max_keys: int = Field(default=100, gt=0, alias="LIST_DEFAULT_MAX_KEYS")
    list_max_keys_limit: int = Field(default=1000, gt=0, alias="LIST_MAX_KEYS_LIMIT")
    signing_concurrency: int = Field(default=8, gt=0, alias="SIGNING_CONCURRENCY")

    backend_timeout: float = Field(default=10.0, gt=0, alias="BACKEND_TIMEOUT_SECONDS")
    max_upload_bytes: int = Field(default=50 * 1024 * 1024, gt=0, alias="MAX_UPLOAD_BYTES")

    retry_enabled: bool = Field(default=False, alias="STORAGE_RETRY_ENABLED")
    retry_attempts: int = Field(default=3, ge=1, alias="STORAGE_RETRY_ATTEMPTS")
    retry_base_delay: float = Field(default=0.2, ge=0, alias="STORAGE_RETRY_BASE_DELAY")
    retry_max_delay: float = Field(default=5.0, ge=0, alias="STORAGE_RETRY_MAX_DELAY")


@lru_cache
def get_settings() -> Settings:
    return Settings()
