from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="Campaign Recipient Importer", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    debug: bool = Field(default=True, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    preview_row_limit: int = Field(default=50, alias="PREVIEW_ROW_LIMIT")
    invalid_sample_limit: int = Field(default=5, alias="INVALID_SAMPLE_LIMIT")
    max_import_rows: int = Field(default=20_000, alias="MAX_IMPORT_ROWS")

    recipients_api_base_url: str | None = Field(default=None, alias="RECIPIENTS_API_BASE_URL")
    recipients_api_token: str | None = Field(default=None, alias="RECIPIENTS_API_TOKEN")
    recipients_api_timeout: float = Field(default=10.0, alias="RECIPIENTS_API_TIMEOUT")
    recipients_api_batch_size: int = Field(default=1000, alias="RECIPIENTS_API_BATCH_SIZE")
    recipients_api_mock_mode: bool = Field(default=True, alias="RECIPIENTS_API_MOCK_MODE")

    model_config = SettingsConfigDict(
        env_file=(".env", ),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


settings = Settings()
