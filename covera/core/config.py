
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = Field(default="Covera API", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")  # defaults by APP_ENV
    frontend_url: str = Field(default="http://localhost:5173", alias="FRONTEND_URL")
    max_upload_size_mb: int = Field(default=10, alias="MAX_UPLOAD_SIZE_MB")

    # OpenAI
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o", alias="OPENAI_MODEL")
    openai_max_tokens: int = Field(default=2000, alias="OPENAI_MAX_TOKENS")
    openai_timeout: int = Field(default=60, alias="OPENAI_TIMEOUT")
    openai_max_retries: int = Field(default=2, alias="OPENAI_MAX_RETRIES")
    openai_vision_detail: str = Field(
        default="high", alias="OPENAI_VISION_DETAIL",
    )  # "low" | "high" | "auto"
    openai_max_input_chars: int = Field(
        default=60000, alias="OPENAI_MAX_INPUT_CHARS",
    )  # PDF text beyond this is truncated before prompting

    # Database (kv_store table; SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./covera_dev.db",
        alias="DATABASE_URL",
    )

    # Multi-tenancy default
    default_org_id: str = Field(default="default", alias="DEFAULT_ORG_ID")

    # Plan limit on vendors per organization (0 = unlimited)
    vendor_limit: int = Field(default=150, alias="VENDOR_LIMIT")

    # Local blob storage for uploaded documents
    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def ai_enabled(self) -> bool:
        """AI extraction is available only when an OpenAI key is configured."""
        return bool(self.openai_api_key)

settings = Settings()
