from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # pydantic-settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    APP_TITLE: str = "AquaDash · Farm administration"

    # Farm REST API (all reads and writes go through it)
    API_BASE_URL: str = "http://localhost:3000"
    API_TIMEOUT: float = 15.0

    # Shared secret of the socket relay posting live events (X-Events-Secret)
    EVENTS_SECRET: str | None = None

    # Secret key for the session cookie
    SECRET_KEY: str = "change_me_in_env"

    LOG_LEVEL: str = "INFO"

    # Rows per page in every management table
    PAGE_SIZE: int = 8

    # Requisition attachments
    ATTACHMENT_MAX_BYTES: int = 5 * 1024 * 1024
    ATTACHMENT_CONTENT_TYPES: list[str] = ["application/pdf", "image/png", "image/jpeg"]


settings = Settings()
