from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Recruit Board", alias="APP_NAME")
    api_url: str = Field(
        default="http://localhost:8080",
        alias="API_URL",
        validation_alias=AliasChoices("API_URL", "REACT_APP_API_URL"),
    )
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    public_url: str = Field(default="", alias="PUBLIC_URL")

    access_token: str = Field(default="", alias="ACCESS_TOKEN")
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    comment_max_length: int = Field(default=20, alias="COMMENT_MAX_LENGTH")
    comment_window_size: int = Field(default=10, alias="COMMENT_WINDOW_SIZE")
    comment_window_step: int = Field(default=10, alias="COMMENT_WINDOW_STEP")
    scroll_bottom_threshold: int = Field(default=100, alias="SCROLL_BOTTOM_THRESHOLD")

    @property
    def api_base_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.api_prefix.strip('/')}"

    @property
    def comment_profile_image(self) -> str:
        return f"{self.public_url.rstrip('/')}/assets/images/real_ian.png"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
