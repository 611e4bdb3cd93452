from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Core Application Settings
    addon_name: str = "DebridFusion"
    version: str = "1.0.0"
    description: str = (
        "Stremio Add-on that lists and resolves streams from your debrid cloud account."
    )
    host_url: str | None = Field(
        default=None, validation_alias=AliasChoices("host_url", "addon_url")
    )
    logging_level: str = "INFO"

    # External Service URLs
    requests_proxy_url: str | None = None
    cinemeta_url: str = "https://v3-cinemeta.strem.io"

    # Provider Settings
    provider_search_min_score: float = Field(default=0.1, ge=0, le=1)
    provider_request_timeout: int = 15  # Stremio timeout is 20s

    # Magnet Resolution Settings
    magnet_max_attempts: int = Field(default=10, ge=1)
    magnet_poll_interval: float = 5
    min_video_size: int = 52428800  # 50 MB in bytes
    resolve_timeout: float = 75

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
