from pydantic import AnyUrl, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    DEBUG: bool = False

    API_URL: AnyUrl = AnyUrl("http://localhost:5000/api/v1")
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # The backend exposes both the full request lists and pending-only variants
    USE_PENDING_ENDPOINTS: bool = False

    # 0 disables the periodic resync job
    BACKGROUND_REFRESH_SECONDS: int = 0

    # Used by the watcher script only
    ACCESS_TOKEN: str = ""
    USER_ID: str = ""
    WATCH_INTERVAL_SECONDS: int = 60

    LOG_DIR: str = "logs"
    LOG_TIMEZONE: str = "Europe/Amsterdam"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def api_base_url(self) -> str:
        return str(self.API_URL).rstrip("/")


settings = Settings()  # type: ignore
