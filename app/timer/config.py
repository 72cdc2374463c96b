from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BEPRODUCTIVE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    API_URL: str = "http://localhost:8000"
    ACCESS_TOKEN: str | None = None

    STATE_FILE: str = "~/.beproductive/timer.json"

    TICK_SECONDS: float = 1.0
    REQUEST_TIMEOUT: float = 10.0
