from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    DATABASE_URL: str

    ENV: str
    JWT_SECRET: str
    JWT_ISSUER: str

    ACCESS_TTL_MIN: int = 15
    REFRESH_TTL_DAYS: int = 30

    GOOGLE_CLIENT_ID: str

    COOKIE_DOMAIN: str | None = None
    COOKIE_SECURE: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:4173",
        "http://127.0.0.1:5173",
    ]

    LOG_LEVEL: str = "INFO"

    @property
    def is_prod(self) -> bool:
        return self.ENV.lower() == "prod"


settings = Settings()
