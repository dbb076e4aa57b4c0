from pydantic_settings import BaseSettings

DEFAULT_SECRET_KEY = "dev-secret-change-me"


class Settings(BaseSettings):
    APP_ENV: str = "development"
    DATABASE_URL: str = "sqlite:///./edusocial.db"
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_DAYS: int = 7
    PASSWORD_HASH_ROUNDS: int = 12
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = ""
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    LOGIN_RATE_LIMIT: str = "10/minute"
    REGISTER_RATE_LIMIT: str = "60/minute"

    # S3-compatible object storage for uploads
    STORAGE_BUCKET: str | None = None
    STORAGE_ENDPOINT: str | None = None
    STORAGE_REGION: str | None = None
    STORAGE_ACCESS_KEY_ID: str | None = None
    STORAGE_SECRET_ACCESS_KEY: str | None = None
    STORAGE_PUBLIC_BASE_URL: str | None = None
    STORAGE_FOLDER: str = "social-learning"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def storage_configured(self) -> bool:
        return bool(
            self.STORAGE_BUCKET
            and self.STORAGE_ACCESS_KEY_ID
            and self.STORAGE_SECRET_ACCESS_KEY
        )


def validate_runtime_config(config: Settings) -> None:
    if config.APP_ENV.lower() == "production" and config.SECRET_KEY == DEFAULT_SECRET_KEY:
        raise RuntimeError("SECRET_KEY must be set in production.")


settings = Settings()
