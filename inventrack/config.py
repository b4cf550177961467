from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 10  # seconds to wait for a pooled connection

    # JWT: no defaults, the app must not start without real secrets
    jwt_secret_key: str
    jwt_refresh_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440
    refresh_token_expire_days: int = 7

    # Passwords
    bcrypt_rounds: int = 12

    # App
    app_name: str = "InvenTrack"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    request_timeout_seconds: float = 30.0
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @model_validator(mode="after")
    def secrets_must_differ(self) -> "Settings":
        if self.jwt_secret_key == self.jwt_refresh_secret_key:
            raise ValueError("JWT_SECRET_KEY and JWT_REFRESH_SECRET_KEY must be different")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
