from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "accounts-api"
    LOG_LEVEL: str = ""

    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    JWT_SECRET: str = "change_me_jwt"
    JWT_ALGORITHM: str = "HS256"
    JWT_TTL_DAYS: int = 7

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"
    GRAPHQL_IDE: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def log_level(self) -> str:
        if self.LOG_LEVEL.strip():
            return self.LOG_LEVEL.strip().upper()
        return "DEBUG" if self.APP_ENV == "local" else "INFO"

settings = Settings()
