from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database
    DATABASE_URL: str
    SQL_ECHO: bool = False
    DB_TIMEOUT_SECONDS: int = 5
    DB_STATEMENT_TIMEOUT_MS: int = 5000

    # Event capacity policy
    ENFORCE_CAPACITY_ON_JOIN: bool = True
    ENFORCE_CAPACITY_ON_LOG: bool = True

    # Pricing
    DEFAULT_RATE_PER_KG: float = 0.10

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"


settings = Settings()
