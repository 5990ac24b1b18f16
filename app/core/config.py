from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./tasks.db"

    # JWT
    SECRET_KEY: str = "change-this-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Auth
    LOGIN_RATE_LIMIT: str = "5 per 15 minutes"
    RATE_LIMIT_ENABLED: bool = True
    # Registration accepts a caller-chosen role (including admin) while this is on
    ALLOW_SELF_ASSIGNED_ROLE: bool = True

    # App
    APP_NAME: str = "Task Management API"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"

settings = Settings()
