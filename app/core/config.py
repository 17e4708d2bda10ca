# app/core/config.py

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "helloworld"
    DATABASE_URL: str = "sqlite:///./helloworld.db"

    # session tokens
    SECRET_KEY: str = "CHANGE_THIS_TO_A_SUPER_SECRET_KEY"
    ALGORITHM: str = "HS256"
    SESSION_TTL_MINUTES: int = 30

    # profile images
    UPLOAD_DIR: str = "./uploads"

    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["*"]

    class Config:
        """
        Values are read from the environment first, then from .env
        in the directory the server is started from.
        """
        env_file = ".env"


settings = Settings()
