# marksheet/core/config.py

from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "student_marks_db"

    # Tokens
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Passwords
    BCRYPT_ROUNDS: int = 10
    # Login accounts created alongside new students/teachers start with this
    DEFAULT_ACCOUNT_PASSWORD: str = "admin123"

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_prefix = "MARKSHEET_"
        case_sensitive = False


CONFIG = Settings()
