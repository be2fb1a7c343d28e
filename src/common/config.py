import os
from typing import List
from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load environment variables from the correct .env file
os.environ.setdefault("APP_ENV", "development")
env_file = ".env" if os.getenv("APP_ENV") == "development" else ".env.production"
load_dotenv(env_file)  # Load the .env file

class Settings(BaseSettings):
    APP_ENV: str = "development"
    DEBUG: bool = False
    DATABASE_URL: str
    ALEMBIC_DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRATION_MINUTES: int
    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "info"

    # Queue defaults
    DEFAULT_CURRENCY: str = "SAR"
    DEFAULT_AVG_VISIT_MINUTES: int = 10

    # Clinical context read limits
    CLINICAL_FILES_LIMIT: int = 20
    CLINICAL_VITALS_SCAN_LIMIT: int = 50

    # Support comma-separated ALLOWED_ORIGINS strings
    @field_validator("ALLOWED_ORIGINS", mode="before")
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

settings = Settings()
