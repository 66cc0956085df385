from typing import List, Optional, Union
import logging

from pydantic import AnyHttpUrl, PostgresDsn, field_validator, model_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Explicitly load .env file and override existing environment variables
load_dotenv(override=True)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings for the motorcycle shop directory service."""

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Moto Shop Directory"

    # CORS settings
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Backend platform (auth + storage REST endpoints)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    STORAGE_BUCKET: str = "service-documents"
    # None means calls wait for the platform indefinitely
    BACKEND_TIMEOUT_SECONDS: Optional[float] = None

    # Platform Postgres; use DATABASE_URL directly when provided
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "postgres"
    POSTGRES_PORT: int = 5432

    DATABASE_URL: Optional[str] = None

    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    @model_validator(mode="after")
    def assemble_db_connection(self) -> "Settings":
        if self.DATABASE_URL:
            self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL
        elif not self.SQLALCHEMY_DATABASE_URI:
            self.SQLALCHEMY_DATABASE_URI = str(PostgresDsn.build(
                scheme="postgresql",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            ))
        return self

    # Directory and upload limits
    SHOPS_PAGE_SIZE: int = 50
    COUNTRY_SAMPLE_LIMIT: int = 1000
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Legacy username login (token kept in a session cookie)
    JWT_SECRET_KEY: str = "your-secret-key"  # Change this in production
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    LEGACY_LOGIN_USERNAME: Optional[str] = None
    LEGACY_LOGIN_PASSWORD: Optional[str] = None

    # "Remember me" cookies
    REMEMBER_ME_MAX_AGE: int = 60 * 60 * 24 * 365

    # Browser workspaces held in memory
    WORKSPACE_IDLE_SECONDS: int = 60 * 60 * 12
    MAX_WORKSPACES: int = 1000

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }

    @property
    def backend_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)


def check_backend_config(config: Settings) -> bool:
    """Log missing platform credentials. Never blocks startup."""
    if not config.SUPABASE_URL:
        logger.error("SUPABASE_URL is not set; backend calls will fail")
    if not config.SUPABASE_ANON_KEY:
        logger.error("SUPABASE_ANON_KEY is not set; backend calls will fail")
    return config.backend_configured


# Create settings instance
settings = Settings()
