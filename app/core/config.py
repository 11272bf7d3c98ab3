from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Formula Management Backend"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api"

    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "formula_db"
    DATABASE_URL: Optional[str] = None
    ExternalDatabaseURL: Optional[str] = None
    InternalDatabaseURL: Optional[str] = None

    # File storage
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024  # 50 MiB
    PUBLIC_BASE_URL: Optional[str] = None  # Falls back to the request base URL

    # Identity provider (Supabase-compatible)
    AUTH_PROVIDER_URL: str = "http://localhost:54321"
    AUTH_PROVIDER_API_KEY: Optional[str] = None
    AUTH_TIMEOUT_SECONDS: float = 5.0

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    @property
    def sync_database_url(self) -> str:
        if self.ExternalDatabaseURL:
            return self.ExternalDatabaseURL
        if self.InternalDatabaseURL:
            return self.InternalDatabaseURL
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

settings = Settings()
