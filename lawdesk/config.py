"""
LawDesk - Configuration Settings
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator


DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    APP_NAME: str = "LawDesk"
    APP_DESCRIPTION: str = "Case management for law offices"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Security
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    SESSION_COOKIE_NAME: str = "lawdesk_session"
    SESSION_EXPIRE_MINUTES: int = 60 * 24  # 24 hours
    PASSWORD_HASH_ITERATIONS: int = 100000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/lawdesk.db"

    # File Storage
    UPLOAD_DIR: Path = Path("./data/uploads")
    MAX_FILE_SIZE_MB: int = 10
    ALLOWED_EXTENSIONS: set[str] = {".pdf", ".doc", ".docx", ".txt", ".jpg", ".jpeg", ".png"}

    # Dashboard windows
    NEW_CLIENT_WINDOW_DAYS: int = 7
    RECENT_DOCUMENT_WINDOW_DAYS: int = 1

    @model_validator(mode="after")
    def validate_secret_key(self):
        """Refuse to start with the default secret key in production."""
        if not self.DEBUG and self.SECRET_KEY == DEFAULT_SECRET_KEY:
            raise ValueError(
                "SECRET_KEY must be changed from the default value in production. "
                "Set a strong, unique SECRET_KEY in your .env file."
            )
        return self

    @property
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024


# Create settings instance
settings = Settings()

