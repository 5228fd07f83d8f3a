# app/core/config.py

from pathlib import Path
from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Couple Ledger API"
    DEBUG: bool = False
    VERSION: str = "0.1.0"

    # Database Configuration
    DATABASE_URL: str

    # JWT / Security Configuration
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # CORS Configuration
    FRONTEND_URL: str

    # SendGrid Configuration (empty key disables outgoing mail)
    SENDGRID_API_KEY: str = ""
    EMAIL_FROM: EmailStr = "no-reply@example.com"
    EMAIL_FROM_NAME: str = "Couple Ledger"

    # Partner invitations
    INVITATION_EXPIRE_DAYS: int = 7
    INVITATION_CODE_LENGTH: int = 8

    # Dashboard aggregation
    LIVING_EXPENSE_CATEGORY: str = "생활비"
    COUNT_DEPOSITS_AS_EXPENSE: bool = True
    HISTORY_MONTHS: int = 6

    # Korea Investment & Securities (KIS) Open API
    KIS_LIVE_BASE_URL: str = "https://openapi.koreainvestment.com:9443"
    KIS_VIRTUAL_BASE_URL: str = "https://openapivts.koreainvestment.com:29443"
    KIS_TOKEN_REFRESH_BUFFER_SECONDS: int = 300
    KIS_REFRESH_INTERVAL_SECONDS: int = 60
    KIS_POLLING_ENABLED: bool = True
    KIS_TIMEOUT_SECONDS: float = 10.0

    # Optional: Environment
    ENVIRONMENT: str = "development"

    @property
    def is_supabase(self) -> bool:
        """Check if we're using Supabase database"""
        return any(d in self.DATABASE_URL for d in [
            "supabase.co",
            "supabase.com",
            "pooler.supabase",
        ])

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

# Create a global settings instance
settings = Settings()
