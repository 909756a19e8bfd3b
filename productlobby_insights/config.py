"""Application configuration and environment settings"""
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class EmailSettings(BaseModel):
    """Outbound email specific settings"""
    api_key: Optional[str] = Field(None, description="Resend API key")
    sender: str = Field(..., description="From header for outgoing mail")
    api_url: str = Field(..., description="Resend send-email endpoint")

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Database settings - DATABASE_URL wins over the individual parts
    DATABASE_URL: Optional[str] = Field(None, description="SQLAlchemy database URL")
    DB_HOST: Optional[str] = Field(None, description="PostgreSQL host")
    DB_PORT: str = Field("5432", description="PostgreSQL port")
    DB_NAME: str = Field("productlobby", description="PostgreSQL database name")
    DB_USER: str = Field("productlobby", description="PostgreSQL user")
    DB_PASSWORD: Optional[str] = Field(None, description="PostgreSQL password")
    DB_SSL_MODE: str = Field("prefer", description="PostgreSQL sslmode")

    # Email settings
    RESEND_API_KEY: Optional[str] = Field(None, description="Resend API key")
    RESEND_API_URL: str = Field("https://api.resend.com/emails", description="Resend send endpoint")
    EMAIL_FROM: str = Field("ProductLobby <noreply@productlobby.com>", description="Sender address")
    APP_URL: str = Field("http://localhost:3000", description="Public web app URL used in email links")

    # Analytics settings
    DIGEST_DAYS_BACK: int = Field(7, description="Look-back window for the weekly digest")
    TOP_SUPPORTERS_LIMIT: int = Field(5, description="Supporters listed in the engagement report")
    DEMAND_CURVE_MAX_POINTS: int = Field(20, description="Max points on the pricing demand curve")

    # Server settings
    HOST: str = Field("0.0.0.0", description="Bind address for the API server")
    PORT: int = Field(8000, description="Bind port for the API server")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    @property
    def email_settings(self) -> EmailSettings:
        """Get email settings as a separate model"""
        return EmailSettings(
            api_key=self.RESEND_API_KEY,
            sender=self.EMAIL_FROM,
            api_url=self.RESEND_API_URL
        )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

settings = Settings()
