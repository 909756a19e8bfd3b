# productlobby_insights/db_config.py
"""Database configuration and connection string assembly"""
from dataclasses import dataclass
from urllib.parse import quote_plus, urlparse

from productlobby_insights.config import Settings, settings

# Used when neither DATABASE_URL nor DB_HOST is configured
LOCAL_DATABASE_URL = 'sqlite:///productlobby.db'

SUPPORTED_SCHEMES = ('postgresql', 'postgresql+psycopg2', 'sqlite')

@dataclass
class DatabaseCredentials:
    """Database credentials container with validation"""
    host: str
    port: str
    name: str
    user: str
    password: str
    ssl_mode: str = 'prefer'

    def to_connection_string(self) -> str:
        """Generate database connection string with proper escaping"""
        return (
            f"postgresql://{quote_plus(self.user)}:{quote_plus(self.password)}@{self.host}:{self.port}/"
            f"{self.name}?sslmode={self.ssl_mode}"
        )

    @classmethod
    def from_settings(cls, config: Settings) -> 'DatabaseCredentials':
        """Create credentials from the individual DB_* settings"""
        return cls(
            host=config.DB_HOST,
            port=config.DB_PORT,
            name=config.DB_NAME,
            user=config.DB_USER,
            password=config.DB_PASSWORD or '',
            ssl_mode=config.DB_SSL_MODE
        )

    @classmethod
    def validate_url(cls, url: str) -> bool:
        """Validate database URL scheme and database name"""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False

        if parsed.scheme not in SUPPORTED_SCHEMES:
            return False

        # sqlite URLs carry a path, postgres URLs need a host and a db name
        if parsed.scheme == 'sqlite':
            return True
        return bool(parsed.hostname) and bool(parsed.path.lstrip('/'))

class DatabaseManager:
    """Resolves which database the application connects to"""

    @classmethod
    def initialize_from_env(cls, config: Settings = settings) -> str:
        """
        Resolve the database connection string from settings

        Returns:
            Database connection string

        Raises:
            ValueError: If DATABASE_URL is malformed or DB_HOST is set without a password
        """
        if config.DATABASE_URL:
            if not DatabaseCredentials.validate_url(config.DATABASE_URL):
                raise ValueError("DATABASE_URL is not a supported database URL")
            return config.DATABASE_URL

        if config.DB_HOST:
            if not config.DB_PASSWORD:
                raise ValueError("DB_PASSWORD setting is required when DB_HOST is set")
            return DatabaseCredentials.from_settings(config).to_connection_string()

        return LOCAL_DATABASE_URL
