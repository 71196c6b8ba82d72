from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL
from typing import Union


class Settings(BaseSettings):
    # Database connection parts - all required, there is no sane default database
    DB_HOST: str
    DB_PORT: int
    DB_USERNAME: str
    DB_PASSWORD: str
    DB_NAME: str
    DB_ECHO: bool = False

    # Security settings
    # JWT_SECRET signs every session token - if it leaks, tokens can be forged
    JWT_SECRET: str
    ALGORITHM: str = "HS256"  # JWT signing algorithm
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120  # Tokens are valid for 2 hours

    # Geoapify geocoding/places provider
    GEOGRAPHY_API_KEY: str
    GEOAPIFY_BASE_URL: str = "https://api.geoapify.com"
    EXTERNAL_REQUEST_TIMEOUT: float = 10.0  # Seconds per provider call

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # CORS origins - string (comma-separated) or list
    CORS_ORIGINS: Union[str, list[str]
                        ] = "http://localhost:5173,http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        # Settings are built once at startup and shared by reference
        frozen=True,
    )

    @property
    def database_url(self) -> URL:
        """Build the PostgreSQL (psycopg2) connection URL from the DB_* parts"""
        return URL.create(
            "postgresql+psycopg2",
            username=self.DB_USERNAME,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    def get_cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS string into list"""
        if isinstance(self.CORS_ORIGINS, str):
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return self.CORS_ORIGINS if isinstance(self.CORS_ORIGINS, list) else []


settings = Settings()
