from functools import lru_cache
from typing import Annotated, Any, List
import json
import os

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

INSECURE_API_KEY = "CHANGEME_IN_PRODUCTION"


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Server settings
    PROJECT_NAME: str = "Property Details Service"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ENV: str = "development"
    DEBUG: bool = False

    # CORS settings
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # Property data provider
    ATTOM_API_KEY: str = INSECURE_API_KEY
    ATTOM_BASE_URL: str = "https://api.gateway.attomdata.com/propertyapi/v1.0.0"
    DEFAULT_TIMEOUT: float = 10  # seconds

    # Cache settings
    CACHE_TTL: int = 3600  # Default cache TTL in seconds
    CACHE_CHECK_PERIOD: int = 600  # Expired entry sweep interval, 0 disables

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENABLE_STRUCTURED_LOGGING: bool = True

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> List[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def uses_insecure_api_key(self) -> bool:
        return self.ATTOM_API_KEY == INSECURE_API_KEY


def load_env_file(env_file: str = ".env") -> None:
    """
    Load environment variables from specified .env file.

    Args:
        env_file: Path to the .env file. Defaults to ".env".
    """
    env_path = os.path.join(os.getcwd(), env_file)
    if os.path.exists(env_path):
        load_dotenv(env_path)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching for efficiency.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
