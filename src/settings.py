"""App settings."""

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Settings loaded from the environment (``DATABASE_NAME``, ``FILTER_TIMEZONE``, ...)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # API settings
    api_title: str = "Inventory API"
    api_version: str = "1.0.0"
    api_description: str = "Filterable list endpoints for inventory and workflow resources"
    host: str = "0.0.0.0"
    port: int = 8000

    # Database settings
    database_connection_string: str = "mongodb://localhost:27017"
    database_name: str = "inventory"

    # Logging
    logging_level: str = "INFO"

    # Filter engine settings
    filter_timezone: str = "UTC"
    default_page_limit: int = 20
    max_page_limit: int = 1000


settings = Settings()
