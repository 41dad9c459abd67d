import logging
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings loaded from environment or .env file."""
    APP_NAME: str = "Website Log Insights"
    VERSION: str = "1.0.0"

    # Server configuration
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Database configuration
    DATABASE_URL: str = "sqlite:///./logs.db"

    # Report sizes
    DEFAULT_REPORT_LIMIT: int = 50
    BANDWIDTH_DAYS: int = 30
    TOP_STATUS_CODES: int = 10

    # Organization lookups (RDAP over HTTP)
    RDAP_URL: str = "https://rdap.org/ip/{ip}"
    WHOIS_TIMEOUT: float = 5.0
    WHOIS_WORKERS: int = 8

    class Config:
        env_file = ".env"

settings = Settings()


def configure_logging(level: str = None) -> None:
    """Set up root logging once for the CLI or the API process."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
