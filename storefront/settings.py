import os
from pydantic import BaseModel


class Settings(BaseModel):
    app_env: str = os.getenv("APP_ENV", "prod")

    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")

    # Signs admin session tokens; create_app() refuses to start without it
    session_secret: str = os.getenv("SESSION_SECRET", "")
    session_ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "86400"))

    # Required for /setup before first admin exists
    setup_token: str | None = os.getenv("SETUP_TOKEN")

    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    default_whatsapp_number: str = os.getenv("DEFAULT_WHATSAPP_NUMBER", "6281234567890")
    popular_threshold: int = int(os.getenv("POPULAR_THRESHOLD", "100"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Empty disables the rotating file handler
    log_file: str = os.getenv("LOG_FILE", "logs/storefront.log")


settings = Settings()
