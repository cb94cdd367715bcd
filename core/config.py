from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Public origin used to build magic links and checkout redirects.
    # When unset, the origin of the incoming request is used.
    PUBLIC_BASE_URL: str | None = None
    MAGIC_LINK_TTL_MINUTES: int = 15
    CURRENCY: str = "INR"

    # Web Push (VAPID)
    VAPID_PUBLIC_KEY: str | None = None
    VAPID_PRIVATE_KEY: str | None = None
    VAPID_SUBJECT: str = "mailto:admin@example.com"

    # Shared secrets for provider / internal callers
    PAYMENT_WEBHOOK_SECRET: str | None = None
    INTERNAL_API_KEY: str | None = None

    STATUS_POLL_INTERVAL_SECONDS: float = 3.0


settings = Settings()
