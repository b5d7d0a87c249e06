import os

from dotenv import load_dotenv

# Load a local .env (if present) so uvicorn can run without --env-file.
load_dotenv()


def _as_bool(raw: str) -> bool:
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Lightweight settings loader using environment variables."""

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-to-a-secure-random-string")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # "sqlite://" gives a single shared in-memory database (handy for tests)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./restaurant.db")

    APP_ENV: str = os.getenv("APP_ENV", os.getenv("ENV", "development")).lower()
    _default_pool_size = 5 if APP_ENV == "development" else 10
    _default_max_overflow = 2 if APP_ENV == "development" else 20
    _default_pool_recycle = 900 if APP_ENV == "development" else 1800

    # Pool tuning only applies to server databases (MySQL etc.)
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", str(_default_pool_size)))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", str(_default_max_overflow)))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", str(_default_pool_recycle)))  # seconds

    # Logging and monitoring controls
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    REQUEST_LOG_EVERY_N: int = int(os.getenv("REQUEST_LOG_EVERY_N", "100"))
    DB_LOG_EVERY_N: int = int(os.getenv("DB_LOG_EVERY_N", "50"))
    REQUEST_LOG_VERBOSE: bool = _as_bool(os.getenv("REQUEST_LOG_VERBOSE", "0"))
    REQUEST_LOG_INCLUDE_PREFIXES: str = os.getenv(
        "REQUEST_LOG_INCLUDE_PREFIXES",
        "/orders,/order-items,/reservations"
    )

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

    # Naive datetimes coming from clients are read in this zone and stored as naive UTC
    RESTAURANT_TIMEZONE: str = os.getenv("RESTAURANT_TIMEZONE", "UTC")

    # When enabled, order/item status changes must follow the transition tables
    STRICT_STATUS_TRANSITIONS: bool = _as_bool(os.getenv("STRICT_STATUS_TRANSITIONS", "0"))


settings = Settings()
