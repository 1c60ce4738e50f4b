import os
from pydantic import BaseModel

class Settings(BaseModel):
    # Basic
    ENV: str = os.getenv("ENV", "dev")
    API_VERSION: str = os.getenv("API_VERSION", "2.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Upstream provider
    SALES_PROVIDER: str = os.getenv("SALES_PROVIDER", "http")  # http | mock
    PROPERTYDATA_API_KEY: str | None = os.getenv("PROPERTYDATA_API_KEY")
    PROPERTYDATA_BASE_URL: str = os.getenv("PROPERTYDATA_BASE_URL", "https://api.propertydata.co.uk")
    UPSTREAM_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))
    USER_AGENT: str = os.getenv("USER_AGENT", "PropIndex/2.0")

    # Cache
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))
    CACHE_MAX_ENTRIES: int = int(os.getenv("CACHE_MAX_ENTRIES", "4096"))

    # Rate limiting (fixed window)
    RATE_LIMIT_RPM: int = int(os.getenv("RATE_LIMIT_RPM", "10"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # CORS
    ALLOW_ORIGINS: str = os.getenv("ALLOW_ORIGINS", "*")

    # Metrics
    PROMETHEUS_ENABLED: bool = os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"

settings = Settings()
