import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")
    LENDING_API_URL = os.environ.get("LENDING_API_URL", "http://localhost:5000")
    API_TIMEOUT = float(os.environ.get("API_TIMEOUT", "10"))
    API_RETRY_ATTEMPTS = int(os.environ.get("API_RETRY_ATTEMPTS", "3"))
    API_CACHE_BUST = _env_bool("API_CACHE_BUST", False)
    # httpx transport override; tests plug a MockTransport in here
    API_TRANSPORT = None
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@admin.com")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin@123")
    ADMIN_PASSWORD_HASH = os.environ.get("ADMIN_PASSWORD_HASH")
    SESSION_LIFETIME_SECONDS = int(os.environ.get("SESSION_LIFETIME_SECONDS", "3600"))
    REFRESH_POLL_SECONDS = int(os.environ.get("REFRESH_POLL_SECONDS", "15"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    CURRENCY = os.environ.get("CURRENCY", "₹")
