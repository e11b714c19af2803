import os

from dotenv import load_dotenv

load_dotenv()


_DEFAULT_BACKEND_URL = 'http://localhost:3000'


def _env_flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_key")

    # CSRF Protection settings
    WTF_CSRF_TIME_LIMIT = None  # No time limit for CSRF tokens
    WTF_CSRF_SSL_STRICT = False  # Allow CSRF over HTTP for development

    # Cookie/session settings
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE')
    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    # External POS backend
    BACKEND_URL = (os.getenv('BACKEND_URL') or _DEFAULT_BACKEND_URL).strip()
    BACKEND_TIMEOUT = _env_int('BACKEND_TIMEOUT', 10)
    BACKEND_URL_COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days

    # Health check / poller
    HEALTH_TIMEOUT = _env_int('HEALTH_TIMEOUT', 5)
    HEALTH_POLL_SECONDS = _env_int('HEALTH_POLL_SECONDS', 30)

    # Query cache (Flask-Caching)
    CACHE_TYPE = os.getenv('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = _env_int('QUERY_CACHE_TTL', 30)
    QUERY_CACHE_TTL = CACHE_DEFAULT_TIMEOUT

    # Pickup dates are entered and shown in this timezone, sent to the backend as UTC
    LOCAL_TIMEZONE = os.getenv('LOCAL_TIMEZONE', 'Asia/Jakarta')

    # Whole request; product images are limited to 10MB by the form
    MAX_CONTENT_LENGTH = 12 * 1024 * 1024

    # Babel
    BABEL_DEFAULT_LOCALE = os.getenv('BABEL_DEFAULT_LOCALE', 'en')

    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
