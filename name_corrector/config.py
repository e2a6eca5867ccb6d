import os
import sys
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


@dataclass(frozen=True)
class Settings:
    google_api_key: Optional[str] = None
    gemini_model: str = 'gemini-2.0-flash'
    secret_key: str = 'numerology-secret-key-2024'
    redis_url: str = 'memory://'
    cache_type: str = 'SimpleCache'
    cache_default_timeout: int = 300
    profile_cache_timeout: int = 3600
    ratelimit_enabled: bool = True
    api_base_url: str = 'http://localhost:5000'
    http_timeout: float = 30.0
    validation_debounce_seconds: float = 0.5
    chat_history_window: int = 5
    log_level: str = 'INFO'
    log_file: str = 'numerology_app.log'
    port: int = 5000

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            google_api_key=os.getenv('GOOGLE_API_KEY'),
            gemini_model=os.getenv('GEMINI_MODEL', cls.gemini_model),
            secret_key=os.getenv('SECRET_KEY', cls.secret_key),
            redis_url=os.getenv('REDIS_URL', cls.redis_url),
            cache_type=os.getenv('CACHE_TYPE', cls.cache_type),
            cache_default_timeout=int(os.getenv('CACHE_DEFAULT_TIMEOUT', cls.cache_default_timeout)),
            profile_cache_timeout=int(os.getenv('PROFILE_CACHE_TIMEOUT', cls.profile_cache_timeout)),
            ratelimit_enabled=_env_bool('RATELIMIT_ENABLED', cls.ratelimit_enabled),
            api_base_url=os.getenv('API_BASE_URL', cls.api_base_url),
            http_timeout=float(os.getenv('HTTP_TIMEOUT', cls.http_timeout)),
            validation_debounce_seconds=float(os.getenv('VALIDATION_DEBOUNCE_SECONDS', cls.validation_debounce_seconds)),
            chat_history_window=int(os.getenv('CHAT_HISTORY_WINDOW', cls.chat_history_window)),
            log_level=os.getenv('LOG_LEVEL', cls.log_level).upper(),
            log_file=os.getenv('LOG_FILE', cls.log_file),
            port=int(os.getenv('PORT', cls.port)),
        )


def configure_logging(settings: Settings) -> None:
    """Configures root logging: stdout always, plus a log file unless LOG_FILE is empty."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
