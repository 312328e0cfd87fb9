"""
Runtime settings, read from the environment.

A ``.env`` file in the working directory is loaded first, so local
database credentials can live outside the code.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///accidents.db"
DEFAULT_API_PREFIX = "/api/accidents"
DEFAULT_PORT = 5000


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    app_env: str = "production"
    api_prefix: str = DEFAULT_API_PREFIX
    api_base_url: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    debug: bool = False
    log_level: str = "INFO"
    create_schema: bool = False

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def resolved_api_base_url(self) -> str:
        """Where the dashboard sends its API requests."""
        if self.api_base_url:
            return self.api_base_url.rstrip("/")
        return f"http://{self.host}:{self.port}{self.api_prefix}"


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        app_env=os.getenv("APP_ENV", "production").strip().lower(),
        api_prefix=os.getenv("API_PREFIX", DEFAULT_API_PREFIX),
        api_base_url=os.getenv("API_BASE_URL") or None,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", DEFAULT_PORT)),
        debug=_env_flag("DEBUG"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        create_schema=_env_flag("CREATE_SCHEMA"),
    )
