import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Edge settings loaded from environment variables."""

    app_title: str = "Adonai Farm Edge"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///data/farmsync.db"

    # Origin farm-management server the edge sits in front of
    origin_url: str = "http://localhost:4000"
    edge_prefix: str = "/_edge"

    # Cache partitions: a version bump makes every older partition obsolete
    cache_prefix: str = "adonai"
    cache_version: str = "v1.0.0"
    fetch_timeout_seconds: float = 10.0
    image_max_age_seconds: int = 86400
    precache_urls: list[str] = [
        "/",
        "/index.html",
        "/static/js/bundle.js",
        "/static/css/main.css",
        "/manifest.json",
        "/images/hero-farm.jpg",
        "/images/farm-2.jpg",
        "/images/farm-3.jpg",
        "/images/farm-4.jpg",
    ]
    image_fallback_families: list[str] = ["adonai", "farm-"]
    hero_image_paths: list[str] = [
        "/images/hero-farm.jpg",
        "/images/farm-2.jpg",
        "/images/farm-3.jpg",
    ]
    precache_on_startup: bool = True

    # Offline queue & local mirrors
    queue_max_retries: int = 3
    queue_retention_days: int = 7
    snapshot_max_age_hours: int = 24
    replay_to_origin: bool = False

    # Connectivity probing against the origin
    connectivity_probe_enabled: bool = False
    connectivity_probe_interval: float = 15.0
    connectivity_probe_path: str = "/api/health"

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_cache: str = "INFO"            # Cache strategy router
    log_level_queue: str = "INFO"            # Offline action queue

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Normalise the origin URL and reject a non-positive fetch timeout."""
        object.__setattr__(self, "origin_url", self.origin_url.rstrip("/"))
        if self.fetch_timeout_seconds <= 0:
            _config_logger.warning(
                "fetch_timeout_seconds=%s is not positive; using 10s",
                self.fetch_timeout_seconds,
            )
            object.__setattr__(self, "fetch_timeout_seconds", 10.0)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
