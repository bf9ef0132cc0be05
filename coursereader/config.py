"""
Runtime configuration.

Values come from environment variables (optionally via a `.env` file in the
project root) with defaults suited to a local development backend.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_CACHE_DIR = Path.home() / ".coursereader"
DEFAULT_CACHE_PATH = DEFAULT_CACHE_DIR / "cache.db"
DEFAULT_API_BASE_URL = "http://localhost:5000/api"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SYNC_WORKERS = 4
DEFAULT_ASSET_BASE_URL = "http://localhost:5173"
DEFAULT_COURSE_ID = "option-analysis-strategy"


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    cache_path: Path = DEFAULT_CACHE_PATH
    sync_workers: int = DEFAULT_SYNC_WORKERS
    log_level: str = "INFO"
    asset_base_url: str = DEFAULT_ASSET_BASE_URL
    course_id: str = DEFAULT_COURSE_ID


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env_file: Optional .env path (default: <project root>/.env)

    Raises:
        ValueError: If a numeric setting cannot be parsed or is not positive
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env")

    timeout = float(os.environ.get("COURSEREADER_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))
    if timeout <= 0:
        raise ValueError(f"COURSEREADER_REQUEST_TIMEOUT must be positive, got {timeout}")

    workers = int(os.environ.get("COURSEREADER_SYNC_WORKERS", DEFAULT_SYNC_WORKERS))
    if workers < 1:
        raise ValueError(f"COURSEREADER_SYNC_WORKERS must be at least 1, got {workers}")

    cache_path = os.environ.get("COURSEREADER_CACHE_PATH")

    return Settings(
        api_base_url=os.environ.get("COURSEREADER_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        request_timeout=timeout,
        cache_path=Path(cache_path).expanduser() if cache_path else DEFAULT_CACHE_PATH,
        sync_workers=workers,
        log_level=os.environ.get("COURSEREADER_LOG_LEVEL", "INFO").upper(),
        asset_base_url=os.environ.get("COURSEREADER_ASSET_BASE_URL", DEFAULT_ASSET_BASE_URL).rstrip("/"),
        course_id=os.environ.get("COURSEREADER_COURSE_ID", DEFAULT_COURSE_ID),
    )
