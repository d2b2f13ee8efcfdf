import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class Settings:
    db_path: Path = Path("data/matching.db")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    media_api_url: Optional[str] = None
    media_api_token: Optional[str] = None
    store_retries: int = 3
    http_timeout: float = 15.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_path=Path(os.getenv("JOBMATCH_DB_PATH", "data/matching.db")),
            log_level=os.getenv("JOBMATCH_LOG_LEVEL", "INFO"),
            log_dir=Path(os.getenv("JOBMATCH_LOG_DIR", "logs")),
            media_api_url=os.getenv("JOBMATCH_MEDIA_API_URL") or None,
            media_api_token=os.getenv("JOBMATCH_MEDIA_API_TOKEN") or None,
            store_retries=_int_env("JOBMATCH_STORE_RETRIES", 3),
            http_timeout=_float_env("JOBMATCH_HTTP_TIMEOUT", 15.0),
        )
