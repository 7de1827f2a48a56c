"""
Runtime configuration.

Values come from the process environment, optionally seeded from a .env
file in the working directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 1521  # Oracle listener default
DEFAULT_SERVICE = "orcl"


def load_env() -> None:
    """Load .env from project root if present."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    db_host: str = DEFAULT_HOST
    db_port: int = DEFAULT_PORT
    db_service: str = DEFAULT_SERVICE
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Recognized variables:
            DATABASE_URL: full SQLAlchemy URL, overrides the HR_DB_* parts
            HR_DB_HOST, HR_DB_PORT, HR_DB_SERVICE, HR_DB_USER, HR_DB_PASSWORD
            HR_LOG_LEVEL, HR_LOG_DIR
        """
        port = os.getenv("HR_DB_PORT")
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            db_host=os.getenv("HR_DB_HOST", DEFAULT_HOST),
            db_port=int(port) if port else DEFAULT_PORT,
            db_service=os.getenv("HR_DB_SERVICE", DEFAULT_SERVICE),
            db_user=os.getenv("HR_DB_USER"),
            db_password=os.getenv("HR_DB_PASSWORD"),
            log_level=os.getenv("HR_LOG_LEVEL", "INFO"),
            log_dir=Path(os.getenv("HR_LOG_DIR", "logs")),
        )
