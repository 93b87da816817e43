"""
Runtime settings.

Everything is read from environment variables, optionally seeded from a
``.env`` file next to the working directory. Defaults suit a single-user
desktop install.

Variables:
    ARCHIVE_DB_PATH             SQLite file (default: patients.db beside this module)
    ARCHIVE_VERIFY_AFTER_COMMIT Run the consistency check after each restore (default: true)
    ARCHIVE_LOCK_TIMEOUT        Seconds to wait for a patient lock; 0 waits forever (default: 10)
    ARCHIVE_LOG_LEVEL           Logging level name (default: INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

APP_DIR = Path(__file__).resolve().parent
DB_PATH = APP_DIR / "patients.db"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Archival engine configuration.

    Attributes:
        db_path: SQLite database file
        verify_after_commit: Check the patient tree after each restore commit
        lock_timeout_seconds: Patient lock wait; ``None`` waits forever
        log_level: Root logging level name
    """

    db_path: Path = DB_PATH
    verify_after_commit: bool = True
    lock_timeout_seconds: float | None = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> Settings:
        """Load settings from the environment (and ``env_file`` if given)."""
        load_dotenv(env_file)
        timeout = float(os.getenv("ARCHIVE_LOCK_TIMEOUT", "10"))
        return cls(
            db_path=Path(os.getenv("ARCHIVE_DB_PATH", str(DB_PATH))),
            verify_after_commit=_flag("ARCHIVE_VERIFY_AFTER_COMMIT", "true"),
            lock_timeout_seconds=timeout if timeout > 0 else None,
            log_level=os.getenv("ARCHIVE_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
