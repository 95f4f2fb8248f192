"""Runtime settings and logging setup."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_DB = Path("data/grindboard.db")
ENVIRONMENTS = ("development", "production")


@dataclass
class Settings:
    """Connection target, listen address and environment mode.

    The environment mode only changes logging verbosity.
    """

    database: Path = DEFAULT_DB
    host: str = "127.0.0.1"
    port: int = 5000
    env: str = "development"

    @property
    def debug(self) -> bool:
        return self.env == "development"


def load_settings(env_path: Optional[Path] = None) -> Settings:
    """Read ``.env`` if present, then the GRINDBOARD_* environment variables."""
    if env_path is None:
        env_path = Path(".env")
    load_dotenv(env_path)

    settings = Settings()
    database = _get_env("GRINDBOARD_DB")
    if database:
        settings.database = Path(database)
    settings.host = _get_env("GRINDBOARD_HOST", settings.host)
    port = _get_env("GRINDBOARD_PORT")
    if port:
        try:
            settings.port = int(port)
        except ValueError:
            logging.getLogger(__name__).warning("Ignoring invalid GRINDBOARD_PORT=%r", port)
    env = (_get_env("GRINDBOARD_ENV", settings.env) or "").strip().lower()
    if env in ENVIRONMENTS:
        settings.env = env
    return settings


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)
