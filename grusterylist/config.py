"""Configuration and path management for grusterylist."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "grusterylist"
CONFIG_DIR = Path.home() / f".{APP_NAME}"
DB_FILENAME = "groceries.db"
DB_ENV_VAR = "GRUSTERYLIST_DB"

# Store sections in walking order
SECTIONS: tuple[str, ...] = ("fresh", "pantry", "dairy", "protein", "freezer")


def get_db_path() -> Path:
    """Get the path to the grocery database.

    The ``GRUSTERYLIST_DB`` environment variable wins over the default
    location under the config directory.
    """
    override = os.getenv(DB_ENV_VAR)
    if override:
        return Path(override).expanduser()

    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR / DB_FILENAME


def section_rank(section: str | None) -> int:
    """Sort rank for a section: known sections first, unknown next, None last."""
    if section is None:
        return len(SECTIONS) + 1
    try:
        return SECTIONS.index(section.casefold())
    except ValueError:
        return len(SECTIONS)
