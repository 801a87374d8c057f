import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from flashdeck.classes.models import DEFAULT_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY
from flashdeck.paths import DATA_DIR, SETTINGS_FILEPATH, STORAGE_KEY

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


class Settings(BaseModel):
    """Configuration for a flashdeck process.

    Attributes:
        data_dir: Directory holding the key-value storage files (default: ~/.flashdeck)
        storage_key: Key the state blob is stored under (default: "flashcards-app-state-v1")
        log_level: Logging level name for the CLI (default: "WARNING")
        default_difficulty: Difficulty given to newly created cards (default: 5)
    """

    data_dir: Path = DATA_DIR
    storage_key: str = STORAGE_KEY
    log_level: str = 'WARNING'
    default_difficulty: int = Field(default=DEFAULT_DIFFICULTY, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a JSON file, falling back to defaults.

    Args:
        path: Settings file to read (default: ~/.flashdeck/settings.json)

    Returns:
        Settings built from the file, or the defaults if the file is
        missing or invalid
    """
    path = Path(path) if path else SETTINGS_FILEPATH
    if not path.exists():
        return Settings()
    try:
        with open(path, 'r', encoding='utf-8') as file:
            settings = Settings(**json.load(file))
    except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
        logger.error(f"Ignoring invalid settings file {path}: {e}")
        return Settings()
    if settings.log_level.upper() not in LOG_LEVELS:
        logger.warning(f"Unknown log level {settings.log_level}, using WARNING")
        settings.log_level = 'WARNING'
    logger.info(f"Loaded settings from {path}")
    return settings
