"""Key-value storage backends for the flashcards state."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Durable string storage addressed by key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        """Store value under key, overwriting. Returns False on failure."""


class FileStorage(KeyValueStorage):
    """Stores each key as ``<key>.json`` inside a data directory."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        file_path = self.path_for(key)
        try:
            with open(file_path, 'r', encoding='utf-8') as file:
                return file.read()
        except FileNotFoundError:
            logger.debug(f"No stored value at {file_path}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading {file_path}: {str(e)}")
            return None

    def set(self, key: str, value: str) -> bool:
        """Write value to the key's file.

        The value is written to a temporary file first and then moved into
        place, so a failed write never truncates the previous value.

        Args:
            key (str): Storage key
            value (str): Serialized value

        Returns:
            bool: True if the value was written
        """
        file_path = self.path_for(key)
        tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as file:
                file.write(value)
            tmp_path.replace(file_path)
        except OSError as e:
            logger.error(f"Error saving {file_path}: {str(e)}")
            return False
        logger.debug(f"Saved {len(value)} characters to {file_path}")
        return True


class MemoryStorage(KeyValueStorage):
    """Process-local storage, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> bool:
        self.values[key] = value
        return True
