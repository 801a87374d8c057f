"""Central configuration of paths for flashdeck."""
from pathlib import Path

# Data paths
DATA_DIR = Path.home() / ".flashdeck"
SETTINGS_FILEPATH = DATA_DIR / "settings.json"

# Fixed key the whole state is stored under
STORAGE_KEY = "flashcards-app-state-v1"
