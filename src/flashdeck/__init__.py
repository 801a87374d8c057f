"""flashdeck - A terminal flashcard study app with local storage."""

from flashdeck.classes.models import CardSideContent, Deck, Flashcard, FlashcardsState
from flashdeck.classes.settings import Settings, load_settings
from flashdeck.classes.views import ViewMode
from flashdeck.exceptions import FlashdeckError, InvalidDifficultyError
from flashdeck.session import SessionController
from flashdeck.storage import FileStorage, KeyValueStorage, MemoryStorage
from flashdeck.store import FlashcardsStore

__all__ = [
    'CardSideContent',
    'Deck',
    'Flashcard',
    'FlashcardsState',
    'Settings',
    'load_settings',
    'ViewMode',
    'FlashdeckError',
    'InvalidDifficultyError',
    'SessionController',
    'FileStorage',
    'KeyValueStorage',
    'MemoryStorage',
    'FlashcardsStore',
]
