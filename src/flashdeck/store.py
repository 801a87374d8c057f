"""Persistent state store for decks and flashcards."""
import json
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from pydantic import ValidationError
from typing_extensions import TypedDict

from flashdeck.classes.models import (
    DEFAULT_DIFFICULTY,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    CardSideContent,
    Deck,
    Flashcard,
    FlashcardsState,
)
from flashdeck.exceptions import InvalidDifficultyError
from flashdeck.paths import STORAGE_KEY
from flashdeck.storage import KeyValueStorage

logger = logging.getLogger(__name__)


class DeckUpdates(TypedDict, total=False):
    name: str
    description: str


class CardUpdates(TypedDict, total=False):
    front: CardSideContent
    back: CardSideContent


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    return str(uuid4())


def check_difficulty(level: int) -> None:
    """Raise InvalidDifficultyError unless level is an int in 1..10."""
    if isinstance(level, bool) or not isinstance(level, int) \
            or not MIN_DIFFICULTY <= level <= MAX_DIFFICULTY:
        raise InvalidDifficultyError(level)


def parse_state(raw: str) -> Optional[FlashcardsState]:
    """Parse a stored state blob, keeping every deck and card that validates.

    Args:
        raw: JSON text read from storage

    Returns:
        The parsed state with malformed decks and cards dropped, or None if
        the text is not JSON or has no ``decks`` list
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Discarding unparsable stored state: {str(e)}")
        return None
    if not isinstance(data, dict) or not isinstance(data.get('decks'), list):
        logger.warning("Discarding stored state without a decks list")
        return None

    decks = []
    for i, raw_deck in enumerate(data['decks']):
        if not isinstance(raw_deck, dict):
            logger.warning(f"Dropping stored deck {i}: not an object")
            continue
        raw_cards = raw_deck.get('cards', [])
        if not isinstance(raw_cards, list):
            logger.warning(f"Dropping cards of stored deck {i}: not a list")
            raw_cards = []
        try:
            deck = Deck.model_validate({**raw_deck, 'cards': []})
        except ValidationError as e:
            logger.warning(f"Dropping stored deck {i}: {str(e)}")
            continue
        for j, raw_card in enumerate(raw_cards):
            try:
                deck.cards.append(Flashcard.model_validate(raw_card))
            except ValidationError as e:
                logger.warning(f"Dropping card {j} of deck {deck.name!r}: {str(e)}")
        decks.append(deck)
    return FlashcardsState(decks=decks)


class FlashcardsStore:
    """Single source of truth for decks and cards.

    Every successful mutation is written through to storage before the
    call returns. Readers always get deep copies, so only the store holds
    references to the live model.
    """

    def __init__(self, storage: KeyValueStorage, storage_key: str = STORAGE_KEY,
                 clock: Callable[[], datetime] = utc_now):
        """
        Initialize the store and load the persisted state.

        Args:
            storage (KeyValueStorage): Durable key-value storage
            storage_key (str): Key the state blob lives under
            clock (Callable[[], datetime]): Source of timestamps
        """
        self.storage = storage
        self.storage_key = storage_key
        self.clock = clock
        loaded = self.load_from_storage()
        self.state: FlashcardsState = loaded if loaded is not None else self.create_initial_state()
        self.persist()

    # Readers

    def get_state(self) -> FlashcardsState:
        return self.state.model_copy(deep=True)

    def get_decks(self) -> List[Deck]:
        return [deck.model_copy(deep=True) for deck in self.state.decks]

    def get_deck_by_id(self, deck_id: str) -> Optional[Deck]:
        deck = self.find_deck(deck_id)
        return deck.model_copy(deep=True) if deck else None

    # Decks

    def create_deck(self, name: str, description: Optional[str] = None) -> Deck:
        deck = Deck(
            id=generate_id(),
            name=name.strip(),
            description=description.strip() if description else None,
        )
        self.state.decks.append(deck)
        self.persist()
        logger.info(f"Created deck {deck.name!r} ({deck.id})")
        return deck.model_copy(deep=True)

    def update_deck(self, deck_id: str, updates: DeckUpdates) -> Optional[Deck]:
        """Apply a partial update to a deck's name and/or description.

        Args:
            deck_id: ID of the deck to update
            updates: Fields to change; string values are trimmed

        Returns:
            Copy of the updated deck, or None if it does not exist
        """
        deck = self.find_deck(deck_id)
        if not deck:
            return None

        if isinstance(updates.get('name'), str):
            deck.name = updates['name'].strip()
        if isinstance(updates.get('description'), str):
            deck.description = updates['description'].strip()

        self.persist()
        return deck.model_copy(deep=True)

    def delete_deck(self, deck_id: str) -> None:
        """Remove a deck together with all of its cards. Unknown IDs are ignored."""
        self.state.decks = [deck for deck in self.state.decks if deck.id != deck_id]
        self.persist()

    # Cards

    def create_card(self, deck_id: str, front: CardSideContent, back: CardSideContent,
                    difficulty: int = DEFAULT_DIFFICULTY) -> Optional[Flashcard]:
        check_difficulty(difficulty)
        deck = self.find_deck(deck_id)
        if not deck:
            return None

        now = self.clock()
        card = Flashcard(
            id=generate_id(),
            front=front.normalized(),
            back=back.normalized(),
            difficulty=difficulty,
            created_at=now,
            updated_at=now,
        )
        deck.cards.append(card)
        self.persist()
        return card.model_copy(deep=True)

    def update_card(self, deck_id: str, card_id: str, updates: CardUpdates) -> Optional[Flashcard]:
        deck = self.find_deck(deck_id)
        if not deck:
            return None
        card = self.find_card(deck, card_id)
        if not card:
            return None

        if updates.get('front'):
            card.front = updates['front'].normalized()
        if updates.get('back'):
            card.back = updates['back'].normalized()
        card.updated_at = self.clock()

        self.persist()
        return card.model_copy(deep=True)

    def delete_card(self, deck_id: str, card_id: str) -> None:
        deck = self.find_deck(deck_id)
        if not deck:
            return
        deck.cards = [card for card in deck.cards if card.id != card_id]
        self.persist()

    def set_card_difficulty(self, deck_id: str, card_id: str, level: int) -> Optional[Flashcard]:
        """Record the difficulty chosen for a card after reviewing it.

        Args:
            deck_id: ID of the deck holding the card
            card_id: ID of the card
            level: Difficulty from 1 (easy) to 10 (hard)

        Returns:
            Copy of the updated card, or None if deck or card is missing

        Raises:
            InvalidDifficultyError: If level is outside 1..10, whether or
                not the deck and card exist
        """
        check_difficulty(level)

        deck = self.find_deck(deck_id)
        if not deck:
            return None
        card = self.find_card(deck, card_id)
        if not card:
            return None

        card.difficulty = level
        card.updated_at = self.clock()
        self.persist()
        return card.model_copy(deep=True)

    # Internals

    def create_initial_state(self) -> FlashcardsState:
        return FlashcardsState(decks=[])

    def find_deck(self, deck_id: str) -> Optional[Deck]:
        for deck in self.state.decks:
            if deck.id == deck_id:
                return deck
        return None

    def find_card(self, deck: Deck, card_id: str) -> Optional[Flashcard]:
        for card in deck.cards:
            if card.id == card_id:
                return card
        return None

    def load_from_storage(self) -> Optional[FlashcardsState]:
        """Read and parse the stored state, or None if absent or corrupt."""
        try:
            raw = self.storage.get(self.storage_key)
        except Exception as e:
            logger.warning(f"Could not read stored state: {str(e)}")
            return None
        if not raw:
            return None
        state = parse_state(raw)
        if state is None:
            return None
        logger.info(f"Loaded {len(state.decks)} decks from storage")
        return state

    def persist(self) -> None:
        """Write the whole state to storage. Failures are logged and ignored."""
        try:
            saved = self.storage.set(self.storage_key, self.state.to_json())
        except Exception as e:
            logger.warning(f"Could not persist state: {str(e)}")
            return
        if not saved:
            logger.warning("Could not persist state, continuing in memory")
