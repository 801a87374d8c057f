"""Navigation and practice-session state driven on top of the store."""
import logging
import random
from concurrent.futures import Future
from typing import Callable, List, Optional, TypeVar

from pydantic import BaseModel, Field

from flashdeck.classes.models import (
    DEFAULT_DIFFICULTY,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    CardSideContent,
    Deck,
    Flashcard,
)
from flashdeck.classes.views import ViewMode
from flashdeck.images import ImageLoader, PathLike
from flashdeck.store import FlashcardsStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def shuffle(items: List[T], rng: random.Random) -> List[T]:
    """Return a Fisher-Yates shuffled copy of items."""
    arr = list(items)
    for i in range(len(arr) - 1, 0, -1):
        j = rng.randint(0, i)
        arr[i], arr[j] = arr[j], arr[i]
    return arr


class CardForm(BaseModel):
    """Working copy of the card being created or edited.

    Attributes:
        editing_card_id: ID of the card being edited, None when creating
        front_text: Text typed for the front side
        front_image: Data URL of the front image
        back_text: Text typed for the back side
        back_image: Data URL of the back image
    """

    editing_card_id: Optional[str] = None
    front_text: str = ''
    front_image: Optional[str] = None
    back_text: str = ''
    back_image: Optional[str] = None

    def front_side(self) -> CardSideContent:
        return CardSideContent(text=self.front_text, image_data_url=self.front_image).normalized()

    def back_side(self) -> CardSideContent:
        return CardSideContent(text=self.back_text, image_data_url=self.back_image).normalized()


class PracticeSession(BaseModel):
    """One shuffled pass over a deck's cards."""

    cards: List[Flashcard] = Field(default_factory=list)
    index: int = 0
    revealed: bool = False
    finished: bool = False
    active: bool = False


def always_confirm(message: str) -> bool:
    return True


class SessionController:
    """Tracks the active screen and drives card editing and practice.

    Holds no durable state: everything shown is re-read from the store
    through ``refresh`` after each mutation.
    """

    def __init__(self, store: FlashcardsStore,
                 confirm: Callable[[str], bool] = always_confirm,
                 image_loader: Optional[ImageLoader] = None,
                 rng: Optional[random.Random] = None,
                 default_difficulty: int = DEFAULT_DIFFICULTY):
        """
        Initialize the controller.

        Args:
            store (FlashcardsStore): Store holding decks and cards.
            confirm (Callable[[str], bool]): Yes/no prompt gating deletions.
            image_loader (ImageLoader, optional): Background image reader.
            rng (random.Random, optional): Randomness for practice order.
            default_difficulty (int): Difficulty given to new cards.
        """
        self.store = store
        self.confirm = confirm
        self.image_loader = image_loader or ImageLoader()
        self.rng = rng or random.Random()
        self.default_difficulty = default_difficulty

        self.decks: List[Deck] = []
        self.selected_deck_id: Optional[str] = None
        self.view_mode: ViewMode = ViewMode.NONE
        self.card_form = CardForm()
        self.practice = PracticeSession()
        self.refresh()

    # Derived values

    @property
    def selected_deck(self) -> Optional[Deck]:
        if not self.selected_deck_id:
            return None
        for deck in self.decks:
            if deck.id == self.selected_deck_id:
                return deck
        return None

    @property
    def current_practice_card(self) -> Optional[Flashcard]:
        if not self.practice.active:
            return None
        if not 0 <= self.practice.index < len(self.practice.cards):
            return None
        return self.practice.cards[self.practice.index]

    def refresh(self) -> None:
        """Re-read all decks and drop a selection whose deck no longer exists."""
        self.decks = self.store.get_decks()
        if self.selected_deck_id and self.selected_deck is None:
            self.selected_deck_id = None
            self.view_mode = ViewMode.NONE

    # Navigation

    def select_deck(self, deck_id: str) -> None:
        if not any(deck.id == deck_id for deck in self.decks):
            return
        self.selected_deck_id = deck_id
        self.view_mode = ViewMode.MENU
        self.exit_practice()
        self.reset_card_form()

    def back_to_deck_list(self) -> None:
        self.selected_deck_id = None
        self.view_mode = ViewMode.NONE
        self.exit_practice()
        self.reset_card_form()

    def go_to_edit_mode(self) -> None:
        if not self.selected_deck:
            return
        self.view_mode = ViewMode.EDIT
        self.exit_practice()

    def go_to_practice_mode(self) -> None:
        if not self.selected_deck:
            return
        self.view_mode = ViewMode.PRACTICE
        self.exit_practice()
        self.start_practice()

    def back_to_deck_menu(self) -> None:
        if not self.selected_deck:
            self.back_to_deck_list()
            return
        self.exit_practice()
        self.view_mode = ViewMode.MENU

    # Decks

    def create_deck(self, name: str, description: str = '') -> Optional[Deck]:
        """Create a deck from the new-deck form. Blank names are ignored."""
        if not name or not name.strip():
            return None
        deck = self.store.create_deck(name, description or None)
        self.refresh()
        return deck

    def rename_deck(self, deck_id: str, name: Optional[str] = None,
                    description: Optional[str] = None) -> Optional[Deck]:
        updates = {}
        if name is not None and name.strip():
            updates['name'] = name
        if description is not None:
            updates['description'] = description
        if not updates:
            return None
        deck = self.store.update_deck(deck_id, updates)
        self.refresh()
        return deck

    def delete_deck(self, deck_id: str) -> bool:
        """Delete a deck after confirmation. Returns True if it was deleted."""
        deck = next((d for d in self.decks if d.id == deck_id), None)
        if not deck:
            return False
        if not self.confirm(f'Really delete deck "{deck.name}"?'):
            return False
        self.store.delete_deck(deck_id)
        self.refresh()
        self.back_to_deck_list()
        return True

    # Cards

    def start_create_card(self) -> None:
        self.reset_card_form()

    def start_edit_card(self, card_id: str) -> None:
        deck = self.selected_deck
        if not deck:
            return
        card = next((c for c in deck.cards if c.id == card_id), None)
        if not card:
            return
        self.card_form = CardForm(
            editing_card_id=card.id,
            front_text=card.front.text,
            front_image=card.front.image_data_url,
            back_text=card.back.text,
            back_image=card.back.image_data_url,
        )

    def save_card(self) -> Optional[Flashcard]:
        """Create or update a card from the form.

        Returns:
            The saved card, or None if nothing was saved (no deck selected,
            or both sides empty).
        """
        deck = self.selected_deck
        if not deck:
            return None

        front = self.card_form.front_side()
        back = self.card_form.back_side()
        if front.is_empty() and back.is_empty():
            logger.debug("Ignoring empty card")
            return None

        if self.card_form.editing_card_id:
            card = self.store.update_card(deck.id, self.card_form.editing_card_id,
                                          {'front': front, 'back': back})
        else:
            card = self.store.create_card(deck.id, front, back, self.default_difficulty)

        self.reset_card_form()
        self.refresh()
        return card

    def delete_card(self, card_id: str) -> bool:
        deck = self.selected_deck
        if not deck:
            return False
        if not self.confirm("Really delete this card?"):
            return False
        self.store.delete_card(deck.id, card_id)
        self.refresh()
        return True

    def reset_card_form(self) -> None:
        self.card_form = CardForm()

    # Images

    def select_front_image(self, image_path: PathLike) -> Future:
        return self.image_loader.load(image_path, self._set_front_image)

    def select_back_image(self, image_path: PathLike) -> Future:
        return self.image_loader.load(image_path, self._set_back_image)

    def clear_front_image(self) -> None:
        self.card_form.front_image = None

    def clear_back_image(self) -> None:
        self.card_form.back_image = None

    def _set_front_image(self, data_url: str) -> None:
        self.card_form.front_image = data_url

    def _set_back_image(self, data_url: str) -> None:
        self.card_form.back_image = data_url

    # Practice

    def start_practice(self) -> bool:
        """Begin a shuffled pass over the selected deck.

        Returns:
            bool: False (and nothing changes) if no deck is selected or it
            has no cards.
        """
        deck = self.selected_deck
        if not deck or not deck.cards:
            return False

        cards = [card.model_copy(deep=True) for card in deck.cards]
        self.practice = PracticeSession(cards=shuffle(cards, self.rng), active=True)
        logger.debug(f"Started practice on {deck.name!r} with {len(cards)} cards")
        return True

    def exit_practice(self) -> None:
        self.practice = PracticeSession()

    def reveal(self) -> None:
        if not self.practice.active or self.practice.finished or not self.current_practice_card:
            return
        self.practice.revealed = not self.practice.revealed

    def rate_current_card(self, level: int) -> Optional[Flashcard]:
        """Rate the current card and move on to the next one.

        Levels outside 1..10 are ignored.
        """
        deck = self.selected_deck
        card = self.current_practice_card
        if not deck or not card:
            return None
        if not MIN_DIFFICULTY <= level <= MAX_DIFFICULTY:
            return None

        rated = self.store.set_card_difficulty(deck.id, card.id, level)
        self._next_practice_card()
        self.refresh()
        return rated

    def _next_practice_card(self) -> None:
        if self.practice.index + 1 >= len(self.practice.cards):
            self.practice.finished = True
            self.practice.active = False
            logger.debug("Practice session finished")
            return
        self.practice.index += 1
        self.practice.revealed = False
