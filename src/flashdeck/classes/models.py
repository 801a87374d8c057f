"""Deck and flashcard models persisted by the store."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10
DEFAULT_DIFFICULTY = 5
ALL_DIFFICULTY_LEVELS = list(range(MIN_DIFFICULTY, MAX_DIFFICULTY + 1))


class FlashdeckModel(BaseModel):
    """Base model mapping snake_case attributes to the camelCase JSON layout."""

    model_config = ConfigDict(populate_by_name=True)


class CardSideContent(FlashdeckModel):
    """One side of a card.

    Attributes:
        text: Text shown on this side, always trimmed once normalized
        image_data_url: Optional embedded image (a ``data:`` URL)
    """

    text: str = ''
    image_data_url: Optional[str] = Field(default=None, alias='imageDataUrl')

    def normalized(self) -> 'CardSideContent':
        """Return a trimmed copy with an empty image reference dropped."""
        return CardSideContent(
            text=(self.text or '').strip(),
            image_data_url=self.image_data_url or None,
        )

    def is_empty(self) -> bool:
        return not self.text and not self.image_data_url


class Flashcard(FlashdeckModel):
    id: str
    front: CardSideContent
    back: CardSideContent
    difficulty: int = Field(default=DEFAULT_DIFFICULTY, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    created_at: datetime = Field(alias='createdAt')
    updated_at: Optional[datetime] = Field(default=None, alias='updatedAt')


class Deck(FlashdeckModel):
    """A named collection of flashcards, in insertion order."""

    id: str
    name: str
    description: Optional[str] = None
    cards: list[Flashcard] = Field(default_factory=list)


class FlashcardsState(FlashdeckModel):
    """The persisted root. ``decks`` is required so a blob without it is rejected."""

    decks: list[Deck]

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, raw: str) -> 'FlashcardsState':
        return cls.model_validate_json(raw)
