"""Exceptions raised by flashdeck."""


class FlashdeckError(Exception):
    """Base class for flashdeck errors."""


class InvalidDifficultyError(FlashdeckError, ValueError):
    """Raised when a difficulty rating falls outside the allowed range."""

    def __init__(self, level):
        self.level = level
        super().__init__(f"Invalid difficulty level: {level}")
