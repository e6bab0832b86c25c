"""Card, Color and CardType types for UNO."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Color(str, Enum):
    """Card colors. WILD is the pseudo-color of wild cards."""

    RED = "RED"
    BLUE = "BLUE"
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    WILD = "WILD"


# Playable colors in canonical order (used for tie-breaks).
COLORS = (Color.RED, Color.BLUE, Color.GREEN, Color.YELLOW)


class CardType(str, Enum):
    """Card faces."""

    NUMBER = "NUMBER"
    SKIP = "SKIP"
    REVERSE = "REVERSE"
    DRAW_TWO = "DRAW_TWO"
    WILD = "WILD"
    WILD_DRAW_FOUR = "WILD_DRAW_FOUR"


WILD_TYPES = (CardType.WILD, CardType.WILD_DRAW_FOUR)
ACTION_TYPES = (CardType.SKIP, CardType.REVERSE, CardType.DRAW_TWO)


@dataclass(frozen=True)
class Card:
    """A UNO card.

    For number cards: color is playable, value is 0-9.
    For skip/reverse/draw_two: color is playable, value is None.
    For wild cards: color is Color.WILD, value is None.
    """

    id: str
    color: Color
    type: CardType
    value: Optional[int] = None

    def __post_init__(self) -> None:
        if self.type == CardType.NUMBER:
            if self.value is None or not 0 <= self.value <= 9:
                raise ValueError(f"Number card needs a value 0-9, got {self.value!r}")
        elif self.value is not None:
            raise ValueError(f"{self.type.value} cards carry no value")
        if self.type in WILD_TYPES and self.color != Color.WILD:
            raise ValueError("Wild cards must have color=WILD")
        if self.type not in WILD_TYPES and self.color == Color.WILD:
            raise ValueError("Non-wild cards must have a playable color")

    @property
    def is_wild(self) -> bool:
        return self.type in WILD_TYPES

    def describe(self) -> str:
        """Short human/LLM readable description, e.g. ``RED NUMBER 7``."""
        if self.value is None:
            return f"{self.color.value} {self.type.value}"
        return f"{self.color.value} {self.type.value} {self.value}"

    def __str__(self) -> str:
        if self.is_wild:
            return self.type.value.lower()
        face = str(self.value) if self.type == CardType.NUMBER else self.type.value.lower()
        return f"{self.color.value.lower()}_{face}"
