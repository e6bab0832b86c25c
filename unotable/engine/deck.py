"""Deck creation and shuffling."""

import random
from typing import List, Optional, Sequence

from unotable.engine.card import COLORS, Card, CardType, Color

ACTION_FACES = (CardType.SKIP, CardType.REVERSE, CardType.DRAW_TWO)

DECK_SIZE = 108


def _resolve_rng(rng: Optional[random.Random], seed: Optional[int] = None) -> random.Random:
    if rng is not None:
        return rng
    return random.Random(seed)


def build_cards() -> List[Card]:
    """Return the canonical 108-card multiset in construction order.

    - 4 colors x (one 0, two each of 1-9, Skip, Reverse, Draw Two): 100 cards
    - 4 Wild, 4 Wild Draw Four: 8 cards
    """
    cards: List[Card] = []
    counter = 0

    def add(color: Color, card_type: CardType, value: Optional[int] = None) -> None:
        nonlocal counter
        cards.append(Card(id=f"card-{counter}", color=color, type=card_type, value=value))
        counter += 1

    for color in COLORS:
        # One zero per color
        add(color, CardType.NUMBER, 0)
        for value in range(1, 10):
            add(color, CardType.NUMBER, value)
            add(color, CardType.NUMBER, value)
        for _ in range(2):
            for face in ACTION_FACES:
                add(color, face)

    for _ in range(4):
        add(Color.WILD, CardType.WILD)
        add(Color.WILD, CardType.WILD_DRAW_FOUR)

    return cards


def shuffle_deck(deck: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Return a uniformly shuffled copy of ``deck``; the input is left untouched."""
    shuffled = list(deck)
    # random.shuffle is a Fisher-Yates shuffle
    _resolve_rng(rng).shuffle(shuffled)
    return shuffled


def create_deck(seed: Optional[int] = None, rng: Optional[random.Random] = None) -> List[Card]:
    """Create a freshly shuffled standard 108-card UNO deck.

    Pass either ``seed`` or an ``rng`` for a reproducible order.
    """
    return shuffle_deck(build_cards(), rng=_resolve_rng(rng, seed))
