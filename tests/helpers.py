"""Builders for hand-crafted match states used across the tests."""

import itertools
from typing import Iterable, Optional, Sequence

from unotable.engine import Card, CardType, Color, MatchState, MatchStatus, Player

_ids = itertools.count()


def card(color: Color, card_type: CardType, value: Optional[int] = None) -> Card:
    return Card(id=f"t-{next(_ids)}", color=color, type=card_type, value=value)


def num(color: Color, value: int) -> Card:
    return card(color, CardType.NUMBER, value)


def wild(card_type: CardType = CardType.WILD) -> Card:
    return card(Color.WILD, card_type)


def filler(n: int) -> list:
    """``n`` distinct cards for padding decks and discard piles."""
    return [num(Color.BLUE, i % 10) for i in range(n)]


def make_state(
    hands: Sequence[Iterable[Card]],
    top: Card,
    deck: Sequence[Card] = (),
    below_top: Sequence[Card] = (),
    current: int = 0,
    direction: int = 1,
    active_color: Optional[Color] = None,
    target_score: int = 500,
    computer_seats: Sequence[int] = (),
    scores: Optional[Sequence[int]] = None,
) -> MatchState:
    players = tuple(
        Player(
            id=f"p{i}",
            name=f"P{i}",
            is_computer=i in computer_seats,
            hand=tuple(h),
            score=scores[i] if scores else 0,
        )
        for i, h in enumerate(hands)
    )
    return MatchState(
        deck=tuple(deck),
        discard_pile=tuple(below_top) + (top,),
        players=players,
        current_index=current,
        direction=direction,
        status=MatchStatus.PLAYING,
        active_color=active_color or (Color.RED if top.is_wild else top.color),
        target_score=target_score,
    )
