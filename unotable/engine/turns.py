"""Turn order and round setup."""

import random
from dataclasses import replace
from enum import Enum
from typing import List, Optional, Sequence

from unotable.engine.card import Card, CardType, Color
from unotable.engine.deck import create_deck
from unotable.engine.game_state import (
    DEFAULT_TARGET_SCORE,
    HAND_SIZE,
    MatchState,
    MatchStatus,
    Player,
)


class GameMode(str, Enum):
    """How the players are seated."""

    AI = "ai"
    LOCAL = "local"
    ONLINE = "online"


def next_index(index: int, direction: int, count: int) -> int:
    """Index of the next seat, wrapping around in both directions."""
    return (index + direction) % count


def advance_turn(state: MatchState) -> MatchState:
    """Pass the turn to the next player in the current direction."""
    return replace(
        state,
        current_index=next_index(state.current_index, state.direction, len(state.players)),
    )


def _flip_starting_card(deck: List[Card]) -> Card:
    # A Wild Draw Four never starts the pile; send it to the bottom.
    start = deck.pop(0)
    while start.type == CardType.WILD_DRAW_FOUR:
        deck.append(start)
        start = deck.pop(0)
    return start


def setup_round(
    players: Sequence[Player],
    start_index: int = 0,
    rng: Optional[random.Random] = None,
    target_score: int = DEFAULT_TARGET_SCORE,
    commentary: str = "",
) -> MatchState:
    """Deal a fresh round: new deck, starting card, 7 cards each. Scores are kept."""
    if not players:
        raise ValueError("A round needs at least one player")
    deck = create_deck(rng=rng)
    start = _flip_starting_card(deck)

    dealt = []
    for p in players:
        hand, deck = deck[:HAND_SIZE], deck[HAND_SIZE:]
        dealt.append(replace(p, hand=tuple(hand)))

    return MatchState(
        deck=tuple(deck),
        discard_pile=(start,),
        players=tuple(dealt),
        current_index=start_index % len(players),
        direction=1,
        status=MatchStatus.PLAYING,
        active_color=Color.RED if start.is_wild else start.color,
        commentary=commentary,
        target_score=target_score,
    )


def start_match(
    players: Sequence[Player],
    start_index: int = 0,
    rng: Optional[random.Random] = None,
    target_score: int = DEFAULT_TARGET_SCORE,
    commentary: str = "",
) -> MatchState:
    """Start a brand new match: every score goes back to zero."""
    fresh = [replace(p, score=0, hand=()) for p in players]
    return setup_round(fresh, start_index, rng=rng, target_score=target_score, commentary=commentary)


def next_round(
    state: MatchState,
    start_index: int,
    rng: Optional[random.Random] = None,
    commentary: str = "",
) -> MatchState:
    """Deal the following round of the same match, keeping scores."""
    cleared = [replace(p, hand=()) for p in state.players]
    return setup_round(
        cleared, start_index, rng=rng, target_score=state.target_score, commentary=commentary
    )


def next_start_index(
    state: MatchState,
    mode: GameMode,
    rng: Optional[random.Random] = None,
) -> int:
    """Who opens the next round: rotate for fixed seats, random against the computer."""
    count = len(state.players)
    if mode == GameMode.AI:
        return (rng or random.Random()).randrange(count)
    return next_index(state.current_index, 1, count)
