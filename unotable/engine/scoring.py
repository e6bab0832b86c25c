"""Round-end scoring."""

from typing import Iterable

from unotable.engine.card import ACTION_TYPES, WILD_TYPES, Card, CardType
from unotable.engine.game_state import MatchState

ACTION_POINTS = 20
WILD_POINTS = 50


def card_points(card: Card) -> int:
    if card.type == CardType.NUMBER:
        return card.value or 0
    if card.type in ACTION_TYPES:
        return ACTION_POINTS
    if card.type in WILD_TYPES:
        return WILD_POINTS
    return 0


def calculate_hand_score(hand: Iterable[Card]) -> int:
    """Point value of a hand left over at the end of a round."""
    return sum(card_points(card) for card in hand)


def round_points(state: MatchState, winner_index: int) -> int:
    """Points the round winner collects: every other player's hand value."""
    return sum(
        calculate_hand_score(p.hand)
        for i, p in enumerate(state.players)
        if i != winner_index
    )
