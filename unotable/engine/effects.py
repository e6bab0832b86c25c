"""Card effects and shared draw mechanics."""

import random
from dataclasses import replace
from typing import Optional

from unotable.engine.card import Card, CardType
from unotable.engine.deck import shuffle_deck
from unotable.engine.game_state import MatchState
from unotable.engine.turns import advance_turn, next_index

PENALTY_DRAWS = {
    CardType.DRAW_TWO: 2,
    CardType.WILD_DRAW_FOUR: 4,
}


def draw_cards(
    state: MatchState,
    player_index: int,
    count: int,
    rng: Optional[random.Random] = None,
) -> MatchState:
    """Move up to ``count`` cards from the front of the deck into a hand.

    When the deck is short, the discard pile (minus its top card) is shuffled
    and appended to the deck first. If both piles are exhausted fewer cards
    are drawn.
    """
    deck = list(state.deck)
    discard = list(state.discard_pile)

    if len(deck) < count and len(discard) > 1:
        top = discard.pop()
        deck.extend(shuffle_deck(discard, rng=rng))
        discard = [top]

    n = min(count, len(deck))
    drawn, deck = deck[:n], deck[n:]
    player = state.players[player_index]
    state = state.with_player(player_index, replace(player, hand=player.hand + tuple(drawn)))
    return replace(state, deck=tuple(deck), discard_pile=tuple(discard))


def apply_card_effect(
    state: MatchState,
    card: Card,
    rng: Optional[random.Random] = None,
) -> MatchState:
    """Resolve a played card's side effects.

    The play pipeline advances the turn once more afterwards, so an extra
    advance here is what skips a player.
    """
    if not card.is_wild:
        state = replace(state, active_color=card.color)

    if card.type == CardType.SKIP:
        state = advance_turn(state)
    elif card.type == CardType.REVERSE:
        if len(state.players) == 2:
            state = advance_turn(state)
        else:
            state = replace(state, direction=-state.direction)
    elif card.type in PENALTY_DRAWS:
        victim = next_index(state.current_index, state.direction, len(state.players))
        state = draw_cards(state, victim, PENALTY_DRAWS[card.type], rng=rng)
        state = advance_turn(state)

    return state
