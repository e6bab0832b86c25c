"""UNO rules: move legality and the play/draw pipeline."""

import logging
import random
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from unotable.engine.card import COLORS, Card, CardType, Color
from unotable.engine.effects import apply_card_effect, draw_cards
from unotable.engine.game_state import MatchState, MatchStatus
from unotable.engine.scoring import round_points
from unotable.engine.turns import advance_turn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayCard:
    """Action: play a card by id. For wilds, chosen_color is required."""

    card_id: str
    chosen_color: Optional[Color] = None


@dataclass(frozen=True)
class DrawCard:
    """Action: draw a card and pass the turn."""

    pass


Action = Union[PlayCard, DrawCard]


def is_valid_move(card: Card, top_card: Card, active_color: Color) -> bool:
    """Check if ``card`` can be played on ``top_card`` given the active color."""
    # Wild can always be played
    if card.is_wild:
        return True
    # Match by active color, which is the chosen color after a wild
    if card.color == active_color:
        return True
    # Match by symbol; numbers must also match value
    if card.type == top_card.type:
        if card.type == CardType.NUMBER:
            return card.value == top_card.value
        return True
    return False


def can_play_any(hand: Iterable[Card], top_card: Card, active_color: Color) -> bool:
    return any(is_valid_move(c, top_card, active_color) for c in hand)


def playable_cards(
    hand: Sequence[Card], top_card: Card, active_color: Color
) -> List[Tuple[int, Card]]:
    """(index, card) pairs of every legal play in ``hand``."""
    return [(i, c) for i, c in enumerate(hand) if is_valid_move(c, top_card, active_color)]


def _may_act(state: MatchState, player_index: int) -> bool:
    if state.status != MatchStatus.PLAYING:
        logger.debug("Rejected action from player %d: match is %s", player_index, state.status.value)
        return False
    if player_index != state.current_index:
        logger.debug("Rejected action from player %d: not their turn", player_index)
        return False
    return True


def play_card(
    state: MatchState,
    player_index: int,
    card_id: str,
    chosen_color: Optional[Color] = None,
    rng: Optional[random.Random] = None,
) -> MatchState:
    """Play a card from a player's hand and return the new match state.

    Illegal plays are rejected silently: the very same state object is
    returned, so callers can test ``new is old`` to give feedback.
    """
    if not _may_act(state, player_index):
        return state

    player = state.players[player_index]
    idx = player.find_card(card_id)
    if idx is None:
        logger.debug("Rejected play of %s: not in %s's hand", card_id, player.name)
        return state

    card = player.hand[idx]
    top = state.top_discard()
    if top is not None and not is_valid_move(card, top, state.active_color):
        logger.debug("Rejected play of %s on %s (active %s)", card, top, state.active_color.value)
        return state
    if card.is_wild and chosen_color not in COLORS:
        logger.debug("Rejected play of %s: no color chosen", card)
        return state

    hand = player.hand[:idx] + player.hand[idx + 1:]
    player = replace(player, hand=hand)
    state = state.with_player(player_index, player)
    state = replace(
        state,
        discard_pile=state.discard_pile + (card,),
        commentary=f"{player.name} played {card.describe()}",
    )
    if card.is_wild:
        state = replace(state, active_color=chosen_color)

    if not hand:
        return _finish_round(state, player_index)

    state = apply_card_effect(state, card, rng=rng)
    return advance_turn(state)


def _finish_round(state: MatchState, winner_index: int) -> MatchState:
    points = round_points(state, winner_index)
    winner = state.players[winner_index]
    winner = replace(winner, score=winner.score + points)
    state = state.with_player(winner_index, winner)
    state = replace(state, round_winner=winner.name, points_won=points)
    logger.info("%s wins the round (+%d, total %d)", winner.name, points, winner.score)

    if winner.score >= state.target_score:
        return replace(state, status=MatchStatus.GAME_OVER, winner=winner.name, commentary="Game Over!")
    return replace(state, status=MatchStatus.ROUND_OVER, commentary="Round Over!")


def draw_card(
    state: MatchState,
    player_index: int,
    rng: Optional[random.Random] = None,
) -> MatchState:
    """Draw one card and pass the turn."""
    drawn = draw_without_passing(state, player_index, rng=rng)
    if drawn is state:
        return state
    return advance_turn(drawn)


def draw_without_passing(
    state: MatchState,
    player_index: int,
    rng: Optional[random.Random] = None,
) -> MatchState:
    """Draw one card but keep the turn (the drawn card may be played next)."""
    if not _may_act(state, player_index):
        return state
    name = state.players[player_index].name
    return draw_cards(state, player_index, 1, rng=rng).with_commentary(f"{name} drew a card.")


def pass_turn(state: MatchState, player_index: int) -> MatchState:
    """End the current player's turn without playing."""
    if not _may_act(state, player_index):
        return state
    return advance_turn(state)


def last_drawn_card(state: MatchState, player_index: int) -> Optional[Card]:
    hand = state.players[player_index].hand
    return hand[-1] if hand else None


def get_legal_actions(state: MatchState, player_index: int) -> List[Action]:
    """Return all legal actions for a player (empty when it is not their turn)."""
    if state.status != MatchStatus.PLAYING or state.current_index != player_index:
        return []

    hand = state.players[player_index].hand
    top = state.top_discard()
    actions: List[Action] = []
    for card in hand:
        if top is not None and not is_valid_move(card, top, state.active_color):
            continue
        if card.is_wild:
            for color in COLORS:
                actions.append(PlayCard(card_id=card.id, chosen_color=color))
        else:
            actions.append(PlayCard(card_id=card.id))

    # Drawing is always allowed
    actions.append(DrawCard())
    return actions


def apply_action(
    state: MatchState,
    player_index: int,
    action: Action,
    rng: Optional[random.Random] = None,
) -> MatchState:
    """Apply an action and return the new match state."""
    if isinstance(action, DrawCard):
        return draw_card(state, player_index, rng=rng)
    return play_card(state, player_index, action.card_id, action.chosen_color, rng=rng)
