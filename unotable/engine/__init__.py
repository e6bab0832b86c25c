"""Game engine for UNO."""

from unotable.engine.card import COLORS, Card, CardType, Color
from unotable.engine.deck import create_deck, shuffle_deck
from unotable.engine.effects import apply_card_effect, draw_cards
from unotable.engine.game_state import MatchState, MatchStatus, Player, PlayerView
from unotable.engine.rules import (
    Action,
    PlayCard,
    DrawCard,
    is_valid_move,
    can_play_any,
    playable_cards,
    play_card,
    draw_card,
    get_legal_actions,
    apply_action,
)
from unotable.engine.scoring import calculate_hand_score
from unotable.engine.turns import (
    GameMode,
    advance_turn,
    next_round,
    next_start_index,
    setup_round,
    start_match,
)

__all__ = [
    "COLORS",
    "Card",
    "CardType",
    "Color",
    "create_deck",
    "shuffle_deck",
    "apply_card_effect",
    "draw_cards",
    "MatchState",
    "MatchStatus",
    "Player",
    "PlayerView",
    "Action",
    "PlayCard",
    "DrawCard",
    "is_valid_move",
    "can_play_any",
    "playable_cards",
    "play_card",
    "draw_card",
    "get_legal_actions",
    "apply_action",
    "calculate_hand_score",
    "GameMode",
    "advance_turn",
    "next_round",
    "next_start_index",
    "setup_round",
    "start_match",
]
