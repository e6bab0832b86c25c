"""JSON-friendly snapshots of match state."""

from typing import Any, Dict, Mapping

from unotable.engine.card import Card, CardType, Color
from unotable.engine.game_state import MatchState, MatchStatus, Player


def card_to_dict(card: Card) -> Dict[str, Any]:
    return {
        "id": card.id,
        "color": card.color.value,
        "type": card.type.value,
        "value": card.value,
    }


def card_from_dict(data: Mapping[str, Any]) -> Card:
    return Card(
        id=str(data["id"]),
        color=Color(data["color"]),
        type=CardType(data["type"]),
        value=data.get("value"),
    )


def _player_to_dict(p: Player) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "is_computer": p.is_computer,
        "hand": [card_to_dict(c) for c in p.hand],
        "score": p.score,
        "avatar": p.avatar,
    }


def _player_from_dict(data: Mapping[str, Any]) -> Player:
    return Player(
        id=str(data["id"]),
        name=str(data["name"]),
        is_computer=bool(data.get("is_computer", False)),
        hand=tuple(card_from_dict(c) for c in data.get("hand", [])),
        score=int(data.get("score", 0)),
        avatar=str(data.get("avatar", "")),
    )


def snapshot(state: MatchState) -> Dict[str, Any]:
    """Return a JSON-serializable canonical snapshot of the match state."""
    return {
        "deck": [card_to_dict(c) for c in state.deck],
        "discard_pile": [card_to_dict(c) for c in state.discard_pile],
        "players": [_player_to_dict(p) for p in state.players],
        "current_index": state.current_index,
        "direction": state.direction,
        "status": state.status.value,
        "active_color": state.active_color.value,
        "winner": state.winner,
        "round_winner": state.round_winner,
        "points_won": state.points_won,
        "commentary": state.commentary,
        "target_score": state.target_score,
    }


def restore(data: Mapping[str, Any]) -> MatchState:
    """Rebuild a MatchState from :func:`snapshot` output.

    Raises KeyError/ValueError on malformed data.
    """
    direction = int(data["direction"])
    if direction not in (1, -1):
        raise ValueError(f"Invalid direction: {direction}")
    players = tuple(_player_from_dict(p) for p in data["players"])
    current_index = int(data["current_index"])
    if players and not 0 <= current_index < len(players):
        raise ValueError(f"current_index {current_index} out of range for {len(players)} players")
    return MatchState(
        deck=tuple(card_from_dict(c) for c in data["deck"]),
        discard_pile=tuple(card_from_dict(c) for c in data["discard_pile"]),
        players=players,
        current_index=current_index,
        direction=direction,
        status=MatchStatus(data["status"]),
        active_color=Color(data["active_color"]),
        winner=data.get("winner"),
        round_winner=data.get("round_winner"),
        points_won=int(data.get("points_won", 0)),
        commentary=str(data.get("commentary", "")),
        target_score=int(data["target_score"]),
    )
