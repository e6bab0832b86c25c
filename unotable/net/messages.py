"""Peer message contract and its JSON wire codec."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from unotable.engine import COLORS, Color, MatchState
from unotable.engine.serialize import restore, snapshot


class ProtocolError(Exception):
    """Raised when a peer message cannot be decoded."""


class MessageKind(str, Enum):
    STATE_UPDATE = "STATE_UPDATE"  # authority -> follower, full state
    PLAYER_MOVE = "PLAYER_MOVE"  # follower -> authority, card id + wild color
    PLAYER_DRAW = "PLAYER_DRAW"  # follower -> authority
    RESTART_REQUEST = "RESTART_REQUEST"  # follower -> authority


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    payload: Dict[str, Any] = field(default_factory=dict)


def state_update(state: MatchState, sequence: int) -> Message:
    return Message(MessageKind.STATE_UPDATE, {"sequence": sequence, "state": snapshot(state)})


def player_move(card_id: str, wild_color: Optional[Color] = None) -> Message:
    return Message(
        MessageKind.PLAYER_MOVE,
        {"card_id": card_id, "wild_color": wild_color.value if wild_color else None},
    )


def player_draw() -> Message:
    return Message(MessageKind.PLAYER_DRAW)


def restart_request() -> Message:
    return Message(MessageKind.RESTART_REQUEST)


def encode_message(message: Message) -> str:
    return json.dumps({"type": message.kind.value, "payload": message.payload}, separators=(",", ":"))


def decode_message(raw: str) -> Message:
    """Parse and validate one wire message."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError("Message must be a JSON object")
    try:
        kind = MessageKind(data.get("type"))
    except ValueError as e:
        raise ProtocolError(f"Unknown message type: {data.get('type')!r}") from e
    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        raise ProtocolError("Payload must be a JSON object")

    if kind == MessageKind.STATE_UPDATE:
        if not isinstance(payload.get("sequence"), int) or not isinstance(payload.get("state"), dict):
            raise ProtocolError("STATE_UPDATE needs an integer sequence and a state")
    elif kind == MessageKind.PLAYER_MOVE:
        if not isinstance(payload.get("card_id"), str):
            raise ProtocolError("PLAYER_MOVE needs a card_id")
    return Message(kind, payload)


def snapshot_state(message: Message) -> MatchState:
    """The MatchState carried by a STATE_UPDATE message."""
    try:
        return restore(message.payload["state"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed state snapshot: {e}") from e


def move_color(message: Message) -> Optional[Color]:
    """The wild color of a PLAYER_MOVE, None if absent or not a playable color."""
    raw = message.payload.get("wild_color")
    if raw is None:
        return None
    try:
        color = Color(raw)
    except ValueError:
        return None
    return color if color in COLORS else None
