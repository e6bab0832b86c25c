"""Host-authoritative state synchronization between two peers.

The host owns the canonical MatchState and is the only peer that applies
game rules. The follower sends requests and renders whatever the last
snapshot said. Every host-side mutation is followed by exactly one
STATE_UPDATE broadcast; requests that change nothing get no answer.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Callable, List, Optional

from unotable.engine import (
    Color,
    GameMode,
    MatchState,
    MatchStatus,
    Player,
    draw_card,
    is_valid_move,
    next_round,
    next_start_index,
    play_card,
    start_match,
)
from unotable.engine.game_state import DEFAULT_TARGET_SCORE
from unotable.net.messages import (
    Message,
    MessageKind,
    ProtocolError,
    move_color,
    player_draw,
    player_move,
    restart_request,
    snapshot_state,
    state_update,
)
from unotable.net.transport import Transport

logger = logging.getLogger(__name__)

HOST_INDEX = 0
FOLLOWER_INDEX = 1

Listener = Callable[[MatchState], None]


class _Peer:
    """State, listeners and connection bookkeeping shared by both roles."""

    def __init__(self, transport: Transport, state: MatchState):
        self._transport = transport
        self._state = state
        self._connected = True
        self._listeners: List[Listener] = []

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._connected

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _set_state(self, state: MatchState) -> None:
        self._state = state
        for listener in self._listeners:
            listener(state)

    async def _send(self, message: Message) -> bool:
        if not self._connected:
            return False
        try:
            await self._transport.send(message)
        except ConnectionError as e:
            logger.info("Send failed: %s", e)
            await self._disconnected()
            return False
        return True

    async def _receive(self) -> Optional[Message]:
        while self._connected:
            try:
                message = await self._transport.receive()
            except ProtocolError as e:
                logger.warning("Dropping undecodable message: %s", e)
                continue
            except ConnectionError as e:
                logger.info("Receive failed: %s", e)
                message = None
            if message is None:
                await self._disconnected()
                return None
            return message
        return None

    async def _disconnected(self) -> None:
        if not self._connected:
            return
        self._connected = False
        logger.info("Peer disconnected; back to lobby")
        self._set_state(replace(self._state, status=MatchStatus.LOBBY, commentary="Opponent disconnected."))

    async def close(self) -> None:
        """Hang up; the match returns to the lobby."""
        await self._transport.close()
        await self._disconnected()


class HostPeer(_Peer):
    """The authority. Applies its own seat's actions and the follower's requests."""

    def __init__(
        self,
        transport: Transport,
        host_player: Player,
        follower_player: Player,
        target_score: int = DEFAULT_TARGET_SCORE,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(
            transport,
            MatchState(players=(host_player, follower_player), target_score=target_score),
        )
        self._rng = rng or random.Random()
        self._sequence = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    async def _commit(self, new_state: MatchState) -> bool:
        if not self._connected or new_state is self._state:
            return False
        self._set_state(new_state)
        await self._broadcast()
        return True

    async def _broadcast(self) -> None:
        self._sequence += 1
        await self._send(state_update(self._state, self._sequence))

    async def start_match(self) -> MatchState:
        """Deal a new match (scores reset) and broadcast it."""
        if not self._connected:
            return self._state
        await self._commit(
            start_match(
                self._state.players,
                HOST_INDEX,
                rng=self._rng,
                target_score=self._state.target_score,
                commentary="Online Match Started!",
            )
        )
        return self._state

    async def publish(self, state: MatchState) -> None:
        """Replace the canonical state (e.g. a restored match) and broadcast it."""
        if not self._connected:
            return
        self._set_state(state)
        await self._broadcast()

    async def next_round(self) -> bool:
        """Deal the next round (scores kept) once the current one is over."""
        if not self._connected or self._state.status != MatchStatus.ROUND_OVER:
            return False
        start = next_start_index(self._state, GameMode.ONLINE)
        return await self._commit(next_round(self._state, start, rng=self._rng, commentary="Next round!"))

    async def restart(self) -> bool:
        if not self._connected:
            return False
        if self._state.status == MatchStatus.ROUND_OVER:
            return await self.next_round()
        if self._state.status == MatchStatus.GAME_OVER:
            await self.start_match()
            return True
        return False

    # --- Host's own seat ---

    async def play(self, card_id: str, wild_color: Optional[Color] = None) -> bool:
        if not self._connected:
            return False
        return await self._commit(play_card(self._state, HOST_INDEX, card_id, wild_color, rng=self._rng))

    async def draw(self) -> bool:
        if not self._connected:
            return False
        return await self._commit(draw_card(self._state, HOST_INDEX, rng=self._rng))

    # --- Follower requests ---

    async def handle(self, message: Message) -> bool:
        """Process one follower message. Returns True if state changed (and was broadcast)."""
        if message.kind == MessageKind.PLAYER_MOVE:
            card_id = message.payload.get("card_id")
            if self._state.players[FOLLOWER_INDEX].find_card(card_id) is None:
                logger.debug("Ignoring stale move request for %s", card_id)
                return False
            return await self._commit(
                play_card(self._state, FOLLOWER_INDEX, card_id, move_color(message), rng=self._rng)
            )
        if message.kind == MessageKind.PLAYER_DRAW:
            return await self._commit(draw_card(self._state, FOLLOWER_INDEX, rng=self._rng))
        if message.kind == MessageKind.RESTART_REQUEST:
            return await self.restart()
        logger.warning("Host ignoring unexpected %s message", message.kind.value)
        return False

    async def serve(self) -> None:
        """Handle follower messages one at a time until the connection drops."""
        while True:
            message = await self._receive()
            if message is None:
                return
            await self.handle(message)


class FollowerPeer(_Peer):
    """The non-authoritative peer: proposes actions, renders snapshots."""

    def __init__(self, transport: Transport):
        super().__init__(transport, MatchState())
        self._last_sequence: Optional[int] = None

    @property
    def last_sequence(self) -> Optional[int]:
        return self._last_sequence

    def apply(self, message: Message) -> bool:
        """Apply a STATE_UPDATE. Returns True if the local copy changed."""
        if message.kind != MessageKind.STATE_UPDATE:
            logger.warning("Follower ignoring unexpected %s message", message.kind.value)
            return False
        sequence = message.payload["sequence"]
        if self._last_sequence is not None and sequence < self._last_sequence:
            logger.debug("Discarding out-of-order snapshot %d (have %d)", sequence, self._last_sequence)
            return False
        new_state = snapshot_state(message)
        self._last_sequence = sequence
        if new_state == self._state:
            return False
        self._set_state(new_state)
        return True

    async def listen(self) -> None:
        """Apply snapshots until the connection drops."""
        while True:
            message = await self._receive()
            if message is None:
                return
            try:
                self.apply(message)
            except ProtocolError as e:
                logger.warning("Dropping bad snapshot: %s", e)

    def _my_turn(self) -> bool:
        return (
            self._connected
            and self._state.status == MatchStatus.PLAYING
            and self._state.current_index == FOLLOWER_INDEX
        )

    async def play(self, card_id: str, wild_color: Optional[Color] = None) -> bool:
        """Ask the host to play a card. Local state is untouched until the next snapshot."""
        if not self._my_turn():
            return False
        player = self._state.players[FOLLOWER_INDEX]
        idx = player.find_card(card_id)
        top = self._state.top_discard()
        if idx is None or (top is not None and not is_valid_move(player.hand[idx], top, self._state.active_color)):
            return False
        return await self._send(player_move(card_id, wild_color))

    async def draw(self) -> bool:
        if not self._my_turn():
            return False
        return await self._send(player_draw())

    async def request_restart(self) -> bool:
        if self._state.status not in (MatchStatus.ROUND_OVER, MatchStatus.GAME_OVER):
            return False
        return await self._send(restart_request())
