"""Owned game session for the computer and pass-and-play modes."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Callable, Dict, List, Optional, Sequence

from unotable.agents.computer import ComputerPlayer
from unotable.agents.protocol import MoveDecision
from unotable.agents.strategy import choose_wild_color
from unotable.config import Settings
from unotable.engine import (
    Card,
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
from unotable.engine.rules import draw_without_passing, last_drawn_card, pass_turn
from unotable.stats import MatchSummary, StatsSink

logger = logging.getLogger(__name__)

Listener = Callable[[MatchState], None]


class GameSession:
    """Owns one match: its state, the computer opponent and the bookkeeping.

    One stimulus is processed at a time. While the computer is deciding,
    human actions are rejected.
    """

    def __init__(
        self,
        players: Sequence[Player],
        mode: GameMode = GameMode.AI,
        settings: Optional[Settings] = None,
        computer: Optional[ComputerPlayer] = None,
        seat_computers: Optional[Dict[int, ComputerPlayer]] = None,
        stats_sink: Optional[StatsSink] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if len(players) < 2:
            raise ValueError("A match needs at least two players")
        self.mode = mode
        self.settings = settings or Settings()
        self.computer = computer or ComputerPlayer(self.settings.personality)
        self._seat_computers = dict(seat_computers or {})
        self._stats_sink = stats_sink
        self._rng = rng or random.Random()
        self._clock = clock
        self._listeners: List[Listener] = []
        self._computer_task: Optional[asyncio.Task] = None
        self._computer_deciding = False
        self._started_at = 0.0
        self._human_cards: List[Card] = []
        self._state = MatchState(players=tuple(players), target_score=self.settings.target_score)

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def computer_deciding(self) -> bool:
        return self._computer_deciding

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _commit(self, new_state: MatchState) -> bool:
        if new_state is self._state:
            return False
        previous = self._state
        self._state = new_state
        for listener in self._listeners:
            listener(new_state)
        if previous.status != MatchStatus.GAME_OVER and new_state.status == MatchStatus.GAME_OVER:
            self._report_match()
        return True

    def _report_match(self) -> None:
        if self.mode != GameMode.AI or self._stats_sink is None:
            return
        winner = next(p for p in self._state.players if p.name == self._state.winner)
        summary = MatchSummary(
            is_win=not winner.is_computer,
            match_duration_seconds=self._clock() - self._started_at,
            cards_played=tuple(self._human_cards),
        )
        self._stats_sink.record(summary)

    # --- Lifecycle ---

    def start(self, start_index: int = 0) -> MatchState:
        """Start (or restart) the match with every score at zero."""
        self._started_at = self._clock()
        self._human_cards = []
        greeting = "Good luck! Have fun!" if self.mode == GameMode.AI else "Match started!"
        self._commit(
            start_match(
                self._state.players,
                start_index,
                rng=self._rng,
                target_score=self.settings.target_score,
                commentary=greeting,
            )
        )
        return self._state

    def resume(self, state: MatchState) -> None:
        """Continue from an existing match state, e.g. a restored snapshot."""
        self._started_at = self._clock()
        self._commit(state)

    def next_round(self) -> bool:
        """Deal the next round once the current one is over."""
        if self._state.status != MatchStatus.ROUND_OVER:
            return False
        start = next_start_index(self._state, self.mode, rng=self._rng)
        return self._commit(next_round(self._state, start, rng=self._rng, commentary="New round, new luck."))

    def close(self) -> None:
        """Tear down the session, cancelling any in-flight computer decision."""
        if self._computer_task is not None and not self._computer_task.done():
            self._computer_task.cancel()
        self._computer_task = None
        self._listeners.clear()

    # --- Human actions ---

    def _human_may_act(self, player_index: int) -> bool:
        if self._computer_deciding:
            logger.debug("Ignoring action from seat %d while the computer decides", player_index)
            return False
        return not self._state.players[player_index].is_computer

    def play(self, player_index: int, card_id: str, chosen_color: Optional[Color] = None) -> bool:
        """Play a card for a human seat. Returns False when the move was rejected."""
        if not self._human_may_act(player_index):
            return False
        player = self._state.players[player_index]
        idx = player.find_card(card_id)
        new_state = play_card(self._state, player_index, card_id, chosen_color, rng=self._rng)
        if new_state is self._state:
            return False
        # Before the commit: the game-over report reads this list
        if idx is not None:
            self._human_cards.append(player.hand[idx])
        return self._commit(new_state)

    def draw(self, player_index: int) -> bool:
        """Draw a card for a human seat and pass the turn."""
        if not self._human_may_act(player_index):
            return False
        return self._commit(draw_card(self._state, player_index, rng=self._rng))

    # --- Computer turns ---

    def is_computer_turn(self) -> bool:
        return (
            self._state.status == MatchStatus.PLAYING
            and self._state.current_player.is_computer
        )

    def schedule_computer_turn(self) -> Optional[asyncio.Task]:
        """Start the computer's turn as a task owned by the session (needs a running loop)."""
        if not self.is_computer_turn() or self._computer_deciding:
            return None
        if self._computer_task is not None and not self._computer_task.done():
            return self._computer_task
        self._computer_task = asyncio.get_running_loop().create_task(self.run_computer_turn())
        return self._computer_task

    async def run_computer_turn(self) -> bool:
        """Let the computer take its turn. Returns False if it was not its turn."""
        if not self.is_computer_turn() or self._computer_deciding:
            return False
        self._computer_deciding = True
        try:
            before = self._state
            index = before.current_index
            if self.settings.think_delay > 0:
                await asyncio.sleep(self.settings.think_delay)
            computer = self._seat_computers.get(index, self.computer)
            decision = await computer.decide(before, index)
            if self._state is not before:
                logger.debug("Match moved on while the computer was deciding; dropping decision")
                return False
            self._apply_decision(index, decision)
        finally:
            self._computer_deciding = False
        return True

    def _apply_decision(self, index: int, decision: MoveDecision) -> None:
        state = self._state
        if decision.action == "play" and decision.card_index is not None:
            card = state.players[index].hand[decision.card_index]
            new_state = play_card(state, index, card.id, decision.wild_color, rng=self._rng)
            if new_state is not state:
                self._commit(self._with_comment(new_state, decision.comment))
                return
            logger.warning("Computer decision %r was rejected; drawing instead", decision)
        self._computer_draw(index, decision.comment)

    def _computer_draw(self, index: int, comment: str) -> None:
        state = draw_without_passing(self._state, index, rng=self._rng)
        drawn = last_drawn_card(state, index)
        top = state.top_discard()
        # A drawn card that fits is played straight away
        if (
            drawn is not None
            and len(state.players[index].hand) > len(self._state.players[index].hand)
            and top is not None
            and is_valid_move(drawn, top, state.active_color)
        ):
            color = choose_wild_color(state.players[index].hand[:-1]) if drawn.is_wild else None
            played = play_card(state, index, drawn.id, color, rng=self._rng)
            self._commit(self._with_comment(played, "Found one!"))
            return
        self._commit(self._with_comment(pass_turn(state, index), comment))

    @staticmethod
    def _with_comment(state: MatchState, comment: str) -> MatchState:
        if comment and state.status == MatchStatus.PLAYING:
            return state.with_commentary(comment)
        return state
