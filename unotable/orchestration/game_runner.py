"""Match runner: drives a GameSession to the end with terminal agents and computers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional

from unotable.engine import MatchState, MatchStatus, PlayerView, get_legal_actions
from unotable.engine.rules import PlayCard
from unotable.orchestration.session import GameSession

if TYPE_CHECKING:
    from unotable.agents.protocol import AgentProtocol

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    """Result of a completed (or abandoned) match."""

    winner: Optional[str]
    num_rounds: int
    num_turns: int
    scores: Dict[str, int]


class GameRunner:
    """Runs a match to completion.

    Seats flagged ``is_computer`` are played by the session's computer;
    every other seat needs an agent.
    """

    def __init__(
        self,
        session: GameSession,
        agents: Optional[dict[int, "AgentProtocol"]] = None,
        max_turns: int = 5000,
        on_round_over: Optional[Callable[[MatchState], None]] = None,
    ):
        self._session = session
        self._agents = agents or {}
        self._max_turns = max_turns
        self._on_round_over = on_round_over
        for i, player in enumerate(session.state.players):
            if not player.is_computer and i not in self._agents:
                raise ValueError(f"No agent for human seat {i} ({player.name})")

    async def _human_turn(self, index: int) -> None:
        state = self._session.state
        agent = self._agents[index]
        legal = get_legal_actions(state, index)
        action = agent.get_action(PlayerView.from_state(state, index), legal, index)
        if isinstance(action, PlayCard):
            if self._session.play(index, action.card_id, action.chosen_color):
                return
            logger.info("[%s] Rejected %s; drawing instead", agent.name, action)
        self._session.draw(index)

    async def run(self) -> MatchResult:
        """Run the match and return the result."""
        session = self._session
        session.start()
        num_turns = 0
        num_rounds = 1

        while session.state.status != MatchStatus.GAME_OVER and num_turns < self._max_turns:
            state = session.state
            if state.status == MatchStatus.ROUND_OVER:
                if self._on_round_over is not None:
                    self._on_round_over(state)
                session.next_round()
                num_rounds += 1
                continue

            if session.is_computer_turn():
                await session.run_computer_turn()
            else:
                await self._human_turn(state.current_index)
            num_turns += 1

        final = session.state
        if final.status != MatchStatus.GAME_OVER:
            logger.warning("Match stopped after %d turns without a winner", num_turns)
        return MatchResult(
            winner=final.winner,
            num_rounds=num_rounds,
            num_turns=num_turns,
            scores={p.name: p.score for p in final.players},
        )
