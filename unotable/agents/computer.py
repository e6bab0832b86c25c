"""Computer opponent: external move service with a local fallback."""

import asyncio
import logging
from dataclasses import replace
from typing import Optional

from unotable.agents.protocol import MoveDecision, MoveRequest, MoveService
from unotable.agents.strategy import Personality, choose_wild_color, fallback_decision
from unotable.engine import MatchState, is_valid_move

logger = logging.getLogger(__name__)

DEFAULT_DECISION_TIMEOUT = 10.0


def build_request(state: MatchState, computer_index: int, personality: Personality) -> MoveRequest:
    hand = state.players[computer_index].hand
    top = state.top_discard()
    opponents = [len(p.hand) for i, p in enumerate(state.players) if i != computer_index]
    return MoveRequest(
        active_color=state.active_color,
        top_card=top.describe() if top else "None",
        hand=[card.describe() for card in hand],
        # Smallest opponent hand is the one that matters
        opponent_hand_count=min(opponents) if opponents else 0,
        personality=personality.value,
    )


class ComputerPlayer:
    """Decides moves for a computer seat. Always resolves to a play or a draw."""

    def __init__(
        self,
        personality: Personality = Personality.SASSY,
        service: Optional[MoveService] = None,
        timeout: float = DEFAULT_DECISION_TIMEOUT,
    ):
        self.personality = personality
        self._service = service
        self._timeout = timeout

    def fallback(self, state: MatchState, computer_index: int) -> MoveDecision:
        top = state.top_discard()
        hand = state.players[computer_index].hand
        if top is None:
            return MoveDecision.draw(source="fallback")
        return fallback_decision(hand, top, state.active_color, self.personality)

    async def decide(self, state: MatchState, computer_index: int) -> MoveDecision:
        if self._service is None:
            return self.fallback(state, computer_index)

        request = build_request(state, computer_index, self.personality)
        try:
            decision = await asyncio.wait_for(self._service.choose_move(request), self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Move service timed out after %.1fs; using fallback strategy", self._timeout)
            return self.fallback(state, computer_index)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Move service unavailable (%s: %s); using fallback strategy", type(e).__name__, e)
            return self.fallback(state, computer_index)

        checked = self._check(decision, state, computer_index)
        if checked is None:
            return self.fallback(state, computer_index)
        return checked

    def _check(self, decision: MoveDecision, state: MatchState, computer_index: int) -> Optional[MoveDecision]:
        """Validate a service decision against the rules; None means fall back."""
        if not isinstance(decision, MoveDecision) or decision.action not in ("play", "draw"):
            logger.warning("Move service returned an unusable decision: %r", decision)
            return None
        if decision.action == "draw":
            return decision

        hand = state.players[computer_index].hand
        index = decision.card_index
        if index is None or not 0 <= index < len(hand):
            logger.warning("Move service picked card index %r out of range (0-%d)", index, len(hand) - 1)
            return None
        card = hand[index]
        top = state.top_discard()
        if top is not None and not is_valid_move(card, top, state.active_color):
            logger.warning("Move service picked illegal card %s", card)
            return None
        if card.is_wild and decision.wild_color is None:
            remaining = [c for i, c in enumerate(hand) if i != index]
            return replace(decision, wild_color=choose_wild_color(remaining))
        if not card.is_wild and decision.wild_color is not None:
            return replace(decision, wild_color=None)
        return decision
