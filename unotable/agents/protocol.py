"""Agent protocols - interfaces that human agents and move services implement."""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Protocol

from unotable.engine import Action, Color, PlayerView


class MoveServiceError(Exception):
    """The external move service failed or answered something unusable."""


@dataclass(frozen=True)
class MoveRequest:
    """What the external move service is told about the computer's position."""

    active_color: Color
    top_card: str
    hand: List[str]
    opponent_hand_count: int
    personality: str


@dataclass(frozen=True)
class MoveDecision:
    """A computer decision: play ``card_index`` from the hand, or draw."""

    action: Literal["play", "draw"]
    card_index: Optional[int] = None
    wild_color: Optional[Color] = None
    comment: str = ""
    source: str = field(default="service", compare=False)

    @classmethod
    def draw(cls, comment: str = "", source: str = "service") -> "MoveDecision":
        return cls(action="draw", comment=comment, source=source)


class MoveService(Protocol):
    """External move-selection service used by the computer opponent."""

    async def choose_move(self, request: MoveRequest) -> MoveDecision:
        """Return a decision for ``request``.

        May raise anything; callers fall back to the local strategy.
        """
        ...


class AgentProtocol(Protocol):
    """Interface for agents that pick actions for a seat (humans at a terminal)."""

    @property
    def name(self) -> str:
        """Display name for the agent."""
        ...

    def get_action(
        self,
        player_view: PlayerView,
        legal_actions: list[Action],
        player_index: int,
    ) -> Action | None:
        """Choose an action given the player view and legal actions.

        Args:
            player_view: Filtered view with only this player's hand and public info.
            legal_actions: List of valid actions to choose from.
            player_index: This agent's seat.

        Returns:
            One of the legal actions, or None to draw.
        """
        ...
