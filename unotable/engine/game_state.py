"""Match state for UNO."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from unotable.engine.card import Card, Color

DEFAULT_TARGET_SCORE = 500
HAND_SIZE = 7


class MatchStatus(str, Enum):
    """Lifecycle of a match: LOBBY -> PLAYING -> ROUND_OVER/GAME_OVER."""

    LOBBY = "LOBBY"
    PLAYING = "PLAYING"
    ROUND_OVER = "ROUND_OVER"
    GAME_OVER = "GAME_OVER"


@dataclass(frozen=True)
class Player:
    """A seat at the table. The hand is owned exclusively by this player."""

    id: str
    name: str
    is_computer: bool = False
    hand: Tuple[Card, ...] = ()
    score: int = 0
    avatar: str = ""

    def find_card(self, card_id: str) -> Optional[int]:
        """Index of the card with ``card_id`` in the hand, or None."""
        for i, card in enumerate(self.hand):
            if card.id == card_id:
                return i
        return None


@dataclass(frozen=True)
class MatchState:
    """Immutable UNO match state.

    Every rule function returns a new MatchState; nothing is mutated in place.
    """

    deck: Tuple[Card, ...] = ()  # top is first
    discard_pile: Tuple[Card, ...] = ()  # top is last
    players: Tuple[Player, ...] = ()
    current_index: int = 0
    direction: int = 1  # 1 = clockwise, -1 = counter-clockwise
    status: MatchStatus = MatchStatus.LOBBY
    active_color: Color = Color.RED  # color to match; chosen color after a wild
    winner: Optional[str] = None
    round_winner: Optional[str] = None
    points_won: int = 0
    commentary: str = ""
    target_score: int = DEFAULT_TARGET_SCORE

    def top_discard(self) -> Optional[Card]:
        """Return the top card on the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def current_player(self) -> Player:
        return self.players[self.current_index]

    def card_count(self) -> int:
        """Cards across deck, discard pile and every hand."""
        return len(self.deck) + len(self.discard_pile) + sum(len(p.hand) for p in self.players)

    def with_player(self, index: int, player: Player) -> "MatchState":
        """Return a copy with the player at ``index`` replaced."""
        players = list(self.players)
        players[index] = player
        return replace(self, players=tuple(players))

    def with_commentary(self, text: str) -> "MatchState":
        return replace(self, commentary=text)


@dataclass
class PlayerView:
    """Filtered match state visible to a single player.

    Contains only that player's hand and public info.
    """

    player_index: int
    my_hand: List[Card]
    top_discard: Optional[Card]
    active_color: Color
    current_index: int
    direction: int
    status: MatchStatus
    player_ids: List[str]
    num_cards_per_player: Dict[str, int]  # player id -> count
    scores: Dict[str, int] = field(default_factory=dict)
    commentary: str = ""

    @classmethod
    def from_state(cls, state: MatchState, player_index: int) -> "PlayerView":
        """Create a player view from full match state, hiding other players' hands."""
        return cls(
            player_index=player_index,
            my_hand=list(state.players[player_index].hand),
            top_discard=state.top_discard(),
            active_color=state.active_color,
            current_index=state.current_index,
            direction=state.direction,
            status=state.status,
            player_ids=[p.id for p in state.players],
            num_cards_per_player={p.id: len(p.hand) for p in state.players},
            scores={p.id: p.score for p in state.players},
            commentary=state.commentary,
        )

    def opponent_card_counts(self) -> List[int]:
        me = self.player_ids[self.player_index]
        return [self.num_cards_per_player[pid] for pid in self.player_ids if pid != me]
