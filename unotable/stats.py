"""Match summaries and cumulative statistics."""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Protocol, Sequence, Tuple

from unotable.engine import Card, CardType, Color


@dataclass(frozen=True)
class MatchSummary:
    """What a finished match reports to the statistics sink."""

    is_win: bool
    match_duration_seconds: float
    cards_played: Tuple[Card, ...] = ()


@dataclass(frozen=True)
class GameStats:
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    current_streak: int = 0
    best_streak: int = 0
    total_cards_played: int = 0
    longest_match_seconds: float = 0.0
    # "COLOR|TYPE|VALUE" -> count
    card_usage: Dict[str, int] = field(default_factory=dict)


class StatsSink(Protocol):
    """Persists match summaries; storage is up to the implementation."""

    def record(self, summary: MatchSummary) -> None:
        ...


class MemoryStatsSink:
    """Keeps summaries and running totals in memory."""

    def __init__(self) -> None:
        self.summaries: List[MatchSummary] = []
        self.stats = GameStats()

    def record(self, summary: MatchSummary) -> None:
        self.summaries.append(summary)
        self.stats = update_stats(self.stats, summary)


def card_key(card: Card) -> str:
    """Usage key: numbers by color+value, actions by color+type, wilds by type."""
    if card.is_wild:
        return f"{Color.WILD.value}|{card.type.value}|0"
    return f"{card.color.value}|{card.type.value}|{card.value or 0}"


def update_stats(stats: GameStats, summary: MatchSummary) -> GameStats:
    """Fold one match summary into the cumulative stats."""
    if summary.is_win:
        streak = stats.current_streak + 1
        won, lost = stats.matches_won + 1, stats.matches_lost
    else:
        streak = 0
        won, lost = stats.matches_won, stats.matches_lost + 1

    usage = dict(stats.card_usage)
    for card in summary.cards_played:
        key = card_key(card)
        usage[key] = usage.get(key, 0) + 1

    return replace(
        stats,
        matches_played=stats.matches_played + 1,
        matches_won=won,
        matches_lost=lost,
        current_streak=streak,
        best_streak=max(stats.best_streak, streak),
        total_cards_played=stats.total_cards_played + len(summary.cards_played),
        longest_match_seconds=max(stats.longest_match_seconds, summary.match_duration_seconds),
        card_usage=usage,
    )


def parse_card_key(key: str) -> Card:
    color, card_type, value = key.split("|")
    kind = CardType(card_type)
    return Card(
        id="stat-card",
        color=Color(color),
        type=kind,
        value=int(value) if kind == CardType.NUMBER else None,
    )


def most_played_cards(stats: GameStats, limit: int = 3) -> Sequence[Tuple[Card, int]]:
    ranked = sorted(stats.card_usage.items(), key=lambda item: -item[1])
    return [(parse_card_key(key), count) for key, count in ranked[:limit]]
