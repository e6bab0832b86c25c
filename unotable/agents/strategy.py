"""Local computer strategy: personality ranking table and the fallback decision."""

from enum import Enum
from typing import Callable, Dict, Sequence

from unotable.agents.protocol import MoveDecision
from unotable.engine import COLORS, Card, CardType, Color
from unotable.engine.rules import playable_cards


class Personality(str, Enum):
    """Computer opponent styles."""

    FRIENDLY = "Friendly"  # passive: number cards first
    SASSY = "Sassy"  # balanced
    RUTHLESS = "Ruthless"  # aggressive: attack cards first

    @classmethod
    def parse(cls, label: str) -> "Personality":
        for p in cls:
            if p.value.lower() == label.strip().lower():
                return p
        raise ValueError(f"Unknown personality: {label}")


def _ruthless_priority(card: Card) -> int:
    return {
        CardType.WILD_DRAW_FOUR: 100,
        CardType.DRAW_TWO: 90,
        CardType.SKIP: 80,
        CardType.REVERSE: 80,
        CardType.WILD: 70,
    }.get(card.type, 10)


def _friendly_priority(card: Card) -> int:
    if card.type == CardType.NUMBER:
        return 100
    if card.type == CardType.WILD:
        return 50
    return 10


def _sassy_priority(card: Card) -> int:
    # Unload heavy cards, keep wilds for emergencies
    return {
        CardType.DRAW_TWO: 60,
        CardType.SKIP: 50,
        CardType.REVERSE: 50,
        CardType.NUMBER: 40,
        CardType.WILD: 30,
        CardType.WILD_DRAW_FOUR: 20,
    }.get(card.type, 0)


STRATEGIES: Dict[Personality, Callable[[Card], int]] = {
    Personality.RUTHLESS: _ruthless_priority,
    Personality.FRIENDLY: _friendly_priority,
    Personality.SASSY: _sassy_priority,
}


def choose_wild_color(hand: Sequence[Card]) -> Color:
    """The color held most often; ties go to the first color in canonical order."""
    counts = {color: 0 for color in COLORS}
    for card in hand:
        if card.color in counts:
            counts[card.color] += 1
    return max(COLORS, key=lambda color: counts[color])


def _play_comment(card: Card, hand_size: int, personality: Personality) -> str:
    if card.type == CardType.WILD_DRAW_FOUR:
        return {
            Personality.RUTHLESS: "Take FOUR! Hahaha!",
            Personality.FRIENDLY: "Oh no, I have to play this. Sorry!",
        }.get(personality, "You wanted a challenge?")
    if card.type == CardType.DRAW_TWO:
        return "Take two more." if personality == Personality.RUTHLESS else "Hope this helps?"
    if hand_size == 2:
        return "UNO! Watch out!"
    if hand_size == 1:
        return "I win! Good game."
    return "I'll play this."


DRAW_COMMENTS = {
    Personality.FRIENDLY: "I'll just draw a card.",
    Personality.SASSY: "Drawing... for now.",
    Personality.RUTHLESS: "The deck is delaying your defeat.",
}


def fallback_decision(
    hand: Sequence[Card],
    top_card: Card,
    active_color: Color,
    personality: Personality,
) -> MoveDecision:
    """Pick the best legal card for ``personality``, or draw when none fits."""
    legal = playable_cards(hand, top_card, active_color)
    if not legal:
        return MoveDecision.draw(DRAW_COMMENTS[personality], source="fallback")

    priority = STRATEGIES[personality]
    # max() keeps the first of equally ranked cards, i.e. hand order
    index, card = max(legal, key=lambda pair: priority(pair[1]))
    remaining = [c for i, c in enumerate(hand) if i != index]
    return MoveDecision(
        action="play",
        card_index=index,
        wild_color=choose_wild_color(remaining) if card.is_wild else None,
        comment=_play_comment(card, len(hand), personality),
        source="fallback",
    )
