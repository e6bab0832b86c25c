"""Unit tests for the deck, the move validator, scoring and round setup."""

import random
from collections import Counter

import pytest

from helpers import card, num, wild
from unotable.engine import (
    COLORS,
    Card,
    CardType,
    Color,
    GameMode,
    MatchStatus,
    Player,
    calculate_hand_score,
    can_play_any,
    create_deck,
    is_valid_move,
    next_round,
    next_start_index,
    setup_round,
    shuffle_deck,
    start_match,
)
from unotable.engine.deck import build_cards
from unotable.engine.turns import next_index


def _players(n: int = 2) -> list:
    return [Player(id=f"p{i}", name=f"P{i}") for i in range(n)]


def test_create_deck_size() -> None:
    deck = create_deck(seed=42)
    assert len(deck) == 108


def test_create_deck_composition() -> None:
    deck = create_deck(seed=1)
    assert len({c.id for c in deck}) == 108

    for color in COLORS:
        numbers = Counter(c.value for c in deck if c.color == color and c.type == CardType.NUMBER)
        assert numbers[0] == 1
        assert all(numbers[v] == 2 for v in range(1, 10))
        for face in (CardType.SKIP, CardType.REVERSE, CardType.DRAW_TWO):
            assert sum(1 for c in deck if c.color == color and c.type == face) == 2

    wilds = [c for c in deck if c.color == Color.WILD]
    assert Counter(c.type for c in wilds) == {CardType.WILD: 4, CardType.WILD_DRAW_FOUR: 4}


def test_create_deck_reproducible() -> None:
    d1 = create_deck(seed=123)
    d2 = create_deck(seed=123)
    assert [c.id for c in d1] == [c.id for c in d2]
    assert [c.id for c in d1] != [c.id for c in create_deck(seed=124)]


def test_shuffle_deck_does_not_mutate_input() -> None:
    cards = build_cards()
    before = list(cards)
    shuffled = shuffle_deck(cards, rng=random.Random(3))
    assert cards == before
    assert sorted(c.id for c in shuffled) == sorted(c.id for c in cards)
    assert shuffled != cards


def test_card_construction_is_validated() -> None:
    with pytest.raises(ValueError):
        Card(id="x", color=Color.RED, type=CardType.NUMBER, value=None)
    with pytest.raises(ValueError):
        Card(id="x", color=Color.RED, type=CardType.WILD)
    with pytest.raises(ValueError):
        Card(id="x", color=Color.WILD, type=CardType.SKIP)
    with pytest.raises(ValueError):
        Card(id="x", color=Color.RED, type=CardType.SKIP, value=3)


def test_wild_cards_always_valid() -> None:
    top = num(Color.RED, 4)
    assert is_valid_move(wild(), top, Color.RED)
    assert is_valid_move(wild(CardType.WILD_DRAW_FOUR), top, Color.BLUE)


def test_match_by_active_color_not_top_color() -> None:
    top = wild()
    assert is_valid_move(num(Color.GREEN, 3), top, Color.GREEN)
    assert not is_valid_move(num(Color.RED, 3), top, Color.GREEN)


def test_number_cards_need_equal_value() -> None:
    top = num(Color.RED, 7)
    assert is_valid_move(num(Color.BLUE, 7), top, Color.RED)
    assert not is_valid_move(num(Color.BLUE, 8), top, Color.RED)


def test_action_cards_match_by_type() -> None:
    top = card(Color.RED, CardType.SKIP)
    assert is_valid_move(card(Color.YELLOW, CardType.SKIP), top, Color.RED)
    assert not is_valid_move(card(Color.YELLOW, CardType.REVERSE), top, Color.RED)


def test_validator_is_reflexive_on_type_and_value() -> None:
    for c in create_deck(seed=9):
        twin = Card(id="twin", color=c.color, type=c.type, value=c.value)
        for color in COLORS:
            assert is_valid_move(twin, c, color)


def test_can_play_any() -> None:
    top = num(Color.RED, 7)
    assert can_play_any([num(Color.BLUE, 1), num(Color.RED, 2)], top, Color.RED)
    assert not can_play_any([num(Color.BLUE, 1), card(Color.GREEN, CardType.SKIP)], top, Color.RED)
    assert not can_play_any([], top, Color.RED)


def test_calculate_hand_score() -> None:
    hand = [
        num(Color.RED, 7),
        num(Color.BLUE, 0),
        card(Color.GREEN, CardType.SKIP),
        card(Color.GREEN, CardType.REVERSE),
        card(Color.YELLOW, CardType.DRAW_TWO),
        wild(),
        wild(CardType.WILD_DRAW_FOUR),
    ]
    assert calculate_hand_score(hand) == 7 + 0 + 20 * 3 + 50 * 2
    assert calculate_hand_score([]) == 0


def test_turn_wrap() -> None:
    assert next_index(1, 1, 2) == 0
    assert next_index(0, -1, 2) == 1
    assert next_index(0, -1, 4) == 3
    assert next_index(3, 1, 4) == 0


def test_setup_round() -> None:
    state = setup_round(_players(3), start_index=2, rng=random.Random(1))
    assert all(len(p.hand) == 7 for p in state.players)
    assert len(state.discard_pile) == 1
    assert len(state.deck) == 108 - 7 * 3 - 1
    assert state.card_count() == 108
    assert state.current_index == 2
    assert state.direction == 1
    assert state.status == MatchStatus.PLAYING
    top = state.top_discard()
    assert top.type != CardType.WILD_DRAW_FOUR
    assert state.active_color == (Color.RED if top.is_wild else top.color)


def test_starting_card_is_never_wild_draw_four() -> None:
    for seed in range(200):
        state = setup_round(_players(), rng=random.Random(seed))
        assert state.top_discard().type != CardType.WILD_DRAW_FOUR
        assert state.card_count() == 108


def test_next_round_keeps_scores_and_start_match_resets_them() -> None:
    state = setup_round([Player(id="a", name="A", score=120), Player(id="b", name="B", score=40)])
    again = next_round(state, 1, rng=random.Random(2))
    assert [p.score for p in again.players] == [120, 40]
    assert again.current_index == 1
    assert all(len(p.hand) == 7 for p in again.players)

    fresh = start_match(state.players, rng=random.Random(2))
    assert [p.score for p in fresh.players] == [0, 0]


def test_next_start_index_policies() -> None:
    state = setup_round(_players(2), start_index=1, rng=random.Random(5))
    assert next_start_index(state, GameMode.LOCAL) == 0
    assert next_start_index(state, GameMode.ONLINE) == 0
    picks = {next_start_index(state, GameMode.AI, rng=random.Random(s)) for s in range(30)}
    assert picks == {0, 1}
