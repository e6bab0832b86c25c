"""Tests for card effects, the play/draw pipeline and round ends."""

import random
from dataclasses import replace

from helpers import card, filler, make_state, num, wild
from unotable.engine import (
    CardType,
    Color,
    MatchStatus,
    Player,
    calculate_hand_score,
    draw_card,
    draw_cards,
    get_legal_actions,
    apply_action,
    next_round,
    play_card,
    setup_round,
)
from unotable.engine.rules import DrawCard, PlayCard, draw_without_passing, pass_turn


def test_draw_two_scenario_from_seeded_deal() -> None:
    players = [Player(id="a", name="A"), Player(id="b", name="B")]
    state = setup_round(players, start_index=0, rng=random.Random(11))

    # Swap a Draw Two from the deck into player 0's hand, keeping every card in play
    deck = list(state.deck)
    pos = next(i for i, c in enumerate(deck) if c.type == CardType.DRAW_TWO)
    draw_two = deck[pos]
    hand = list(state.players[0].hand)
    deck[pos], hand[0] = hand[0], draw_two
    state = replace(state, deck=tuple(deck), active_color=draw_two.color)
    state = state.with_player(0, replace(state.players[0], hand=tuple(hand)))
    assert state.card_count() == 108

    after = play_card(state, 0, draw_two.id)
    assert len(after.players[1].hand) == len(state.players[1].hand) + 2
    assert after.current_index == 0
    assert after.card_count() == 108
    assert after.top_discard() == draw_two


def test_wild_draw_four_sets_chosen_color_and_skips_victim() -> None:
    w4 = wild(CardType.WILD_DRAW_FOUR)
    state = make_state(
        hands=[[w4, num(Color.RED, 1)], [num(Color.BLUE, 2)], [num(Color.GREEN, 3)]],
        top=num(Color.RED, 9),
        deck=filler(10),
    )
    after = play_card(state, 0, w4.id, Color.YELLOW)
    assert after.active_color == Color.YELLOW
    assert len(after.players[1].hand) == 5
    assert after.current_index == 2


def test_draw_two_victim_follows_direction() -> None:
    d2 = card(Color.RED, CardType.DRAW_TWO)
    state = make_state(
        hands=[[d2, num(Color.RED, 1)], [num(Color.BLUE, 2)], [num(Color.GREEN, 3)]],
        top=num(Color.RED, 9),
        deck=filler(10),
        direction=-1,
    )
    after = play_card(state, 0, d2.id)
    assert len(after.players[2].hand) == 3
    assert len(after.players[1].hand) == 1
    assert after.current_index == 1


def test_skip_with_three_players() -> None:
    skip = card(Color.RED, CardType.SKIP)
    state = make_state(
        hands=[[skip, num(Color.RED, 1)], [num(Color.BLUE, 2)], [num(Color.GREEN, 3)]],
        top=num(Color.RED, 9),
    )
    after = play_card(state, 0, skip.id)
    assert after.current_index == 2
    assert after.active_color == Color.RED


def test_reverse_with_two_players_acts_like_skip() -> None:
    rev = card(Color.RED, CardType.REVERSE)
    skip = card(Color.RED, CardType.SKIP)
    hands = [[rev, skip, num(Color.RED, 1)], [num(Color.BLUE, 2)]]
    state = make_state(hands=hands, top=num(Color.RED, 9))

    after_reverse = play_card(state, 0, rev.id)
    after_skip = play_card(state, 0, skip.id)
    assert after_reverse.current_index == after_skip.current_index == 0
    assert after_reverse.direction == state.direction


def test_reverse_with_three_players_flips_direction() -> None:
    rev = card(Color.RED, CardType.REVERSE)
    state = make_state(
        hands=[[rev, num(Color.RED, 1)], [num(Color.BLUE, 2)], [num(Color.GREEN, 3)]],
        top=num(Color.RED, 9),
    )
    after = play_card(state, 0, rev.id)
    assert after.direction == -1
    assert after.current_index == 2


def test_non_wild_play_sets_active_color() -> None:
    blue7 = num(Color.BLUE, 7)
    state = make_state(hands=[[blue7, num(Color.RED, 1)], [num(Color.GREEN, 2)]], top=num(Color.RED, 7))
    after = play_card(state, 0, blue7.id)
    assert after.active_color == Color.BLUE
    assert after.current_index == 1
    assert "played BLUE NUMBER 7" in after.commentary


def test_play_does_not_mutate_input() -> None:
    c = num(Color.RED, 1)
    state = make_state(hands=[[c, num(Color.RED, 2)], [num(Color.GREEN, 2)]], top=num(Color.RED, 7))
    hands_before = [p.hand for p in state.players]
    play_card(state, 0, c.id)
    assert [p.hand for p in state.players] == hands_before
    assert len(state.discard_pile) == 1


def test_illegal_plays_are_rejected_silently() -> None:
    red1 = num(Color.RED, 1)
    green5 = num(Color.GREEN, 5)
    w = wild()
    state = make_state(hands=[[red1, green5, w], [num(Color.BLUE, 2)]], top=num(Color.RED, 7))

    assert play_card(state, 1, state.players[1].hand[0].id) is state  # not their turn
    assert play_card(state, 0, "no-such-card") is state
    assert play_card(state, 0, green5.id) is state  # wrong color and value
    assert play_card(state, 0, w.id) is state  # wild without a color
    assert play_card(state, 0, w.id, Color.WILD) is state
    assert play_card(replace(state, status=MatchStatus.ROUND_OVER), 0, red1.id).status == MatchStatus.ROUND_OVER
    assert draw_card(state, 1) is state


def test_reshuffle_when_deck_runs_short() -> None:
    top = num(Color.RED, 7)
    below = filler(4)
    state = make_state(
        hands=[[num(Color.RED, 1)], [num(Color.GREEN, 2)]],
        top=top,
        below_top=below,
        deck=[num(Color.YELLOW, 3)],
    )
    total = state.card_count()
    after = draw_cards(state, 1, 3, rng=random.Random(0))
    assert len(after.players[1].hand) == 4
    assert after.discard_pile == (top,)
    assert len(after.deck) == 2
    assert after.card_count() == total


def test_draw_when_both_piles_are_exhausted() -> None:
    top = num(Color.RED, 7)
    state = make_state(hands=[[num(Color.RED, 1)], [num(Color.GREEN, 2)]], top=top)
    after = draw_cards(state, 1, 2)
    assert len(after.players[1].hand) == 1
    assert after.discard_pile == (top,)

    state = make_state(hands=[[num(Color.RED, 1)], [num(Color.GREEN, 2)]], top=top, deck=[num(Color.BLUE, 4)])
    after = draw_cards(state, 1, 4)
    assert len(after.players[1].hand) == 2
    assert after.deck == ()


def test_draw_card_passes_turn() -> None:
    state = make_state(hands=[[num(Color.RED, 1)], [num(Color.GREEN, 2)]], top=num(Color.RED, 7), deck=filler(3))
    after = draw_card(state, 0)
    assert len(after.players[0].hand) == 2
    assert after.current_index == 1
    assert after.commentary == "P0 drew a card."


def test_draw_without_passing_then_pass() -> None:
    state = make_state(hands=[[num(Color.RED, 1)], [num(Color.GREEN, 2)]], top=num(Color.RED, 7), deck=filler(3))
    kept = draw_without_passing(state, 0)
    assert kept.current_index == 0
    assert len(kept.players[0].hand) == 2
    assert pass_turn(kept, 0).current_index == 1
    assert pass_turn(kept, 1) is kept


def test_round_end_scores_other_hands() -> None:
    last = num(Color.RED, 3)
    others = [
        [num(Color.BLUE, 5), card(Color.GREEN, CardType.SKIP), wild()],
        [num(Color.YELLOW, 9), wild(CardType.WILD_DRAW_FOUR)],
    ]
    state = make_state(hands=[[last]] + others, top=num(Color.RED, 7), scores=[10, 0, 0])
    after = play_card(state, 0, last.id)

    expected = sum(calculate_hand_score(h) for h in others)
    assert expected == 75 + 59
    assert after.players[0].score == 10 + expected
    assert after.points_won == expected
    assert after.round_winner == "P0"
    assert after.status == MatchStatus.ROUND_OVER
    assert after.winner is None
    assert after.current_index == 0


def test_round_end_effect_is_not_resolved() -> None:
    last = card(Color.RED, CardType.DRAW_TWO)
    state = make_state(hands=[[last], [num(Color.BLUE, 5)]], top=num(Color.RED, 7), deck=filler(4))
    after = play_card(state, 0, last.id)
    assert len(after.players[1].hand) == 1
    assert after.status == MatchStatus.ROUND_OVER


def test_reaching_target_score_ends_match() -> None:
    last = num(Color.RED, 3)
    state = make_state(
        hands=[[last], [wild(), wild()]],
        top=num(Color.RED, 7),
        scores=[450, 300],
        target_score=500,
    )
    after = play_card(state, 0, last.id)
    assert after.players[0].score == 550
    assert after.status == MatchStatus.GAME_OVER
    assert after.winner == "P0"


def test_get_legal_actions() -> None:
    red1 = num(Color.RED, 1)
    w = wild()
    state = make_state(hands=[[red1, num(Color.GREEN, 5), w], [num(Color.BLUE, 2)]], top=num(Color.RED, 7))
    actions = get_legal_actions(state, 0)
    plays = [a for a in actions if isinstance(a, PlayCard)]
    assert PlayCard(card_id=red1.id) in plays
    assert sum(1 for a in plays if a.card_id == w.id) == 4
    assert isinstance(actions[-1], DrawCard)
    assert get_legal_actions(state, 1) == []


def test_card_count_is_conserved_over_many_turns() -> None:
    rng = random.Random(2024)
    players = [Player(id=f"p{i}", name=f"P{i}") for i in range(3)]
    state = setup_round(players, rng=rng)
    for _ in range(600):
        assert state.card_count() == 108
        ids = [c.id for c in state.deck] + [c.id for c in state.discard_pile]
        ids += [c.id for p in state.players for c in p.hand]
        assert len(set(ids)) == 108
        if state.status != MatchStatus.PLAYING:
            state = next_round(state, 0, rng=rng)
            continue
        actions = get_legal_actions(state, state.current_index)
        plays = [a for a in actions if isinstance(a, PlayCard)]
        action = rng.choice(plays) if plays and rng.random() < 0.8 else DrawCard()
        state = apply_action(state, state.current_index, action, rng=rng)
