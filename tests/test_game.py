"""Tests for the trick state machine and the game lifecycle."""
import random

import pytest

import hiddentrump.game as game_module
from hiddentrump.agents import RandomAgent, policy_action_fn
from hiddentrump.deal import SEATS, TEAM_1, TEAM_2
from hiddentrump.deck import Suit, card_from_id
from hiddentrump.errors import IllegalIntent, IntegrityViolation
from hiddentrump.game import GameController, GamePhase, run_game, run_match
from hiddentrump.messages import GameCompleted, PlayCard, RevealTrump, TrickCompleted, TrumpRevealed
from hiddentrump.play import TrumpTiming
from hiddentrump.scoring import trick_target


def _c(card_id: str):
    return card_from_id(card_id)


def _cards_accounted(controller: GameController) -> int:
    st = controller.state
    n = sum(len(h) for h in st.hands.values())
    n += 1 if st.reserve is not None else 0
    if st.trick is not None and not st.trick.complete:
        n += len(st.trick.cards_played)
    n += sum(len(p) for p in st.won_cards.values())
    return n


def _checking_random_policy(seed: int):
    """Random policy that asserts the engine invariants before every decision."""
    rng = random.Random(seed)
    seen_revealed = {"flag": False}

    def get_action(controller: GameController, seat: int):
        st = controller.state
        assert _cards_accounted(controller) == 48
        assert sum(st.tricks_won.values()) <= 8
        if seen_revealed["flag"]:
            assert st.trump_revealed
        seen_revealed["flag"] = st.trump_revealed
        trick = st.trick
        legal = controller.legal_cards(seat)
        assert legal
        if trick.led_suit is not None and not trick.mandatory_trump_follow:
            if any(c.suit == trick.led_suit for c in st.hands[seat]):
                assert all(c.suit == trick.led_suit for c in legal)
        if controller.can_reveal(seat) and rng.random() < 0.5:
            return RevealTrump()
        return PlayCard(card=rng.choice(legal))

    return get_action


def test_distributor_one_gives_team_two_the_lead():
    controller = GameController(rng=random.Random(1))
    st = controller.start_game(distributor=1)
    assert st.phase == GamePhase.IN_PROGRESS
    assert st.first_to_act == 2
    assert st.first_mover_team == TEAM_2
    assert st.trick.current_turn == 2
    assert trick_target(TEAM_2, st.first_mover_team) == 5
    assert trick_target(TEAM_1, st.first_mover_team) == 4
    assert len(st.hands[2]) == 7
    assert st.reserve is not None


def test_wrong_turn_and_card_not_in_hand_are_rejected(rig):
    controller = rig(fixed={2: ["K-hearts"], 3: ["Q-hearts"]}, reserve="5-clubs")
    with pytest.raises(IllegalIntent):
        controller.play_card(3, _c("Q-hearts"))
    with pytest.raises(IllegalIntent):
        controller.play_card(2, _c("Q-hearts"))
    assert controller.state.trick.cards_played == {}
    assert controller.state.trick.led_suit is None


def test_first_play_sets_led_suit_once(rig):
    controller = rig(fixed={2: ["K-hearts"], 3: ["3-spades"]}, reserve="5-clubs", voids={3: {Suit.HEARTS}})
    controller.play_card(2, _c("K-hearts"))
    assert controller.state.trick.led_suit == Suit.HEARTS
    controller.play_card(3, _c("3-spades"))
    assert controller.state.trick.led_suit == Suit.HEARTS
    assert controller.current_player() == 4


def test_must_follow_suit(rig):
    controller = rig(fixed={2: ["K-hearts"], 3: ["Q-hearts", "3-spades"]}, reserve="5-clubs")
    controller.play_card(2, _c("K-hearts"))
    with pytest.raises(IllegalIntent, match="must follow"):
        controller.play_card(3, _c("3-spades"))
    assert not controller.can_reveal(3)
    with pytest.raises(IllegalIntent):
        controller.reveal_trump(3)


def test_reveal_not_allowed_before_lead(rig):
    controller = rig(fixed={}, reserve="5-clubs")
    with pytest.raises(IllegalIntent):
        controller.reveal_trump(2)
    assert not controller.state.trump_revealed


def test_club_reveal_deal_reveal_timing(club_reveal_deal):
    controller = club_reveal_deal
    events = []
    controller.on_event = events.append

    controller.play_card(2, _c("K-hearts"))
    controller.play_card(3, _c("A-clubs"))
    controller.play_card(4, _c("A-hearts"))

    assert controller.can_reveal(5)
    controller.reveal_trump(5)
    st = controller.state
    assert st.trump_suit == Suit.CLUBS
    assert st.trump_revealed
    assert st.trump_revealer == 5
    assert st.reserve is None
    # The reserve goes back to the first-to-act seat, not to the revealer
    assert _c("5-clubs") in st.hands[2]
    assert _c("5-clubs") not in st.hands[5]
    assert st.trick.trump_activated_this_trick
    assert st.trick.mandatory_trump_follow
    assert controller.current_player() == 5
    assert isinstance(events[-1], TrumpRevealed)

    # Revealer owes a club
    with pytest.raises(IllegalIntent, match="must play"):
        controller.play_card(5, _c("Q-spades"))
    controller.play_card(5, _c("K-clubs"))
    assert not st.trick.mandatory_trump_follow
    # Later seats are not bound by the mandatory trump
    controller.play_card(6, _c("J-clubs"))
    controller.play_card(1, _c("3-hearts"))

    # Seat 3's ace of clubs preceded the reveal and does not count as trump
    assert st.trick.complete
    assert st.trick.winner == 5
    assert st.last_trick_winner == 5
    assert st.last_trick_card == _c("K-clubs")
    assert st.tricks_won == {TEAM_1: 1, TEAM_2: 0}
    assert isinstance(events[-1], TrickCompleted)


def test_club_reveal_deal_after_revealer_variant(club_reveal_deal):
    controller = club_reveal_deal
    controller.timing = TrumpTiming.AFTER_REVEALER
    controller.play_card(2, _c("K-hearts"))
    controller.play_card(3, _c("A-clubs"))
    controller.play_card(4, _c("A-hearts"))
    controller.reveal_trump(5)
    controller.play_card(5, _c("K-clubs"))
    controller.play_card(6, _c("J-clubs"))
    controller.play_card(1, _c("3-hearts"))
    assert controller.state.trick.winner == 6


def test_reveal_only_once_per_game(club_reveal_deal):
    controller = club_reveal_deal
    controller.play_card(2, _c("K-hearts"))
    controller.reveal_trump(3)
    with pytest.raises(IllegalIntent):
        controller.reveal_trump(3)
    controller.play_card(3, _c("A-clubs"))
    controller.play_card(4, _c("A-hearts"))
    assert not controller.can_reveal(5)


def test_completed_trick_blocks_play_until_advanced(club_reveal_deal):
    controller = club_reveal_deal
    for seat, card in [(2, "K-hearts"), (3, "A-clubs"), (4, "A-hearts"), (5, "K-clubs"), (6, "J-clubs"), (1, "3-hearts")]:
        controller.play_card(seat, _c(card))
    assert controller.awaiting_transition
    assert controller.current_player() is None
    with pytest.raises(IllegalIntent):
        controller.play_card(4, controller.state.hands[4][0])

    st = controller.advance_trick()
    assert st.trick_number == 2
    # Winner of the previous trick (seat 4, ace of hearts, no trump yet) leads
    assert st.trick.start_seat == 4
    assert st.trick.current_turn == 4
    assert st.trick.cards_played == {}
    assert st.trick.led_suit is None
    assert st.trick.trump_from is None
    with pytest.raises(IllegalIntent):
        controller.advance_trick()


def test_trump_known_before_trick_counts_from_first_card(club_reveal_deal):
    controller = club_reveal_deal
    controller.play_card(2, _c("K-hearts"))
    controller.play_card(3, _c("A-clubs"))
    controller.play_card(4, _c("A-hearts"))
    controller.reveal_trump(5)
    controller.play_card(5, _c("K-clubs"))
    controller.play_card(6, _c("J-clubs"))
    controller.play_card(1, _c("3-hearts"))
    st = controller.advance_trick()
    assert st.trick.trump_from == 0


def test_random_games_hold_invariants_and_targets():
    for seed in range(30):
        controller = GameController(rng=random.Random(seed))
        result = run_game(controller, _checking_random_policy(seed))
        fm = result.first_mover_team
        winner = result.winning_team
        loser = TEAM_1 if winner == TEAM_2 else TEAM_2
        assert result.tricks_won[winner] == trick_target(winner, fm)
        assert result.tricks_won[loser] < trick_target(loser, fm)
        assert sum(result.tricks_won.values()) <= 8
        assert all(0 <= p < 32 for p in result.ladder_points.values())
        assert controller.state.phase == GamePhase.COMPLETED


def test_game_completed_event_and_intents_rejected_after_end():
    events = []
    controller = GameController(rng=random.Random(5), on_event=events.append)
    result = run_game(controller, _checking_random_policy(5), distributor=3)
    completed = [e for e in events if isinstance(e, GameCompleted)]
    assert len(completed) == 1
    assert completed[0].winning_team == result.winning_team
    assert completed[0].next_distributor == result.next_distributor
    with pytest.raises(IllegalIntent, match="No game in progress"):
        controller.play_card(1, _c("A-hearts"))


def test_next_game_uses_recorded_distributor_and_keeps_ladder():
    controller = GameController(rng=random.Random(11))
    first = run_game(controller, _checking_random_policy(11), distributor=2)
    st = controller.start_game()
    assert st.distributor == first.next_distributor
    assert st.ladder_points == first.ladder_points
    assert st.tricks_won == {TEAM_1: 0, TEAM_2: 0}
    assert not st.trump_revealed
    assert st.trump_suit is None
    assert st.game_number == 2
    with pytest.raises(IllegalIntent):
        controller.start_game()


def test_run_match_with_random_agents():
    agents = {seat: RandomAgent(seed=seat) for seat in SEATS}
    ladder, results = run_match(4, policy_action_fn(agents), rng=random.Random(3))
    assert len(results) == 4
    assert ladder == results[-1].ladder_points
    for prev, cur in zip(results, results[1:]):
        assert cur.distributor == prev.next_distributor


def test_duplicate_card_is_integrity_violation(rig):
    controller = rig(fixed={2: ["K-hearts"]}, reserve="5-clubs")
    st = controller.state
    st.hands[1].append(st.hands[3][0])
    with pytest.raises(IntegrityViolation):
        controller.play_card(2, _c("K-hearts"))


def test_exhausted_tricks_is_integrity_violation(monkeypatch):
    monkeypatch.setattr(game_module, "game_winner", lambda tricks_won, first_mover_team: None)
    controller = GameController(rng=random.Random(8))
    with pytest.raises(IntegrityViolation, match="exhausted"):
        run_game(controller, _checking_random_policy(8))
    assert controller.state.trick_number == 8


# Every seat follows suit for seven tricks (two per suit, clubs last). Seat 2
# leads with 7 cards; its only club goes in trick 7. Winners alternate
# 2, 1, 4, 3, 6, 5, 4, so trick 8 starts at 4-3 with the reserve still hidden.
_FOLLOW_SUIT_DEAL = {
    1: ["4-hearts", "K-hearts", "5-spades", "6-spades", "5-diamonds", "6-diamonds", "6-clubs", "7-clubs"],
    2: ["A-hearts", "3-hearts", "7-spades", "8-spades", "7-diamonds", "8-diamonds", "3-clubs"],
    3: ["5-hearts", "6-hearts", "4-spades", "K-spades", "9-diamonds", "10-diamonds", "8-clubs", "9-clubs"],
    4: ["7-hearts", "8-hearts", "A-spades", "3-spades", "J-diamonds", "Q-diamonds", "A-clubs", "4-clubs"],
    5: ["9-hearts", "10-hearts", "9-spades", "10-spades", "4-diamonds", "K-diamonds", "10-clubs", "J-clubs"],
    6: ["J-hearts", "Q-hearts", "J-spades", "Q-spades", "A-diamonds", "3-diamonds", "Q-clubs", "K-clubs"],
}


def test_first_mover_out_of_cards_in_trick_eight_receives_reserve(rig):
    controller = rig(fixed=_FOLLOW_SUIT_DEAL, reserve="5-clubs", distributor=1)
    st = controller.state
    reveals = []

    def on_event(event):
        if isinstance(event, TrumpRevealed):
            reveals.append((st.trick_number, event))

    controller.on_event = on_event

    while controller.in_progress:
        if controller.awaiting_transition:
            if st.trick_number == 7:
                assert st.tricks_won == {TEAM_1: 3, TEAM_2: 4}
                assert st.reserve is not None
            controller.advance_trick()
            continue
        seat = controller.current_player()
        plan = _FOLLOW_SUIT_DEAL[seat]
        card_id = plan[st.trick_number - 1] if st.trick_number <= len(plan) else "5-clubs"
        if seat == 2 and st.trick_number == 8:
            assert st.trump_revealed
            assert controller.legal_cards(2) == [_c("5-clubs")]
        controller.play_card(seat, _c(card_id))

    assert [(n, e.seat, e.first_to_act, e.card) for n, e in reveals] == [(8, 2, 2, _c("5-clubs"))]
    assert st.phase == GamePhase.COMPLETED
    assert st.trick_number == 8
    assert st.trick.winner == 6
    assert st.tricks_won == {TEAM_1: 3, TEAM_2: 5}
    assert st.winning_team == TEAM_2
    assert all(not hand for hand in st.hands.values())


def test_first_mover_revealing_must_play_own_reserve(rig):
    controller = rig(
        fixed={2: ["3-hearts", "Q-spades"], 3: ["A-hearts", "K-diamonds"]},
        reserve="5-clubs",
        voids={2: {Suit.DIAMONDS, Suit.CLUBS}},
    )
    events = []
    controller.on_event = events.append
    st = controller.state

    # Trick 1: seat 3 takes the hearts lead with the ace
    controller.play_card(2, _c("3-hearts"))
    controller.play_card(3, _c("A-hearts"))
    for seat in (4, 5, 6, 1):
        controller.play_card(seat, controller.legal_cards(seat)[0])
    assert st.trick.winner == 3
    controller.advance_trick()

    # Trick 2: diamonds led, seat 2 (the first mover) holds none
    controller.play_card(3, _c("K-diamonds"))
    for seat in (4, 5, 6, 1):
        controller.play_card(seat, controller.legal_cards(seat)[0])
    assert controller.can_reveal(2)
    controller.reveal_trump(2)

    assert st.first_to_act == 2
    assert st.reserve is None
    assert _c("5-clubs") in st.hands[2]
    assert events[-1] == TrumpRevealed(seat=2, card=_c("5-clubs"), first_to_act=2)
    assert controller.legal_cards(2) == [_c("5-clubs")]
    with pytest.raises(IllegalIntent, match="must play a clubs card"):
        controller.play_card(2, _c("Q-spades"))
    assert _c("Q-spades") in st.hands[2]

    controller.play_card(2, _c("5-clubs"))
    assert st.trick.complete
    assert st.trick.winner == 2
    assert st.tricks_won == {TEAM_1: 1, TEAM_2: 1}
