"""Shared helpers: build controllers with hand-picked cards."""
import random

import pytest

from hiddentrump.deal import SEATS, next_seat, team_of
from hiddentrump.deck import Suit, card_from_id, make_deck_48
from hiddentrump.game import GameController, GamePhase, GameState, TrickState


def rigged_controller(
    fixed: dict[int, list[str]],
    reserve: str,
    distributor: int = 1,
    voids: dict[int, set[Suit]] | None = None,
) -> GameController:
    """
    A controller at the start of trick 1 where each seat holds its ``fixed``
    cards (ids) plus filler up to 8 cards (7 for the first-to-act seat).
    Filler never gives a seat a suit listed in ``voids``.
    """
    voids = voids or {}
    leader = next_seat(distributor)
    reserve_card = card_from_id(reserve)
    hands = {seat: [card_from_id(c) for c in fixed.get(seat, [])] for seat in SEATS}
    taken = {c for h in hands.values() for c in h} | {reserve_card}
    targets = {seat: (7 if seat == leader else 8) for seat in SEATS}
    for card in make_deck_48():
        if card in taken:
            continue
        for seat in SEATS:
            if len(hands[seat]) < targets[seat] and card.suit not in voids.get(seat, set()):
                hands[seat].append(card)
                break
        else:
            raise AssertionError(f"Could not place filler card {card}")
    state = GameState(
        phase=GamePhase.IN_PROGRESS,
        game_number=1,
        distributor=distributor,
        first_to_act=leader,
        first_mover_team=team_of(leader),
        trick_number=1,
        hands=hands,
        reserve=reserve_card,
        trick=TrickState(start_seat=leader, current_turn=leader),
    )
    controller = GameController(rng=random.Random(0), state=state)
    controller.check_integrity()
    return controller


@pytest.fixture
def rig():
    return rigged_controller


@pytest.fixture
def club_reveal_deal(rig):
    """
    Distributor 1, seat 2 leads hearts. Seats 3, 5 and 6 hold no hearts; the
    reserve is a club. Seat 3 discards the ace of clubs before anyone reveals.
    """
    no_hearts = {Suit.HEARTS}
    return rig(
        fixed={
            1: ["3-hearts"],
            2: ["K-hearts"],
            3: ["A-clubs"],
            4: ["A-hearts"],
            5: ["K-clubs", "Q-spades"],
            6: ["J-clubs"],
        },
        reserve="5-clubs",
        distributor=1,
        voids={3: no_hearts, 5: no_hearts, 6: no_hearts},
    )
