"""
Seats, teams and distribution for 6 players.
Seats are 1..6 clockwise. Team 1 = seats 1, 3, 5; team 2 = seats 2, 4, 6.
Dealing starts at the seat after the distributor, one card at a time, 8 each;
then one random card of the first-to-act seat is set aside as the reserve.
"""
from __future__ import annotations

import random
from collections import Counter
from typing import Iterable, NamedTuple

from .deck import NUM_CARDS, Card, make_deck_48
from .errors import IntegrityViolation

NUM_SEATS = 6
CARDS_PER_SEAT = 8
SEATS = tuple(range(1, NUM_SEATS + 1))

TEAM_1 = 1
TEAM_2 = 2
TEAM_SEATS = {
    TEAM_1: (1, 3, 5),
    TEAM_2: (2, 4, 6),
}


def check_seat(seat: int) -> int:
    if seat not in SEATS:
        raise ValueError(f"Invalid seat {seat}; expected 1..{NUM_SEATS}")
    return seat


def next_seat(seat: int) -> int:
    """Next seat clockwise (6 -> 1). The only rotation rule used anywhere."""
    return (seat % NUM_SEATS) + 1


def seats_from(start: int) -> list[int]:
    """All six seats in play order beginning with ``start``."""
    order = [start]
    while len(order) < NUM_SEATS:
        order.append(next_seat(order[-1]))
    return order


def team_of(seat: int) -> int:
    return TEAM_1 if check_seat(seat) in TEAM_SEATS[TEAM_1] else TEAM_2


def other_team(team: int) -> int:
    return TEAM_2 if team == TEAM_1 else TEAM_1


def first_to_act(distributor: int) -> int:
    """The seat after the distributor leads trick 1 and loses a card to the reserve."""
    return next_seat(distributor)


class Deal6P(NamedTuple):
    """Result of a deal. Hands are lists (mutated during play)."""
    hands: dict[int, list[Card]]  # seat -> cards
    reserve: Card
    distributor: int
    first_to_act: int


def deal_6p(
    distributor: int,
    deck: list[Card] | None = None,
    rng: random.Random | None = None,
) -> Deal6P:
    """
    Shuffle and deal the 48 cards clockwise from the seat after ``distributor``.
    The first-to-act seat then loses one uniformly random card to the reserve
    and plays the game with 7 cards until the trump is revealed.
    """
    check_seat(distributor)
    if deck is None:
        deck = make_deck_48()
    if rng is None:
        rng = random.Random()
    deck = list(deck)
    rng.shuffle(deck)

    hands: dict[int, list[Card]] = {seat: [] for seat in SEATS}
    seat = distributor
    for card in deck:
        seat = next_seat(seat)
        hands[seat].append(card)

    leader = first_to_act(distributor)
    leader_hand = hands[leader]
    reserve = leader_hand.pop(rng.randrange(len(leader_hand)))

    check_no_duplicates(_all_cards(hands.values(), [reserve]), expected=NUM_CARDS)
    return Deal6P(hands=hands, reserve=reserve, distributor=distributor, first_to_act=leader)


def _all_cards(hands: Iterable[list[Card]], *extra: Iterable[Card]) -> list[Card]:
    cards: list[Card] = []
    for h in hands:
        cards.extend(h)
    for e in extra:
        cards.extend(e)
    return cards


def check_no_duplicates(cards: list[Card], expected: int = NUM_CARDS) -> None:
    """Raise IntegrityViolation unless ``cards`` holds exactly ``expected`` distinct cards."""
    if len(cards) != expected:
        raise IntegrityViolation(f"Card count mismatch: {len(cards)} accounted for, expected {expected}")
    dupes = [c for c, n in Counter(cards).items() if n > 1]
    if dupes:
        raise IntegrityViolation(f"Duplicate cards: {dupes}")
