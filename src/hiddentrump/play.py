"""
Trick-taking: legal plays, trump reveal eligibility, trick winner.
Follow the led suit when possible; otherwise anything goes. A seat that cannot
follow may reveal the reserve card instead, which makes its suit trump and
obliges that seat to play a trump on the same turn if it holds one.
"""
from __future__ import annotations

from enum import Enum

from .deck import Card, Suit


class TrumpTiming(str, Enum):
    """
    Which trump-suit cards count as trump in the trick where the reveal happens.

    FROM_REVEALER: the revealer's own card and every later card (default).
    AFTER_REVEALER: only cards played strictly after the revealer's card
    (behaviour of early revisions of the game, kept as a variant).
    """
    FROM_REVEALER = "from_revealer"
    AFTER_REVEALER = "after_revealer"


def has_suit(hand: list[Card], suit: Suit | None) -> bool:
    return suit is not None and any(c.suit == suit for c in hand)


def cards_of_suit(hand: list[Card], suit: Suit) -> list[Card]:
    return [c for c in hand if c.suit == suit]


def legal_plays(
    hand: list[Card],
    led_suit: Suit | None,
    trump_suit: Suit | None = None,
    mandatory_trump: bool = False,
) -> list[Card]:
    """
    Cards of ``hand`` that may be played now.
    mandatory_trump: the seat has just revealed the trump and owes a trump if it has one.
    """
    if mandatory_trump and trump_suit is not None:
        trumps = cards_of_suit(hand, trump_suit)
        return trumps if trumps else list(hand)
    if led_suit is None:
        return list(hand)
    if has_suit(hand, led_suit):
        return cards_of_suit(hand, led_suit)
    return list(hand)


def can_reveal(
    hand: list[Card],
    led_suit: Suit | None,
    trump_revealed: bool,
    reserve: Card | None,
) -> bool:
    """A seat may reveal the reserve only when a suit was led that it cannot follow."""
    if led_suit is None or trump_revealed or reserve is None:
        return False
    return not has_suit(hand, led_suit)


def trump_active_positions(
    trick: list[tuple[int, Card]],
    led_suit: Suit | None,
    trump_suit: Suit | None,
    trump_from: int | None,
    timing: TrumpTiming = TrumpTiming.FROM_REVEALER,
) -> list[int]:
    """
    Indices into ``trick`` (play order) whose card counts as trump.
    trump_from: index of the revealer's play if the reveal happened during this
    trick, 0 if the trump was already known when the trick began, None if not revealed.
    """
    if trump_suit is None or trump_from is None:
        return []
    if trump_suit == led_suit:
        # Trump lead: every card of the suit is trump, whenever it was played.
        first = 0
    elif trump_from > 0 and timing == TrumpTiming.AFTER_REVEALER:
        first = trump_from + 1
    else:
        first = trump_from
    return [i for i, (_, c) in enumerate(trick) if i >= first and c.suit == trump_suit]


def trick_winner(
    trick: list[tuple[int, Card]],
    led_suit: Suit | None,
    trump_suit: Suit | None = None,
    trump_from: int | None = None,
    timing: TrumpTiming = TrumpTiming.FROM_REVEALER,
) -> int:
    """
    Seat that wins the trick. ``trick`` is (seat, card) in play order.
    Highest active trump wins; else highest card of the led suit; else the leader.
    """
    if not trick:
        raise ValueError("Cannot resolve an empty trick")
    positions = trump_active_positions(trick, led_suit, trump_suit, trump_from, timing)
    if not positions:
        positions = [i for i, (_, c) in enumerate(trick) if c.suit == led_suit]
    if not positions:
        return trick[0][0]
    best = max(positions, key=lambda i: trick[i][1].rank)
    return trick[best][0]
