"""
Hidden Trump deck: 48 cards (4 suits × 12 ranks, no 2s).
Strength inside a suit: 3 (weakest) .. 10, J, Q, K, A (strongest).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Suit(str, Enum):
    """Value is the wire name used in card ids ("A-hearts")."""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]


_SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

# Hand display order (not a rule: suits are never ranked against each other)
SUIT_DISPLAY_ORDER = {Suit.HEARTS: 0, Suit.SPADES: 1, Suit.DIAMONDS: 2, Suit.CLUBS: 3}

# Rank as strength: 3..10 face value, 11=J, 12=Q, 13=K, 14=A
RANK_JACK = 11
RANK_QUEEN = 12
RANK_KING = 13
RANK_ACE = 14
RANKS = tuple(range(3, 15))

_RANK_LABELS = {RANK_JACK: "J", RANK_QUEEN: "Q", RANK_KING: "K", RANK_ACE: "A"}
_LABEL_RANKS = {label: rank for rank, label in _RANK_LABELS.items()}

NUM_CARDS = 48


@dataclass(frozen=True)
class Card:
    """A single card; identity is (suit, rank)."""

    suit: Suit
    rank: int

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank {self.rank}; expected 3..14")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit {self.suit!r}")

    @property
    def label(self) -> str:
        return _RANK_LABELS.get(self.rank) or str(self.rank)

    @property
    def id(self) -> str:
        return f"{self.label}-{self.suit.value}"

    def __str__(self) -> str:
        return f"{self.label}{self.suit.symbol}"

    def __repr__(self) -> str:
        return str(self)


def card_from_id(card_id: str) -> Card:
    """Parse a card id such as "10-clubs" or "Q-hearts"."""
    label, sep, suit_name = card_id.partition("-")
    if not sep:
        raise ValueError(f"Malformed card id {card_id!r}")
    try:
        suit = Suit(suit_name)
    except ValueError:
        raise ValueError(f"Unknown suit in card id {card_id!r}") from None
    if label in _LABEL_RANKS:
        rank = _LABEL_RANKS[label]
    elif label.isdigit():
        rank = int(label)
    else:
        raise ValueError(f"Unknown rank in card id {card_id!r}")
    return Card(suit=suit, rank=rank)


def make_deck_48() -> list[Card]:
    """Build the full 48-card deck, suit-major then ascending rank."""
    return [Card(suit=s, rank=r) for s in Suit for r in RANKS]


def sort_hand(cards: list[Card]) -> list[Card]:
    """Display order: by suit (hearts, spades, diamonds, clubs), strongest first."""
    return sorted(cards, key=lambda c: (SUIT_DISPLAY_ORDER[c.suit], -c.rank))
