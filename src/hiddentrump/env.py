"""
Observation / action encoding for bot seats.

Flat observations let any policy (random, scripted or learned) decide from the
same vector a seat is entitled to see:
- its own hand, card-by-card,
- the cards on the table in the current trick,
- led suit, trump suit and whether the trump is known,
- trick counts, ladder points, own seat and the first-mover team.

Actions are indices: 0..47 play the card with that deck index, 48 reveals the trump.
"""
from __future__ import annotations

from typing import Iterable

import numpy as np

from .deal import NUM_SEATS, TEAM_1, TEAM_2
from .deck import NUM_CARDS, RANKS, Card, Suit
from .game import GameController, TRICKS_PER_GAME
from .messages import Intent, PlayCard, RevealTrump
from .scoring import LADDER_LIMIT

NUM_CARD_ACTIONS: int = NUM_CARDS
REVEAL_ACTION: int = NUM_CARD_ACTIONS
NUM_ACTIONS: int = NUM_CARD_ACTIONS + 1  # 48 + 1 = 49

_SUITS = list(Suit)
_NUM_SUITS = len(_SUITS)

# 48 (hand) + 48 (trick) + 4 (led) + 4 (trump) + 1 (revealed) + 2 (tricks)
# + 2 (ladder) + 6 (seat) + 2 (first mover)
OBS_DIM: int = 2 * NUM_CARDS + 2 * _NUM_SUITS + 1 + 2 + 2 + NUM_SEATS + 2


def card_index(card: Card) -> int:
    """Stable index 0..47 matching make_deck_48(): suit-major, then ascending rank."""
    return _SUITS.index(card.suit) * len(RANKS) + (card.rank - RANKS[0])


def card_from_index(index: int) -> Card:
    if not 0 <= index < NUM_CARDS:
        raise ValueError(f"Invalid card index {index}")
    suit_idx, rank_idx = divmod(index, len(RANKS))
    return Card(suit=_SUITS[suit_idx], rank=RANKS[rank_idx])


def encode_card_set(cards: Iterable[Card]) -> np.ndarray:
    vec = np.zeros(NUM_CARDS, dtype=np.float32)
    for c in cards:
        vec[card_index(c)] = 1.0
    return vec


def _one_hot_suit(suit: Suit | None) -> np.ndarray:
    vec = np.zeros(_NUM_SUITS, dtype=np.float32)
    if suit is not None:
        vec[_SUITS.index(suit)] = 1.0
    return vec


def encode_observation(controller: GameController, seat: int) -> np.ndarray:
    """Flat float32 vector of length OBS_DIM for ``seat``."""
    st = controller.state
    trick = st.trick
    on_table = list(trick.cards_played.values()) if trick is not None else []
    led = trick.led_suit if trick is not None else None

    seat_vec = np.zeros(NUM_SEATS, dtype=np.float32)
    seat_vec[seat - 1] = 1.0
    mover_vec = np.zeros(2, dtype=np.float32)
    if st.first_mover_team is not None:
        mover_vec[st.first_mover_team - 1] = 1.0

    parts = [
        encode_card_set(st.hands[seat]),
        encode_card_set(on_table),
        _one_hot_suit(led),
        _one_hot_suit(st.trump_suit),
        np.array([1.0 if st.trump_revealed else 0.0], dtype=np.float32),
        np.array([st.tricks_won[TEAM_1], st.tricks_won[TEAM_2]], dtype=np.float32) / TRICKS_PER_GAME,
        np.array([st.ladder_points[TEAM_1], st.ladder_points[TEAM_2]], dtype=np.float32) / LADDER_LIMIT,
        seat_vec,
        mover_vec,
    ]
    obs = np.concatenate(parts)
    assert obs.shape == (OBS_DIM,)
    return obs


def legal_action_mask(controller: GameController, seat: int) -> np.ndarray:
    """Boolean mask over NUM_ACTIONS; all False when it is not ``seat``'s turn."""
    mask = np.zeros(NUM_ACTIONS, dtype=bool)
    for card in controller.legal_cards(seat):
        mask[card_index(card)] = True
    if controller.can_reveal(seat):
        mask[REVEAL_ACTION] = True
    return mask


def action_to_intent(action: int) -> Intent:
    if action == REVEAL_ACTION:
        return RevealTrump()
    return PlayCard(card=card_from_index(action))


def intent_to_action(intent: Intent) -> int:
    if isinstance(intent, RevealTrump):
        return REVEAL_ACTION
    return card_index(intent.card)


__all__ = [
    "NUM_ACTIONS",
    "NUM_CARD_ACTIONS",
    "REVEAL_ACTION",
    "OBS_DIM",
    "card_index",
    "card_from_index",
    "encode_card_set",
    "encode_observation",
    "legal_action_mask",
    "action_to_intent",
    "intent_to_action",
]
