"""
Intents (what a seat asks for) and events (what happened), as closed sets of
frozen dataclasses, plus their JSON-compatible wire form.

Intents: PlayCard, RevealTrump.
Events:  TrumpRevealed, TrickCompleted, GameCompleted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Union

from .deck import Card, card_from_id

if TYPE_CHECKING:
    from .game import GameController, GameState


@dataclass(frozen=True)
class PlayCard:
    card: Card


@dataclass(frozen=True)
class RevealTrump:
    pass


Intent = Union[PlayCard, RevealTrump]


@dataclass(frozen=True)
class TrumpRevealed:
    seat: int
    card: Card
    first_to_act: int  # seat that received the reserve card


@dataclass(frozen=True)
class TrickCompleted:
    trick_number: int
    winner: int
    card: Card
    team: int


@dataclass(frozen=True)
class GameCompleted:
    winning_team: int
    tricks_won: Dict[int, int]
    ladder_points: Dict[int, int]
    rollover_triggered: bool  # "big win": a team passed 32 ladder points
    next_distributor: int


Event = Union[TrumpRevealed, TrickCompleted, GameCompleted]


def dispatch_intent(controller: "GameController", seat: int, intent: Intent) -> "GameState":
    """Route an intent to the matching controller transition. Raises IllegalIntent if refused."""
    if isinstance(intent, PlayCard):
        return controller.play_card(seat, intent.card)
    if isinstance(intent, RevealTrump):
        return controller.reveal_trump(seat)
    raise TypeError(f"Unknown intent {intent!r}")


# ---- wire form ----

def intent_to_dict(intent: Intent) -> Dict[str, Any]:
    if isinstance(intent, PlayCard):
        return {"type": "play_card", "card": intent.card.id}
    if isinstance(intent, RevealTrump):
        return {"type": "reveal_trump"}
    raise TypeError(f"Unknown intent {intent!r}")


def intent_from_dict(d: Dict[str, Any]) -> Intent:
    """Parse a wire-form intent. Anything malformed raises ValueError."""
    if not isinstance(d, Mapping):
        raise ValueError(f"Intent must be a mapping, got {type(d).__name__}")
    kind = d.get("type")
    if kind == "play_card":
        card_id = d.get("card")
        if not isinstance(card_id, str):
            raise ValueError(f"play_card needs a card id string, got {card_id!r}")
        return PlayCard(card=card_from_id(card_id))
    if kind == "reveal_trump":
        return RevealTrump()
    raise ValueError(f"Unknown intent type {kind!r}")


def event_to_dict(event: Event) -> Dict[str, Any]:
    if isinstance(event, TrumpRevealed):
        return {
            "type": "trump_revealed",
            "seat": event.seat,
            "card": event.card.id,
            "first_to_act": event.first_to_act,
        }
    if isinstance(event, TrickCompleted):
        return {
            "type": "trick_completed",
            "trick_number": event.trick_number,
            "winner": event.winner,
            "card": event.card.id,
            "team": event.team,
        }
    if isinstance(event, GameCompleted):
        return {
            "type": "game_completed",
            "winning_team": event.winning_team,
            "tricks_won": {str(k): v for k, v in event.tricks_won.items()},
            "ladder_points": {str(k): v for k, v in event.ladder_points.items()},
            "rollover_triggered": event.rollover_triggered,
            "next_distributor": event.next_distributor,
        }
    raise TypeError(f"Unknown event {event!r}")


__all__ = [
    "PlayCard",
    "RevealTrump",
    "Intent",
    "TrumpRevealed",
    "TrickCompleted",
    "GameCompleted",
    "Event",
    "dispatch_intent",
    "intent_to_dict",
    "intent_from_dict",
    "event_to_dict",
]
