"""
Game snapshot serialization for broadcast.

The authoritative side publishes the full state as a JSON-compatible dict;
observers rebuild a read-only controller from it or show a per-seat view in
which other hands and the unrevealed reserve are hidden.
"""
from __future__ import annotations

import copy
import json
from typing import Any, Dict, List, Optional

from .deal import SEATS, TEAM_1, TEAM_2
from .deck import Card, Suit, card_from_id
from .game import GameController, GamePhase, GameState, TrickState
from .play import TrumpTiming

SCHEMA_VERSION = 1


def _card(c: Optional[Card]) -> Optional[str]:
    return c.id if c is not None else None


def _card_back(s: Optional[str]) -> Optional[Card]:
    return card_from_id(s) if s is not None else None


def _cards(cards: List[Card]) -> List[str]:
    return [c.id for c in cards]


def _cards_back(ids: List[str]) -> List[Card]:
    return [card_from_id(s) for s in ids]


def _by_team(d: Dict[int, Any]) -> Dict[str, Any]:
    return {str(TEAM_1): d[TEAM_1], str(TEAM_2): d[TEAM_2]}


def _trick_to_dict(trick: TrickState) -> Dict[str, Any]:
    return {
        "start_seat": trick.start_seat,
        "current_turn": trick.current_turn,
        "cards_played": [[seat, c.id] for seat, c in trick.plays()],
        "led_suit": trick.led_suit.value if trick.led_suit else None,
        "complete": trick.complete,
        "mandatory_trump_follow": trick.mandatory_trump_follow,
        "trump_activated_this_trick": trick.trump_activated_this_trick,
        "trump_from": trick.trump_from,
        "winner": trick.winner,
    }


def _trick_from_dict(d: Dict[str, Any]) -> TrickState:
    return TrickState(
        start_seat=int(d["start_seat"]),
        current_turn=d.get("current_turn"),
        cards_played={int(seat): card_from_id(cid) for seat, cid in d.get("cards_played", [])},
        led_suit=Suit(d["led_suit"]) if d.get("led_suit") else None,
        complete=bool(d.get("complete", False)),
        mandatory_trump_follow=bool(d.get("mandatory_trump_follow", False)),
        trump_activated_this_trick=bool(d.get("trump_activated_this_trick", False)),
        trump_from=d.get("trump_from"),
        winner=d.get("winner"),
    )


def state_to_dict(state: GameState) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "phase": state.phase.value,
        "game_number": state.game_number,
        "distributor": state.distributor,
        "next_distributor": state.next_distributor,
        "first_to_act": state.first_to_act,
        "first_mover_team": state.first_mover_team,
        "trick_number": state.trick_number,
        "tricks_won": _by_team(state.tricks_won),
        "ladder_points": _by_team(state.ladder_points),
        "hands": {str(seat): _cards(state.hands[seat]) for seat in SEATS},
        "won_cards": _by_team({t: _cards(cs) for t, cs in state.won_cards.items()}),
        "reserve": _card(state.reserve),
        "revealed_card": _card(state.revealed_card),
        "trump_suit": state.trump_suit.value if state.trump_suit else None,
        "trump_revealed": state.trump_revealed,
        "trump_revealer": state.trump_revealer,
        "trick": _trick_to_dict(state.trick) if state.trick is not None else None,
        "last_trick_winner": state.last_trick_winner,
        "last_trick_card": _card(state.last_trick_card),
        "winning_team": state.winning_team,
        "rollover_triggered": state.rollover_triggered,
    }


def state_from_dict(d: Dict[str, Any]) -> GameState:
    """Inverse of state_to_dict. Hidden entries (see public_view) come back empty."""
    version = d.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ValueError(f"Unsupported snapshot schema version {version!r}")
    hands = d.get("hands", {})
    won = d.get("won_cards", {})
    return GameState(
        phase=GamePhase(d["phase"]),
        game_number=int(d.get("game_number", 0)),
        distributor=d.get("distributor"),
        next_distributor=d.get("next_distributor"),
        first_to_act=d.get("first_to_act"),
        first_mover_team=d.get("first_mover_team"),
        trick_number=int(d.get("trick_number", 0)),
        tricks_won={int(k): int(v) for k, v in d["tricks_won"].items()},
        ladder_points={int(k): int(v) for k, v in d["ladder_points"].items()},
        hands={seat: _cards_back(hands.get(str(seat)) or []) for seat in SEATS},
        won_cards={t: _cards_back(won.get(str(t)) or []) for t in (TEAM_1, TEAM_2)},
        reserve=_card_back(d.get("reserve")),
        revealed_card=_card_back(d.get("revealed_card")),
        trump_suit=Suit(d["trump_suit"]) if d.get("trump_suit") else None,
        trump_revealed=bool(d.get("trump_revealed", False)),
        trump_revealer=d.get("trump_revealer"),
        trick=_trick_from_dict(d["trick"]) if d.get("trick") else None,
        last_trick_winner=d.get("last_trick_winner"),
        last_trick_card=_card_back(d.get("last_trick_card")),
        winning_team=d.get("winning_team"),
        rollover_triggered=bool(d.get("rollover_triggered", False)),
    )


def snapshot_state(controller: GameController) -> Dict[str, Any]:
    """Full serializable state of the authoritative controller, plus its trump-timing rule."""
    snap = state_to_dict(controller.state)
    snap["trump_timing"] = controller.timing.value
    return snap


def public_view(snapshot: Dict[str, Any], seat: int) -> Dict[str, Any]:
    """
    What ``seat`` is shown: its own hand, the other hands as card counts, and
    the reserve only once revealed. The input snapshot is not modified.
    """
    view = copy.deepcopy(snapshot)
    hands = view.get("hands", {})
    view["hand_counts"] = {s: len(cards) for s, cards in hands.items()}
    view["hands"] = {str(seat): hands.get(str(seat), [])}
    view["reserve"] = None
    view["has_reserve"] = snapshot.get("reserve") is not None
    view["viewer"] = seat
    return view


def controller_from_snapshot(
    snapshot: Dict[str, Any],
    timing: TrumpTiming | None = None,
) -> GameController:
    """
    Rebuild a controller around a received snapshot (observer side). The
    trump-timing rule comes from ``timing``, else from the snapshot.
    """
    if timing is None:
        timing = TrumpTiming(snapshot.get("trump_timing", TrumpTiming.FROM_REVEALER.value))
    return GameController(state=state_from_dict(snapshot), timing=timing)


def snapshot_to_json(snapshot: Dict[str, Any]) -> str:
    return json.dumps(snapshot, indent=2)


def snapshot_from_json(s: str) -> Dict[str, Any]:
    return json.loads(s)


__all__ = [
    "SCHEMA_VERSION",
    "state_to_dict",
    "state_from_dict",
    "snapshot_state",
    "public_view",
    "controller_from_snapshot",
    "snapshot_to_json",
    "snapshot_from_json",
]
