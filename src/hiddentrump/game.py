"""
Game orchestration: deal → up to 8 tricks → win check → ladder settlement.
The controller owns the only mutable GameState; every change goes through its
methods (start_game, reveal_trump, play_card, advance_trick).
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, NamedTuple

from .deal import (
    NUM_SEATS,
    SEATS,
    TEAM_1,
    TEAM_2,
    check_no_duplicates,
    check_seat,
    deal_6p,
    next_seat,
    seats_from,
    team_of,
)
from .deck import NUM_CARDS, Card, Suit
from .errors import IllegalIntent, IntegrityViolation
from .messages import (
    Event,
    GameCompleted,
    Intent,
    TrickCompleted,
    TrumpRevealed,
    dispatch_intent,
)
from .play import TrumpTiming, can_reveal, has_suit, legal_plays, trick_winner
from .scoring import game_winner, settle_game

log = logging.getLogger(__name__)

TRICKS_PER_GAME = 8


class GamePhase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class TrickState:
    """One trick. cards_played keeps play order (seat -> card)."""

    start_seat: int
    current_turn: int | None
    cards_played: dict[int, Card] = field(default_factory=dict)
    led_suit: Suit | None = None
    complete: bool = False
    # The seat to play has just revealed and owes a trump if it holds one
    mandatory_trump_follow: bool = False
    trump_activated_this_trick: bool = False
    # Play index from which trump-suit cards count as trump (0 = revealed before this trick)
    trump_from: int | None = None
    winner: int | None = None

    def plays(self) -> list[tuple[int, Card]]:
        """(seat, card) in play order, reconstructed clockwise from start_seat."""
        return [(s, self.cards_played[s]) for s in seats_from(self.start_seat) if s in self.cards_played]


@dataclass
class GameState:
    """Everything about the current game plus the ladder, which outlives games."""

    phase: GamePhase = GamePhase.NOT_STARTED
    game_number: int = 0
    distributor: int | None = None
    next_distributor: int | None = None
    first_to_act: int | None = None
    first_mover_team: int | None = None
    trick_number: int = 0
    tricks_won: dict[int, int] = field(default_factory=lambda: {TEAM_1: 0, TEAM_2: 0})
    ladder_points: dict[int, int] = field(default_factory=lambda: {TEAM_1: 0, TEAM_2: 0})
    hands: dict[int, list[Card]] = field(default_factory=lambda: {s: [] for s in SEATS})
    won_cards: dict[int, list[Card]] = field(default_factory=lambda: {TEAM_1: [], TEAM_2: []})
    reserve: Card | None = None
    revealed_card: Card | None = None
    trump_suit: Suit | None = None
    trump_revealed: bool = False
    trump_revealer: int | None = None
    trick: TrickState | None = None
    last_trick_winner: int | None = None
    last_trick_card: Card | None = None
    winning_team: int | None = None
    rollover_triggered: bool = False


class GameResult(NamedTuple):
    game_number: int
    distributor: int
    first_mover_team: int
    winning_team: int
    tricks_won: dict[int, int]
    ladder_points: dict[int, int]
    rollover_triggered: bool
    next_distributor: int


class GameController:
    """Authoritative rule engine for one table. Single writer, synchronous transitions."""

    def __init__(
        self,
        rng: random.Random | None = None,
        on_event: Callable[[Event], None] | None = None,
        timing: TrumpTiming = TrumpTiming.FROM_REVEALER,
        state: GameState | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self.on_event = on_event
        self.timing = timing
        self.state = state or GameState()

    # ---- queries ----

    @property
    def in_progress(self) -> bool:
        return self.state.phase == GamePhase.IN_PROGRESS

    @property
    def awaiting_transition(self) -> bool:
        """A finished trick is on display and the next one has not begun."""
        trick = self.state.trick
        return self.in_progress and trick is not None and trick.complete

    def current_player(self) -> int | None:
        trick = self.state.trick
        if not self.in_progress or trick is None or trick.complete:
            return None
        return trick.current_turn

    def legal_cards(self, seat: int) -> list[Card]:
        """Legal cards for ``seat`` (empty when it is not that seat's turn)."""
        if self.current_player() != seat:
            return []
        trick = self.state.trick
        return legal_plays(
            self.state.hands[seat],
            trick.led_suit,
            self.state.trump_suit,
            mandatory_trump=trick.mandatory_trump_follow,
        )

    def can_reveal(self, seat: int) -> bool:
        if self.current_player() != seat:
            return False
        st = self.state
        return can_reveal(st.hands[seat], st.trick.led_suit, st.trump_revealed, st.reserve)

    def result(self) -> GameResult:
        st = self.state
        if st.phase != GamePhase.COMPLETED:
            raise ValueError("Game is not completed")
        return GameResult(
            game_number=st.game_number,
            distributor=st.distributor,
            first_mover_team=st.first_mover_team,
            winning_team=st.winning_team,
            tricks_won=dict(st.tricks_won),
            ladder_points=dict(st.ladder_points),
            rollover_triggered=st.rollover_triggered,
            next_distributor=st.next_distributor,
        )

    # ---- transitions ----

    def start_game(self, distributor: int | None = None) -> GameState:
        """
        Deal a new game. Distributor: explicit argument, else the successor
        recorded by the previous game, else a random seat.
        """
        prev = self.state
        if prev.phase == GamePhase.IN_PROGRESS:
            raise IllegalIntent("A game is already in progress")
        if distributor is None:
            distributor = prev.next_distributor
        if distributor is None:
            distributor = self._rng.randint(1, NUM_SEATS)
        check_seat(distributor)

        deal = deal_6p(distributor, rng=self._rng)
        leader = deal.first_to_act
        self.state = GameState(
            phase=GamePhase.IN_PROGRESS,
            game_number=prev.game_number + 1,
            distributor=distributor,
            first_to_act=leader,
            first_mover_team=team_of(leader),
            trick_number=1,
            ladder_points=dict(prev.ladder_points),
            hands={seat: list(cards) for seat, cards in deal.hands.items()},
            reserve=deal.reserve,
            trick=TrickState(start_seat=leader, current_turn=leader),
        )
        log.info(
            "Game %d dealt by seat %d; seat %d leads (team %d needs 5 tricks)",
            self.state.game_number, distributor, leader, self.state.first_mover_team,
        )
        self.check_integrity()
        return self.state

    def reveal_trump(self, seat: int) -> GameState:
        """Turn the reserve card face up; its suit becomes trump for the rest of the game."""
        self._check_turn(seat)
        st = self.state
        trick = st.trick
        if trick.led_suit is None:
            raise IllegalIntent("Cannot reveal the trump before a suit is led")
        if st.trump_revealed or st.reserve is None:
            raise IllegalIntent("The trump has already been revealed")
        if has_suit(st.hands[seat], trick.led_suit):
            raise IllegalIntent(f"Seat {seat} can follow {trick.led_suit.value}; reveal not allowed")
        self._reveal(seat)
        self.check_integrity()
        return st

    def play_card(self, seat: int, card: Card) -> GameState:
        self._check_turn(seat)
        st = self.state
        trick = st.trick
        hand = st.hands[seat]
        if card not in hand:
            raise IllegalIntent(f"Card {card} not in hand of seat {seat}")
        if card not in self.legal_cards(seat):
            if trick.mandatory_trump_follow:
                raise IllegalIntent(f"Seat {seat} must play a {st.trump_suit.value} card after revealing")
            raise IllegalIntent(f"Seat {seat} must follow {trick.led_suit.value}")

        hand.remove(card)
        if trick.led_suit is None:
            trick.led_suit = card.suit
        trick.cards_played[seat] = card
        trick.mandatory_trump_follow = False

        if len(trick.cards_played) == NUM_SEATS:
            trick.complete = True
            trick.current_turn = None
            self._resolve_trick()
        else:
            trick.current_turn = next_seat(seat)
            self._reveal_if_stranded()
        self.check_integrity()
        return st

    def advance_trick(self) -> GameState:
        """Clear the displayed trick and let its winner lead the next one."""
        if not self.awaiting_transition:
            raise IllegalIntent("No completed trick to move past")
        st = self.state
        winner = st.trick.winner
        st.trick_number += 1
        st.trick = TrickState(
            start_seat=winner,
            current_turn=winner,
            trump_from=0 if st.trump_revealed else None,
        )
        self._reveal_if_stranded()
        return st

    # ---- internals ----

    def _reveal(self, seat: int) -> None:
        st = self.state
        trick = st.trick
        card = st.reserve
        st.trump_suit = card.suit
        st.trump_revealed = True
        st.trump_revealer = seat
        st.revealed_card = card
        st.reserve = None
        st.hands[st.first_to_act].append(card)
        trick.trump_activated_this_trick = True
        trick.mandatory_trump_follow = True
        trick.trump_from = len(trick.cards_played)

        log.info("Seat %d revealed the reserve %s; trump is %s", seat, card, card.suit.value)
        self._emit(TrumpRevealed(seat=seat, card=card, first_to_act=st.first_to_act))

    def _reveal_if_stranded(self) -> None:
        """
        The first-to-act seat holds 7 cards while the reserve is hidden; if it
        reaches an 8th trick with an empty hand the reserve is revealed for it.
        """
        st = self.state
        seat = st.trick.current_turn
        if seat == st.first_to_act and not st.hands[seat] and st.reserve is not None:
            log.info("Seat %d has no card left; revealing the reserve for it", seat)
            self._reveal(seat)

    def _check_turn(self, seat: int) -> None:
        check_seat(seat)
        if not self.in_progress:
            raise IllegalIntent("No game in progress")
        if self.awaiting_transition:
            raise IllegalIntent("Trick result is on display; wait for the next trick")
        if self.state.trick.current_turn != seat:
            raise IllegalIntent(f"Not seat {seat}'s turn (seat {self.state.trick.current_turn} to play)")

    def _resolve_trick(self) -> None:
        st = self.state
        trick = st.trick
        plays = trick.plays()
        winner = trick_winner(plays, trick.led_suit, st.trump_suit, trick.trump_from, self.timing)
        team = team_of(winner)
        trick.winner = winner
        st.tricks_won[team] += 1
        st.won_cards[team].extend(c for _, c in plays)
        st.last_trick_winner = winner
        st.last_trick_card = trick.cards_played[winner]

        log.info(
            "Trick %d won by seat %d with %s (team %d: %d tricks)",
            st.trick_number, winner, st.last_trick_card, team, st.tricks_won[team],
        )
        self._emit(TrickCompleted(
            trick_number=st.trick_number, winner=winner, card=st.last_trick_card, team=team,
        ))

        winning_team = game_winner(st.tricks_won, st.first_mover_team)
        if winning_team is not None:
            self._end_game(winning_team)
        elif st.trick_number >= TRICKS_PER_GAME:
            log.error("All %d tricks played without a winner: %s", TRICKS_PER_GAME, st.tricks_won)
            raise IntegrityViolation(f"Tricks exhausted without a game winner: {st.tricks_won}")

    def _end_game(self, winning_team: int) -> None:
        st = self.state
        outcome = settle_game(st.ladder_points, winning_team, st.distributor)
        st.phase = GamePhase.COMPLETED
        st.winning_team = winning_team
        st.ladder_points = outcome.points
        st.rollover_triggered = outcome.rollover_triggered
        st.next_distributor = outcome.next_distributor

        log.info(
            "Game %d won by team %d after %d tricks; ladder %s, next distributor seat %d",
            st.game_number, winning_team, st.trick_number, st.ladder_points, st.next_distributor,
        )
        if outcome.rollover_triggered:
            log.info("Ladder rollover in game %d", st.game_number)
        self._emit(GameCompleted(
            winning_team=winning_team,
            tricks_won=dict(st.tricks_won),
            ladder_points=dict(st.ladder_points),
            rollover_triggered=outcome.rollover_triggered,
            next_distributor=outcome.next_distributor,
        ))

    def _emit(self, event: Event) -> None:
        if self.on_event is not None:
            self.on_event(event)

    def check_integrity(self) -> None:
        """All 48 cards are in hands, the reserve, the current trick or a won pile, once each."""
        st = self.state
        if st.phase == GamePhase.NOT_STARTED:
            return
        cards: list[Card] = []
        for seat in SEATS:
            cards.extend(st.hands[seat])
        if st.reserve is not None:
            cards.append(st.reserve)
        if st.trick is not None and not st.trick.complete:
            cards.extend(st.trick.cards_played.values())
        for team in (TEAM_1, TEAM_2):
            cards.extend(st.won_cards[team])
        try:
            check_no_duplicates(cards, expected=NUM_CARDS)
        except IntegrityViolation:
            log.error("Integrity check failed in game %d, trick %d", st.game_number, st.trick_number)
            raise
        if sum(st.tricks_won.values()) > TRICKS_PER_GAME:
            raise IntegrityViolation(f"More than {TRICKS_PER_GAME} tricks counted: {st.tricks_won}")


ActionFn = Callable[[GameController, int], Intent]


def run_game(
    controller: GameController,
    get_action: ActionFn,
    distributor: int | None = None,
) -> GameResult:
    """
    Play one full game, asking get_action(controller, seat) for each decision
    (a PlayCard or RevealTrump). Trick transitions happen immediately.
    """
    controller.start_game(distributor)
    while controller.in_progress:
        if controller.awaiting_transition:
            controller.advance_trick()
            continue
        seat = controller.current_player()
        dispatch_intent(controller, seat, get_action(controller, seat))
    return controller.result()


def run_match(
    num_games: int,
    get_action: ActionFn,
    rng: random.Random | None = None,
    controller: GameController | None = None,
) -> tuple[dict[int, int], list[GameResult]]:
    """
    Play num_games in a row; the distributor follows the ladder succession.
    Returns (final ladder points, per-game results).
    """
    if controller is None:
        controller = GameController(rng=rng)
    results: list[GameResult] = []
    for _ in range(num_games):
        results.append(run_game(controller, get_action))
    return dict(controller.state.ladder_points), results
