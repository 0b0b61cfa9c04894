"""
Authoritative host and observing peers.

One host process owns the GameController. Peers submit intents (fire-and-forget)
and receive snapshots. The host validates intents one at a time, in arrival
order; refused intents are dropped, never re-queued. After a trick completes
the host keeps it on display for ``HostConfig.display_delay`` seconds, then a
single deferred transition starts the next trick.
"""
from __future__ import annotations

import logging
import queue
import random
import threading
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union

from .config import HostConfig, TableConfig, table_config_to_dict
from .deal import check_seat
from .errors import IllegalIntent, IntegrityViolation
from .game import GameController
from .messages import Event, Intent, dispatch_intent, intent_from_dict, intent_to_dict
from .persistence import public_view, snapshot_state

log = logging.getLogger(__name__)

Snapshot = Dict[str, Any]


class Accepted(NamedTuple):
    state: Snapshot


class Rejected(NamedTuple):
    reason: str


IntentResult = Union[Accepted, Rejected]


class DeferredTransition:
    """
    One scheduled continuation with a cancellation token.
    Runs its callback at most once: when the timer expires or on fire(),
    whichever comes first, and never after cancel().
    """

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.cancelled = threading.Event()
        self._callback = callback
        self._fired = False
        self._lock = threading.Lock()
        self._timer = threading.Timer(delay, self.fire)
        self._timer.daemon = True

    @property
    def pending(self) -> bool:
        return not self._fired and not self.cancelled.is_set()

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> None:
        self.cancelled.set()
        self._timer.cancel()

    def fire(self) -> bool:
        """Run the continuation now. Returns False if it already ran or was cancelled."""
        with self._lock:
            if not self.pending:
                return False
            self._fired = True
        self._timer.cancel()
        self._callback()
        return True


class AuthoritativeHost:
    """The only writer of game state; everyone else observes."""

    def __init__(
        self,
        controller: GameController | None = None,
        config: HostConfig | None = None,
        table: TableConfig | None = None,
    ) -> None:
        self.config = config or HostConfig()
        self.table = table or TableConfig()
        self.controller = controller or GameController(rng=random.Random(self.config.seed))
        self.controller.on_event = self._record_event
        self.halted = False
        self._lock = threading.RLock()
        self._queue: "queue.Queue[Tuple[int, Intent]]" = queue.Queue()
        self._subscribers: List[Tuple[Callable[[Snapshot], None], Optional[int]]] = []
        self._event_subscribers: List[Callable[[Event], None]] = []
        self._pending_events: List[Event] = []
        self._transition: DeferredTransition | None = None
        self._stop = threading.Event()
        self._worker: threading.Thread | None = None

    # ---- observers ----

    def subscribe(self, callback: Callable[[Snapshot], None], seat: int | None = None) -> None:
        """Receive every published state; with ``seat``, only that seat's public view."""
        self._subscribers.append((callback, seat))

    def subscribe_events(self, callback: Callable[[Event], None]) -> None:
        self._event_subscribers.append(callback)

    def snapshot_state(self) -> Snapshot:
        with self._lock:
            snap = snapshot_state(self.controller)
            snap["table"] = table_config_to_dict(self.table)
            return snap

    @property
    def transition_pending(self) -> bool:
        return self._transition is not None and self._transition.pending

    # ---- game control ----

    def start_game(self, distributor: int | None = None) -> Snapshot:
        with self._lock:
            self._ensure_not_halted()
            self.controller.start_game(distributor)
            return self._publish()

    def apply_intent(self, seat: int, intent: Intent) -> IntentResult:
        """Validate and apply one intent. IntegrityViolation halts the host and propagates."""
        with self._lock:
            if self.halted:
                return Rejected("Game halted after an integrity violation")
            try:
                check_seat(seat)
            except ValueError as e:
                log.debug("Rejected %r from seat %s: %s", intent, seat, e)
                return Rejected(str(e))
            try:
                dispatch_intent(self.controller, seat, intent)
            except IllegalIntent as e:
                self._pending_events.clear()
                log.debug("Rejected %r from seat %d: %s", intent, seat, e.reason)
                return Rejected(e.reason)
            except IntegrityViolation:
                self.halted = True
                log.error("Integrity violation while applying %r from seat %d; game halted", intent, seat)
                raise
            if self.controller.awaiting_transition:
                self._schedule_transition()
            return Accepted(self._publish())

    def submit(self, seat: int, intent: Intent) -> None:
        """Queue an intent for validation (fire-and-forget)."""
        self._queue.put((seat, intent))

    def submit_message(self, seat: int, message: Dict[str, Any]) -> None:
        """Queue a wire-form intent; malformed messages are dropped."""
        try:
            intent = intent_from_dict(message)
        except ValueError as e:
            log.debug("Dropped malformed message from seat %s: %s", seat, e)
            return
        self.submit(seat, intent)

    def process_pending(self) -> List[IntentResult]:
        """Drain the intent queue in arrival order."""
        results: List[IntentResult] = []
        while True:
            try:
                seat, intent = self._queue.get_nowait()
            except queue.Empty:
                return results
            results.append(self.apply_intent(seat, intent))

    def flush_transition(self) -> bool:
        """Run the pending trick transition immediately instead of waiting for the timer."""
        transition = self._transition
        return transition.fire() if transition is not None else False

    # ---- worker thread ----

    def start(self) -> None:
        """Drain the queue continuously on a background thread."""
        if self._worker is not None and self._worker.is_alive():
            return
        self._stop.clear()
        self._worker = threading.Thread(target=self._serve, name="hiddentrump-host", daemon=True)
        self._worker.start()

    def stop(self) -> None:
        self._stop.set()
        if self._worker is not None:
            self._worker.join(timeout=2.0)
            self._worker = None

    def teardown(self) -> None:
        """Stop serving and cancel any scheduled trick transition."""
        with self._lock:
            if self._transition is not None:
                self._transition.cancel()
                self._transition = None
        self.stop()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                seat, intent = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                self.apply_intent(seat, intent)
            except IntegrityViolation:
                log.exception("Host worker stopping")
                return

    # ---- internals ----

    def _ensure_not_halted(self) -> None:
        if self.halted:
            raise IntegrityViolation("Game halted after an integrity violation")

    def _schedule_transition(self) -> None:
        if self.transition_pending:
            return
        transition = DeferredTransition(self.config.display_delay, lambda: self._continue_trick(transition))
        self._transition = transition
        transition.start()

    def _continue_trick(self, transition: DeferredTransition) -> None:
        with self._lock:
            # Cancelled while waiting for the lock (teardown) or superseded
            if transition.cancelled.is_set() or transition is not self._transition:
                return
            if self.halted or not self.controller.awaiting_transition:
                return
            self.controller.advance_trick()
            self._publish()

    def _record_event(self, event: Event) -> None:
        self._pending_events.append(event)

    def _publish(self) -> Snapshot:
        snap = self.snapshot_state()
        for callback, seat in self._subscribers:
            callback(public_view(snap, seat) if seat is not None else snap)
        events, self._pending_events = self._pending_events, []
        for event in events:
            for callback in self._event_subscribers:
                callback(event)
        return snap


class Peer:
    """
    A non-authoritative participant: sends intents, renders what it receives.
    Intents travel in wire form, as they would over a real link.
    """

    def __init__(
        self,
        seat: int,
        host: AuthoritativeHost,
        on_render: Callable[[Snapshot], None] | None = None,
    ) -> None:
        self.seat = check_seat(seat)
        self.view: Snapshot | None = None
        self._host = host
        self._on_render = on_render
        host.subscribe(self.on_state_received, seat=seat)

    def submit_intent(self, intent: Intent) -> None:
        self._host.submit_message(self.seat, intent_to_dict(intent))

    def on_state_received(self, state: Snapshot) -> None:
        self.view = state
        if self._on_render is not None:
            self._on_render(state)


__all__ = [
    "Accepted",
    "Rejected",
    "IntentResult",
    "DeferredTransition",
    "AuthoritativeHost",
    "Peer",
]
