"""Hidden Trump: six-seat, two-team trick-taking engine with a reserve-card trump."""

__version__ = "0.1.0"

from .deck import Card, Suit, card_from_id, make_deck_48, sort_hand
from .deal import (
    Deal6P,
    deal_6p,
    first_to_act,
    next_seat,
    team_of,
    TEAM_1,
    TEAM_2,
    TEAM_SEATS,
)
from .errors import IllegalIntent, IntegrityViolation
from .play import TrumpTiming, can_reveal, legal_plays, trick_winner
from .scoring import LadderOutcome, game_winner, next_distributor, settle_game
from .messages import (
    PlayCard,
    RevealTrump,
    TrumpRevealed,
    TrickCompleted,
    GameCompleted,
)
from .game import (
    GameController,
    GamePhase,
    GameResult,
    GameState,
    TrickState,
    run_game,
    run_match,
)
from .persistence import public_view, snapshot_state
from .host import Accepted, AuthoritativeHost, Peer, Rejected
