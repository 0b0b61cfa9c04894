"""
Game targets and the team ladder.
First-mover team needs 5 tricks, the other team 4. The winner of a game takes
up to 10 ladder points from the loser (flat 5 if the loser has none); reaching
32 rolls the team back by 32 and makes the distributor skip a seat.
"""
from __future__ import annotations

from typing import NamedTuple

from .deal import TEAM_1, TEAM_2, next_seat, other_team, team_of

FIRST_MOVER_TARGET = 5
OTHER_TEAM_TARGET = 4

LADDER_LIMIT = 32
MAX_STEAL = 10
FLAT_GAIN = 5


def trick_target(team: int, first_mover_team: int) -> int:
    return FIRST_MOVER_TARGET if team == first_mover_team else OTHER_TEAM_TARGET


def game_winner(tricks_won: dict[int, int], first_mover_team: int) -> int | None:
    """Team that has reached its target, or None. The first mover is checked first."""
    for team in (first_mover_team, other_team(first_mover_team)):
        if tricks_won[team] >= trick_target(team, first_mover_team):
            return team
    return None


class LadderOutcome(NamedTuple):
    """Result of settling one game on the ladder."""
    points: dict[int, int]  # team -> ladder points after settlement
    transferred: int  # points gained by the winner before any rollover
    stolen: bool  # False when the loser had nothing and the flat gain applied
    rollover_triggered: bool
    next_distributor: int


def next_distributor(distributor: int, winning_team: int, rollover_triggered: bool) -> int:
    """
    Rollover: the deal skips one seat. Otherwise the deal passes on only when
    the distributor's own team won; a win by the other team keeps the distributor.
    """
    if rollover_triggered:
        return next_seat(next_seat(distributor))
    if winning_team == team_of(distributor):
        return next_seat(distributor)
    return distributor


def settle_game(points: dict[int, int], winning_team: int, distributor: int) -> LadderOutcome:
    """Apply the steal/flat gain and the 32-point rollover. ``points`` is not mutated."""
    if winning_team not in (TEAM_1, TEAM_2):
        raise ValueError(f"Invalid team {winning_team}")
    losing_team = other_team(winning_team)
    new_points = {TEAM_1: points[TEAM_1], TEAM_2: points[TEAM_2]}

    losing_points = new_points[losing_team]
    if losing_points == 0:
        gained = FLAT_GAIN
        stolen = False
    else:
        gained = min(MAX_STEAL, losing_points)
        new_points[losing_team] -= gained
        stolen = True
    new_points[winning_team] += gained

    rollover = False
    for team in (TEAM_1, TEAM_2):
        if new_points[team] >= LADDER_LIMIT:
            new_points[team] -= LADDER_LIMIT
            rollover = True

    return LadderOutcome(
        points=new_points,
        transferred=gained,
        stolen=stolen,
        rollover_triggered=rollover,
        next_distributor=next_distributor(distributor, winning_team, rollover),
    )
