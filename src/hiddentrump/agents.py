"""
Simple baseline agents and the generic policy interface.

A ``Policy`` maps (observation, legal-action mask) to an action index; see
``hiddentrump.env`` for both encodings. ``policy_action_fn`` adapts per-seat
policies to the callback expected by ``run_game`` / ``run_match``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Protocol, Sequence

import numpy as np

from .env import action_to_intent, encode_observation, legal_action_mask
from .game import ActionFn, GameController
from .messages import Intent


class Policy(Protocol):
    """Stateless or stateful decision policy working on flat observations."""

    def act(self, obs: Sequence[float], legal_actions_mask: Iterable[bool]) -> int:
        """Return an index where ``legal_actions_mask`` is true."""


@dataclass
class RandomAgent:
    """
    Baseline policy that samples uniformly among legal actions (reveal included).

    Usage:
        agent = RandomAgent(seed=42)
        action = agent.act(obs, legal_actions_mask)
    """

    seed: int | None = None

    def __post_init__(self) -> None:
        self._rng = np.random.default_rng(self.seed)

    def act(self, obs: Sequence[float], legal_actions_mask: Iterable[bool]) -> int:
        legal = np.flatnonzero(np.asarray(list(legal_actions_mask), dtype=bool))
        if legal.size == 0:
            raise ValueError("No legal actions available for RandomAgent")
        return int(self._rng.choice(legal))


def policy_action_fn(policies: Policy | Mapping[int, Policy]) -> ActionFn:
    """One policy for every seat, or a seat -> policy mapping."""

    def get_action(controller: GameController, seat: int) -> Intent:
        policy = policies[seat] if isinstance(policies, Mapping) else policies
        mask = legal_action_mask(controller, seat)
        action = policy.act(encode_observation(controller, seat), mask)
        if not mask[action]:
            raise ValueError(f"Policy chose illegal action {action} for seat {seat}")
        return action_to_intent(action)

    return get_action


__all__ = ["Policy", "RandomAgent", "policy_action_fn"]
