"""
Table and host configuration.

TableConfig holds presentation labels only (team and player names); it has no
effect on the rules. HostConfig holds the authoritative side's settings.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from .deal import SEATS, TEAM_1, TEAM_2


def _default_team_names() -> Dict[int, str]:
    return {TEAM_1: "Team 1", TEAM_2: "Team 2"}


def _default_player_names() -> Dict[int, str]:
    return {seat: f"Player {seat}" for seat in SEATS}


@dataclass
class TableConfig:
    """Display names for teams and seats."""

    team_names: Dict[int, str] = field(default_factory=_default_team_names)
    player_names: Dict[int, str] = field(default_factory=_default_player_names)

    def team_name(self, team: int) -> str:
        return self.team_names.get(team) or f"Team {team}"

    def player_name(self, seat: int) -> str:
        return self.player_names.get(seat) or f"Player {seat}"


@dataclass
class HostConfig:
    """Authoritative host settings."""

    # Seconds a finished trick stays on display before the next one starts
    display_delay: float = 1.0
    seed: int | None = None


def table_config_from_dict(d: Dict[str, Any]) -> TableConfig:
    """Blank or missing names fall back to the defaults."""
    cfg = TableConfig()
    for key, name in (d.get("team_names") or {}).items():
        team = int(key)
        if team not in (TEAM_1, TEAM_2):
            raise ValueError(f"Invalid team {key!r} in team_names")
        if name and str(name).strip():
            cfg.team_names[team] = str(name).strip()
    for key, name in (d.get("player_names") or {}).items():
        seat = int(key)
        if seat not in SEATS:
            raise ValueError(f"Invalid seat {key!r} in player_names")
        if name and str(name).strip():
            cfg.player_names[seat] = str(name).strip()
    return cfg


def table_config_to_dict(cfg: TableConfig) -> Dict[str, Any]:
    return {
        "team_names": {str(k): v for k, v in cfg.team_names.items()},
        "player_names": {str(k): v for k, v in cfg.player_names.items()},
    }


def host_config_from_dict(d: Dict[str, Any]) -> HostConfig:
    delay = float(d.get("display_delay", 1.0))
    if delay < 0:
        raise ValueError(f"display_delay must be >= 0, got {delay}")
    seed = d.get("seed")
    return HostConfig(display_delay=delay, seed=int(seed) if seed is not None else None)


def host_config_to_dict(cfg: HostConfig) -> Dict[str, Any]:
    return {"display_delay": cfg.display_delay, "seed": cfg.seed}


def load_config(path: Path | str) -> tuple[TableConfig, HostConfig]:
    """Read {"table": {...}, "host": {...}} from a JSON file; both sections optional."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a JSON object")
    return (
        table_config_from_dict(data.get("table") or {}),
        host_config_from_dict(data.get("host") or {}),
    )


__all__ = [
    "TableConfig",
    "HostConfig",
    "table_config_from_dict",
    "table_config_to_dict",
    "host_config_from_dict",
    "host_config_to_dict",
    "load_config",
]
