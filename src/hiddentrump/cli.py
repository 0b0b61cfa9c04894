"""
Command-line interface for simulating Hidden Trump games.

Usage examples (after installing in editable mode):

    hidden-trump simulate --games 10 --seed 7
    hidden-trump simulate --games 3 --config table.json --snapshot-out last.json
    hidden-trump show-config --config table.json
"""
from __future__ import annotations

import argparse
import json
import logging
import random
from pathlib import Path
from typing import List, Optional

from .agents import RandomAgent, policy_action_fn
from .config import HostConfig, TableConfig, host_config_to_dict, load_config, table_config_to_dict
from .deal import SEATS, TEAM_1, TEAM_2
from .game import GameController, run_match
from .persistence import snapshot_state, snapshot_to_json

log = logging.getLogger(__name__)


def _load(args: argparse.Namespace) -> tuple[TableConfig, HostConfig]:
    if args.config:
        return load_config(args.config)
    return TableConfig(), HostConfig()


def _add_simulate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "simulate",
        help="Play games with random agents in every seat and print the ladder.",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=5,
        help="Number of games to play in a row.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides the host seed from --config).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON config file with optional 'table' and 'host' sections.",
    )
    parser.add_argument(
        "--snapshot-out",
        type=str,
        default=None,
        help="Write the final game snapshot to this JSON file.",
    )
    parser.set_defaults(func=_cmd_simulate)


def _cmd_simulate(args: argparse.Namespace) -> None:
    table, host_cfg = _load(args)
    seed = args.seed if args.seed is not None else host_cfg.seed
    if args.games < 1:
        raise SystemExit("--games must be at least 1")

    controller = GameController(rng=random.Random(seed))
    agents = {seat: RandomAgent(seed=None if seed is None else seed * 10 + seat) for seat in SEATS}
    log.info("Simulating %d games (seed=%s)", args.games, seed)
    ladder, results = run_match(args.games, policy_action_fn(agents), controller=controller)

    for r in results:
        flag = "  ROLLOVER" if r.rollover_triggered else ""
        print(
            f"[game {r.game_number}] distributor={table.player_name(r.distributor)} "
            f"winner={table.team_name(r.winning_team)} "
            f"tricks={r.tricks_won[TEAM_1]}-{r.tricks_won[TEAM_2]} "
            f"ladder={r.ladder_points[TEAM_1]}-{r.ladder_points[TEAM_2]}{flag}",
            flush=True,
        )
    print(
        f"Final ladder: {table.team_name(TEAM_1)} {ladder[TEAM_1]}, "
        f"{table.team_name(TEAM_2)} {ladder[TEAM_2]}"
    )

    if args.snapshot_out:
        out = Path(args.snapshot_out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(snapshot_to_json(snapshot_state(controller)), encoding="utf-8")
        print(f"Saved snapshot to {out.resolve()}")


def _add_show_config_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "show-config",
        help="Print the effective table and host configuration as JSON.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON config file to load.",
    )
    parser.set_defaults(func=_cmd_show_config)


def _cmd_show_config(args: argparse.Namespace) -> None:
    table, host_cfg = _load(args)
    print(json.dumps(
        {"table": table_config_to_dict(table), "host": host_config_to_dict(host_cfg)},
        indent=2,
    ))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hidden Trump engine tools.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log engine activity (-v info, -vv debug).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_simulate_parser(subparsers)
    _add_show_config_parser(subparsers)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args.func(args)


if __name__ == "__main__":
    main()
