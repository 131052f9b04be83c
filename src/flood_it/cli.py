"""Command-line entry point for headless flood-it runs."""

from __future__ import annotations

import argparse
import json
import logging
import sys

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flood-it",
        description="Flood-it simulation and configuration tools.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- simulate ---
    sim_p = sub.add_parser(
        "simulate", help="Autoplay games and report win rate and throughput.",
    )
    sim_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON config file (flags override its values).",
    )
    sim_p.add_argument("--games", type=int, default=100)
    sim_p.add_argument("--size", type=int, default=None)
    sim_p.add_argument("--colors", type=int, default=None)
    sim_p.add_argument("--seed", type=int, default=None)
    sim_p.add_argument(
        "--strategy", type=str, default="greedy",
        choices=["greedy", "random"],
    )

    # --- show-config ---
    show_p = sub.add_parser(
        "show-config", help="Print the effective config and move limit.",
    )
    show_p.add_argument("--config", type=str, default=None)
    show_p.add_argument("--size", type=int, default=None)
    show_p.add_argument("--colors", type=int, default=None)
    show_p.add_argument("--seed", type=int, default=None)
    show_p.add_argument(
        "--save", type=str, default=None,
        help="Write the effective config to this path.",
    )

    return parser


def _resolve_config(args: argparse.Namespace):
    from flood_it.config import SessionConfig

    config = (
        SessionConfig.load(args.config)
        if args.config else SessionConfig()
    )

    overrides: dict = {}
    flag_map = {
        "size": "size",
        "colors": "num_colors",
        "seed": "seed",
    }
    for cli_name, cfg_name in flag_map.items():
        val = getattr(args, cli_name, None)
        if val is not None:
            overrides[cfg_name] = val

    if overrides:
        d = config.to_dict()
        d.update(overrides)
        config = SessionConfig(**d)
    return config


def _run_simulate(args: argparse.Namespace) -> int:
    from flood_it.simulate import simulate_games

    config = _resolve_config(args)
    result = simulate_games(
        num_games=args.games,
        size=config.size,
        num_colors=config.num_colors,
        strategy=args.strategy,
        seed=config.seed,
    )
    print(result.summary())  # noqa: T201
    return 0


def _run_show_config(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    payload = config.to_dict()
    payload["move_limit"] = config.move_limit
    print(json.dumps(payload, indent=2))  # noqa: T201
    if args.save:
        config.save(args.save)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``flood-it`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "simulate": _run_simulate,
        "show-config": _run_show_config,
    }
    try:
        return handlers[args.command](args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
