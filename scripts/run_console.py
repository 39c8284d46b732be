#!/usr/bin/env python3
"""
Replay an intent script against a headless ship console.

The script is a JSON list of steps, each run at its simulation time:

    [
        {"at": 0.0, "intent": "toggle-switch", "params": {"value": 16}},
        {"at": 0.2, "intent": "toggle-switch", "params": {"value": 8}},
        {"at": 12.0}
    ]

A step without "intent" only advances the clock.

Usage:
    python scripts/run_console.py session.json
    python scripts/run_console.py session.json --seed 7 --fracture cockpit --status
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add the repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shipconsole import COMPARTMENTS, ShipConsole, load_config


def load_script(path: Path) -> list:
    with open(path, "r", encoding="utf-8") as f:
        steps = json.load(f)
    if not isinstance(steps, list):
        raise ValueError(f"Intent script must be a JSON list: {path}")
    return sorted(steps, key=lambda step: float(step.get("at", 0.0)))


def run_script(console: ShipConsole, steps: list) -> None:
    for step in steps:
        console.tick(max(console.now, float(step.get("at", console.now))))
        intent = step.get("intent")
        if intent:
            console.dispatch(intent, **step.get("params", {}))


def main():
    parser = argparse.ArgumentParser(
        description="Replay an intent script against a headless ship console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/run_console.py session.json
    python scripts/run_console.py session.json --until 60 --status
    python scripts/run_console.py session.json --config overrides.json --log-level DEBUG
        """,
    )
    parser.add_argument("script", type=Path, help="JSON intent script")
    parser.add_argument("--config", type=Path, default=None, help="JSON config overrides")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed")
    parser.add_argument(
        "--fracture",
        choices=COMPARTMENTS,
        default=None,
        help="Force the breached compartment",
    )
    parser.add_argument(
        "--until",
        type=float,
        default=None,
        help="Keep simulating until this time after the last step",
    )
    parser.add_argument("--status", action="store_true", help="Print the final status as JSON")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic logging level (default: WARNING)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        steps = load_script(args.script)
    except (FileNotFoundError, KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    console = ShipConsole(config=config, seed=args.seed, fracture_site=args.fracture)
    run_script(console, steps)
    if args.until is not None:
        console.tick(max(console.now, args.until))

    print("SHIP CONSOLE")
    print("=" * 50)
    for entry in console.log.entries:
        print(f"  {entry}")

    reactor = console.reactor
    print("\n" + "=" * 50)
    print(f"  T+{console.now:.1f}s  phase {reactor.phase}  power {reactor.power}  "
          f"temp {reactor.temp}  status {reactor.status.value}")
    print(f"  O2 {console.lifesupport.oxygen_level:.1f}%  "
          f"hull {console.vitals.hull_integrity:.1f}%  "
          f"shields {console.vitals.shield_status:.1f}%")
    if reactor.exploded:
        print("  REACTOR LOST")
    if console.authority.ending:
        print(f"  FINAL DIRECTIVE: {console.authority.ending.value.upper()}")

    if args.status:
        print(json.dumps(console.get_status(), indent=2))


if __name__ == "__main__":
    main()
