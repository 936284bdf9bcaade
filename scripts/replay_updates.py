#!/usr/bin/env python3
"""Replay a JSON file of map updates through a StateStore and print events.

Usage
-----
    python scripts/replay_updates.py updates.json
    python scripts/replay_updates.py --changed-only --fragment updates.json

The file holds a JSON list. Each item is either a partial snapshot
(``{"year": 2012, "stateVotes": {"Ohio": {"rep": 18}}}``) or a relative
adjustment (``{"delta": {"Ohio": {"dem": 2}}}``).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ecmap import (
    EcMapConfig,
    EcMapError,
    EventContext,
    FragmentTracker,
    NotifyPolicy,
    StateChange,
    StateSnapshot,
    StateStore,
)


def _print_state_change(context: EventContext, change: StateChange) -> None:
    print(f"  [{context.sequence}] {context.name} {change.name}: dem={change.dem} rep={change.rep} toss={change.toss}")


def _print_change(context: EventContext, snapshot: StateSnapshot) -> None:
    totals = snapshot.totals
    print(f"  [{context.sequence}] {context.name} year={snapshot.year} totals dem={totals.dem} rep={totals.rep} toss={totals.toss}")


def _load(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise SystemExit(f"{path}: expected a JSON list of updates")
    for index, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise SystemExit(f"{path}: update #{index} must be a JSON object, got {type(item).__name__}")
    return data


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("path", type=Path, help="JSON file with a list of updates")
    parser.add_argument("--changed-only", action="store_true", help="announce only entities that changed")
    parser.add_argument("--fragment", action="store_true", help="print the location fragment after each update")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.changed_only:
        overrides["notify_policy"] = NotifyPolicy.CHANGED
    store = StateStore(EcMapConfig.from_env(**overrides))
    store.on("change:state", _print_state_change)
    store.on("change", _print_change)
    tracker = FragmentTracker(store) if args.fragment else None

    for index, item in enumerate(_load(args.path), start=1):
        print(f"update #{index}")
        try:
            if "delta" in item:
                store.apply_relative_delta(item["delta"])
            else:
                store.apply_update(item)
        except EcMapError as exc:
            print(f"  error: {exc}", file=sys.stderr)
            continue
        changed = store.changed_entities()
        print(f"  changed: {sorted(changed) if changed else 'nothing'}")
        print(f"  outcome: {store.outcome()}")
        if tracker is not None:
            print(f"  fragment: #{tracker.fragment}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
