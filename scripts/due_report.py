"""
Print due cards and the planned study queue for a JSON card list.

Reference harness for the scheduling engine: feeds a card list through the
scheduler and the regular study planner without touching any storage.

Input: a JSON array of cards, e.g.
    [{"key": "kitab", "definitions": [{"meaning": "book", "source_deck": "Basics//Nouns"}],
      "state": {"difficulty": 5.1, "stability": 4.1, "reviews": [...],
                "last_review_timestamp": "...", "due_timestamp": "..."}}]

Usage:
    python -m scripts.due_report cards.json
    python -m scripts.due_report cards.json --learned-today 3 --scope collection:Basics --json
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
import random
import sys
from typing import Optional

from pydantic import ValidationError

from vocab_core import ReviewScheduler, load_settings
from vocab_core.fsrs import coerce_timestamp
from vocab_core.schemas import load_cards
from vocab_core.session_builders import GLOBAL_SCOPE, RegularStudyPlanner


def build_report(
    records: list[dict],
    now: datetime,
    learned_today: int = 0,
    scopes: Optional[list[str]] = None,
    seed: Optional[int] = None
) -> dict:
    """Run the planner over raw card records and summarise the result."""
    settings = load_settings()
    scheduler = ReviewScheduler(settings.weights)
    planner = RegularStudyPlanner(scheduler, settings, rng=random.Random(seed))

    cards = planner.select_scope_cards(load_cards(records), scopes or [GLOBAL_SCOPE])
    due = scheduler.get_due_cards(cards, now)
    plan = planner.build_queue(cards, learned_today=learned_today, now=now)

    return {
        "now": now.isoformat(),
        "due": [card.key for card in due],
        "queue": [card.key for card in plan.queue],
        "review_count": plan.review_count,
        "new_count": plan.new_count,
        "pools": {
            "due_review": len(plan.pools.due_review),
            "new": len(plan.pools.new),
            "not_due": len(plan.pools.not_due),
        },
    }


def print_report(report: dict) -> None:
    print("=" * 60)
    print(f"Due report at {report['now']}")
    print("=" * 60)
    pools = report["pools"]
    print(f"Due review: {pools['due_review']}  New: {pools['new']}  Not due: {pools['not_due']}")
    print(f"\nDue cards ({len(report['due'])}):")
    for key in report["due"]:
        print(f"  - {key}")
    print(f"\nPlanned queue ({report['review_count']} review + {report['new_count']} new):")
    for position, key in enumerate(report["queue"], start=1):
        print(f"  {position:>3}. {key}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Print due cards and the planned study queue for a JSON card list"
    )
    parser.add_argument("cards", type=Path, help="JSON file holding a list of cards")
    parser.add_argument("--now", help="Evaluation time (ISO-8601, default: current UTC time)")
    parser.add_argument("--learned-today", type=int, default=0, help="New cards already learned today")
    parser.add_argument(
        "--scope",
        action="append",
        help="global, collection:<name> or deck:<collection>//<deck> (repeatable)"
    )
    parser.add_argument("--seed", type=int, help="Seed for the new-card shuffle")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--verbose", action="store_true", help="Log planner decisions")

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    now = coerce_timestamp(args.now) if args.now else datetime.now(timezone.utc)

    try:
        records = json.loads(args.cards.read_text(encoding="utf-8"))
        report = build_report(records, now, args.learned_today, args.scope, args.seed)
    except (OSError, json.JSONDecodeError, ValidationError, ValueError) as e:
        print(f"✗ Could not build report: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
