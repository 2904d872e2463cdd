#!/usr/bin/env python3
"""
Run one engagement sweep now, outside the scheduler (same code path as the scheduled job).
Run: python scripts/run_sweep.py inactive_5_days
     python scripts/run_sweep.py new_stories --dry-run
--dry-run uses the log-only provider and writes nothing: no user is flagged and no story is marked announced.
"""
import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from engagement.config import setup_logging
from engagement.core.constants import INACTIVITY_RULES, NEW_STORIES_JOB_ID
from engagement.db.session import SessionLocal
from engagement.services.notifications.sweeps import run_inactivity_sweep, run_new_story_sweep
from engagement.services.push.registry import LogOnlyProvider, get_push_provider

_RULES = {rule.job_id: rule for rule in INACTIVITY_RULES}


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one engagement notification sweep")
    parser.add_argument("sweep", choices=sorted([*_RULES, NEW_STORIES_JOB_ID]))
    parser.add_argument("--dry-run", action="store_true", help="Log instead of sending push notifications")
    args = parser.parse_args()

    setup_logging()
    provider = LogOnlyProvider() if args.dry_run else get_push_provider()
    now = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        if args.sweep == NEW_STORIES_JOB_ID:
            outcome = run_new_story_sweep(db, provider, now, mark_announced=not args.dry_run)
        else:
            flag_mode = "confirmed" if args.dry_run else None
            outcome = run_inactivity_sweep(db, _RULES[args.sweep], provider, now, flag_mode=flag_mode)
    finally:
        db.close()
    print(
        f"{outcome.trigger}: candidates={outcome.candidates} tokens={outcome.tokens} "
        f"chunks={outcome.chunks} failed_chunks={outcome.failed_chunks} "
        f"sent={outcome.sent} failed={outcome.failed} flagged={outcome.flagged}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
