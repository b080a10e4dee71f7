"""
Verify (and optionally rebuild) the memory snapshot cache.

Replays every reviewed item's history and compares the result with the
cached snapshot. Missing, stale or drifted snapshots are reported; with
--write they are replaced by the replayed state.

Usage:
    python -m scripts.maintenance.rebuild_snapshots --user-id alice
    python -m scripts.maintenance.rebuild_snapshots --user-id alice --write
"""

import argparse
import math

from recall.fsrs import database
from recall.fsrs.config import parameters_from_env
from recall.fsrs.records import MemorySnapshot
from recall.fsrs.replay import replay
from recall.logging import configure_logging, logger


def _drifted(cached, replayed, tolerance: float) -> bool:
    return not (
        math.isclose(cached.stability, replayed.stability, rel_tol=tolerance)
        and math.isclose(cached.difficulty, replayed.difficulty, rel_tol=tolerance)
        and cached.last_reviewed == replayed.last_reviewed
    )


def check_user(user_id: str, write: bool, tolerance: float) -> dict:
    """
    Compare cached snapshots with replayed state for one user.

    Returns:
        Counts: checked, ok, missing, stale, drifted, written
    """
    params = parameters_from_env()
    counts = {"checked": 0, "ok": 0, "missing": 0, "stale": 0, "drifted": 0, "written": 0}

    for item_id in database.list_reviewed_item_ids(user_id):
        history = database.load_history(user_id, item_id)
        replayed = replay(history, params)
        if replayed is None:
            continue
        counts["checked"] += 1

        cached = database.load_snapshot(user_id, item_id)
        if cached is None:
            status = "missing"
        elif not cached.matches(history):
            status = "stale"
        elif _drifted(cached.state, replayed, tolerance):
            status = "drifted"
        else:
            counts["ok"] += 1
            continue

        counts[status] += 1
        logger.warning("memory_snapshot_mismatch", user_id=user_id, item_id=item_id, status=status)

        if write:
            database.save_snapshot(
                user_id,
                item_id,
                MemorySnapshot(
                    state=replayed,
                    last_review_id=history[-1].id,
                    review_count=len(history)
                )
            )
            counts["written"] += 1

    return counts


def main():
    parser = argparse.ArgumentParser(description="Verify or rebuild cached memory snapshots")
    parser.add_argument("--user-id", required=True, help="User whose items to check")
    parser.add_argument(
        "--write",
        action="store_true",
        help="Replace missing, stale or drifted snapshots with the replayed state"
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=1e-9,
        help="Relative tolerance when comparing stability/difficulty"
    )
    args = parser.parse_args()

    configure_logging(json=False)
    database.init_db()

    counts = check_user(args.user_id, args.write, args.tolerance)

    print(f"Checked {counts['checked']} items for {args.user_id}")
    print(f"  ok:      {counts['ok']}")
    print(f"  missing: {counts['missing']}")
    print(f"  stale:   {counts['stale']}")
    print(f"  drifted: {counts['drifted']}")
    if args.write:
        print(f"  written: {counts['written']}")


if __name__ == "__main__":
    main()
