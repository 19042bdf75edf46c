"""Import a counter that was kept outside the service (e.g. browser storage).

The imported value becomes the last issued number; the next commit continues
after it. The version is bumped so in-flight commits lose their check-and-set.
"""
from __future__ import annotations

import argparse
import sys

from hims_sequencing.core.sequence import SequenceState
from hims_sequencing.db.session import SessionLocal
from hims_sequencing.db.time import utcnow
from hims_sequencing.services.errors import PersistenceError
from hims_sequencing.services.sequence_store import SequenceStore, SqlSequenceStore


def seed_sequence(store: SequenceStore, name: str, last_value: int) -> SequenceState:
    """Overwrite the stored counter of ``name`` with ``last_value``."""
    if last_value < 0:
        raise ValueError("last_value must be non-negative")
    current = store.read(name) or SequenceState()
    state = SequenceState(
        last_value=last_value,
        last_reset_at=current.last_reset_at or utcnow(),
        version=current.version + 1,
    )
    store.write(name, state)
    return state


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the last issued value of a sequence")
    parser.add_argument("name", help="Sequence name, e.g. mrNumber or token")
    parser.add_argument("last_value", type=int, help="Last number already issued")
    args = parser.parse_args()

    with SessionLocal() as db:
        try:
            state = seed_sequence(SqlSequenceStore(db), args.name, args.last_value)
        except (ValueError, PersistenceError) as exc:
            print(f"[seed_sequence] ERROR: {exc}", file=sys.stderr)
            sys.exit(1)
    print(f"[seed_sequence] {args.name} last_value={state.last_value}")


if __name__ == "__main__":
    main()
