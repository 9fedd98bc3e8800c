"""Serialized, all-or-nothing execution of state-mutating operations.

Every mutating service call runs inside ``atomic(db)``. A single process-wide
re-entrant lock serializes operations, so the marketplace behaves as one
sequential ledger. The outermost block commits on success and rolls back every
flushed change on failure.

Blocks opened while another is active on the same session (e.g. a payout
recipient calling back into a registry operation) run inside a SAVEPOINT. A
nested block that fails rolls back its own changes only; the outer unit keeps
going and decides the final commit.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

_ledger_lock = threading.RLock()

_DEPTH_KEY = "atomic_depth"


def in_atomic(db: Session) -> bool:
    """True while an ``atomic`` block is open on this session."""
    return db.info.get(_DEPTH_KEY, 0) > 0


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    with _ledger_lock:
        depth = db.info.get(_DEPTH_KEY, 0)
        db.info[_DEPTH_KEY] = depth + 1
        try:
            if depth == 0:
                try:
                    yield db
                    db.commit()
                except BaseException:
                    db.rollback()
                    raise
            else:
                with db.begin_nested():
                    yield db
        finally:
            db.info[_DEPTH_KEY] = depth
