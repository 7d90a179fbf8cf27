# Overview: Transaction scoping and row locking shared by the order and inventory services.

from __future__ import annotations

import time
from contextlib import contextmanager

from sqlalchemy import text

from ..extensions import db


class TransactionTimeout(Exception):
    """Raised when a transaction scope outlives its time budget."""


class Deadline:
    """Monotonic time budget for one transaction scope. timeout=None means unbounded."""

    def __init__(self, timeout: float | None):
        self.timeout = timeout
        self.started = time.monotonic()

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started

    def check(self) -> None:
        if self.timeout is not None and self.elapsed > self.timeout:
            raise TransactionTimeout(
                f"transaction exceeded {self.timeout:g}s (elapsed {self.elapsed:.3f}s)"
            )


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; transaction_scope() takes the
    database write lock up front there instead.
    """
    return query.with_for_update()


def _begin(timeout: float | None) -> None:
    dialect = db.engine.dialect.name
    if dialect == "sqlite":
        # No row locks in SQLite: take the RESERVED lock now so competing
        # writers queue here rather than failing at commit.
        db.session.execute(text("BEGIN IMMEDIATE"))
    elif dialect == "postgresql" and timeout is not None:
        ms = max(int(timeout * 1000), 1)
        db.session.execute(text(f"SET LOCAL statement_timeout = {ms}"))
        db.session.execute(text(f"SET LOCAL lock_timeout = {ms}"))


@contextmanager
def transaction_scope(*, timeout: float | None = None):
    """
    One database transaction with a single commit point.

    Commits when the block exits normally (after a last deadline check) and
    rolls back on every other exit, re-raising whatever ended the block.

    On SQLite the wait for the write lock is bounded by the connection's busy
    timeout, which create_app() sets from ORDER_TRANSACTION_TIMEOUT_SECONDS.
    """
    deadline = Deadline(timeout)
    try:
        _begin(timeout)
        yield deadline
        deadline.check()
        db.session.commit()
    except BaseException:
        db.session.rollback()
        raise
