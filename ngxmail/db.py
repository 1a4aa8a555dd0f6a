"""Database error classification, row-level-security context and transactions.

Works with any pool whose ``begin()`` returns a transaction object offering
``execute(sql, params)``, ``commit()`` and ``rollback()``.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"

_SET_ORG_SQL = "SELECT set_config('app.current_org_id', %s, TRUE)"
_SET_POD_SQL = "SELECT set_config('app.current_pod_id', %s, TRUE)"


class NoRowsError(LookupError):
    """Raised when a query that must return a row returns none."""


def _chain(err: BaseException | None) -> Iterator[BaseException]:
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        if err.__cause__ is not None:
            err = err.__cause__
        elif not err.__suppress_context__:
            err = err.__context__
        else:
            err = None


def _sqlstate(err: BaseException) -> str | None:
    for attr in ("sqlstate", "pgcode", "code"):
        value = getattr(err, attr, None)
        if isinstance(value, str):
            return value
    return None


def _has_sqlstate(err: BaseException | None, code: str) -> bool:
    return any(_sqlstate(e) == code for e in _chain(err))


def is_duplicate_key(err: BaseException | None) -> bool:
    """Report whether err is a unique-constraint violation (23505)."""
    return _has_sqlstate(err, _UNIQUE_VIOLATION)


def is_not_found(err: BaseException | None) -> bool:
    """Report whether err is a no-rows error."""
    return any(isinstance(e, NoRowsError) for e in _chain(err))


def is_constraint_violation(err: BaseException | None) -> bool:
    """Report whether err is a constraint violation (23503)."""
    return _has_sqlstate(err, _FOREIGN_KEY_VIOLATION)


def is_foreign_key_violation(err: BaseException | None) -> bool:
    """Report whether err is a foreign-key violation (23503)."""
    return _has_sqlstate(err, _FOREIGN_KEY_VIOLATION)


def set_org_context(tx: Any, org_id: uuid.UUID) -> None:
    """Set the org used by row-level security for the current transaction."""
    tx.execute(_SET_ORG_SQL, (str(org_id),))


def set_pod_context(tx: Any, pod_id: uuid.UUID | None) -> None:
    """Set the pod restriction for the current transaction; None means org-wide."""
    tx.execute(_SET_POD_SQL, ("" if pod_id is None else str(pod_id),))


@contextmanager
def transaction(pool: Any) -> Iterator[Any]:
    """Run the block in a transaction: commit on success, roll back on error."""
    tx = pool.begin()
    try:
        yield tx
    except BaseException:
        try:
            tx.rollback()
        except Exception:
            pass
        raise
    tx.commit()


@contextmanager
def org_transaction(pool: Any, org_id: uuid.UUID) -> Iterator[Any]:
    """A transaction with the row-level-security org context set."""
    with transaction(pool) as tx:
        set_org_context(tx, org_id)
        yield tx


@contextmanager
def org_pod_transaction(
    pool: Any, org_id: uuid.UUID, pod_id: uuid.UUID | None
) -> Iterator[Any]:
    """A transaction with the org and optional pod context set."""
    with transaction(pool) as tx:
        set_org_context(tx, org_id)
        set_pod_context(tx, pod_id)
        yield tx