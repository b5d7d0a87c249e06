"""Double-booking detection for table reservations.

A reservation holds its table over the half-open window
``[reserved_from, reserved_to)`` while its status is confirmed or seated.
Two windows collide when each one starts before the other ends, so a booking
ending at 19:30 and another starting at 19:30 do not conflict.

Every caller (availability check, create, update, status change) goes
through :func:`find_conflict`; writers run it inside :func:`table_guard`.
"""
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.models.reservation import Reservation, ACTIVE_RESERVATION_STATUSES
from app.models.table import Table


def windows_overlap(a_from: datetime, a_to: datetime, b_from: datetime, b_to: datetime) -> bool:
    return a_from < b_to and a_to > b_from


def overlap_clause(reserved_from: datetime, reserved_to: datetime):
    """SQL form of :func:`windows_overlap` against the stored windows."""
    return and_(Reservation.reserved_from < reserved_to, Reservation.reserved_to > reserved_from)


def find_conflict(
    db: Session,
    table_id: int,
    reserved_from: datetime,
    reserved_to: datetime,
    exclude_id: Optional[int] = None,
) -> Optional[Reservation]:
    """Return the first active reservation on the table overlapping the window."""
    q = db.query(Reservation).filter(
        Reservation.table_id == table_id,
        Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        overlap_clause(reserved_from, reserved_to),
    )
    if exclude_id is not None:
        q = q.filter(Reservation.id != exclude_id)
    return q.order_by(Reservation.reserved_from.asc(), Reservation.id.asc()).first()


def lock_table(db: Session, table_id: int) -> Optional[Table]:
    """Load the table row FOR UPDATE.

    Writers booking the same table in other processes queue up on this row
    until the current transaction commits. SQLite ignores the clause; the
    in-process lock taken by :func:`table_guard` covers it there.
    """
    return db.query(Table).filter(Table.id == table_id).with_for_update().first()


_table_locks = defaultdict(threading.Lock)
_table_locks_guard = threading.Lock()


def _lock_for(table_id: int) -> threading.Lock:
    with _table_locks_guard:
        return _table_locks[table_id]


@contextmanager
def table_guard(db: Session, table_id: int):
    """Serialize check-and-write on one table.

    Holds a per-table lock for the threads of this process (sync routes run
    in a threadpool) and the row lock from :func:`lock_table` for other
    processes. Yields the table, or None when it does not exist. The caller
    commits inside the block so the next writer sees the new booking.
    """
    with _lock_for(table_id):
        try:
            yield lock_table(db, table_id)
        except Exception:
            db.rollback()
            raise
