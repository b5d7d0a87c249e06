import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import BadRequest, NotFound
from app.core.timezone_utils import to_storage, to_local, local_day_range_to_utc
from app.models.reservation import Reservation, ReservationStatus, ACTIVE_RESERVATION_STATUSES
from app.services.conflicts import find_conflict, table_guard
from app.services.tables import get_table_or_404

logger = logging.getLogger("app.reservations")

# fields that move a reservation in time/space and require a fresh conflict check
SCHEDULING_FIELDS = ("table_id", "reserved_from", "reserved_to", "guest_count")


def conflict_payload(r: Reservation) -> dict:
    return {
        "id": r.id,
        "customer_name": r.customer_name,
        "reserved_from": to_local(r.reserved_from).isoformat(),
        "reserved_to": to_local(r.reserved_to).isoformat(),
    }


def _window(reserved_from: datetime, reserved_to: datetime):
    start, end = to_storage(reserved_from), to_storage(reserved_to)
    if end <= start:
        raise BadRequest("reserved_to must be after reserved_from")
    return start, end


def _check_capacity(table, guest_count: Optional[int]):
    if guest_count and guest_count > table.capacity:
        raise BadRequest("Table capacity exceeded", capacity=table.capacity)


def get_reservation_or_404(db: Session, reservation_id: int) -> Reservation:
    r = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not r:
        raise NotFound("Reservation not found")
    return r


def list_reservations(db: Session, date: Optional[str] = None, status: Optional[ReservationStatus] = None):
    q = db.query(Reservation)
    if status:
        q = q.filter(Reservation.status == status)
    if date:
        start, end = local_day_range_to_utc(date)
        if start is None:
            raise BadRequest("Invalid date, expected YYYY-MM-DD")
        q = q.filter(Reservation.reserved_from >= start, Reservation.reserved_from < end)
    return q.order_by(Reservation.reserved_from.asc(), Reservation.id.asc()).all()


def check_availability(
    db: Session,
    table_id: int,
    reserved_from: datetime,
    reserved_to: datetime,
    guests_count: Optional[int] = None,
    exclude_id: Optional[int] = None,
) -> dict:
    """Read-only check that predicts whether a booking would be accepted.

    Runs the same steps, in the same order, as :func:`create_reservation`:
    table lookup, window, capacity, then the conflict detector.
    """
    table = get_table_or_404(db, table_id)
    start, end = _window(reserved_from, reserved_to)
    if guests_count and guests_count > table.capacity:
        return {"available": False, "reason": "Table capacity exceeded", "conflict": None}
    conflict = find_conflict(db, table_id, start, end, exclude_id=exclude_id)
    logger.debug("availability table=%s %s..%s -> conflict=%s", table_id, start, end, conflict.id if conflict else None)
    if conflict is None:
        return {"available": True, "reason": None, "conflict": None}
    return {
        "available": False,
        "reason": None,
        "conflict": {"id": conflict.id, "reserved_from": conflict.reserved_from, "reserved_to": conflict.reserved_to},
    }


def create_reservation(
    db: Session,
    *,
    table_id: int,
    customer_name: str,
    customer_phone: str,
    guest_count: int,
    reserved_from: datetime,
    reserved_to: datetime,
    user_id: Optional[int],
) -> Reservation:
    with table_guard(db, table_id) as table:
        if table is None:
            raise NotFound("Table not found")
        start, end = _window(reserved_from, reserved_to)
        _check_capacity(table, guest_count)

        conflict = find_conflict(db, table_id, start, end)
        if conflict is not None:
            logger.warning("Rejected booking on table %s for %s..%s: overlaps reservation %s", table_id, start, end, conflict.id)
            raise BadRequest("Table is already booked for the requested time", conflict=conflict_payload(conflict))

        r = Reservation(
            table_id=table_id,
            user_id=user_id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            guest_count=guest_count,
            reserved_from=start,
            reserved_to=end,
            status=ReservationStatus.confirmed,
        )
        db.add(r)
        db.commit()
    db.refresh(r)
    logger.info("Reservation %s created on table %s (%s..%s)", r.id, table_id, start, end)
    return r


def update_reservation(db: Session, reservation_id: int, changes: dict) -> Reservation:
    """Apply a partial update.

    When the table, window or guest count change, the effective booking is
    rebuilt from the supplied and stored values and re-validated (capacity and
    conflicts, ignoring the reservation itself). A status moving into an
    active state is checked the same way.
    """
    r = get_reservation_or_404(db, reservation_id)
    changes = {k: v for k, v in changes.items() if v is not None}

    table_id = changes.get("table_id", r.table_id)
    guest_count = changes.get("guest_count", r.guest_count)
    status = changes.get("status", r.status)
    start = to_storage(changes["reserved_from"]) if "reserved_from" in changes else r.reserved_from
    end = to_storage(changes["reserved_to"]) if "reserved_to" in changes else r.reserved_to
    if end <= start:
        raise BadRequest("reserved_to must be after reserved_from")

    rescheduled = any(k in changes for k in SCHEDULING_FIELDS)
    activated = status in ACTIVE_RESERVATION_STATUSES and status != r.status

    def apply():
        r.table_id = table_id
        r.guest_count = guest_count
        r.reserved_from = start
        r.reserved_to = end
        r.status = status
        for field in ("customer_name", "customer_phone"):
            if field in changes:
                setattr(r, field, changes[field])
        db.add(r)
        db.commit()

    if rescheduled or activated:
        with table_guard(db, table_id) as table:
            if table is None:
                raise NotFound("Table not found")
            _check_capacity(table, guest_count)
            conflict = find_conflict(db, table_id, start, end, exclude_id=r.id)
            if conflict is not None:
                logger.warning("Rejected update of reservation %s: overlaps reservation %s", r.id, conflict.id)
                raise BadRequest(
                    "Table is already booked for this time by another reservation",
                    conflict=conflict_payload(conflict),
                )
            apply()
    else:
        apply()
    db.refresh(r)
    return r


def change_reservation_status(db: Session, reservation_id: int, status: ReservationStatus) -> Reservation:
    r = get_reservation_or_404(db, reservation_id)
    if status in ACTIVE_RESERVATION_STATUSES and status != r.status:
        with table_guard(db, r.table_id):
            conflict = find_conflict(db, r.table_id, r.reserved_from, r.reserved_to, exclude_id=r.id)
            if conflict is not None:
                logger.warning("Rejected status %s for reservation %s: overlaps reservation %s", status.value, r.id, conflict.id)
                raise BadRequest(
                    "Cannot change status: the table is booked by another reservation for this time",
                    conflict=conflict_payload(conflict),
                )
            r.status = status
            db.add(r)
            db.commit()
    else:
        r.status = status
        db.add(r)
        db.commit()
    db.refresh(r)
    return r


def delete_reservation(db: Session, reservation_id: int) -> None:
    r = get_reservation_or_404(db, reservation_id)
    db.delete(r)
    db.commit()
    logger.info("Reservation %s deleted", reservation_id)
