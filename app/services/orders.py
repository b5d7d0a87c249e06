import logging
from decimal import Decimal
from typing import Iterable, Optional, List

from sqlalchemy.orm import Session

from app.core.exceptions import BadRequest, NotFound
from app.core.timezone_utils import utcnow, local_day_range_to_utc
from app.models.dish import Dish
from app.models.order import Order, OrderStatus, OrderType
from app.models.order_item import OrderItem, ItemStatus
from app.services.tables import get_table_or_404
from app.services.transitions import check_order_transition

logger = logging.getLogger("app.orders")

KITCHEN_ORDER_STATUSES = (OrderStatus.open, OrderStatus.in_progress)
KITCHEN_ITEM_STATUSES = (ItemStatus.ordered, ItemStatus.preparing)


def order_total(items: Iterable) -> Decimal:
    """Sum of price * quantity over the submitted items, kept as Decimal."""
    return sum((Decimal(it.price) * it.quantity for it in items), Decimal("0"))


def status_counts(items: Iterable[OrderItem]) -> dict:
    counts = {s.value: 0 for s in ItemStatus}
    for it in items:
        counts[it.status.value] += 1
    return counts


def get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFound("Order not found")
    return order


def _ensure_dishes_exist(db: Session, items) -> None:
    wanted = {it.dish_id for it in items}
    found = {row[0] for row in db.query(Dish.id).filter(Dish.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        raise NotFound("Dish not found", dish_ids=missing)


def _build_items(items) -> List[OrderItem]:
    # item_price is the price the waiter submitted, not Dish.price
    return [
        OrderItem(
            dish_id=it.dish_id,
            quantity=it.quantity,
            item_price=Decimal(it.price),
            notes=it.notes,
            status=ItemStatus.ordered,
        )
        for it in items
    ]


def list_orders(db: Session, status: Optional[str] = None, date: Optional[str] = None) -> List[Order]:
    q = db.query(Order)
    if status:
        try:
            wanted = [OrderStatus(s.strip()) for s in status.split(",") if s.strip()]
        except ValueError:
            raise BadRequest("Unknown order status", allowed=[s.value for s in OrderStatus])
        q = q.filter(Order.status.in_(wanted))
    if date:
        start, end = local_day_range_to_utc(date)
        if start is None:
            raise BadRequest("Invalid date, expected YYYY-MM-DD")
        q = q.filter(Order.created_at >= start, Order.created_at < end)
    return q.order_by(Order.created_at.desc(), Order.id.desc()).all()


def kitchen_orders(db: Session) -> List[Order]:
    """Open/in-progress orders that still have something for the kitchen."""
    return (
        db.query(Order)
        .filter(
            Order.status.in_(KITCHEN_ORDER_STATUSES),
            Order.items.any(OrderItem.status.in_(KITCHEN_ITEM_STATUSES)),
        )
        .order_by(Order.created_at.asc(), Order.id.asc())
        .all()
    )


def kitchen_items_of(order: Order) -> List[OrderItem]:
    return [it for it in order.items if it.status in KITCHEN_ITEM_STATUSES]


def create_order(
    db: Session,
    *,
    table_id: Optional[int],
    waiter_id: Optional[int],
    order_type: OrderType,
    items,
) -> Order:
    if not items:
        raise BadRequest("An order needs a non-empty list of items")
    if not table_id:
        raise BadRequest("table_id is required")
    get_table_or_404(db, table_id)
    _ensure_dishes_exist(db, items)

    order = Order(
        table_id=table_id,
        waiter_id=waiter_id,
        order_type=order_type or OrderType.dine_in,
        status=OrderStatus.open,
        total_amount=order_total(items),
    )
    order.items = _build_items(items)
    # order and items go in with a single commit
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Order %s created on table %s with %s items, total=%s", order.id, table_id, len(order.items), order.total_amount)
    return order


def update_order(db: Session, order_id: int, changes: dict, items=None) -> Order:
    """Patch top-level fields; when ``items`` is given, replace the whole list.

    Replacing drops every current item (delete-orphan) and inserts the new
    ones in the same transaction, recomputing ``total_amount``.
    """
    order = get_order_or_404(db, order_id)

    if items is not None:
        if not items:
            raise BadRequest("An order needs a non-empty list of items")
        _ensure_dishes_exist(db, items)
        order.items.clear()
        db.flush()
        order.items.extend(_build_items(items))
        order.total_amount = order_total(items)

    if changes.get("table_id") is not None:
        get_table_or_404(db, changes["table_id"])
        order.table_id = changes["table_id"]
    if changes.get("order_type") is not None:
        order.order_type = changes["order_type"]
    if changes.get("status") is not None:
        check_order_transition(order.status, changes["status"])
        order.status = changes["status"]

    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def change_order_status(db: Session, order_id: int, status: OrderStatus) -> Order:
    order = get_order_or_404(db, order_id)
    check_order_transition(order.status, status)
    order.status = status
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Order %s status -> %s", order.id, status.value)
    return order


def can_close(db: Session, order_id: int) -> dict:
    """Advisory precheck; does not block :func:`close_order`."""
    order = get_order_or_404(db, order_id)
    counts = status_counts(order.items)
    unfinished = len(order.items) - counts[ItemStatus.served.value]
    return {"can_close": unfinished == 0, "unfinished_items": unfinished, "details": counts}


def close_order(db: Session, order_id: int, force: bool = False) -> Order:
    """Close an order once everything was served.

    Without ``force`` the order must not have items in the kitchen
    (ordered/preparing) nor ready-but-unserved items; the error carries the
    counts per status and ``force_close_available`` so the caller can retry
    with ``force``. A forced close marks every unfinished item as served in
    the same transaction.
    """
    order = get_order_or_404(db, order_id)
    counts = status_counts(order.items)

    if not force:
        if counts["ordered"] or counts["preparing"]:
            raise BadRequest(
                "Cannot close the order: some items are still being prepared",
                details=counts,
                force_close_available=True,
            )
        if counts["ready"]:
            raise BadRequest(
                "Some items are ready but have not been served",
                details={"ready": counts["ready"], "served": counts["served"]},
                force_close_available=True,
            )
    else:
        for it in order.items:
            if it.status != ItemStatus.served:
                it.status = ItemStatus.served

    order.status = OrderStatus.closed
    order.closed_at = utcnow()
    db.add(order)
    db.commit()
    db.refresh(order)
    if force and (counts["ordered"] or counts["preparing"] or counts["ready"]):
        logger.warning("Order %s force-closed with unfinished items %s", order.id, counts)
    else:
        logger.info("Order %s closed", order.id)
    return order
