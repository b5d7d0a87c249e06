import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequest, NotFound
from app.core.timezone_utils import utcnow
from app.models.order import Order, OrderStatus
from app.models.order_item import OrderItem, ItemStatus
from app.services.orders import KITCHEN_ITEM_STATUSES
from app.services.transitions import check_item_transition

logger = logging.getLogger("app.order_items")

# orders that must never be pulled back into the kitchen flow by a roll-up
FINAL_ORDER_STATUSES = (OrderStatus.closed, OrderStatus.cancelled)


def get_item_or_404(db: Session, item_id: int) -> OrderItem:
    item = db.query(OrderItem).filter(OrderItem.id == item_id).first()
    if not item:
        raise NotFound("Order item not found")
    return item


def _count_siblings(db: Session, order_id: int, statuses) -> int:
    return (
        db.query(func.count(OrderItem.id))
        .filter(OrderItem.order_id == order_id, OrderItem.status.in_(statuses))
        .scalar()
    )


def kitchen_items(db: Session) -> List[OrderItem]:
    return (
        db.query(OrderItem)
        .filter(OrderItem.status.in_(KITCHEN_ITEM_STATUSES))
        .order_by(OrderItem.created_at.asc(), OrderItem.id.asc())
        .all()
    )


def change_item_status(db: Session, item_id: int, status: ItemStatus, acting_user_id: Optional[int]) -> OrderItem:
    """Move an item through the kitchen workflow.

    preparing: the acting chef is recorded if nobody took the item yet.
    ready: ``prepared_at`` is stamped and, once no item of the order is
    ordered/preparing anymore, the order itself becomes ready. The recount
    runs after a flush so it sees this item's new status, and everything is
    committed together.
    """
    item = get_item_or_404(db, item_id)
    check_item_transition(item.status, status)

    if status == ItemStatus.preparing and item.chef_id is None:
        item.chef_id = acting_user_id
    if status == ItemStatus.ready:
        item.prepared_at = utcnow()
    item.status = status
    db.flush()

    if status == ItemStatus.ready:
        order: Order = item.order
        pending = _count_siblings(db, item.order_id, KITCHEN_ITEM_STATUSES)
        if pending == 0 and order.status not in FINAL_ORDER_STATUSES:
            order.status = OrderStatus.ready
            db.add(order)
            logger.info("Order %s ready: kitchen finished all items", order.id)

    db.commit()
    db.refresh(item)
    return item


def mark_served(db: Session, item_id: int) -> OrderItem:
    """Serve a ready item; the order closes once no ready item is left.

    Only ``ready`` siblings are counted, so items still in the kitchen do not
    keep the order open here.
    """
    item = get_item_or_404(db, item_id)
    if item.status != ItemStatus.ready:
        raise BadRequest("Only ready items can be marked as served", status=item.status.value)

    item.status = ItemStatus.served
    db.flush()

    remaining = _count_siblings(db, item.order_id, (ItemStatus.ready,))
    if remaining == 0:
        order: Order = item.order
        order.status = OrderStatus.closed
        order.closed_at = utcnow()
        db.add(order)
        logger.info("Order %s closed: last ready item served", order.id)

    db.commit()
    db.refresh(item)
    return item
