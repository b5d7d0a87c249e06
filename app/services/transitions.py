"""Allowed status transitions for orders and order items.

Status-change endpoints historically accept any value. The tables below are
only enforced when ``STRICT_STATUS_TRANSITIONS`` is on; roll-ups and order
closing always set the status directly.
"""
from app.core.config import settings
from app.core.exceptions import InvalidTransition
from app.models.order import OrderStatus
from app.models.order_item import ItemStatus

ORDER_TRANSITIONS = {
    OrderStatus.open: {OrderStatus.in_progress, OrderStatus.ready, OrderStatus.closed, OrderStatus.cancelled},
    OrderStatus.in_progress: {OrderStatus.ready, OrderStatus.closed, OrderStatus.cancelled},
    OrderStatus.ready: {OrderStatus.in_progress, OrderStatus.closed, OrderStatus.cancelled},
    OrderStatus.closed: set(),
    OrderStatus.cancelled: set(),
}

ITEM_TRANSITIONS = {
    ItemStatus.ordered: {ItemStatus.preparing, ItemStatus.ready},
    ItemStatus.preparing: {ItemStatus.ready},
    ItemStatus.ready: {ItemStatus.served},
    ItemStatus.served: set(),
}


def is_allowed(table: dict, current, target) -> bool:
    # re-applying the current status is always accepted
    if current == target:
        return True
    return target in table.get(current, set())


def _check(entity: str, table: dict, current, target):
    if not settings.STRICT_STATUS_TRANSITIONS:
        return
    if not is_allowed(table, current, target):
        raise InvalidTransition(entity, _value(current), _value(target))


def _value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def check_order_transition(current: OrderStatus, target: OrderStatus):
    _check("Order", ORDER_TRANSITIONS, current, target)


def check_item_transition(current: ItemStatus, target: ItemStatus):
    _check("Order item", ITEM_TRANSITIONS, current, target)
