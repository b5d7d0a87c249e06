"""Kitchen/floor notifications built from order state changes."""
from app.models.order import Order
from app.models.order_item import OrderItem
from app.utils.pubsub import publish_nowait


def order_event(order: Order, action: str) -> dict:
    return {
        "type": "order",
        "action": action,
        "order_id": order.id,
        "table_id": order.table_id,
        "status": order.status.value,
    }


def item_event(item: OrderItem, action: str) -> dict:
    return {
        "type": "order_item",
        "action": action,
        "order_id": item.order_id,
        "order_status": item.order.status.value,
        "item": {
            "id": item.id,
            "dish_id": item.dish_id,
            "dish_name": item.dish.name if item.dish else None,
            "quantity": item.quantity,
            "status": item.status.value,
            "chef_id": item.chef_id,
            "notes": item.notes,
        },
    }


def notify_order(order: Order, action: str) -> None:
    publish_nowait(order_event(order, action))


def notify_item(item: OrderItem, action: str) -> None:
    publish_nowait(item_event(item, action))
