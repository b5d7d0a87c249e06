from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.core.exceptions import ApiError
from app.db.session import get_db
from app.schemas.order import (
    OrderCreate,
    OrderUpdate,
    OrderStatusUpdate,
    OrderCloseRequest,
    OrderRead,
    OrderItemRead,
    OrderCloseResponse,
    CanCloseResponse,
)
from app.services import orders as orders_service
from app.services.auth import get_current_user, waiter_or_above
from app.services.events import notify_order

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger("app.orders")


@router.get("", response_model=List[OrderRead])
@router.get("/", response_model=List[OrderRead])
def list_orders(
    status: Optional[str] = None,
    date: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """List orders, newest first.

    ``status`` accepts a single value or a comma separated set
    (``open,in_progress``); ``date`` (YYYY-MM-DD) limits to one local day.
    """
    return orders_service.list_orders(db, status=status, date=date)


@router.get("/kitchen", response_model=List[OrderRead])
def kitchen_orders(db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    # only the items the kitchen still has to work on are returned
    out = []
    for order in orders_service.kitchen_orders(db):
        data = OrderRead.model_validate(order)
        data.items = [OrderItemRead.model_validate(it) for it in orders_service.kitchen_items_of(order)]
        out.append(data)
    return out


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return orders_service.get_order_or_404(db, order_id)


@router.post("", response_model=OrderRead)
@router.post("/", response_model=OrderRead)
async def create_order(payload: OrderCreate, db: Session = Depends(get_db), current_user=Depends(waiter_or_above)):
    try:
        order = orders_service.create_order(
            db,
            table_id=payload.table_id,
            waiter_id=current_user.id,
            order_type=payload.order_type,
            items=payload.items,
        )
    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to create order: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create order")
    notify_order(order, "created")
    return order


@router.put("/{order_id}", response_model=OrderRead)
async def update_order(
    order_id: int,
    payload: OrderUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(waiter_or_above),
):
    changes = payload.model_dump(exclude_unset=True, exclude={"items"})
    try:
        order = orders_service.update_order(db, order_id, changes, items=payload.items)
    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to update order %s: %s", order_id, e)
        raise HTTPException(status_code=500, detail="Failed to update order")
    notify_order(order, "updated")
    return order


@router.put("/{order_id}/status", response_model=OrderRead)
async def change_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    order = orders_service.change_order_status(db, order_id, payload.status)
    notify_order(order, "status")
    return order


@router.put("/{order_id}/close", response_model=OrderCloseResponse)
async def close_order(
    order_id: int,
    payload: Optional[OrderCloseRequest] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    force = bool(payload and payload.force)
    try:
        order = orders_service.close_order(db, order_id, force=force)
    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to close order %s: %s", order_id, e)
        raise HTTPException(status_code=500, detail="Failed to close order")
    notify_order(order, "closed")
    return {"message": "Order force-closed" if force else "Order closed", "order": order}


@router.get("/{order_id}/can-close", response_model=CanCloseResponse)
def can_close(order_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return orders_service.can_close(db, order_id)
