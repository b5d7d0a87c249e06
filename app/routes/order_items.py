from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from app.core.exceptions import ApiError
from app.db.session import get_db
from app.schemas.order import KitchenItemRead, ItemStatusUpdate
from app.services import order_items as items_service
from app.services.auth import get_current_user, chef_or_above
from app.services.events import notify_item

router = APIRouter(prefix="/order-items", tags=["Order items"])
logger = logging.getLogger("app.order_items")


@router.get("/kitchen", response_model=List[KitchenItemRead])
def kitchen_items(db: Session = Depends(get_db), current_user=Depends(chef_or_above)):
    return items_service.kitchen_items(db)


@router.put("/{item_id}/status", response_model=KitchenItemRead)
async def change_item_status(
    item_id: int,
    payload: ItemStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(chef_or_above),
):
    try:
        item = items_service.change_item_status(db, item_id, payload.status, current_user.id)
    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to change status of item %s: %s", item_id, e)
        raise HTTPException(status_code=500, detail="Failed to change item status")
    notify_item(item, "status")
    return item


@router.put("/{item_id}/served", response_model=KitchenItemRead)
async def mark_served(item_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    try:
        item = items_service.mark_served(db, item_id)
    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to serve item %s: %s", item_id, e)
        raise HTTPException(status_code=500, detail="Failed to mark item as served")
    notify_item(item, "served")
    return item
