from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict

from app.models.order import OrderStatus, OrderType
from app.models.order_item import ItemStatus
from app.schemas.common import LocalDatetime
from app.schemas.dish import DishBrief
from app.schemas.table import TableRead
from app.schemas.user import UserBrief


class OrderItemIn(BaseModel):
    dish_id: int
    quantity: int = Field(default=1, ge=1)
    # taken as-is from the caller and snapshotted on the item
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    notes: Optional[str] = None


class OrderCreate(BaseModel):
    table_id: Optional[int] = None
    order_type: OrderType = OrderType.dine_in
    items: Optional[List[OrderItemIn]] = None


class OrderUpdate(BaseModel):
    table_id: Optional[int] = None
    order_type: Optional[OrderType] = None
    status: Optional[OrderStatus] = None
    # when present the whole item list is replaced
    items: Optional[List[OrderItemIn]] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class ItemStatusUpdate(BaseModel):
    status: ItemStatus


class OrderCloseRequest(BaseModel):
    force: bool = False


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    dish_id: int
    chef_id: Optional[int] = None
    quantity: int
    item_price: Decimal
    status: ItemStatus
    prepared_at: Optional[LocalDatetime] = None
    notes: Optional[str] = None
    created_at: Optional[LocalDatetime] = None
    dish: Optional[DishBrief] = None


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    table_id: Optional[int] = None
    waiter_id: Optional[int] = None
    order_type: OrderType
    status: OrderStatus
    total_amount: Decimal
    created_at: Optional[LocalDatetime] = None
    closed_at: Optional[LocalDatetime] = None
    items: List[OrderItemRead] = []
    table: Optional[TableRead] = None
    waiter: Optional[UserBrief] = None


class KitchenOrderRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: OrderStatus
    table: Optional[TableRead] = None


class KitchenItemRead(OrderItemRead):
    order: KitchenOrderRef


class StatusCounts(BaseModel):
    ordered: int = 0
    preparing: int = 0
    ready: int = 0
    served: int = 0


class CanCloseResponse(BaseModel):
    can_close: bool
    unfinished_items: int
    details: StatusCounts


class OrderCloseResponse(BaseModel):
    message: str
    order: OrderRead


class MessageResponse(BaseModel):
    message: str
