from sqlalchemy import Column, Integer, ForeignKey, Numeric, DateTime, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.order_item import OrderItem
from app.models.table import Table
from app.models.user import User
import enum


class OrderType(str, enum.Enum):
    dine_in = "dine_in"
    takeaway = "takeaway"


class OrderStatus(str, enum.Enum):
    open = "open"
    in_progress = "in_progress"
    ready = "ready"
    closed = "closed"
    cancelled = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=True, index=True)
    waiter_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    order_type = Column(Enum(OrderType), nullable=False, default=OrderType.dine_in)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.open, index=True)
    # sum of quantity * item_price at the last item list mutation, not live
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now(), index=True)
    closed_at = Column(DateTime, nullable=True)

    # items are replaced wholesale on update, hence delete-orphan
    items = relationship(
        OrderItem,
        backref="order",
        cascade="all, delete-orphan",
        order_by=OrderItem.id,
        lazy="selectin",
    )
    table = relationship(Table, lazy="joined")
    waiter = relationship(User, lazy="joined")
