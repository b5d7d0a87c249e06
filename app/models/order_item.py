from sqlalchemy import Column, Integer, ForeignKey, Numeric, Text, DateTime, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.dish import Dish
from app.models.user import User
import enum


class ItemStatus(str, enum.Enum):
    ordered = "ordered"
    preparing = "preparing"
    ready = "ready"
    served = "served"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    dish_id = Column(Integer, ForeignKey("dishes.id"), nullable=False)
    # set on the first move into "preparing", never reassigned afterwards
    chef_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    # price snapshot taken from the request at order time
    item_price = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(ItemStatus), nullable=False, default=ItemStatus.ordered, index=True)
    prepared_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    dish = relationship(Dish, lazy="joined")
    chef = relationship(User, lazy="joined")
    # `order` backref is set on the Order model
