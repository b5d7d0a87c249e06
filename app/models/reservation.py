from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.table import Table
from app.models.user import User
import enum


class ReservationStatus(str, enum.Enum):
    confirmed = "confirmed"
    seated = "seated"
    cancelled = "cancelled"
    completed = "completed"


# statuses that hold the table for their window
ACTIVE_RESERVATION_STATUSES = (ReservationStatus.confirmed, ReservationStatus.seated)


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_table_window", "table_id", "reserved_from", "reserved_to"),
    )

    id = Column(Integer, primary_key=True, index=True)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    guest_count = Column(Integer, nullable=False)
    # stored as naive UTC; the window is half-open [reserved_from, reserved_to)
    reserved_from = Column(DateTime, nullable=False)
    reserved_to = Column(DateTime, nullable=False)
    status = Column(Enum(ReservationStatus), nullable=False, default=ReservationStatus.confirmed)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    table = relationship(Table, lazy="joined")
    user = relationship(User, lazy="joined")
