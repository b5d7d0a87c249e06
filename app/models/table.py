from sqlalchemy import Column, Integer, String, Boolean
from app.db.session import Base


class Table(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False)
    # tables are deactivated, never removed, while orders/reservations point at them
    is_active = Column(Boolean, nullable=False, default=True)
