from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean
from app.db.session import Base


class Dish(Base):
    __tablename__ = "dishes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    ingredients = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    # temporarily unavailable ("stop list")
    is_stopped = Column(Boolean, nullable=False, default=False)
    cooking_time_min = Column(Integer, nullable=False, default=15)
