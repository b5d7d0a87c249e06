from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class DishCreate(BaseModel):
    name: str
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    ingredients: Optional[str] = None
    cooking_time_min: int = 15


class DishUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    ingredients: Optional[str] = None
    cooking_time_min: Optional[int] = None
    is_active: Optional[bool] = None
    is_stopped: Optional[bool] = None


class DishBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: Decimal


class DishRead(DishBrief):
    ingredients: Optional[str] = None
    cooking_time_min: int
    is_active: bool
    is_stopped: bool
