from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class TableCreate(BaseModel):
    name: str
    capacity: int = Field(gt=0)


class TableUpdate(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class TableRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    capacity: int
    is_active: bool
