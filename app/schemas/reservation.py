from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.models.reservation import ReservationStatus
from app.schemas.common import LocalDatetime
from app.schemas.table import TableRead


class ReservationCreate(BaseModel):
    table_id: int
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    guest_count: int = Field(ge=1)
    reserved_from: datetime
    reserved_to: datetime


class ReservationUpdate(BaseModel):
    table_id: Optional[int] = None
    customer_name: Optional[str] = Field(default=None, min_length=1)
    customer_phone: Optional[str] = Field(default=None, min_length=1)
    guest_count: Optional[int] = Field(default=None, ge=1)
    reserved_from: Optional[datetime] = None
    reserved_to: Optional[datetime] = None
    status: Optional[ReservationStatus] = None


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus


class ReservationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    table_id: int
    user_id: Optional[int] = None
    customer_name: str
    customer_phone: str
    guest_count: int
    reserved_from: LocalDatetime
    reserved_to: LocalDatetime
    status: ReservationStatus
    created_at: Optional[LocalDatetime] = None
    updated_at: Optional[LocalDatetime] = None
    table: Optional[TableRead] = None


class ConflictInfo(BaseModel):
    id: int
    reserved_from: LocalDatetime
    reserved_to: LocalDatetime


class AvailabilityResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
    conflict: Optional[ConflictInfo] = None
