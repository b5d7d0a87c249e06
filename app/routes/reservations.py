from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
import logging

from app.core.exceptions import ApiError
from app.db.session import get_db
from app.models.reservation import ReservationStatus
from app.schemas.order import MessageResponse
from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationStatusUpdate,
    ReservationRead,
    AvailabilityResponse,
)
from app.services import reservations as reservations_service
from app.services.auth import get_current_user, admin_or_above

router = APIRouter(prefix="/reservations", tags=["Reservations"])
logger = logging.getLogger("app.reservations")


@router.get("", response_model=List[ReservationRead])
@router.get("/", response_model=List[ReservationRead])
def list_reservations(
    date: Optional[str] = None,
    status: Optional[ReservationStatus] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return reservations_service.list_reservations(db, date=date, status=status)


@router.get("/available", response_model=AvailabilityResponse)
def check_availability(
    table_id: int,
    reserved_from: datetime,
    reserved_to: datetime,
    guests_count: Optional[int] = Query(None, ge=1),
    exclude_reservation_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return reservations_service.check_availability(
        db,
        table_id,
        reserved_from,
        reserved_to,
        guests_count=guests_count,
        exclude_id=exclude_reservation_id,
    )


@router.get("/{reservation_id}", response_model=ReservationRead)
def get_reservation(reservation_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return reservations_service.get_reservation_or_404(db, reservation_id)


@router.post("", response_model=ReservationRead)
@router.post("/", response_model=ReservationRead)
def create_reservation(payload: ReservationCreate, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    try:
        return reservations_service.create_reservation(
            db,
            table_id=payload.table_id,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            guest_count=payload.guest_count,
            reserved_from=payload.reserved_from,
            reserved_to=payload.reserved_to,
            user_id=current_user.id,
        )
    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to create reservation: %s", e)
        raise HTTPException(status_code=500, detail="Failed to create reservation")


@router.put("/{reservation_id}", response_model=ReservationRead)
def update_reservation(
    reservation_id: int,
    payload: ReservationUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_or_above),
):
    try:
        return reservations_service.update_reservation(db, reservation_id, payload.model_dump(exclude_unset=True))
    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Failed to update reservation %s: %s", reservation_id, e)
        raise HTTPException(status_code=500, detail="Failed to update reservation")


@router.put("/{reservation_id}/status", response_model=ReservationRead)
def change_reservation_status(
    reservation_id: int,
    payload: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_or_above),
):
    return reservations_service.change_reservation_status(db, reservation_id, payload.status)


@router.delete("/{reservation_id}", response_model=MessageResponse)
def delete_reservation(reservation_id: int, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    reservations_service.delete_reservation(db, reservation_id)
    return {"message": "Reservation deleted"}
