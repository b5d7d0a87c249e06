from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.dish import Dish as DishModel
from app.schemas.dish import DishCreate, DishUpdate, DishRead
from app.schemas.order import MessageResponse
from app.services.auth import get_current_user, admin_or_above
from app.services.tables import get_dish_or_404

router = APIRouter(prefix="/dishes", tags=["Dishes"])


@router.get("", response_model=List[DishRead])
@router.get("/", response_model=List[DishRead])
def list_dishes(db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return db.query(DishModel).filter(DishModel.is_active.is_(True)).order_by(DishModel.name.asc()).all()


@router.get("/{dish_id}", response_model=DishRead)
def get_dish(dish_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return get_dish_or_404(db, dish_id)


@router.post("", response_model=DishRead)
@router.post("/", response_model=DishRead)
def create_dish(payload: DishCreate, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    dish = DishModel(**payload.model_dump())
    db.add(dish)
    db.commit()
    db.refresh(dish)
    return dish


@router.put("/{dish_id}", response_model=DishRead)
def update_dish(dish_id: int, payload: DishUpdate, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    dish = get_dish_or_404(db, dish_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(dish, field, value)
    db.add(dish)
    db.commit()
    db.refresh(dish)
    return dish


@router.delete("/{dish_id}", response_model=MessageResponse)
def deactivate_dish(dish_id: int, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    dish = get_dish_or_404(db, dish_id)
    dish.is_active = False
    db.add(dish)
    db.commit()
    return {"message": "Dish deactivated"}
