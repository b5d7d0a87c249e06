from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.table import Table as TableModel
from app.schemas.order import MessageResponse
from app.schemas.table import TableCreate, TableUpdate, TableRead
from app.services.auth import get_current_user, admin_or_above
from app.services.tables import get_table_or_404

router = APIRouter(prefix="/tables", tags=["Tables"])


@router.get("", response_model=List[TableRead])
@router.get("/", response_model=List[TableRead])
def list_tables(db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return db.query(TableModel).filter(TableModel.is_active.is_(True)).order_by(TableModel.name.asc()).all()


@router.get("/{table_id}", response_model=TableRead)
def get_table(table_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return get_table_or_404(db, table_id)


@router.post("", response_model=TableRead)
@router.post("/", response_model=TableRead)
def create_table(payload: TableCreate, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    table = TableModel(name=payload.name, capacity=payload.capacity, is_active=True)
    db.add(table)
    db.commit()
    db.refresh(table)
    return table


@router.put("/{table_id}", response_model=TableRead)
def update_table(table_id: int, payload: TableUpdate, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    table = get_table_or_404(db, table_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(table, field, value)
    db.add(table)
    db.commit()
    db.refresh(table)
    return table


@router.delete("/{table_id}", response_model=MessageResponse)
def deactivate_table(table_id: int, db: Session = Depends(get_db), current_user=Depends(admin_or_above)):
    # soft delete: orders and reservations keep pointing at the row
    table = get_table_or_404(db, table_id)
    table.is_active = False
    db.add(table)
    db.commit()
    return {"message": "Table deactivated"}
