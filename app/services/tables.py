from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.models.table import Table
from app.models.dish import Dish


def get_table_or_404(db: Session, table_id: int) -> Table:
    table = db.query(Table).filter(Table.id == table_id).first()
    if not table:
        raise NotFound("Table not found")
    return table


def get_dish_or_404(db: Session, dish_id: int) -> Dish:
    dish = db.query(Dish).filter(Dish.id == dish_id).first()
    if not dish:
        raise NotFound("Dish not found")
    return dish
