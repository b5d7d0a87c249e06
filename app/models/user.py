from sqlalchemy import Column, Integer, String, DateTime, Enum, Boolean
from sqlalchemy.sql import func
from app.db.session import Base
import enum


class RoleEnum(str, enum.Enum):
    super_admin = "super_admin"
    admin = "admin"
    waiter = "waiter"
    chef = "chef"
    trainee = "trainee"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(150), nullable=False, default="")
    last_name = Column(String(150), nullable=False, default="")
    role = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.trainee)
    # deactivated users keep their history but can no longer authenticate
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
