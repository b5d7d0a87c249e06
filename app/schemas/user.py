from pydantic import BaseModel, EmailStr
from pydantic import ConfigDict
from typing import Optional
from app.models.user import RoleEnum
from app.schemas.common import LocalDatetime


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    first_name: str = ""
    last_name: str = ""


class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    role: RoleEnum


class UserRead(BaseModel):
    # Pydantic v2: use model_config with from_attributes to support ORM objects
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    first_name: str
    last_name: str
    role: RoleEnum
    is_active: bool
    created_at: Optional[LocalDatetime] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class CheckResponse(Token):
    user: UserRead


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
