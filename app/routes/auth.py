from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequest, Forbidden
from app.db.session import get_db
from app.models.user import User as UserModel, RoleEnum
from app.schemas.user import UserCreate, Token, LoginRequest, CheckResponse
from app.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/registration", response_model=Token)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    if db.query(UserModel).filter(UserModel.email == user_in.email).first():
        raise BadRequest("User already exists")
    # new accounts start as trainee; an admin promotes them later
    user = UserModel(
        email=user_in.email,
        password_hash=auth_service.get_password_hash(user_in.password),
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        role=RoleEnum.trainee,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return {"access_token": auth_service.token_for_user(user), "token_type": "bearer"}


@router.post("/login", response_model=Token)
def login(form_data: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate_user(db, form_data.email, form_data.password)
    if not user:
        raise BadRequest("Wrong email or password")
    if not user.is_active:
        raise Forbidden("Account is deactivated")
    return {"access_token": auth_service.token_for_user(user), "token_type": "bearer"}


@router.get("/check", response_model=CheckResponse)
def check(current_user=Depends(auth_service.get_current_user)):
    return {
        "access_token": auth_service.token_for_user(current_user),
        "token_type": "bearer",
        "user": current_user,
    }
