from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from travel_expense.core.deps import DbSession, get_current_user
from travel_expense.core.security import create_access_token, verify_password
from travel_expense.models.user import User
from travel_expense.schemas.auth import Token, UserOut
from travel_expense.services import users as users_svc

router = APIRouter()


@router.post("/login", response_model=Token)
def login(
    db: DbSession,
    form: OAuth2PasswordRequestForm = Depends(),
):
    user = users_svc.get_user_by_email(db, form.username)
    if not user or not verify_password(form.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    token = create_access_token(subject=str(user.id), role=user.role.value)
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserOut)
def me(current_user: Annotated[User, Depends(get_current_user)]):
    return current_user
