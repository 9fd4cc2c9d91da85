from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from travel_expense.core.security import decode_token
from travel_expense.db.session import get_session
from travel_expense.models.user import User
from travel_expense.services.authorization import Actor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_session)],
) -> User:
    """Validate JWT and return the User ORM object.

    The role is taken from the database row, not the token, so a role
    change applies to the very next request.
    """
    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise credentials_exc
        user_id: str = payload.get("sub")
        if not user_id:
            raise credentials_exc
        user_uuid = UUID(user_id)
    except (JWTError, ValueError):
        raise credentials_exc

    user = db.execute(select(User).where(User.id == user_uuid)).scalars().first()
    if user is None or not user.is_active:
        raise credentials_exc
    return user


def get_current_actor(user: Annotated[User, Depends(get_current_user)]) -> Actor:
    return Actor.from_user(user)


DbSession = Annotated[Session, Depends(get_session)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
