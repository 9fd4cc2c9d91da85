"""User administration endpoints."""
import uuid

from fastapi import APIRouter, status

from travel_expense.core.deps import CurrentActor, DbSession
from travel_expense.core.exceptions import Forbidden
from travel_expense.schemas.auth import UserCreate, UserOut, UserUpdate
from travel_expense.services import authorization as authz
from travel_expense.services import users as users_svc

router = APIRouter()


@router.get("", response_model=list[UserOut], summary="List users (accounting only)")
def list_users(db: DbSession, actor: CurrentActor):
    return [UserOut.model_validate(u) for u in users_svc.list_users(db, actor)]


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user (accounting only)",
)
def create_user(body: UserCreate, db: DbSession, actor: CurrentActor):
    if not authz.can_manage_users(actor):
        raise Forbidden("Only accounting can create users")
    user = users_svc.create_user(
        db,
        email=body.email,
        password=body.password,
        name=body.name,
        role=body.role,
        department=body.department,
    )
    return UserOut.model_validate(user)


@router.get("/{user_id}", response_model=UserOut, summary="Get a user")
def get_user(user_id: uuid.UUID, db: DbSession, actor: CurrentActor):
    if not authz.can_edit_profile(user_id, actor):
        raise Forbidden("You can only view your own profile")
    return UserOut.model_validate(users_svc.get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserOut, summary="Update a user profile")
def update_user(user_id: uuid.UUID, body: UserUpdate, db: DbSession, actor: CurrentActor):
    user = users_svc.update_user(db, user_id, body.model_dump(exclude_unset=True), actor)
    return UserOut.model_validate(user)
