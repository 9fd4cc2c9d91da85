"""User administration service."""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from travel_expense.core.exceptions import DuplicateEmail, Forbidden, NotFound
from travel_expense.core.security import hash_password
from travel_expense.db.session import transaction
from travel_expense.models.user import Role, User
from travel_expense.services import authorization as authz
from travel_expense.services.authorization import Actor

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "department", "role")


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.execute(select(User).where(User.id == user_id)).scalars().first()
    if user is None:
        raise NotFound("User not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalars().first()


def list_users(db: Session, actor: Actor) -> list[User]:
    if not authz.can_manage_users(actor):
        raise Forbidden("Only accounting can list users")
    return list(db.execute(select(User).order_by(User.created_at.desc())).scalars().all())


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role: Role = Role.employee,
    department: str | None = None,
) -> User:
    """Create a user. Fails DuplicateEmail when the address is taken.

    The pre-check gives a clean error in the common case; the unique index
    still decides under concurrent inserts, which surfaces as a
    PersistenceError from the transaction.
    """
    with transaction(db):
        if get_user_by_email(db, email) is not None:
            raise DuplicateEmail("Email already exists")
        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password),
            role=Role(role),
            department=department,
            is_active=True,
        )
        db.add(user)
        db.flush()

    logger.info("User created: user=%s role=%s", user.id, user.role.value)
    return user


def update_user(db: Session, user_id: uuid.UUID, fields: dict, actor: Actor) -> User:
    """Update profile fields. Role changes are reserved to accounting."""
    changes = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}

    if "role" in changes and not authz.can_manage_users(actor):
        raise Forbidden("Only accounting can change user roles")
    if not authz.can_edit_profile(user_id, actor):
        raise Forbidden("You can only update your own profile")

    with transaction(db):
        user = get_user(db, user_id)
        for key, value in changes.items():
            setattr(user, key, Role(value) if key == "role" else value)
        db.flush()

    logger.info("User updated: user=%s by=%s fields=%s", user_id, actor.id, sorted(changes))
    return user
