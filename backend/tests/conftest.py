"""Shared fixtures: an in-memory SQLite store and a few users.

The core takes its Session as an argument, so tests hand it a session
bound to a throwaway SQLite database instead of PostgreSQL.
"""
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import travel_expense.models  # noqa: F401  (registers all tables)
from travel_expense.db.base import Base
from travel_expense.models.user import Role, User
from travel_expense.services import items as items_svc
from travel_expense.services import lifecycle
from travel_expense.services.authorization import Actor


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(engine, expire_on_commit=False, autoflush=False)
    with Session() as session:
        yield session


def _make_user(db, email: str, name: str, role: Role) -> User:
    user = User(
        id=uuid.uuid4(),
        email=email,
        name=name,
        password_hash="not-a-real-hash",
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def employee_user(db) -> User:
    return _make_user(db, "employee@example.com", "Taro Yamada", Role.employee)


@pytest.fixture
def other_employee_user(db) -> User:
    return _make_user(db, "other@example.com", "Jiro Sato", Role.employee)


@pytest.fixture
def accounting_user(db) -> User:
    return _make_user(db, "accounting@example.com", "Hanako Suzuki", Role.accounting)


@pytest.fixture
def employee(employee_user) -> Actor:
    return Actor.from_user(employee_user)


@pytest.fixture
def other_employee(other_employee_user) -> Actor:
    return Actor.from_user(other_employee_user)


@pytest.fixture
def accountant(accounting_user) -> Actor:
    return Actor.from_user(accounting_user)


# ─── Builders ─────────────────────────────────────────────────────────────────

def make_report(db, owner: Actor, **overrides):
    fields = {
        "title": "Tokyo trip",
        "trip_purpose": "Client meeting",
        "trip_start_date": date(2024, 1, 15),
        "trip_end_date": date(2024, 1, 17),
    }
    fields.update(overrides)
    return lifecycle.create_report(db, owner_id=owner.id, **fields)


def item_fields(**overrides) -> dict:
    fields = {
        "category": "meal",
        "description": "Dinner with client",
        "amount": Decimal("1000"),
        "expense_date": date(2024, 1, 16),
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def draft_report(db, employee):
    return make_report(db, employee)


@pytest.fixture
def report_with_item(db, employee, draft_report):
    items_svc.add_item(db, draft_report.id, item_fields(), employee)
    return draft_report


@pytest.fixture
def submitted_report(db, employee, report_with_item):
    return lifecycle.submit_report(db, report_with_item.id, employee)


@pytest.fixture
def approved_report(db, accountant, submitted_report):
    return lifecycle.approve_report(db, submitted_report.id, accountant, comment="ok")
