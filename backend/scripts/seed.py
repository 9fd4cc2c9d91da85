"""Seed script. Creates demo users and a few expense reports in different states.

Idempotent for users: existing accounts are reused. Reports are only
created when the demo employee has none yet.
Run: python scripts/seed.py
"""
import os
import sys
from datetime import date
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from travel_expense.db.session import SessionLocal, engine
from travel_expense.models.user import Role, User
from travel_expense.services import items as items_svc
from travel_expense.services import lifecycle
from travel_expense.services import users as users_svc
from travel_expense.services.authorization import Actor

DEMO_PASSWORD = "changeme123"


# ─── Upsert helpers ───────────────────────────────────────────────────────────

def _upsert_user(db, email: str, name: str, role: Role, department: str | None = None) -> User:
    user = users_svc.get_user_by_email(db, email)
    if user:
        print(f"  [skip] User {email}")
        return user
    user = users_svc.create_user(
        db, email=email, password=DEMO_PASSWORD, name=name, role=role, department=department,
    )
    print(f"  [new]  User {email} ({role.value})")
    return user


def _create_report(db, owner: Actor, title: str, purpose: str,
                   start: date, end: date, items: list[dict]):
    report = lifecycle.create_report(
        db, owner_id=owner.id, title=title, trip_purpose=purpose,
        trip_start_date=start, trip_end_date=end,
    )
    for fields in items:
        items_svc.add_item(db, report.id, fields, owner)
    print(f"  [new]  Report '{title}'")
    return report


# ─── Main ─────────────────────────────────────────────────────────────────────

def seed() -> None:
    with SessionLocal() as db:
        print("── Users ──")
        employee = _upsert_user(db, "employee@example.com", "Taro Yamada", Role.employee, "Sales")
        accountant = _upsert_user(db, "accounting@example.com", "Hanako Suzuki", Role.accounting, "Finance")

        emp = Actor.from_user(employee)
        acc = Actor.from_user(accountant)

        print("\n── Expense Reports ──")
        if lifecycle.list_reports(db, emp):
            print("  [skip] Demo reports already present")
        else:
            _create_report(
                db, emp, "Osaka client visit", "Quarterly review with Osaka client",
                date(2024, 3, 4), date(2024, 3, 5),
                [
                    {"category": "transportation", "description": "Shinkansen Tokyo-Shin-Osaka round trip",
                     "amount": Decimal("29440"), "expense_date": date(2024, 3, 4)},
                ],
            )

            tokyo = _create_report(
                db, emp, "Tokyo trip", "Industry conference",
                date(2024, 1, 15), date(2024, 1, 17),
                [
                    {"category": "accommodation", "description": "Hotel, 2 nights",
                     "amount": Decimal("24000"), "expense_date": date(2024, 1, 15)},
                    {"category": "meal", "description": "Team dinner",
                     "amount": Decimal("1000"), "expense_date": date(2024, 1, 16)},
                ],
            )
            lifecycle.submit_report(db, tokyo.id, emp)
            lifecycle.approve_report(db, tokyo.id, acc, comment="ok")
            lifecycle.mark_paid(db, tokyo.id, acc)

            fukuoka = _create_report(
                db, emp, "Fukuoka branch support", "Branch system migration support",
                date(2024, 2, 1), date(2024, 2, 2),
                [
                    {"category": "other", "description": "Taxi (no receipt)",
                     "amount": Decimal("5200"), "expense_date": date(2024, 2, 1)},
                ],
            )
            lifecycle.submit_report(db, fukuoka.id, emp)
            lifecycle.reject_report(db, fukuoka.id, acc, comment="Receipt missing for taxi fare")

    engine.dispose()
    print("\n✓ Seed complete.")
    print(f"  employee@example.com    / {DEMO_PASSWORD}  (employee)")
    print(f"  accounting@example.com  / {DEMO_PASSWORD}  (accounting)")


if __name__ == "__main__":
    seed()
