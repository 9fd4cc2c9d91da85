from fastapi import APIRouter

from travel_expense.api.v1 import auth, expense_items, expense_reports, reports, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(expense_reports.router, prefix="/expense-reports", tags=["expense-reports"])
api_router.include_router(expense_items.router, prefix="/expense-reports", tags=["expense-items"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
