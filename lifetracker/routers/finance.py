"""
Money domains: expenses, incomes, lendings, borrowings and investments.

All five are plain owned records served by the generic engine; only the
domain rules (recurring income day, returned-date transition) live here as
hooks. ``/api/finance/summary`` folds the five collections into one balance.
"""
import logging

from fastapi import APIRouter, Depends
from pymongo.database import Database

from lifetracker import schemas
from lifetracker.crud import Resource, register_routes
from lifetracker.database import get_db, utcnow
from lifetracker.deps import get_current_user

logger = logging.getLogger(__name__)


def income_recurring_day(db, doc, user, session, existing=None):
    recurring = doc.get("recurring", (existing or {}).get("recurring", False))
    if not recurring:
        doc["recurring_day"] = None


def income_before_update(db, updates, existing, user, session):
    income_recurring_day(db, updates, user, session, existing=existing)


def returned_transition(db, updates, existing, user, session):
    """isReturned false -> true stamps returnedDate, true -> false clears it."""
    if "is_returned" not in updates:
        return
    if updates["is_returned"] and not existing.get("is_returned"):
        updates["returned_date"] = utcnow()
    elif not updates["is_returned"]:
        updates["returned_date"] = None


expenses = Resource(
    collection="expense",
    label="Expense",
    create_schema=schemas.Expense,
    update_schema=schemas.ExpenseUpdate,
    summary_field="description",
)

incomes = Resource(
    collection="income",
    label="Income",
    create_schema=schemas.Income,
    update_schema=schemas.IncomeUpdate,
    before_create=income_recurring_day,
    before_update=income_before_update,
    summary_field="source",
)

lendings = Resource(
    collection="lending",
    label="Lending",
    create_schema=schemas.Lending,
    update_schema=schemas.LendingUpdate,
    create_defaults={"is_returned": False, "returned_date": None},
    before_update=returned_transition,
    summary_field="description",
)

borrowings = Resource(
    collection="borrowing",
    label="Borrowing",
    create_schema=schemas.Borrowing,
    update_schema=schemas.BorrowingUpdate,
    create_defaults={"is_returned": False, "returned_date": None},
    before_update=returned_transition,
    summary_field="description",
)

investments = Resource(
    collection="investment",
    label="Investment",
    create_schema=schemas.Investment,
    update_schema=schemas.InvestmentUpdate,
    create_defaults={"is_active": True},
    summary_field="description",
)

expenses_router = register_routes(APIRouter(prefix="/api/expenses", tags=["expenses"]), expenses)
incomes_router = register_routes(APIRouter(prefix="/api/incomes", tags=["incomes"]), incomes)
lendings_router = register_routes(APIRouter(prefix="/api/lendings", tags=["lendings"]), lendings)
borrowings_router = register_routes(APIRouter(prefix="/api/borrowings", tags=["borrowings"]), borrowings)
investments_router = register_routes(APIRouter(prefix="/api/investments", tags=["investments"]), investments)

summary_router = APIRouter(prefix="/api/finance", tags=["finance"])


def _total(db: Database, collection: str, query: dict) -> float:
    return round(sum(d.get("amount", 0) for d in db[collection].find(query, {"amount": 1})), 2)


@summary_router.get("/summary")
def finance_summary(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    owner = {"user_id": user["id"]}
    income = _total(db, "income", owner)
    spent = _total(db, "expense", owner)
    lent = _total(db, "lending", {**owner, "is_returned": False})
    borrowed = _total(db, "borrowing", {**owner, "is_returned": False})
    invested = _total(db, "investment", {**owner, "is_active": True})

    return {
        "totalIncome": income,
        "totalExpenses": spent,
        "totalLent": lent,
        "totalBorrowed": borrowed,
        "totalInvested": invested,
        "netWorth": round(income - spent - lent + borrowed - invested, 2),
    }


routers = [
    expenses_router,
    incomes_router,
    lendings_router,
    borrowings_router,
    investments_router,
    summary_router,
]
