from fastapi import APIRouter

from app.api.v1.routes import (
    allowances,
    auth,
    dashboard,
    fixed_expenses,
    goals,
    investments,
    invitations,
    kis,
    ledger,
    living_expenses,
    salaries,
    savings,
    users,
)

api_router = APIRouter()

# Custom auth routes go first so the cookie-clearing logout wins over the default one
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(invitations.router)
api_router.include_router(salaries.router)
api_router.include_router(fixed_expenses.router)
api_router.include_router(living_expenses.router)
api_router.include_router(allowances.router)
api_router.include_router(ledger.router)
api_router.include_router(savings.router)
api_router.include_router(investments.router)
api_router.include_router(goals.router)
api_router.include_router(dashboard.router)
api_router.include_router(kis.router)
