from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth, health, users,
    clients, contracts, projects, payments, categories, time_entries, reports
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])

# Resource endpoints
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(time_entries.router, prefix="/time-entries", tags=["time-entries"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
