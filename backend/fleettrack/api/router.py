"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from fleettrack.api.routes import vehicles, trips, expenses, mileage_gaps, analytics

api_router = APIRouter()

# Include all route modules
api_router.include_router(vehicles.router)
api_router.include_router(trips.router)
api_router.include_router(expenses.router)
api_router.include_router(mileage_gaps.router)
api_router.include_router(analytics.router)
