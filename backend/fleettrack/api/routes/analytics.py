"""
Analytics dashboard routes.
"""
from fastapi import APIRouter, Depends
from datetime import date
from typing import Optional
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.time_ranges import TimeRange
from fleettrack.services import analytics_service
from fleettrack.api.dependencies import get_store, check_company

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/company/{company_id}")
async def get_analytics(
    company_id: int,
    time_range: TimeRange = TimeRange.ALL,
    today: Optional[date] = None,
    store: TripRecordStore = Depends(get_store)
):
    """Dashboard summary, per-vehicle metrics, performers and trends."""
    check_company(company_id, store)
    return analytics_service.get_analytics_data(store, company_id, time_range.value, today)


@router.get("/company/{company_id}/mileage-trends")
async def get_mileage_trends(
    company_id: int,
    time_range: TimeRange = TimeRange.ALL,
    today: Optional[date] = None,
    store: TripRecordStore = Depends(get_store)
):
    check_company(company_id, store)
    return analytics_service.get_mileage_trends(store, company_id, time_range.value, today)


@router.get("/company/{company_id}/period-totals")
async def get_period_totals(
    company_id: int,
    today: Optional[date] = None,
    store: TripRecordStore = Depends(get_store)
):
    """Trailing weekly and monthly totals."""
    check_company(company_id, store)
    return analytics_service.get_period_totals(store, company_id, today)


@router.get("/company/{company_id}/service-alerts")
async def get_service_alerts(
    company_id: int,
    store: TripRecordStore = Depends(get_store)
):
    check_company(company_id, store)
    return analytics_service.get_service_alerts(store, company_id)


@router.get("/company/{company_id}/license-alerts")
async def get_license_alerts(
    company_id: int,
    today: Optional[date] = None,
    store: TripRecordStore = Depends(get_store)
):
    check_company(company_id, store)
    return analytics_service.get_license_expiry_alerts(store, company_id, today)
