"""
Company and vehicle registration routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from fleettrack.models.company import Company
from fleettrack.models.vehicle import Vehicle
from fleettrack.schemas.vehicle import (
    CompanyCreate, CompanyResponse, VehicleCreate, VehicleResponse, LastUsedResponse
)
from fleettrack.core.errors import NotFoundError
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.analytics_service import acknowledge_service_alert
from fleettrack.services.last_used_service import get_last_driver_for_vehicle, get_last_vehicle_for_driver
from fleettrack.api.dependencies import get_store, check_company

router = APIRouter(tags=["vehicles"])


@router.post("/companies", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    store: TripRecordStore = Depends(get_store)
):
    """Register a company."""
    return store.save(Company(name=company_data.name))


@router.get("/companies/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """Get company details."""
    return check_company(company_id, store)


@router.post("/vehicles", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    store: TripRecordStore = Depends(get_store)
):
    """Register a vehicle to a company."""
    check_company(vehicle_data.company_id, store)
    vehicle = Vehicle(**vehicle_data.model_dump())
    return store.save(vehicle)


@router.get("/companies/{company_id}/vehicles", response_model=List[VehicleResponse])
async def list_vehicles(
    company_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """List all vehicles of a company."""
    check_company(company_id, store)
    return store.list_vehicles_for_company(company_id)


@router.post("/vehicles/{vehicle_id}/service-alert/acknowledge", response_model=VehicleResponse)
async def acknowledge_service(
    vehicle_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """Mark the vehicle as serviced, resetting its service counter."""
    try:
        return acknowledge_service_alert(store, vehicle_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/vehicles/{vehicle_id}/last-driver", response_model=LastUsedResponse)
async def last_driver(
    vehicle_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """Driver of the vehicle's most recent trip."""
    if not store.get_vehicle(vehicle_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    return LastUsedResponse(vehicle_id=vehicle_id, driver_id=get_last_driver_for_vehicle(store, vehicle_id))


@router.get("/drivers/{driver_id}/last-vehicle", response_model=LastUsedResponse)
async def last_vehicle(
    driver_id: str,
    store: TripRecordStore = Depends(get_store)
):
    """Vehicle of the driver's most recent trip."""
    return LastUsedResponse(vehicle_id=get_last_vehicle_for_driver(store, driver_id), driver_id=driver_id)
