"""
Trip record routes: capture, edit, removal and the entry-form mileage checks.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
from fleettrack.core.errors import MileageValidationError, NotFoundError
from fleettrack.schemas.trip import TripCreate, TripUpdate, TripResponse
from fleettrack.schemas.mileage import (
    MileageCheckRequest, MileageValidationResult, GapPreviewRequest, GapPreview
)
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services import trip_service
from fleettrack.services.mileage_validation_service import check_trip_mileage
from fleettrack.services.gap_detection_service import preview_gap
from fleettrack.api.dependencies import get_store, check_company

router = APIRouter(prefix="/trips", tags=["trips"])


def rejected(exc: MileageValidationError) -> HTTPException:
    """422 carrying the rejection reason and message."""
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"reason": exc.result.reason.value, "message": exc.result.message}
    )


def to_response(trip, warning: Optional[str] = None) -> TripResponse:
    response = TripResponse.model_validate(trip)
    response.warning = warning
    return response


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    trip_data: TripCreate,
    store: TripRecordStore = Depends(get_store)
):
    """Record a trip after strict mileage validation."""
    try:
        trip, warning = trip_service.create_trip(store, trip_data)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except MileageValidationError as exc:
        raise rejected(exc)
    return to_response(trip, warning)


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: int,
    trip_data: TripUpdate,
    store: TripRecordStore = Depends(get_store)
):
    """Edit a trip; readings are re-validated when they or the date change."""
    try:
        trip, warning = trip_service.update_trip(store, trip_id, trip_data)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except MileageValidationError as exc:
        raise rejected(exc)
    return to_response(trip, warning)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """Delete a trip."""
    try:
        trip_service.delete_trip(store, trip_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return None


@router.get("/company/{company_id}", response_model=List[TripResponse])
async def list_company_trips(
    company_id: int,
    vehicle_id: Optional[int] = None,
    store: TripRecordStore = Depends(get_store)
):
    """All trips of a company, newest first, optionally for one vehicle."""
    check_company(company_id, store)
    return store.list_trips_for_company(company_id, vehicle_id)


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """Get trip details."""
    trip = store.get_trip(trip_id)
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return trip


@router.post("/check", response_model=MileageValidationResult)
async def check_mileage(
    request: MileageCheckRequest,
    store: TripRecordStore = Depends(get_store)
):
    """
    Interactive mileage check for the entry form.
    Always answers 200; rejections are reported in the body.
    """
    return check_trip_mileage(
        store,
        request.vehicle_id,
        request.start_mileage,
        request.end_mileage,
        entry_date=request.date,
        exclude_trip_id=request.exclude_trip_id
    )


@router.post("/gap-preview", response_model=GapPreview)
async def gap_preview(
    request: GapPreviewRequest,
    store: TripRecordStore = Depends(get_store)
):
    """Gap the entry would open against the vehicle's latest trip."""
    return preview_gap(
        store,
        request.vehicle_id,
        request.start_mileage,
        request.date,
        company_id=request.company_id
    )
