"""
Unaccounted mileage routes: gap listings, statistics and acknowledgements.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
from fleettrack.schemas.mileage import (
    MileageGap, GapStats, AcknowledgementCreate, AcknowledgementResponse, AcknowledgementStatus
)
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.acknowledgement_service import AcknowledgementLedger
from fleettrack.services.gap_detection_service import (
    detect_vehicle_gaps, get_company_mileage_gaps_filtered
)
from fleettrack.services.gap_stats_service import get_mileage_gap_stats
from fleettrack.api.dependencies import get_store, check_company

router = APIRouter(prefix="/mileage-gaps", tags=["mileage-gaps"])


@router.get("/company/{company_id}", response_model=List[MileageGap])
async def list_company_gaps(
    company_id: int,
    include_acknowledged: bool = False,
    store: TripRecordStore = Depends(get_store)
):
    """Gaps across the company's fleet, most severe first."""
    check_company(company_id, store)
    return get_company_mileage_gaps_filtered(store, company_id, include_acknowledged)


@router.get("/company/{company_id}/stats", response_model=GapStats)
async def company_gap_stats(
    company_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """Statistics over outstanding gaps."""
    check_company(company_id, store)
    return get_mileage_gap_stats(store, company_id)


@router.get("/vehicle/{vehicle_id}", response_model=List[MileageGap])
async def list_vehicle_gaps(
    vehicle_id: int,
    store: TripRecordStore = Depends(get_store)
):
    """Gaps of one vehicle in chronological order, acknowledged ones flagged."""
    vehicle = store.get_vehicle(vehicle_id)
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    
    gaps = detect_vehicle_gaps(store, vehicle_id)
    return AcknowledgementLedger(store).mark(gaps)


@router.post("/{gap_id}/acknowledge", response_model=AcknowledgementResponse)
async def acknowledge_gap(
    gap_id: str,
    ack_data: AcknowledgementCreate,
    company_id: Optional[int] = None,
    store: TripRecordStore = Depends(get_store)
):
    """Mark a gap as reviewed. Repeating the call overwrites the entry."""
    return AcknowledgementLedger(store).acknowledge(
        gap_id, ack_data.reviewer_id, ack_data.note, company_id=company_id
    )


@router.get("/{gap_id}/acknowledgement")
async def acknowledgement_status(
    gap_id: str,
    store: TripRecordStore = Depends(get_store)
):
    """Ledger status of a gap: acknowledged, not_acknowledged or unknown."""
    ack_status = AcknowledgementLedger(store).status(gap_id)
    return {"gap_id": gap_id, "status": ack_status.value, "acknowledged": ack_status == AcknowledgementStatus.ACKNOWLEDGED}
