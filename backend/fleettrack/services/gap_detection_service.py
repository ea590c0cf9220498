"""
Mileage gap detection service.

A gap is unaccounted distance between two consecutive trips of the same
vehicle: the later trip starts above the earlier trip's end reading.
Gaps are never stored; they are recomputed from trip history on every call.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional
from fleettrack.core.config import settings
from fleettrack.core.errors import StoreReadError
from fleettrack.core.utils import days_between, format_km, parse_number, to_date, to_datetime, to_number
from fleettrack.schemas.mileage import GapPreview, GapSeverity, MileageGap
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.acknowledgement_service import AcknowledgementLedger

logger = logging.getLogger(__name__)


def make_gap_id(previous_trip_id: Any, current_trip_id: Any) -> str:
    return f"{previous_trip_id}-{current_trip_id}"


def classify_severity(
    unaccounted_km: float,
    medium_threshold: Optional[float] = None,
    high_threshold: Optional[float] = None
) -> GapSeverity:
    """high above 500 km, medium above 100 km, low otherwise (defaults from settings)."""
    if medium_threshold is None:
        medium_threshold = settings.GAP_MEDIUM_SEVERITY_KM
    if high_threshold is None:
        high_threshold = settings.GAP_HIGH_SEVERITY_KM

    if unaccounted_km > high_threshold:
        return GapSeverity.HIGH
    if unaccounted_km > medium_threshold:
        return GapSeverity.MEDIUM
    return GapSeverity.LOW


def sort_trips_chronologically(trips: Iterable[Any]) -> List[Any]:
    """Ascending by date; trips on the same date keep creation (id) order."""
    return sorted(trips, key=lambda trip: (to_datetime(trip.date), trip.id))


def detect_gaps(trips: Iterable[Any], vehicle_id: Optional[int] = None) -> List[MileageGap]:
    """
    Scan one vehicle's trips and emit a gap for every adjacent pair whose
    start reading exceeds the previous end reading.

    Args:
        trips: Trip records of a single vehicle, in any order
        vehicle_id: Vehicle to tag gaps with (defaults to each trip's vehicle_id)
    """
    ordered = sort_trips_chronologically(trips)
    if len(ordered) < 2:
        return []

    detected_at = datetime.now(timezone.utc)
    gaps = []
    previous = ordered[0]
    for current in ordered[1:]:
        previous_end = to_number(previous.end_mileage)
        current_start = to_number(current.start_mileage)
        gap = current_start - previous_end

        if gap > 0:
            gaps.append(MileageGap(
                id=make_gap_id(previous.id, current.id),
                vehicle_id=vehicle_id if vehicle_id is not None else current.vehicle_id,
                previous_trip_id=previous.id,
                current_trip_id=current.id,
                previous_date=to_date(previous.date),
                current_date=to_date(current.date),
                previous_end_mileage=previous_end,
                current_start_mileage=current_start,
                unaccounted_km=gap,
                days_between=days_between(previous.date, current.date),
                severity=classify_severity(gap),
                detected_at=detected_at
            ))

        previous = current

    return gaps


def sort_gaps(gaps: Iterable[MileageGap]) -> List[MileageGap]:
    """Most severe first, then largest unaccounted distance first."""
    return sorted(gaps, key=lambda gap: (-gap.severity.rank, -gap.unaccounted_km))


def detect_vehicle_gaps(store: TripRecordStore, vehicle_id: int, company_id: Optional[int] = None) -> List[MileageGap]:
    """
    Gaps for one vehicle.
    StoreReadError propagates: there is nothing else to fall back on.
    """
    trips = store.list_trips_for_vehicle(vehicle_id, company_id)
    return detect_gaps(trips, vehicle_id)


def get_company_mileage_gaps(store: TripRecordStore, company_id: int) -> List[MileageGap]:
    """
    Gaps across every vehicle of a company, tagged with vehicle name and
    registration and sorted by severity.

    A vehicle whose history cannot be read is skipped so that the gaps of the
    other vehicles are still reported.
    """
    vehicles = store.list_vehicles_for_company(company_id)

    all_gaps = []
    for vehicle in vehicles:
        try:
            gaps = detect_vehicle_gaps(store, vehicle.id, company_id)
        except StoreReadError as exc:
            logger.warning(f"Skipping vehicle {vehicle.id} in gap scan for company {company_id}: {exc}")
            continue

        for gap in gaps:
            all_gaps.append(gap.model_copy(update={
                "vehicle_name": vehicle.name,
                "vehicle_registration": vehicle.registration_number
            }))

    return sort_gaps(all_gaps)


def get_company_mileage_gaps_filtered(
    store: TripRecordStore,
    company_id: int,
    include_acknowledged: bool = False
) -> List[MileageGap]:
    """Company gaps with acknowledgement applied: flagged, or dropped when not included."""
    ledger = AcknowledgementLedger(store)
    gaps = get_company_mileage_gaps(store, company_id)
    if include_acknowledged:
        return ledger.mark(gaps)
    return ledger.filter_unacknowledged(gaps)


def preview_gap(
    store: TripRecordStore,
    vehicle_id: Optional[int],
    start_mileage: Any,
    entry_date: Optional[date],
    company_id: Optional[int] = None
) -> GapPreview:
    """
    The gap a new entry would open against the vehicle's most recent trip.
    Incomplete input or an empty history yields has_gap=False.
    """
    start = parse_number(start_mileage)
    if not vehicle_id or not start or entry_date is None:
        return GapPreview(has_gap=False)

    latest = store.get_latest_trip(vehicle_id, company_id=company_id)
    if latest is None:
        return GapPreview(has_gap=False)

    previous_end = to_number(latest.end_mileage)
    gap = start - previous_end
    if gap <= 0:
        return GapPreview(has_gap=False)

    previous_date = to_date(latest.date)
    return GapPreview(
        has_gap=True,
        unaccounted_km=gap,
        previous_end_mileage=previous_end,
        previous_date=previous_date,
        days_between=days_between(previous_date, entry_date),
        severity=classify_severity(gap),
        warning=(
            f"Mileage Gap Detected: {format_km(gap)} km unaccounted for between "
            f"{previous_date.isoformat()} ({format_km(previous_end)} km) and "
            f"{to_date(entry_date).isoformat()} ({format_km(start)} km). "
            "This may indicate unreported trips."
        )
    )
