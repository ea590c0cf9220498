"""
Mileage validation service.

Two strictness levels share one rule set:
- live check: run while the operator types, compared against the vehicle's
  latest trip; an implausibly long single trip only produces a warning.
- strict check: run when a trip is written, compared against the trip that
  chronologically precedes the entry date; an implausibly long trip is rejected.
"""
import logging
from datetime import date
from typing import Any, Optional
from fleettrack.core.config import settings
from fleettrack.core.utils import parse_number, to_date, to_number, format_km
from fleettrack.schemas.mileage import MileageValidationResult, ValidationReason
from fleettrack.services.trip_store import TripRecordStore

logger = logging.getLogger(__name__)


def _invalid(reason: ValidationReason, message: str) -> MileageValidationResult:
    return MileageValidationResult(is_valid=False, reason=reason, message=message)


def validate_mileage(
    start_mileage: Any,
    end_mileage: Any,
    previous_end_mileage: Optional[Any] = None,
    entry_date: Optional[date] = None,
    previous_date: Optional[date] = None,
    strict: bool = False,
    large_jump_km: Optional[float] = None,
    max_trip_km: Optional[float] = None
) -> MileageValidationResult:
    """
    Validate proposed odometer readings against the preceding trip.

    Args:
        start_mileage: Proposed start reading (any value that parses as a number)
        end_mileage: Proposed end reading
        previous_end_mileage: End reading of the preceding trip, None for a first trip
        entry_date: Date of the proposed trip
        previous_date: Date of the preceding trip
        strict: Reject (instead of warn about) implausible single-trip distances
        large_jump_km: Override for LARGE_JUMP_WARNING_KM
        max_trip_km: Override for MAX_SINGLE_TRIP_KM

    Returns:
        MileageValidationResult that is invalid, valid with a warning, or valid
    """
    if large_jump_km is None:
        large_jump_km = settings.LARGE_JUMP_WARNING_KM
    if max_trip_km is None:
        max_trip_km = settings.MAX_SINGLE_TRIP_KM

    start = parse_number(start_mileage)
    end = parse_number(end_mileage)
    if start is None or end is None:
        return _invalid(ValidationReason.NON_NUMERIC, "Please enter valid mileage values")

    if start < 0 or end < 0:
        return _invalid(ValidationReason.NEGATIVE_MILEAGE, "Mileage values cannot be negative")

    if end <= start:
        return _invalid(
            ValidationReason.END_NOT_AFTER_START,
            "End mileage must be greater than start mileage"
        )

    if entry_date is not None and previous_date is not None:
        if to_date(entry_date) < to_date(previous_date):
            return _invalid(
                ValidationReason.BACKDATED_ENTRY,
                f"Entry date {to_date(entry_date).isoformat()} is earlier than the last "
                f"recorded trip on {to_date(previous_date).isoformat()}"
            )

    warnings = []

    if previous_end_mileage is not None:
        last_mileage = to_number(previous_end_mileage)
        if start < last_mileage:
            return _invalid(
                ValidationReason.ODOMETER_REGRESSION,
                f"Start mileage ({format_km(start)} km) cannot be less than last "
                f"recorded mileage ({format_km(last_mileage)} km)"
            )

        mileage_jump = start - last_mileage
        if mileage_jump > large_jump_km:
            warnings.append(
                f"Large mileage jump detected: {format_km(mileage_jump)} km since last entry. "
                "Please verify this is correct."
            )

    distance = end - start
    if distance > max_trip_km:
        if strict:
            return _invalid(
                ValidationReason.IMPLAUSIBLE_DISTANCE,
                f"Distance of {format_km(distance)} km exceeds the maximum of "
                f"{format_km(max_trip_km)} km for a single trip"
            )
        warnings.append(
            f"Distance of {format_km(distance)} km is unusually long for a single trip."
        )

    if warnings:
        return MileageValidationResult(is_valid=True, warning=" ".join(warnings))

    return MileageValidationResult(is_valid=True, message="Mileage is valid")


def validate_successor(end_mileage: float, following_start_mileage: Optional[Any]) -> MileageValidationResult:
    """A trip's end reading must not exceed the start of the trip that follows it."""
    if following_start_mileage is None:
        return MileageValidationResult(is_valid=True, message="Mileage is valid")

    following_start = to_number(following_start_mileage)
    if following_start < end_mileage:
        return _invalid(
            ValidationReason.SUCCESSOR_REGRESSION,
            f"End mileage ({format_km(end_mileage)} km) is greater than the start mileage "
            f"of the next recorded trip ({format_km(following_start)} km)"
        )
    return MileageValidationResult(is_valid=True, message="Mileage is valid")


def _last_recorded_mileage(trip) -> float:
    """End reading of a trip, falling back to its start reading."""
    return to_number(trip.end_mileage) or to_number(trip.start_mileage)


def check_trip_mileage(
    store: TripRecordStore,
    vehicle_id: int,
    start_mileage: Any,
    end_mileage: Any,
    entry_date: Optional[date] = None,
    exclude_trip_id: Optional[int] = None
) -> MileageValidationResult:
    """
    Interactive check against the vehicle's latest recorded trip.
    StoreReadError propagates to the caller.
    """
    latest = store.get_latest_trip(vehicle_id, exclude_trip_id=exclude_trip_id)
    if latest is None:
        return validate_mileage(start_mileage, end_mileage, entry_date=entry_date)

    return validate_mileage(
        start_mileage,
        end_mileage,
        previous_end_mileage=_last_recorded_mileage(latest),
        entry_date=entry_date,
        previous_date=latest.date
    )


def validate_trip_write(
    store: TripRecordStore,
    vehicle_id: int,
    start_mileage: Any,
    end_mileage: Any,
    entry_date: date,
    exclude_trip_id: Optional[int] = None
) -> MileageValidationResult:
    """
    Full pre-write check of a trip's readings against both chronological neighbours.

    The preceding trip is looked up by the (possibly edited) entry date, and the
    trip being edited is never its own neighbour.
    """
    preceding = store.get_preceding_trip(vehicle_id, entry_date, exclude_trip_id=exclude_trip_id)
    result = validate_mileage(
        start_mileage,
        end_mileage,
        previous_end_mileage=preceding.end_mileage if preceding else None,
        entry_date=entry_date,
        previous_date=preceding.date if preceding else None,
        strict=True
    )
    if not result.is_valid:
        logger.info(f"Rejected mileage for vehicle {vehicle_id} on {entry_date}: {result.reason.value}")
        return result

    following = store.get_following_trip(vehicle_id, entry_date, exclude_trip_id=exclude_trip_id)
    if following is not None:
        successor = validate_successor(parse_number(end_mileage), following.start_mileage)
        if not successor.is_valid:
            logger.info(f"Rejected mileage for vehicle {vehicle_id} on {entry_date}: {successor.reason.value}")
            return successor

    return result
