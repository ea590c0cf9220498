"""
Trip service for trip capture, edit and removal.

Every write runs the strict mileage check before anything is persisted.
"""
import logging
from typing import Optional, Tuple
from decimal import Decimal
from fleettrack.core.errors import MileageValidationError, NotFoundError
from fleettrack.models.trip import TripRecord
from fleettrack.schemas.trip import TripCreate, TripUpdate
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.mileage_validation_service import validate_trip_write

logger = logging.getLogger(__name__)


def _require_vehicle(store: TripRecordStore, vehicle_id: int, company_id: int):
    vehicle = store.get_vehicle(vehicle_id)
    if not vehicle or vehicle.company_id != company_id:
        raise NotFoundError("Vehicle not found")
    return vehicle


def create_trip(store: TripRecordStore, trip_data: TripCreate) -> Tuple[TripRecord, Optional[str]]:
    """
    Validate and persist a new trip.

    Returns:
        The created trip and the non-blocking mileage warning, if any

    Raises:
        NotFoundError: vehicle does not belong to the company
        MileageValidationError: readings rejected
    """
    _require_vehicle(store, trip_data.vehicle_id, trip_data.company_id)

    result = validate_trip_write(
        store,
        trip_data.vehicle_id,
        trip_data.start_mileage,
        trip_data.end_mileage,
        trip_data.date
    )
    if not result.is_valid:
        raise MileageValidationError(result)

    trip = TripRecord(
        company_id=trip_data.company_id,
        vehicle_id=trip_data.vehicle_id,
        driver_id=trip_data.driver_id,
        date=trip_data.date,
        cash_in=trip_data.cash_in or Decimal("0"),
        start_location=trip_data.start_location or "",
        end_location=trip_data.end_location or "",
        notes=trip_data.notes or ""
    )
    trip.set_mileage(float(trip_data.start_mileage), float(trip_data.end_mileage))
    store.save(trip)

    logger.info(f"Created trip {trip.id} for vehicle {trip.vehicle_id} ({trip.distance_traveled} km)")
    return trip, result.warning


def update_trip(store: TripRecordStore, trip_id: int, updates: TripUpdate) -> Tuple[TripRecord, Optional[str]]:
    """
    Apply an edit to a trip.

    Any change to vehicle, date or readings is re-validated against the
    neighbours at the trip's new position, with the trip itself excluded.
    """
    trip = store.get_trip(trip_id)
    if not trip:
        raise NotFoundError("Trip not found")

    changes = updates.model_dump(exclude_unset=True)

    vehicle_id = changes.get("vehicle_id") or trip.vehicle_id
    if vehicle_id != trip.vehicle_id:
        _require_vehicle(store, vehicle_id, trip.company_id)

    entry_date = changes.get("date") or trip.date
    start_mileage = changes["start_mileage"] if changes.get("start_mileage") is not None else trip.start_mileage
    end_mileage = changes["end_mileage"] if changes.get("end_mileage") is not None else trip.end_mileage

    warning = None
    if {"vehicle_id", "date", "start_mileage", "end_mileage"} & set(changes):
        result = validate_trip_write(
            store,
            vehicle_id,
            start_mileage,
            end_mileage,
            entry_date,
            exclude_trip_id=trip.id
        )
        if not result.is_valid:
            raise MileageValidationError(result)
        warning = result.warning

    trip.vehicle_id = vehicle_id
    trip.date = entry_date
    trip.set_mileage(float(start_mileage), float(end_mileage))

    for field in ("cash_in", "driver_id", "start_location", "end_location", "notes"):
        if field in changes:
            value = changes[field]
            if field == "cash_in":
                value = value if value is not None else Decimal("0")
            elif field != "driver_id":
                value = value or ""
            setattr(trip, field, value)

    store.save(trip)
    return trip, warning


def delete_trip(store: TripRecordStore, trip_id: int):
    """Hard-delete a trip; it drops out of every mileage chain immediately."""
    trip = store.get_trip(trip_id)
    if not trip:
        raise NotFoundError("Trip not found")
    store.delete(trip)
    logger.info(f"Deleted trip {trip_id}")
