"""
Last-used lookups used to pre-fill the trip entry form.
"""
import logging
from typing import Optional
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.gap_detection_service import sort_trips_chronologically

logger = logging.getLogger(__name__)


def get_last_driver_for_vehicle(store: TripRecordStore, vehicle_id: int) -> Optional[str]:
    """Driver of the vehicle's most recent trip, or None."""
    if not vehicle_id:
        return None
    latest = store.get_latest_trip(vehicle_id)
    if latest is None:
        return None
    return latest.driver_id


def get_last_vehicle_for_driver(store: TripRecordStore, driver_id: str) -> Optional[int]:
    """Vehicle of the driver's most recent trip, or None."""
    if not driver_id:
        return None
    trips = store.list_trips_for_driver(driver_id)
    if not trips:
        return None
    latest = sort_trips_chronologically(trips)[-1]
    logger.debug(f"Driver {driver_id} last used vehicle {latest.vehicle_id}")
    return latest.vehicle_id
