"""Models package - Import all models for SQLAlchemy registration."""
from fleettrack.models.company import Company
from fleettrack.models.vehicle import Vehicle
from fleettrack.models.trip import TripRecord
from fleettrack.models.expense import Expense
from fleettrack.models.acknowledgement import GapAcknowledgement

__all__ = [
    "Company",
    "Vehicle",
    "TripRecord",
    "Expense",
    "GapAcknowledgement",
]
