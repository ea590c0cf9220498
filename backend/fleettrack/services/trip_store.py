"""
Trip record store: the data-access boundary used by the mileage and analytics services.

Every read is wrapped so that SQLAlchemy failures surface as StoreReadError;
callers decide whether to skip (company-wide scans) or propagate.
"""
import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Set
from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fleettrack.core.errors import StoreReadError
from fleettrack.models.company import Company
from fleettrack.models.vehicle import Vehicle
from fleettrack.models.trip import TripRecord
from fleettrack.models.expense import Expense
from fleettrack.models.acknowledgement import GapAcknowledgement

logger = logging.getLogger(__name__)


class TripRecordStore:
    """SQLAlchemy-backed access to trips, vehicles, expenses and gap acknowledgements."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _reading(self, what: str):
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(f"Failed to read {what}: {exc}")
            raise StoreReadError(f"Could not read {what}") from exc

    # Companies and vehicles

    def get_company(self, company_id: int) -> Optional[Company]:
        with self._reading(f"company {company_id}"):
            return self.db.query(Company).filter(Company.id == company_id).first()

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        with self._reading(f"vehicle {vehicle_id}"):
            return self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()

    def list_vehicles_for_company(self, company_id: int) -> List[Vehicle]:
        with self._reading(f"vehicles of company {company_id}"):
            return self.db.query(Vehicle).filter(
                Vehicle.company_id == company_id
            ).order_by(Vehicle.id).all()

    # Trips

    def get_trip(self, trip_id: int) -> Optional[TripRecord]:
        with self._reading(f"trip {trip_id}"):
            return self.db.query(TripRecord).filter(TripRecord.id == trip_id).first()

    def list_trips_for_vehicle(self, vehicle_id: int, company_id: Optional[int] = None) -> List[TripRecord]:
        """All trips of a vehicle, in no particular order."""
        with self._reading(f"trips of vehicle {vehicle_id}"):
            query = self.db.query(TripRecord).filter(TripRecord.vehicle_id == vehicle_id)
            if company_id is not None:
                query = query.filter(TripRecord.company_id == company_id)
            return query.all()

    def list_trips_for_company(self, company_id: int, vehicle_id: Optional[int] = None) -> List[TripRecord]:
        with self._reading(f"trips of company {company_id}"):
            query = self.db.query(TripRecord).filter(TripRecord.company_id == company_id)
            if vehicle_id is not None:
                query = query.filter(TripRecord.vehicle_id == vehicle_id)
            return query.order_by(TripRecord.date.desc(), TripRecord.id.desc()).all()

    def list_trips_for_driver(self, driver_id: str) -> List[TripRecord]:
        with self._reading(f"trips of driver {driver_id}"):
            return self.db.query(TripRecord).filter(TripRecord.driver_id == driver_id).all()

    def get_preceding_trip(
        self,
        vehicle_id: int,
        before_date: date,
        exclude_trip_id: Optional[int] = None
    ) -> Optional[TripRecord]:
        """
        Trip immediately before a position in the vehicle's (date, id) chain.

        The position is before_date with exclude_trip_id's id for an existing
        trip; a new trip (exclude_trip_id None) goes after every trip on its date.
        """
        with self._reading(f"trip preceding {before_date} for vehicle {vehicle_id}"):
            if exclude_trip_id is None:
                position = TripRecord.date <= before_date
            else:
                position = or_(
                    TripRecord.date < before_date,
                    and_(TripRecord.date == before_date, TripRecord.id < exclude_trip_id)
                )
            query = self.db.query(TripRecord).filter(
                TripRecord.vehicle_id == vehicle_id,
                position
            )
            return query.order_by(TripRecord.date.desc(), TripRecord.id.desc()).first()

    def get_following_trip(
        self,
        vehicle_id: int,
        after_date: date,
        exclude_trip_id: Optional[int] = None
    ) -> Optional[TripRecord]:
        """Trip immediately after a position in the vehicle's (date, id) chain."""
        with self._reading(f"trip following {after_date} for vehicle {vehicle_id}"):
            if exclude_trip_id is None:
                position = TripRecord.date > after_date
            else:
                position = or_(
                    TripRecord.date > after_date,
                    and_(TripRecord.date == after_date, TripRecord.id > exclude_trip_id)
                )
            query = self.db.query(TripRecord).filter(
                TripRecord.vehicle_id == vehicle_id,
                position
            )
            return query.order_by(TripRecord.date.asc(), TripRecord.id.asc()).first()

    def get_latest_trip(
        self,
        vehicle_id: int,
        company_id: Optional[int] = None,
        exclude_trip_id: Optional[int] = None
    ) -> Optional[TripRecord]:
        """Most recent trip of the vehicle regardless of any reference date."""
        with self._reading(f"latest trip for vehicle {vehicle_id}"):
            query = self.db.query(TripRecord).filter(TripRecord.vehicle_id == vehicle_id)
            if company_id is not None:
                query = query.filter(TripRecord.company_id == company_id)
            if exclude_trip_id is not None:
                query = query.filter(TripRecord.id != exclude_trip_id)
            return query.order_by(TripRecord.date.desc(), TripRecord.id.desc()).first()

    # Expenses

    def list_expenses(self, company_id: int, vehicle_id: Optional[int] = None) -> List[Expense]:
        with self._reading(f"expenses of company {company_id}"):
            query = self.db.query(Expense).filter(Expense.company_id == company_id)
            if vehicle_id is not None:
                query = query.filter(Expense.vehicle_id == vehicle_id)
            return query.order_by(Expense.date.desc(), Expense.id.desc()).all()

    # Acknowledgement ledger

    def get_acknowledgement(self, gap_id: str) -> Optional[GapAcknowledgement]:
        with self._reading(f"acknowledgement {gap_id}"):
            return self.db.query(GapAcknowledgement).filter(
                GapAcknowledgement.gap_id == gap_id
            ).first()

    def get_acknowledged_ids(self, gap_ids: Iterable[str]) -> Set[str]:
        """Subset of gap_ids that have a ledger entry, in one query."""
        gap_ids = list(gap_ids)
        if not gap_ids:
            return set()
        with self._reading(f"acknowledgements for {len(gap_ids)} gaps"):
            rows = self.db.query(GapAcknowledgement.gap_id).filter(
                GapAcknowledgement.gap_id.in_(gap_ids)
            ).all()
            return {row[0] for row in rows}

    def put_acknowledgement(
        self,
        gap_id: str,
        reviewer_id: str,
        note: str = "",
        company_id: Optional[int] = None
    ) -> GapAcknowledgement:
        """Create or overwrite the ledger entry for a gap (last write wins)."""
        entry = GapAcknowledgement(
            gap_id=gap_id,
            company_id=company_id,
            acknowledged_by=reviewer_id,
            acknowledged_at=datetime.now(timezone.utc),
            note=note or ""
        )
        entry = self.db.merge(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    # Writes

    def save(self, record):
        """Persist a new or modified record and reload it."""
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def delete(self, record):
        self.db.delete(record)
        self.db.commit()