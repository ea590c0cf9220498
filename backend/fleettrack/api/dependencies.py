"""
Shared route dependencies.
"""
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session
from fleettrack.db.session import get_db
from fleettrack.services.trip_store import TripRecordStore


def get_store(db: Session = Depends(get_db)) -> TripRecordStore:
    """Dependency for getting the trip record store bound to the request session."""
    return TripRecordStore(db)


def check_company(company_id: int, store: TripRecordStore):
    """Raise 404 unless the company exists."""
    company = store.get_company(company_id)
    if not company:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company not found"
        )
    return company
