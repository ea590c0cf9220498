"""
Shared fixtures: an in-memory SQLite database and a TestClient bound to it.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import fleettrack.models  # noqa: F401
from fleettrack.db.base import Base
from fleettrack.db.session import get_db
from fleettrack.main import app
from fleettrack.models import Company, Vehicle, TripRecord
from fleettrack.services.trip_store import TripRecordStore

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db):
    return TripRecordStore(db)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def company(store):
    return store.save(Company(name="Acme Haulage"))


@pytest.fixture
def make_vehicle(store, company):
    def _make(name="Truck", registration_number="KA-01", **kwargs):
        return store.save(Vehicle(
            company_id=company.id,
            name=name,
            registration_number=registration_number,
            **kwargs
        ))
    return _make


@pytest.fixture
def make_trip(store, company):
    """Persist a trip directly, bypassing validation."""
    def _make(vehicle, start, end, day, cash_in="0", driver_id=None):
        trip = TripRecord(
            company_id=company.id,
            vehicle_id=vehicle.id,
            date=day,
            cash_in=Decimal(cash_in),
            driver_id=driver_id
        )
        trip.set_mileage(start, end)
        return store.save(trip)
    return _make
