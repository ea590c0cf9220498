"""
Tests for mileage gap detection.
"""
import pytest
from datetime import date
from types import SimpleNamespace
from fleettrack.core.errors import StoreReadError
from fleettrack.schemas.mileage import GapSeverity
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.gap_detection_service import (
    classify_severity,
    detect_gaps,
    detect_vehicle_gaps,
    get_company_mileage_gaps,
    preview_gap,
    sort_gaps,
)

D1 = date(2024, 3, 1)
D2 = date(2024, 3, 4)
D3 = date(2024, 3, 8)


def trip(id, start, end, day, vehicle_id=1):
    return SimpleNamespace(id=id, vehicle_id=vehicle_id, start_mileage=start, end_mileage=end, date=day)


class FlakyStore(TripRecordStore):
    """Store that cannot read the history of selected vehicles."""

    def __init__(self, db, broken_vehicle_ids):
        super().__init__(db)
        self.broken_vehicle_ids = set(broken_vehicle_ids)

    def list_trips_for_vehicle(self, vehicle_id, company_id=None):
        if vehicle_id in self.broken_vehicle_ids:
            raise StoreReadError(f"Could not read trips of vehicle {vehicle_id}")
        return super().list_trips_for_vehicle(vehicle_id, company_id)


def test_gap_between_consecutive_trips():
    gaps = detect_gaps([trip(1, 0, 1000, D1), trip(2, 1200, 1400, D2)])

    assert len(gaps) == 1
    gap = gaps[0]
    assert gap.id == "1-2"
    assert gap.previous_trip_id == 1
    assert gap.current_trip_id == 2
    assert gap.unaccounted_km == 200
    assert gap.previous_end_mileage == 1000
    assert gap.current_start_mileage == 1200
    assert gap.days_between == 3
    assert gap.severity == GapSeverity.MEDIUM
    assert gap.acknowledged is False
    assert gap.detected_at.tzinfo is not None


def test_exact_continuation_is_not_a_gap():
    assert detect_gaps([trip(1, 0, 1000, D1), trip(2, 1000, 1400, D2)]) == []


def test_overlap_is_not_a_gap():
    assert detect_gaps([trip(1, 0, 1000, D1), trip(2, 900, 1400, D2)]) == []


def test_fewer_than_two_trips_has_no_gaps():
    assert detect_gaps([]) == []
    assert detect_gaps([trip(1, 0, 1000, D1)]) == []


def test_trips_are_ordered_by_date_then_id():
    trips = [
        trip(3, 1600, 1700, D3),
        trip(2, 1100, 1500, D2),
        trip(1, 0, 1000, D1),
    ]
    gaps = detect_gaps(trips)

    assert [gap.id for gap in gaps] == ["1-2", "2-3"]
    assert [gap.unaccounted_km for gap in gaps] == [100, 100]


def test_same_day_trips_follow_creation_order():
    gaps = detect_gaps([trip(5, 300, 400, D1), trip(4, 0, 100, D1)])
    assert [gap.id for gap in gaps] == ["4-5"]
    assert gaps[0].days_between == 0


def test_every_gap_is_positive():
    trips = [trip(i, i * 100, i * 100 + 50, date(2024, 1, i)) for i in range(1, 10)]
    gaps = detect_gaps(trips)
    assert len(gaps) == 8
    assert all(gap.unaccounted_km > 0 for gap in gaps)


@pytest.mark.parametrize("km,expected", [
    (1, GapSeverity.LOW),
    (100, GapSeverity.LOW),
    (100.01, GapSeverity.MEDIUM),
    (500, GapSeverity.MEDIUM),
    (500.01, GapSeverity.HIGH),
    (10000, GapSeverity.HIGH),
])
def test_severity_boundaries(km, expected):
    assert classify_severity(km) == expected


def test_sort_gaps_by_severity_then_size():
    gaps = detect_gaps([
        trip(1, 0, 100, D1),
        trip(2, 150, 200, D2),   # 50 low
        trip(3, 800, 900, D3),   # 600 high
        trip(4, 1050, 1100, date(2024, 3, 9)),  # 150 medium
        trip(5, 1180, 1200, date(2024, 3, 10)),  # 80 low
    ])
    ordered = sort_gaps(gaps)
    assert [gap.unaccounted_km for gap in ordered] == [600, 150, 80, 50]


def test_vehicle_gaps_from_store(store, make_vehicle, make_trip):
    vehicle = make_vehicle()
    make_trip(vehicle, 1200, 1400, D2)
    first = make_trip(vehicle, 0, 1000, D1)

    gaps = detect_vehicle_gaps(store, vehicle.id)
    assert len(gaps) == 1
    assert gaps[0].previous_trip_id == first.id
    assert gaps[0].vehicle_id == vehicle.id


def test_vehicle_gaps_propagate_store_errors(db, make_vehicle):
    vehicle = make_vehicle()
    with pytest.raises(StoreReadError):
        detect_vehicle_gaps(FlakyStore(db, [vehicle.id]), vehicle.id)


def test_company_gaps_are_tagged_and_sorted(store, make_vehicle, make_trip):
    van = make_vehicle(name="Van", registration_number="V-1")
    truck = make_vehicle(name="Truck", registration_number="T-1")
    make_trip(van, 0, 100, D1)
    make_trip(van, 150, 200, D2)
    make_trip(truck, 0, 100, D1)
    make_trip(truck, 700, 800, D2)

    gaps = get_company_mileage_gaps(store, van.company_id)
    assert [gap.unaccounted_km for gap in gaps] == [600, 50]
    assert gaps[0].vehicle_name == "Truck"
    assert gaps[0].vehicle_registration == "T-1"
    assert gaps[1].vehicle_name == "Van"


def test_company_scan_skips_unreadable_vehicle(db, make_vehicle, make_trip):
    broken = make_vehicle(name="Broken", registration_number="B-1")
    healthy = make_vehicle(name="Healthy", registration_number="H-1")
    make_trip(broken, 0, 100, D1)
    make_trip(broken, 900, 1000, D2)
    make_trip(healthy, 0, 100, D1)
    make_trip(healthy, 300, 400, D2)

    gaps = get_company_mileage_gaps(FlakyStore(db, [broken.id]), healthy.company_id)
    assert len(gaps) == 1
    assert gaps[0].vehicle_id == healthy.id


def test_gap_preview(store, company, make_vehicle, make_trip):
    vehicle = make_vehicle()
    make_trip(vehicle, 0, 1000, D1)

    preview = preview_gap(store, vehicle.id, "1250", D2, company_id=company.id)
    assert preview.has_gap
    assert preview.unaccounted_km == 250
    assert preview.previous_end_mileage == 1000
    assert preview.days_between == 3
    assert preview.severity == GapSeverity.MEDIUM
    assert preview.warning.startswith("Mileage Gap Detected: 250 km")


def test_gap_preview_without_gap_or_input(store, make_vehicle, make_trip):
    vehicle = make_vehicle()
    assert not preview_gap(store, vehicle.id, 500, D1).has_gap

    make_trip(vehicle, 0, 1000, D1)
    assert not preview_gap(store, vehicle.id, 1000, D2).has_gap
    assert not preview_gap(store, vehicle.id, "", D2).has_gap
    assert not preview_gap(store, vehicle.id, 1500, None).has_gap
