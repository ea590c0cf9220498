"""
Tests for analytics calculations, time ranges and alerts.
"""
import pytest
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace
from fleettrack.core.errors import NotFoundError
from fleettrack.models import Expense
from fleettrack.services.calculations import (
    calculate_distance,
    calculate_profit_margin,
    calculate_total,
    aggregate_expenses_by_category,
    cumulative_series,
    find_top_performer,
    find_low_performer,
)
from fleettrack.services.time_ranges import resolve_time_range, filter_by_date_range
from fleettrack.services.analytics_service import (
    acknowledge_service_alert,
    build_license_expiry_alerts,
    build_mileage_trends,
    build_service_alerts,
    calculate_period_totals,
    get_analytics_data,
    get_service_alerts,
)

TODAY = date(2024, 3, 13)  # a Wednesday


def test_missing_values_count_as_zero():
    assert calculate_total([1, None, "abc", float("nan"), "2.5"]) == 3.5
    assert calculate_total(None) == 0
    assert calculate_distance(None, 100) == 100
    assert calculate_distance(200, 100) == 0


def test_profit_margin_guards_zero_cash_in():
    assert calculate_profit_margin(50, 0) == 0
    assert calculate_profit_margin(-50, None) == 0
    assert calculate_profit_margin(25, 100) == 0.25


def test_performer_ties_go_to_first_seen():
    metrics = {7: {"profit": 10}, 3: {"profit": 10}, 9: {"profit": 10}}
    assert find_top_performer(metrics) == 7
    assert find_low_performer(metrics) == 7

    metrics = {1: {"profit": 5}, 2: {"profit": 20}, 3: {"profit": -4}}
    assert find_top_performer(metrics) == 2
    assert find_low_performer(metrics) == 3
    assert find_top_performer({}) is None


def test_cumulative_series_runs_in_date_order():
    series = cumulative_series([
        {"date": "2024-03-02", "total": 5},
        {"date": "2024-03-01", "total": 10},
        {"date": "2024-03-03", "total": None},
    ])
    assert [point["date"] for point in series] == ["2024-03-01", "2024-03-02", "2024-03-03"]
    assert [point["cumulative"] for point in series] == [10, 15, 15]


def test_expenses_by_category():
    totals = aggregate_expenses_by_category([
        {"category": "Fuel", "amount": 100},
        {"category": "Fuel", "amount": "50"},
        {"category": None, "amount": 20},
    ])
    assert totals == {"Fuel": 150, "Uncategorized": 20}


@pytest.mark.parametrize("time_range,expected", [
    ("today", (date(2024, 3, 13), date(2024, 3, 13))),
    ("yesterday", (date(2024, 3, 12), date(2024, 3, 12))),
    ("thisWeek", (date(2024, 3, 11), date(2024, 3, 13))),
    ("lastWeek", (date(2024, 3, 4), date(2024, 3, 10))),
    ("thisMonth", (date(2024, 3, 1), date(2024, 3, 13))),
    ("lastMonth", (date(2024, 2, 1), date(2024, 2, 29))),
    ("last7Days", (date(2024, 3, 7), date(2024, 3, 13))),
    ("last30Days", (date(2024, 2, 13), date(2024, 3, 13))),
    ("thisYear", (date(2024, 1, 1), date(2024, 3, 13))),
    ("all", (None, None)),
])
def test_resolve_time_range(time_range, expected):
    assert resolve_time_range(time_range, TODAY) == expected


def test_unknown_time_range_rejected():
    with pytest.raises(ValueError):
        resolve_time_range("fortnight", TODAY)


def test_filter_by_date_range_is_inclusive():
    records = [{"date": date(2024, 3, day)} for day in (1, 5, 10)]
    filtered = filter_by_date_range(records, date(2024, 3, 5), date(2024, 3, 10))
    assert [record["date"].day for record in filtered] == [5, 10]
    assert filter_by_date_range(records) == records


def test_analytics_for_time_range(store, company, make_vehicle, make_trip):
    van = make_vehicle(name="Van", registration_number="V-1")
    truck = make_vehicle(name="Truck", registration_number="T-1")
    make_trip(van, 0, 100, date(2024, 3, 1), cash_in="500")
    make_trip(van, 100, 250, date(2024, 3, 4), cash_in="300")
    make_trip(truck, 0, 50, date(2024, 3, 4), cash_in="100")
    make_trip(truck, 0, 10, date(2024, 2, 20), cash_in="999")
    store.save(Expense(company_id=company.id, vehicle_id=van.id, date=date(2024, 3, 2),
                       amount=Decimal("200"), category="Fuel"))
    store.save(Expense(company_id=company.id, vehicle_id=truck.id, date=date(2024, 3, 4),
                       amount=Decimal("50"), category="Tolls"))

    data = get_analytics_data(store, company.id, "thisMonth", today=TODAY)

    assert data["start_date"] == "2024-03-01"
    assert data["trip_count"] == 3
    summary = data["summary"]
    assert summary["total_cash_in"] == 900
    assert summary["total_expenses"] == 250
    assert summary["total_profit"] == 650
    assert summary["total_mileage"] == 300
    assert summary["avg_daily_cash_in"] == 300
    assert summary["avg_daily_expenses"] == 125
    assert summary["avg_daily_mileage"] == 150
    assert summary["profit_margin"] == pytest.approx(650 / 900)

    assert data["vehicle_metrics"][van.id]["profit"] == 600
    assert data["vehicle_metrics"][truck.id]["profit"] == 50
    assert data["top_performer"] == van.id
    assert data["low_performer"] == truck.id

    profit = data["trends"]["profit"]
    assert [point["date"] for point in profit] == ["2024-03-01", "2024-03-02", "2024-03-04"]
    assert [point["profit"] for point in profit] == [500, -200, 350]
    assert [point["cumulative"] for point in data["trends"]["cumulative_profit"]] == [500, 300, 650]
    assert data["expenses_by_category"] == {"Fuel": 200, "Tolls": 50}


def test_analytics_for_empty_company(store, company):
    data = get_analytics_data(store, company.id)
    assert data["summary"]["total_profit"] == 0
    assert data["summary"]["profit_margin"] == 0
    assert data["top_performer"] is None
    assert data["trends"]["profit"] == []


def test_mileage_trends_are_cumulative():
    trips = [
        SimpleNamespace(vehicle_id=1, date=date(2024, 3, 1), distance_traveled=100),
        SimpleNamespace(vehicle_id=1, date=date(2024, 3, 2), distance_traveled=50),
        SimpleNamespace(vehicle_id=2, date=date(2024, 3, 2), distance_traveled=30),
    ]
    trends = build_mileage_trends(trips)

    assert [point["cumulative"] for point in trends["mileage_by_vehicle"][1]] == [100, 150]
    assert [point["cumulative"] for point in trends["mileage_by_vehicle"][2]] == [30]
    assert [point["cumulative"] for point in trends["cumulative_mileage"]] == [100, 180]


def test_period_totals():
    trips = [
        SimpleNamespace(date=TODAY - timedelta(days=3), cash_in=Decimal("100")),
        SimpleNamespace(date=TODAY - timedelta(days=20), cash_in=Decimal("50")),
    ]
    expenses = [SimpleNamespace(date=TODAY - timedelta(days=1), amount=Decimal("30"))]

    weekly = calculate_period_totals(trips, expenses, 7, TODAY)
    assert weekly == {"total_cash_in": 100, "total_expenses": 30, "total_profit": 70}

    monthly = calculate_period_totals(trips, expenses, 30, TODAY)
    assert monthly["total_profit"] == 120


def test_service_alerts():
    vehicles = [
        SimpleNamespace(id=1, name="A", registration_number="A-1", service_alert_threshold=1000, last_service_mileage=0),
        SimpleNamespace(id=2, name="B", registration_number="B-1", service_alert_threshold=1000, last_service_mileage=0),
        SimpleNamespace(id=3, name="C", registration_number="C-1", service_alert_threshold=1000, last_service_mileage=500),
        SimpleNamespace(id=4, name="D", registration_number="D-1", service_alert_threshold=None, last_service_mileage=0),
    ]
    trips = [
        SimpleNamespace(vehicle_id=1, cash_in=0, distance_traveled=1300),
        SimpleNamespace(vehicle_id=2, cash_in=0, distance_traveled=1100),
        SimpleNamespace(vehicle_id=3, cash_in=0, distance_traveled=1100),
        SimpleNamespace(vehicle_id=4, cash_in=0, distance_traveled=9000),
    ]
    alerts = build_service_alerts(vehicles, trips)

    assert [(alert["vehicle_id"], alert["severity"]) for alert in alerts] == [(1, "high"), (2, "medium")]
    assert alerts[0]["mileage_since_service"] == 1300


def test_license_expiry_alerts():
    def vehicle(id, days):
        expiry = TODAY + timedelta(days=days) if days is not None else None
        return SimpleNamespace(id=id, name=f"V{id}", registration_number=f"R-{id}", license_expiry_date=expiry)

    alerts = build_license_expiry_alerts([
        vehicle(1, 45),
        vehicle(2, 5),
        vehicle(3, -1),
        vehicle(4, 90),
        vehicle(5, None),
        vehicle(6, 20),
    ], TODAY)

    assert [alert["vehicle_id"] for alert in alerts] == [3, 2, 6, 1]
    assert [alert["severity"] for alert in alerts] == ["critical", "high", "medium", "low"]
    assert alerts[0]["expired"] is True


def test_acknowledging_service_alert_resets_counter(store, company, make_vehicle, make_trip):
    vehicle = make_vehicle(service_alert_threshold=1000, last_service_mileage=0)
    make_trip(vehicle, 0, 700, date(2024, 3, 1))
    make_trip(vehicle, 700, 1300, date(2024, 3, 2))
    assert [alert["vehicle_id"] for alert in get_service_alerts(store, company.id)] == [vehicle.id]

    serviced = acknowledge_service_alert(store, vehicle.id)

    assert serviced.last_service_mileage == 1300
    assert get_service_alerts(store, company.id) == []


def test_acknowledging_service_alert_for_missing_vehicle(store):
    with pytest.raises(NotFoundError):
        acknowledge_service_alert(store, 999)
