"""
Analytics service: dashboard summaries, trend series and vehicle alerts
derived from trip and expense records.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from fleettrack.core.config import settings
from fleettrack.core.errors import NotFoundError
from fleettrack.core.utils import to_number
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.time_ranges import resolve_time_range, filter_by_date_range
from fleettrack.services.calculations import (
    calculate_profit,
    calculate_total,
    calculate_average,
    calculate_profit_margin,
    aggregate_by_vehicle,
    aggregate_expenses_by_vehicle,
    aggregate_expenses_by_category,
    group_by_date,
    calculate_daily_totals,
    cumulative_series,
    find_top_performer,
    find_low_performer,
    trip_distance,
)

logger = logging.getLogger(__name__)


def summarize(trips: List[Any], expenses: List[Any]) -> Dict[str, float]:
    """Headline totals and averages for a set of trips and expenses."""
    total_cash_in = calculate_total(trip.cash_in for trip in trips)
    total_expenses = calculate_total(expense.amount for expense in expenses)
    total_profit = calculate_profit(total_cash_in, total_expenses)
    total_mileage = calculate_total(trip_distance(trip) for trip in trips)
    daily_mileage = calculate_daily_totals(group_by_date(trips), "distance_traveled")

    return {
        "total_cash_in": total_cash_in,
        "total_expenses": total_expenses,
        "total_profit": total_profit,
        "total_mileage": total_mileage,
        "avg_daily_cash_in": total_cash_in / len(trips) if trips else 0.0,
        "avg_daily_expenses": total_expenses / len(expenses) if expenses else 0.0,
        "avg_daily_mileage": calculate_average(point["total"] for point in daily_mileage),
        "profit_margin": calculate_profit_margin(total_profit, total_cash_in),
    }


def build_vehicle_metrics(vehicles: List[Any], trips: List[Any], expenses: List[Any]) -> Dict[int, Dict[str, Any]]:
    """Cash-in, expenses, profit and mileage for every vehicle, in vehicle order."""
    trips_by_vehicle = aggregate_by_vehicle(trips)
    expenses_by_vehicle = aggregate_expenses_by_vehicle(expenses)

    metrics = {}
    for vehicle in vehicles:
        trip_data = trips_by_vehicle.get(vehicle.id, {"total_cash_in": 0.0, "total_distance": 0.0, "entry_count": 0})
        expense_data = expenses_by_vehicle.get(vehicle.id, {"total_expenses": 0.0, "expense_count": 0})
        metrics[vehicle.id] = {
            "vehicle_id": vehicle.id,
            "vehicle_name": vehicle.name,
            "registration_number": vehicle.registration_number,
            "total_cash_in": trip_data["total_cash_in"],
            "total_expenses": expense_data["total_expenses"],
            "profit": calculate_profit(trip_data["total_cash_in"], expense_data["total_expenses"]),
            "total_mileage": trip_data["total_distance"],
            "entry_count": trip_data["entry_count"],
            "expense_count": expense_data["expense_count"],
        }
    return metrics


def build_profit_trend(trips: List[Any], expenses: List[Any]) -> Dict[str, List[Dict[str, Any]]]:
    """Daily cash-in, expense and profit series plus cumulative profit."""
    cash_in_trend = calculate_daily_totals(group_by_date(trips), "cash_in")
    expense_trend = calculate_daily_totals(group_by_date(expenses), "amount")

    cash_in_by_date = {point["date"]: point["total"] for point in cash_in_trend}
    expenses_by_date = {point["date"]: point["total"] for point in expense_trend}

    profit_trend = []
    for day in sorted(set(cash_in_by_date) | set(expenses_by_date)):
        cash_in = cash_in_by_date.get(day, 0.0)
        spent = expenses_by_date.get(day, 0.0)
        profit_trend.append({
            "date": day,
            "profit": calculate_profit(cash_in, spent),
            "cash_in": cash_in,
            "expenses": spent,
        })

    return {
        "profit": profit_trend,
        "cash_in": cash_in_trend,
        "expenses": expense_trend,
        "cumulative_profit": cumulative_series(profit_trend, key="profit"),
    }


def get_analytics_data(
    store: TripRecordStore,
    company_id: int,
    time_range: str = "all",
    today: Optional[date] = None
) -> Dict[str, Any]:
    """
    Full dashboard payload for a company.

    The time range only narrows the records; the aggregation itself is the
    same for every range.
    """
    start_date, end_date = resolve_time_range(time_range, today)

    vehicles = store.list_vehicles_for_company(company_id)
    trips = filter_by_date_range(store.list_trips_for_company(company_id), start_date, end_date)
    expenses = filter_by_date_range(store.list_expenses(company_id), start_date, end_date)

    logger.debug(f"Analytics for company {company_id} ({time_range}): {len(trips)} trips, {len(expenses)} expenses")
    vehicle_metrics = build_vehicle_metrics(vehicles, trips, expenses)

    return {
        "time_range": time_range,
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "summary": summarize(trips, expenses),
        "vehicle_metrics": vehicle_metrics,
        "top_performer": find_top_performer(vehicle_metrics, "profit"),
        "low_performer": find_low_performer(vehicle_metrics, "profit"),
        "trends": build_profit_trend(trips, expenses),
        "expenses_by_category": aggregate_expenses_by_category(expenses),
        "trip_count": len(trips),
        "expense_count": len(expenses),
        "vehicle_count": len(vehicles),
    }


def build_mileage_trends(trips: List[Any]) -> Dict[str, Any]:
    """Cumulative mileage per vehicle and for the whole fleet, by date."""
    trips_by_vehicle: Dict[Any, List[Any]] = {}
    for trip in trips:
        trips_by_vehicle.setdefault(trip.vehicle_id, []).append(trip)

    mileage_by_vehicle = {}
    for vehicle_id, vehicle_trips in trips_by_vehicle.items():
        daily = calculate_daily_totals(group_by_date(vehicle_trips), "distance_traveled")
        mileage_by_vehicle[vehicle_id] = cumulative_series(daily)

    fleet_daily = calculate_daily_totals(group_by_date(trips), "distance_traveled")
    return {
        "mileage_by_vehicle": mileage_by_vehicle,
        "cumulative_mileage": cumulative_series(fleet_daily),
    }


def get_mileage_trends(
    store: TripRecordStore,
    company_id: int,
    time_range: str = "all",
    today: Optional[date] = None
) -> Dict[str, Any]:
    start_date, end_date = resolve_time_range(time_range, today)
    trips = filter_by_date_range(store.list_trips_for_company(company_id), start_date, end_date)
    return build_mileage_trends(trips)


def calculate_period_totals(
    trips: List[Any],
    expenses: List[Any],
    days: int,
    today: Optional[date] = None
) -> Dict[str, float]:
    """Cash-in, expenses and profit over the trailing number of days."""
    today = today or date.today()
    start_date = today - timedelta(days=days)
    period_trips = filter_by_date_range(trips, start_date)
    period_expenses = filter_by_date_range(expenses, start_date)

    total_cash_in = calculate_total(trip.cash_in for trip in period_trips)
    total_expenses = calculate_total(expense.amount for expense in period_expenses)
    return {
        "total_cash_in": total_cash_in,
        "total_expenses": total_expenses,
        "total_profit": calculate_profit(total_cash_in, total_expenses),
    }


def get_period_totals(store: TripRecordStore, company_id: int, today: Optional[date] = None) -> Dict[str, Dict[str, float]]:
    """Weekly (7 day) and monthly (30 day) totals."""
    trips = store.list_trips_for_company(company_id)
    expenses = store.list_expenses(company_id)
    return {
        "weekly": calculate_period_totals(trips, expenses, 7, today),
        "monthly": calculate_period_totals(trips, expenses, 30, today),
    }


def build_service_alerts(vehicles: List[Any], trips: List[Any]) -> List[Dict[str, Any]]:
    """Vehicles whose mileage since last service reached their alert threshold."""
    distance_by_vehicle = aggregate_by_vehicle(trips)

    alerts = []
    for vehicle in vehicles:
        threshold = to_number(vehicle.service_alert_threshold)
        if not threshold:
            continue

        total_mileage = distance_by_vehicle.get(vehicle.id, {}).get("total_distance", 0.0)
        mileage_since_service = total_mileage - to_number(vehicle.last_service_mileage)
        if mileage_since_service >= threshold:
            critical = mileage_since_service >= threshold * settings.SERVICE_ALERT_CRITICAL_RATIO
            alerts.append({
                "vehicle_id": vehicle.id,
                "vehicle_name": vehicle.name,
                "registration_number": vehicle.registration_number,
                "current_mileage": total_mileage,
                "mileage_since_service": mileage_since_service,
                "threshold": threshold,
                "severity": "high" if critical else "medium",
            })
    return alerts


def get_service_alerts(store: TripRecordStore, company_id: int) -> List[Dict[str, Any]]:
    vehicles = store.list_vehicles_for_company(company_id)
    trips = store.list_trips_for_company(company_id)
    return build_service_alerts(vehicles, trips)


def acknowledge_service_alert(store: TripRecordStore, vehicle_id: int):
    """
    Record that a vehicle was serviced: its service counter restarts at the
    current total mileage, which clears any open service alert.
    """
    vehicle = store.get_vehicle(vehicle_id)
    if not vehicle:
        raise NotFoundError("Vehicle not found")

    trips = store.list_trips_for_vehicle(vehicle_id, vehicle.company_id)
    vehicle.last_service_mileage = calculate_total(trip_distance(trip) for trip in trips)
    store.save(vehicle)

    logger.info(f"Service counter of vehicle {vehicle_id} reset at {vehicle.last_service_mileage} km")
    return vehicle


def build_license_expiry_alerts(vehicles: List[Any], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Vehicles whose license is expired or expires within the warning window,
    expired first and then soonest first.
    """
    today = today or date.today()

    alerts = []
    for vehicle in vehicles:
        if not vehicle.license_expiry_date:
            continue

        days_until_expiry = (vehicle.license_expiry_date - today).days
        if days_until_expiry > settings.LICENSE_EXPIRY_WARNING_DAYS:
            continue

        if days_until_expiry < 0:
            severity = "critical"
        elif days_until_expiry <= 7:
            severity = "high"
        elif days_until_expiry <= 30:
            severity = "medium"
        else:
            severity = "low"

        alerts.append({
            "vehicle_id": vehicle.id,
            "vehicle_name": vehicle.name,
            "registration_number": vehicle.registration_number,
            "license_expiry_date": vehicle.license_expiry_date.isoformat(),
            "days_until_expiry": days_until_expiry,
            "severity": severity,
            "expired": days_until_expiry < 0,
        })

    alerts.sort(key=lambda alert: (not alert["expired"], alert["days_until_expiry"]))
    return alerts


def get_license_expiry_alerts(store: TripRecordStore, company_id: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    vehicles = store.list_vehicles_for_company(company_id)
    return build_license_expiry_alerts(vehicles, today)
