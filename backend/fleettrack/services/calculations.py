"""
Calculation helpers for analytics and metrics.

Records may be ORM objects or plain dicts. Missing and non-numeric values
count as zero so that no aggregate ever becomes NaN.
"""
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional
from fleettrack.core.utils import to_date, to_number


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from an ORM object or a dict."""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def calculate_distance(start_mileage: Any, end_mileage: Any) -> float:
    """Distance travelled between two readings, never negative."""
    start = to_number(start_mileage)
    end = to_number(end_mileage)
    return max(0.0, end - start)


def trip_distance(trip: Any) -> float:
    """Stored distance of a trip, or the distance derived from its readings."""
    distance = get_field(trip, "distance_traveled")
    if distance is None:
        return calculate_distance(get_field(trip, "start_mileage"), get_field(trip, "end_mileage"))
    return to_number(distance)


def calculate_total(values: Iterable[Any]) -> float:
    if values is None:
        return 0.0
    return sum(to_number(value) for value in values)


def calculate_average(values: Iterable[Any]) -> float:
    values = list(values or [])
    if not values:
        return 0.0
    return calculate_total(values) / len(values)


def calculate_profit(cash_in: Any, expenses: Any) -> float:
    """Cash-in minus expenses; may be negative."""
    return to_number(cash_in) - to_number(expenses)


def calculate_profit_margin(profit: Any, cash_in: Any) -> float:
    """Profit as a fraction of cash-in, or 0 when there is no cash-in."""
    cash = to_number(cash_in)
    if cash == 0:
        return 0.0
    return to_number(profit) / cash


def aggregate_by_vehicle(trips: Iterable[Any]) -> Dict[Any, Dict[str, float]]:
    """Cash-in, distance and trip count per vehicle."""
    totals: Dict[Any, Dict[str, float]] = OrderedDict()
    for trip in trips or []:
        vehicle_id = get_field(trip, "vehicle_id")
        if vehicle_id not in totals:
            totals[vehicle_id] = {"total_cash_in": 0.0, "total_distance": 0.0, "entry_count": 0}
        totals[vehicle_id]["total_cash_in"] += to_number(get_field(trip, "cash_in"))
        totals[vehicle_id]["total_distance"] += trip_distance(trip)
        totals[vehicle_id]["entry_count"] += 1
    return totals


def aggregate_expenses_by_vehicle(expenses: Iterable[Any]) -> Dict[Any, Dict[str, float]]:
    """Expense total and count per vehicle."""
    totals: Dict[Any, Dict[str, float]] = OrderedDict()
    for expense in expenses or []:
        vehicle_id = get_field(expense, "vehicle_id")
        if vehicle_id not in totals:
            totals[vehicle_id] = {"total_expenses": 0.0, "expense_count": 0}
        totals[vehicle_id]["total_expenses"] += to_number(get_field(expense, "amount"))
        totals[vehicle_id]["expense_count"] += 1
    return totals


def aggregate_expenses_by_category(expenses: Iterable[Any]) -> Dict[str, float]:
    totals: Dict[str, float] = OrderedDict()
    for expense in expenses or []:
        category = get_field(expense, "category") or "Uncategorized"
        totals[category] = totals.get(category, 0.0) + to_number(get_field(expense, "amount"))
    return totals


def group_by_date(records: Iterable[Any], date_field: str = "date") -> Dict[str, List[Any]]:
    """Group records by ISO calendar date; records without a date are dropped."""
    grouped: Dict[str, List[Any]] = {}
    for record in records or []:
        value = get_field(record, date_field)
        if not value:
            continue
        grouped.setdefault(to_date(value).isoformat(), []).append(record)
    return grouped


def calculate_daily_totals(grouped: Dict[str, List[Any]], field: str) -> List[Dict[str, Any]]:
    """[{date, total}] ascending by date, summing field over each day's records."""
    return [
        {"date": day, "total": calculate_total(get_field(item, field) for item in items)}
        for day, items in sorted(grouped.items())
    ]


def cumulative_series(daily_totals: List[Dict[str, Any]], key: str = "total") -> List[Dict[str, Any]]:
    """Running totals over an ascending daily series."""
    running = 0.0
    series = []
    for point in sorted(daily_totals, key=lambda p: p["date"]):
        running += to_number(point.get(key))
        series.append({"date": point["date"], key: to_number(point.get(key)), "cumulative": running})
    return series


def find_top_performer(metrics: Dict[Any, Dict[str, Any]], metric: str = "profit") -> Optional[Any]:
    """Key with the highest metric; the first one seen wins ties."""
    top = None
    for key, data in (metrics or {}).items():
        if top is None or to_number(data.get(metric)) > to_number(metrics[top].get(metric)):
            top = key
    return top


def find_low_performer(metrics: Dict[Any, Dict[str, Any]], metric: str = "profit") -> Optional[Any]:
    """Key with the lowest metric; the first one seen wins ties."""
    low = None
    for key, data in (metrics or {}).items():
        if low is None or to_number(data.get(metric)) < to_number(metrics[low].get(metric)):
            low = key
    return low
