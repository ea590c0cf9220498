"""
Gap statistics for the unaccounted-mileage dashboard.
"""
from typing import Iterable
from fleettrack.schemas.mileage import GapSeverity, GapStats, MileageGap
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.services.gap_detection_service import get_company_mileage_gaps_filtered


def compute_gap_stats(gaps: Iterable[MileageGap]) -> GapStats:
    """Reduce a gap list to totals, severity counts and affected vehicles."""
    gaps = list(gaps)
    if not gaps:
        return GapStats()

    total_km = sum(gap.unaccounted_km for gap in gaps)
    return GapStats(
        total_gaps=len(gaps),
        total_unaccounted_km=total_km,
        high_severity_count=sum(1 for gap in gaps if gap.severity == GapSeverity.HIGH),
        medium_severity_count=sum(1 for gap in gaps if gap.severity == GapSeverity.MEDIUM),
        low_severity_count=sum(1 for gap in gaps if gap.severity == GapSeverity.LOW),
        affected_vehicles=len({gap.vehicle_id for gap in gaps}),
        average_gap_size=total_km / len(gaps)
    )


def get_mileage_gap_stats(store: TripRecordStore, company_id: int) -> GapStats:
    """Statistics over the company's outstanding gaps only."""
    gaps = get_company_mileage_gaps_filtered(store, company_id, include_acknowledged=False)
    return compute_gap_stats(gaps)
