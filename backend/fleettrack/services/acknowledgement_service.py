"""
Acknowledgement ledger: records that a manager reviewed a mileage gap.
"""
import logging
from typing import List
from fleettrack.core.errors import StoreReadError
from fleettrack.models.acknowledgement import GapAcknowledgement
from fleettrack.schemas.mileage import AcknowledgementStatus, MileageGap
from fleettrack.services.trip_store import TripRecordStore

logger = logging.getLogger(__name__)


class AcknowledgementLedger:
    """
    Ledger entries are keyed by gap id, i.e. by the pair of adjacent trips.
    An entry keeps suppressing its gap while the same two trips stay adjacent,
    even if an edit changes the gap's size.
    """

    def __init__(self, store: TripRecordStore):
        self.store = store

    def acknowledge(self, gap_id: str, reviewer_id: str, note: str = "", company_id: int = None) -> GapAcknowledgement:
        """Create the ledger entry for a gap, overwriting any earlier one."""
        entry = self.store.put_acknowledgement(gap_id, reviewer_id, note, company_id=company_id)
        logger.info(f"Gap {gap_id} acknowledged by {reviewer_id}")
        return entry

    def status(self, gap_id: str) -> AcknowledgementStatus:
        """Look up a gap, reporting UNKNOWN instead of raising when the store fails."""
        try:
            entry = self.store.get_acknowledgement(gap_id)
        except StoreReadError:
            logger.warning(f"Acknowledgement status of gap {gap_id} is unknown")
            return AcknowledgementStatus.UNKNOWN
        if entry is None:
            return AcknowledgementStatus.NOT_ACKNOWLEDGED
        return AcknowledgementStatus.ACKNOWLEDGED

    def is_acknowledged(self, gap_id: str) -> bool:
        return self.status(gap_id) == AcknowledgementStatus.ACKNOWLEDGED

    def mark(self, gaps: List[MileageGap]) -> List[MileageGap]:
        """
        Return copies of gaps with the acknowledged flag set from the ledger.
        If the ledger cannot be read, every gap is reported as not acknowledged.
        """
        try:
            acknowledged_ids = self.store.get_acknowledged_ids(gap.id for gap in gaps)
        except StoreReadError:
            logger.warning(f"Could not read acknowledgements for {len(gaps)} gaps; showing all as outstanding")
            acknowledged_ids = set()
        return [
            gap.model_copy(update={"acknowledged": gap.id in acknowledged_ids})
            for gap in gaps
        ]

    def filter_unacknowledged(self, gaps: List[MileageGap]) -> List[MileageGap]:
        """Keep only gaps without a ledger entry, preserving order."""
        return [gap for gap in self.mark(gaps) if not gap.acknowledged]
