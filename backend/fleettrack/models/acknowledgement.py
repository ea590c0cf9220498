"""
Gap acknowledgement model: a manager's review of a detected mileage gap.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.sql import func
from fleettrack.db.base import Base


class GapAcknowledgement(Base):
    """
    Ledger entry keyed by gap id ("<previous trip id>-<current trip id>").
    Gaps are never stored; this row is the only persisted trace of one.
    """
    __tablename__ = "gap_acknowledgements"
    
    gap_id = Column(String(64), primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    acknowledged_by = Column(String(64), nullable=False)
    acknowledged_at = Column(DateTime, nullable=False, server_default=func.now())
    note = Column(Text, nullable=False, default="")
