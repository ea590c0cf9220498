"""
Pydantic schemas for mileage validation, gaps and acknowledgements.
"""
from pydantic import BaseModel
from typing import Optional, Union
from datetime import date as dt_date, datetime
import enum


class ValidationReason(str, enum.Enum):
    """Why a proposed set of odometer readings was rejected."""
    NON_NUMERIC = "non_numeric"
    NEGATIVE_MILEAGE = "negative_mileage"
    END_NOT_AFTER_START = "end_not_after_start"
    ODOMETER_REGRESSION = "odometer_regression"
    BACKDATED_ENTRY = "backdated_entry"
    SUCCESSOR_REGRESSION = "successor_regression"
    IMPLAUSIBLE_DISTANCE = "implausible_distance"


class MileageValidationResult(BaseModel):
    """Outcome of a mileage check: invalid, valid with warning, or valid."""
    is_valid: bool
    reason: Optional[ValidationReason] = None
    message: Optional[str] = None
    warning: Optional[str] = None
    
    @property
    def has_warning(self) -> bool:
        return self.is_valid and self.warning is not None


class MileageCheckRequest(BaseModel):
    """Schema for the interactive mileage check on the entry form."""
    vehicle_id: int
    start_mileage: Optional[Union[float, str]] = None
    end_mileage: Optional[Union[float, str]] = None
    date: Optional[dt_date] = None
    exclude_trip_id: Optional[int] = None  # Trip being edited


class GapSeverity(str, enum.Enum):
    """Severity bucket of an unaccounted mileage gap."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    
    @property
    def rank(self) -> int:
        return {"low": 1, "medium": 2, "high": 3}[self.value]


class MileageGap(BaseModel):
    """Unaccounted distance between two consecutive trips of one vehicle."""
    id: str  # "<previous_trip_id>-<current_trip_id>"
    vehicle_id: int
    previous_trip_id: int
    current_trip_id: int
    previous_date: dt_date
    current_date: dt_date
    previous_end_mileage: float
    current_start_mileage: float
    unaccounted_km: float
    days_between: int
    severity: GapSeverity
    detected_at: datetime
    vehicle_name: Optional[str] = None
    vehicle_registration: Optional[str] = None
    acknowledged: bool = False


class GapStats(BaseModel):
    """Summary of outstanding (unacknowledged) gaps for a company."""
    total_gaps: int = 0
    total_unaccounted_km: float = 0.0
    high_severity_count: int = 0
    medium_severity_count: int = 0
    low_severity_count: int = 0
    affected_vehicles: int = 0
    average_gap_size: float = 0.0


class GapPreviewRequest(BaseModel):
    """Schema for previewing the gap a new entry would open."""
    vehicle_id: int
    company_id: int
    start_mileage: Optional[Union[float, str]] = None
    date: Optional[dt_date] = None


class GapPreview(BaseModel):
    """Gap a proposed entry would create against the vehicle's latest trip."""
    has_gap: bool
    unaccounted_km: Optional[float] = None
    previous_end_mileage: Optional[float] = None
    previous_date: Optional[dt_date] = None
    days_between: Optional[int] = None
    severity: Optional[GapSeverity] = None
    warning: Optional[str] = None


class AcknowledgementStatus(str, enum.Enum):
    """Result of looking up a gap in the acknowledgement ledger."""
    ACKNOWLEDGED = "acknowledged"
    NOT_ACKNOWLEDGED = "not_acknowledged"
    UNKNOWN = "unknown"  # Lookup failed


class AcknowledgementCreate(BaseModel):
    """Schema for acknowledging a gap."""
    reviewer_id: str
    note: str = ""


class AcknowledgementResponse(BaseModel):
    """Schema for acknowledgement response."""
    gap_id: str
    company_id: Optional[int] = None
    acknowledged_by: str
    acknowledged_at: datetime
    note: str
    
    class Config:
        from_attributes = True
