"""
Pydantic schemas for TripRecord entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date as dt_date, datetime
from decimal import Decimal


class TripBase(BaseModel):
    """Base trip schema."""
    vehicle_id: int
    date: dt_date
    start_mileage: float
    end_mileage: float
    cash_in: Decimal = Field(default=Decimal("0"), ge=0)
    driver_id: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    notes: Optional[str] = None


class TripCreate(TripBase):
    """Schema for trip creation."""
    company_id: int


class TripUpdate(BaseModel):
    """Schema for trip update."""
    vehicle_id: Optional[int] = None
    date: Optional[dt_date] = None
    start_mileage: Optional[float] = None
    end_mileage: Optional[float] = None
    cash_in: Optional[Decimal] = Field(default=None, ge=0)
    driver_id: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    notes: Optional[str] = None


class TripResponse(TripBase):
    """Schema for trip response."""
    id: int
    company_id: int
    distance_traveled: float
    created_at: datetime
    updated_at: datetime
    warning: Optional[str] = None  # Non-blocking mileage warning from the write
    
    class Config:
        from_attributes = True
