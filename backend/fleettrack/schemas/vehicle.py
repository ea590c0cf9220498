"""
Pydantic schemas for Company and Vehicle entities.
"""
from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime


class CompanyCreate(BaseModel):
    """Schema for company creation."""
    name: str


class CompanyResponse(CompanyCreate):
    """Schema for company response."""
    id: int
    created_at: datetime
    
    class Config:
        from_attributes = True


class VehicleBase(BaseModel):
    """Base vehicle schema."""
    name: str
    registration_number: str
    last_service_mileage: float = 0
    service_alert_threshold: Optional[float] = None
    license_expiry_date: Optional[date] = None


class VehicleCreate(VehicleBase):
    """Schema for vehicle creation."""
    company_id: int


class VehicleResponse(VehicleBase):
    """Schema for vehicle response."""
    id: int
    company_id: int
    created_at: datetime
    
    class Config:
        from_attributes = True


class LastUsedResponse(BaseModel):
    """Most recent driver/vehicle pairing found in trip history."""
    vehicle_id: Optional[int] = None
    driver_id: Optional[str] = None
