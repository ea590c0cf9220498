"""
Vehicle model for fleet registration.
"""
from sqlalchemy import Column, String, Float, Date, ForeignKey, Integer
from sqlalchemy.orm import relationship
from fleettrack.db.base import BaseModel


class Vehicle(BaseModel):
    """Vehicle registered to a company."""
    __tablename__ = "vehicles"
    
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    registration_number = Column(String(50), nullable=False, index=True)
    last_service_mileage = Column(Float, nullable=False, default=0)  # Counter reset point at last service
    service_alert_threshold = Column(Float, nullable=True)  # km between services, None = no alerts
    license_expiry_date = Column(Date, nullable=True)
    
    # Relationships
    company = relationship("Company", back_populates="vehicles")
    trips = relationship("TripRecord", back_populates="vehicle", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="vehicle", cascade="all, delete-orphan")
