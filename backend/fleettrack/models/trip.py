"""
Trip record model: one vehicle usage event with odometer readings.
"""
from sqlalchemy import Column, String, Float, Numeric, Date, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from fleettrack.db.base import BaseModel


class TripRecord(BaseModel):
    """A single trip of a vehicle, captured on the daily entry form."""
    __tablename__ = "trip_records"
    
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    driver_id = Column(String(64), nullable=True, index=True)  # User reference owned by the auth layer
    date = Column(Date, nullable=False, index=True)
    start_mileage = Column(Float, nullable=False)
    end_mileage = Column(Float, nullable=False)
    distance_traveled = Column(Float, nullable=False)  # Always end_mileage - start_mileage
    cash_in = Column(Numeric(15, 2), nullable=False, default=0)
    start_location = Column(String(200), nullable=True)
    end_location = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    
    # Relationships
    vehicle = relationship("Vehicle", back_populates="trips")
    
    def set_mileage(self, start_mileage: float, end_mileage: float):
        """Set both odometer readings and recompute the distance."""
        self.start_mileage = start_mileage
        self.end_mileage = end_mileage
        self.distance_traveled = end_mileage - start_mileage
