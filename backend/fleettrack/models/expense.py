"""
Expense model for tracking vehicle spending.
"""
from sqlalchemy import Column, String, Numeric, Date, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from fleettrack.db.base import BaseModel


class Expense(BaseModel):
    """Expense model representing a single spending event for a vehicle."""
    __tablename__ = "expenses"
    
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    category = Column(String(50), nullable=False, default="Other")
    description = Column(Text, nullable=True)
    
    # Relationships
    vehicle = relationship("Vehicle", back_populates="expenses")
