"""
Company model: the tenant that owns vehicles, trips and expenses.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from fleettrack.db.base import BaseModel


class Company(BaseModel):
    """Company model."""
    __tablename__ = "companies"
    
    name = Column(String(200), nullable=False)
    
    # Relationships
    vehicles = relationship("Vehicle", back_populates="company", cascade="all, delete-orphan")
