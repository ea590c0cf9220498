"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date as dt_date, datetime
from decimal import Decimal


class ExpenseBase(BaseModel):
    """Base expense schema."""
    vehicle_id: int
    date: dt_date
    amount: Decimal = Field(gt=0)
    category: str = "Other"
    description: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    """Schema for expense creation."""
    company_id: int


class ExpenseResponse(ExpenseBase):
    """Schema for expense response."""
    id: int
    company_id: int
    created_at: datetime
    
    class Config:
        from_attributes = True
