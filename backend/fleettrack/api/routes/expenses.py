"""
Expense routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
from fleettrack.models.expense import Expense
from fleettrack.schemas.expense import ExpenseCreate, ExpenseResponse
from fleettrack.services.trip_store import TripRecordStore
from fleettrack.api.dependencies import get_store, check_company

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    store: TripRecordStore = Depends(get_store)
):
    """Record an expense against a vehicle."""
    vehicle = store.get_vehicle(expense_data.vehicle_id)
    if not vehicle or vehicle.company_id != expense_data.company_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    
    return store.save(Expense(**expense_data.model_dump()))


@router.get("/company/{company_id}", response_model=List[ExpenseResponse])
async def list_expenses(
    company_id: int,
    vehicle_id: Optional[int] = None,
    store: TripRecordStore = Depends(get_store)
):
    """All expenses of a company, newest first."""
    check_company(company_id, store)
    return store.list_expenses(company_id, vehicle_id)
