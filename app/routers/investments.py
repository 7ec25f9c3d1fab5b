from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response

from app.dependencies import get_store
from app.schemas.investment import (
    InvestmentCreate,
    InvestmentResponse,
    InvestmentUpdate,
    InvestmentWithPerformanceResponse,
)
from app.services.store import PortfolioStore
from app.services.valuation import value_investment

router = APIRouter(prefix="/api/investments", tags=["investments"])


@router.post("", response_model=InvestmentResponse, status_code=201)
async def create_investment(investment_data: InvestmentCreate, store: PortfolioStore = Depends(get_store)):
    """Add an investment to a portfolio."""
    return await store.create_investment(investment_data.model_dump())


@router.get("/{investment_id}", response_model=InvestmentWithPerformanceResponse)
async def get_investment(investment_id: int, store: PortfolioStore = Depends(get_store)):
    """Get one investment with its value and return figures."""
    investment = await store.get_investment(investment_id)
    if not investment:
        raise HTTPException(status_code=404, detail="Investment not found")

    today = datetime.now(timezone.utc).date()
    closes = await store.get_previous_closes([investment.id], before=today)
    return InvestmentWithPerformanceResponse.model_validate(
        value_investment(investment, closes.get(investment.id))
    )


@router.patch("/{investment_id}", response_model=InvestmentResponse)
async def update_investment(
    investment_id: int,
    update_data: InvestmentUpdate,
    store: PortfolioStore = Depends(get_store),
):
    investment = await store.update_investment(
        investment_id, update_data.model_dump(exclude_unset=True, exclude_none=True)
    )
    if not investment:
        raise HTTPException(status_code=404, detail="Investment not found")
    return investment


@router.delete("/{investment_id}", status_code=204)
async def delete_investment(investment_id: int, store: PortfolioStore = Depends(get_store)):
    if not await store.delete_investment(investment_id):
        raise HTTPException(status_code=404, detail="Investment not found")
    return Response(status_code=204)
