from fastapi import APIRouter, Depends, HTTPException, Query, Response
from typing import List, Optional

from app.config import get_settings
from app.dependencies import get_store, get_summary_service
from app.schemas.investment import InvestmentWithPerformanceResponse
from app.schemas.portfolio import (
    PerformanceCreate,
    PerformanceSnapshotResponse,
    PortfolioCreate,
    PortfolioResponse,
    PortfolioSummaryResponse,
    PortfolioUpdate,
)
from app.services.recorder import PerformanceRecorder
from app.services.store import PortfolioStore
from app.services.summary import SummaryService

router = APIRouter(prefix="/api/portfolios", tags=["portfolios"])


@router.get("", response_model=List[PortfolioResponse])
async def list_portfolios(
    user_id: Optional[int] = Query(default=None, description="Owner; defaults to the configured user"),
    store: PortfolioStore = Depends(get_store),
):
    """List portfolios owned by a user."""
    if user_id is None:
        user_id = get_settings().default_user_id
    return await store.list_portfolios(user_id)


@router.post("", response_model=PortfolioResponse, status_code=201)
async def create_portfolio(portfolio_data: PortfolioCreate, store: PortfolioStore = Depends(get_store)):
    user_id = portfolio_data.user_id
    if user_id is None:
        user_id = get_settings().default_user_id
    return await store.create_portfolio(user_id, portfolio_data.name, portfolio_data.risk_level)


@router.get("/{portfolio_id}", response_model=PortfolioResponse)
async def get_portfolio(portfolio_id: int, store: PortfolioStore = Depends(get_store)):
    portfolio = await store.get_portfolio(portfolio_id)
    if not portfolio:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return portfolio


@router.patch("/{portfolio_id}", response_model=PortfolioResponse)
async def update_portfolio(
    portfolio_id: int,
    update_data: PortfolioUpdate,
    store: PortfolioStore = Depends(get_store),
):
    """Update name, risk level or owner of a portfolio."""
    portfolio = await store.update_portfolio(
        portfolio_id, update_data.model_dump(exclude_unset=True, exclude_none=True)
    )
    if not portfolio:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return portfolio


@router.delete("/{portfolio_id}", status_code=204)
async def delete_portfolio(portfolio_id: int, store: PortfolioStore = Depends(get_store)):
    """Delete a portfolio together with its investments and performance history."""
    if not await store.delete_portfolio(portfolio_id):
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return Response(status_code=204)


@router.get("/{portfolio_id}/summary", response_model=PortfolioSummaryResponse)
async def get_portfolio_summary(
    portfolio_id: int,
    summary_service: SummaryService = Depends(get_summary_service),
):
    """Dashboard summary: value, daily and YTD change, history and allocation."""
    summary = await summary_service.get_portfolio_summary(portfolio_id)
    return PortfolioSummaryResponse.model_validate(summary)


@router.get("/{portfolio_id}/investments", response_model=List[InvestmentWithPerformanceResponse])
async def list_portfolio_investments(
    portfolio_id: int,
    summary_service: SummaryService = Depends(get_summary_service),
):
    """List investments of a portfolio with value and return figures."""
    investments = await summary_service.get_valued_investments(portfolio_id)
    return [InvestmentWithPerformanceResponse.model_validate(i) for i in investments]


@router.get("/{portfolio_id}/performance", response_model=List[PerformanceSnapshotResponse])
async def get_performance_history(portfolio_id: int, store: PortfolioStore = Depends(get_store)):
    """Performance snapshots, oldest first."""
    if not await store.get_portfolio(portfolio_id):
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return await store.get_performance_snapshots(portfolio_id)


@router.post("/{portfolio_id}/performance", response_model=PerformanceSnapshotResponse, status_code=201)
async def add_performance_snapshot(
    portfolio_id: int,
    performance_data: PerformanceCreate,
    store: PortfolioStore = Depends(get_store),
):
    """Append a performance data point."""
    return await store.add_performance_snapshot(
        portfolio_id, performance_data.total_value, timestamp=performance_data.timestamp
    )


@router.post("/{portfolio_id}/performance/record", response_model=PerformanceSnapshotResponse, status_code=201)
async def record_performance(portfolio_id: int, store: PortfolioStore = Depends(get_store)):
    """Snapshot the portfolio's current value and record the latest closing prices."""
    recorder = PerformanceRecorder(store, close_hour_utc=get_settings().market_close_hour_utc)
    return await recorder.record_portfolio(portfolio_id)
