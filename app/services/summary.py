"""
Portfolio summary aggregation.

build_portfolio_summary() is a pure projection over already-fetched records;
SummaryService fetches those records through a PortfolioReader and hands
them over. Nothing here is cached or written back.

Asset allocation is ordered by value, largest first. Types with equal value
keep the order in which they first appear among the investments.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from app.exceptions import NotFoundError
from app.services.store import PortfolioReader
from app.services.valuation import ZERO, ValuedInvestment, percent_of, value_investment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformancePoint:
    date: str
    value: Decimal


@dataclass(frozen=True)
class AllocationSlice:
    type: str
    percentage: Decimal
    value: Decimal


@dataclass(frozen=True)
class PortfolioSummary:
    id: int
    name: str
    risk_level: str
    total_value: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    ytd_return: Decimal
    ytd_return_value: Decimal
    performance_data: List[PerformancePoint] = field(default_factory=list)
    asset_allocation: List[AllocationSlice] = field(default_factory=list)


def _as_utc(timestamp: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def sort_snapshots(snapshots: Iterable) -> list:
    return sorted(snapshots, key=lambda s: (_as_utc(s.timestamp), s.id or 0))


def calculate_daily_change(ordered_snapshots: Sequence) -> tuple:
    """Change between the two most recent snapshots, as (value, percent)."""
    if len(ordered_snapshots) < 2:
        return ZERO, percent_of(ZERO, ZERO)

    latest = Decimal(ordered_snapshots[-1].total_value)
    previous = Decimal(ordered_snapshots[-2].total_value)
    change = latest - previous
    return change, percent_of(change, previous)


def calculate_ytd_return(ordered_snapshots: Sequence, today: date) -> tuple:
    """
    Return since the first snapshot on or after January 1 of today's year,
    as (percent, value).
    """
    start_of_year = datetime(today.year, 1, 1, tzinfo=timezone.utc)
    ytd_start = next(
        (s for s in ordered_snapshots if _as_utc(s.timestamp) >= start_of_year),
        None,
    )
    if ytd_start is None:
        return percent_of(ZERO, ZERO), ZERO

    start_value = Decimal(ytd_start.total_value)
    return_value = Decimal(ordered_snapshots[-1].total_value) - start_value
    return percent_of(return_value, start_value), return_value


def calculate_asset_allocation(
    investments: Sequence[ValuedInvestment], total_value: Decimal
) -> List[AllocationSlice]:
    by_type: Dict[str, Decimal] = {}
    for investment in investments:
        by_type[investment.type] = by_type.get(investment.type, ZERO) + investment.value

    # sorted() is stable, so equal values keep first-seen order
    ordered = sorted(by_type.items(), key=lambda item: item[1], reverse=True)
    return [
        AllocationSlice(type=type_, percentage=percent_of(value, total_value), value=value)
        for type_, value in ordered
    ]


def build_portfolio_summary(
    portfolio,
    investments: Iterable,
    snapshots: Iterable,
    previous_closes: Optional[Dict[int, Decimal]] = None,
    today: Optional[date] = None,
) -> PortfolioSummary:
    today = today or datetime.now(timezone.utc).date()
    previous_closes = previous_closes or {}

    valued = [value_investment(i, previous_closes.get(i.id)) for i in investments]
    total_value = sum((v.value for v in valued), ZERO)

    ordered = sort_snapshots(snapshots)
    daily_change, daily_change_percent = calculate_daily_change(ordered)
    ytd_return, ytd_return_value = calculate_ytd_return(ordered, today)

    return PortfolioSummary(
        id=portfolio.id,
        name=portfolio.name,
        risk_level=portfolio.risk_level,
        total_value=total_value,
        daily_change=daily_change,
        daily_change_percent=daily_change_percent,
        ytd_return=ytd_return,
        ytd_return_value=ytd_return_value,
        performance_data=[
            PerformancePoint(date=_as_utc(s.timestamp).date().isoformat(), value=Decimal(s.total_value))
            for s in ordered
        ],
        asset_allocation=calculate_asset_allocation(valued, total_value),
    )


class SummaryService:
    def __init__(self, reader: PortfolioReader):
        self.reader = reader

    async def get_portfolio_summary(
        self, portfolio_id: int, today: Optional[date] = None
    ) -> PortfolioSummary:
        """Build the dashboard summary for one portfolio."""
        today = today or datetime.now(timezone.utc).date()

        portfolio = await self.reader.get_portfolio(portfolio_id)
        if portfolio is None:
            raise NotFoundError("Portfolio", portfolio_id)

        investments = await self.reader.get_investments(portfolio_id)
        snapshots = await self.reader.get_performance_snapshots(portfolio_id)
        previous_closes = await self.reader.get_previous_closes(
            [i.id for i in investments], before=today
        )

        summary = build_portfolio_summary(portfolio, investments, snapshots, previous_closes, today)
        logger.debug(
            f"Summary for portfolio {portfolio_id}: total={summary.total_value}, "
            f"{len(investments)} investments, {len(snapshots)} snapshots"
        )
        return summary

    async def get_valued_investments(
        self, portfolio_id: int, today: Optional[date] = None
    ) -> List[ValuedInvestment]:
        today = today or datetime.now(timezone.utc).date()

        portfolio = await self.reader.get_portfolio(portfolio_id)
        if portfolio is None:
            raise NotFoundError("Portfolio", portfolio_id)

        investments = await self.reader.get_investments(portfolio_id)
        previous_closes = await self.reader.get_previous_closes(
            [i.id for i in investments], before=today
        )
        return [value_investment(i, previous_closes.get(i.id)) for i in investments]
