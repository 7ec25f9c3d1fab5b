import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from app.exceptions import NotFoundError
from app.models import PerformanceSnapshot
from app.services.store import PortfolioStore
from app.services.valuation import ZERO, value_investment

logger = logging.getLogger(__name__)

# 16:00 New York during daylight time
DEFAULT_CLOSE_HOUR_UTC = 21


def trading_date_for(moment: datetime, close_hour_utc: int = DEFAULT_CLOSE_HOUR_UTC) -> date:
    """
    Date whose close a price captured at `moment` represents. Before the
    close hour the latest price is still the previous day's close.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    if moment.hour < close_hour_utc:
        return (moment - timedelta(days=1)).date()
    return moment.date()


class PerformanceRecorder:
    """Appends performance snapshots and closing prices from current investment values."""

    def __init__(self, store: PortfolioStore, close_hour_utc: int = DEFAULT_CLOSE_HOUR_UTC):
        self.store = store
        self.close_hour_utc = close_hour_utc

    async def record_portfolio(
        self, portfolio_id: int, now: Optional[datetime] = None
    ) -> PerformanceSnapshot:
        """
        Record the latest close for every investment in the portfolio and
        append a snapshot of its current total value.
        """
        now = now or datetime.now(timezone.utc)

        if await self.store.get_portfolio(portfolio_id) is None:
            raise NotFoundError("Portfolio", portfolio_id)

        investments = await self.store.get_investments(portfolio_id)
        closes = {}
        total_value = ZERO
        for investment in investments:
            closes[investment.id] = Decimal(investment.current_price)
            total_value += value_investment(investment).value

        return await self.store.record_performance(
            portfolio_id,
            closes,
            close_date=trading_date_for(now, self.close_hour_utc),
            total_value=total_value,
            timestamp=now,
        )

    async def record_all_portfolios(self, now: Optional[datetime] = None) -> List[PerformanceSnapshot]:
        """Record every portfolio; a failure on one is logged and skipped."""
        now = now or datetime.now(timezone.utc)
        snapshots = []

        for portfolio in await self.store.list_all_portfolios():
            try:
                snapshots.append(await self.record_portfolio(portfolio.id, now=now))
            except Exception as e:
                logger.error(f"Failed to record performance for portfolio {portfolio.id}: {e}", exc_info=True)

        logger.info(f"Recorded performance for {len(snapshots)} portfolios")
        return snapshots
