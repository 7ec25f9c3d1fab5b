"""
Entity store backed by an async SQLAlchemy session.

PortfolioReader is the read contract the summary engine depends on;
PortfolioStore implements it together with the CRUD operations used by the
routers and the performance recorder. Database failures surface as
StoreError, missing parents as NotFoundError.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol, Sequence

from passlib.hash import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DuplicateError, NotFoundError, StoreError
from app.models import Investment, PerformanceSnapshot, Portfolio, PriceClose, User

logger = logging.getLogger(__name__)


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops the offset of aware datetimes, so store the UTC instant
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc)
    return value


class PortfolioReader(Protocol):
    async def get_portfolio(self, portfolio_id: int) -> Optional[Portfolio]: ...

    async def get_investments(self, portfolio_id: int) -> List[Investment]: ...

    async def get_performance_snapshots(self, portfolio_id: int) -> List[PerformanceSnapshot]: ...

    async def get_previous_closes(
        self, investment_ids: Sequence[int], before: date
    ) -> Dict[int, Decimal]: ...


class PortfolioStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _reading(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}: {e}")
            raise StoreError(f"Failed to {action}") from e

    @asynccontextmanager
    async def _writing(self, action: str):
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StoreError(f"Failed to {action}") from e

    async def _reload(self, instance, action: str):
        async with self._reading(action):
            await self.db.refresh(instance)

    # Users

    async def get_user(self, user_id: int) -> Optional[User]:
        async with self._reading("load user"):
            return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with self._reading("load user"):
            result = await self.db.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()

    async def create_user(self, username: str, password: str) -> User:
        user = User(username=username, password_hash=bcrypt.hash(password))
        try:
            async with self._writing("create user"):
                self.db.add(user)
                await self.db.flush()
        except StoreError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateError(f"Username '{username}' is already taken") from e.__cause__
            raise
        await self._reload(user, "reload user")
        logger.info(f"User created: id={user.id}, username={user.username}")
        return user

    # Portfolios

    async def list_portfolios(self, user_id: int) -> List[Portfolio]:
        async with self._reading("list portfolios"):
            result = await self.db.execute(
                select(Portfolio).where(Portfolio.user_id == user_id).order_by(Portfolio.id)
            )
            return list(result.scalars().all())

    async def get_portfolio(self, portfolio_id: int) -> Optional[Portfolio]:
        async with self._reading("load portfolio"):
            return await self.db.get(Portfolio, portfolio_id)

    async def create_portfolio(self, user_id: int, name: str, risk_level: str) -> Portfolio:
        if await self.get_user(user_id) is None:
            raise NotFoundError("User", user_id)

        portfolio = Portfolio(user_id=user_id, name=name, risk_level=risk_level)
        async with self._writing("create portfolio"):
            self.db.add(portfolio)
        await self._reload(portfolio, "reload portfolio")
        logger.info(f"Portfolio created: id={portfolio.id}, name={portfolio.name}")
        return portfolio

    async def update_portfolio(self, portfolio_id: int, changes: Dict[str, Any]) -> Optional[Portfolio]:
        portfolio = await self.get_portfolio(portfolio_id)
        if portfolio is None:
            return None

        if "user_id" in changes and await self.get_user(changes["user_id"]) is None:
            raise NotFoundError("User", changes["user_id"])

        async with self._writing("update portfolio"):
            for key, value in changes.items():
                setattr(portfolio, key, value)
        await self._reload(portfolio, "reload portfolio")
        return portfolio

    async def delete_portfolio(self, portfolio_id: int) -> bool:
        """Delete a portfolio with its investments, closes and snapshots in one transaction."""
        portfolio = await self.get_portfolio(portfolio_id)
        if portfolio is None:
            return False

        investment_ids = select(Investment.id).where(Investment.portfolio_id == portfolio_id)
        async with self._writing("delete portfolio"):
            await self.db.execute(delete(PriceClose).where(PriceClose.investment_id.in_(investment_ids)))
            await self.db.execute(delete(Investment).where(Investment.portfolio_id == portfolio_id))
            await self.db.execute(
                delete(PerformanceSnapshot).where(PerformanceSnapshot.portfolio_id == portfolio_id)
            )
            await self.db.delete(portfolio)

        logger.info(f"Portfolio {portfolio_id} deleted with its investments and history")
        return True

    # Investments

    async def get_investments(self, portfolio_id: int) -> List[Investment]:
        async with self._reading("list investments"):
            result = await self.db.execute(
                select(Investment).where(Investment.portfolio_id == portfolio_id).order_by(Investment.id)
            )
            return list(result.scalars().all())

    async def get_investment(self, investment_id: int) -> Optional[Investment]:
        async with self._reading("load investment"):
            return await self.db.get(Investment, investment_id)

    async def create_investment(self, data: Dict[str, Any]) -> Investment:
        if await self.get_portfolio(data["portfolio_id"]) is None:
            raise NotFoundError("Portfolio", data["portfolio_id"])

        values = dict(data)
        values["purchase_date"] = _to_utc(values.get("purchase_date")) or datetime.now(timezone.utc)

        investment = Investment(**values)
        async with self._writing("create investment"):
            self.db.add(investment)
        await self._reload(investment, "reload investment")
        logger.info(
            f"Investment created: id={investment.id}, {investment.shares} {investment.symbol} "
            f"in portfolio {investment.portfolio_id}"
        )
        return investment

    async def update_investment(self, investment_id: int, changes: Dict[str, Any]) -> Optional[Investment]:
        investment = await self.get_investment(investment_id)
        if investment is None:
            return None

        if "portfolio_id" in changes and await self.get_portfolio(changes["portfolio_id"]) is None:
            raise NotFoundError("Portfolio", changes["portfolio_id"])

        async with self._writing("update investment"):
            for key, value in changes.items():
                setattr(investment, key, _to_utc(value) if key == "purchase_date" else value)
        await self._reload(investment, "reload investment")
        return investment

    async def delete_investment(self, investment_id: int) -> bool:
        investment = await self.get_investment(investment_id)
        if investment is None:
            return False

        async with self._writing("delete investment"):
            await self.db.execute(delete(PriceClose).where(PriceClose.investment_id == investment_id))
            await self.db.delete(investment)

        logger.info(f"Investment {investment_id} deleted")
        return True

    # Performance history

    async def get_performance_snapshots(self, portfolio_id: int) -> List[PerformanceSnapshot]:
        async with self._reading("load performance history"):
            result = await self.db.execute(
                select(PerformanceSnapshot)
                .where(PerformanceSnapshot.portfolio_id == portfolio_id)
                .order_by(PerformanceSnapshot.timestamp, PerformanceSnapshot.id)
            )
            return list(result.scalars().all())

    async def add_performance_snapshot(
        self, portfolio_id: int, total_value: Decimal, timestamp: Optional[datetime] = None
    ) -> PerformanceSnapshot:
        if await self.get_portfolio(portfolio_id) is None:
            raise NotFoundError("Portfolio", portfolio_id)

        snapshot = PerformanceSnapshot(
            portfolio_id=portfolio_id,
            timestamp=_to_utc(timestamp) or datetime.now(timezone.utc),
            total_value=total_value,
        )
        async with self._writing("add performance snapshot"):
            self.db.add(snapshot)
        await self._reload(snapshot, "reload performance snapshot")
        logger.info(f"Performance snapshot for portfolio {portfolio_id}: total=${total_value:.2f}")
        return snapshot

    async def record_performance(
        self,
        portfolio_id: int,
        closes: Dict[int, Decimal],
        close_date: date,
        total_value: Decimal,
        timestamp: datetime,
    ) -> PerformanceSnapshot:
        """
        Store closing prices for `close_date` and append a snapshot in a
        single transaction, so a failed snapshot leaves no closes behind.
        """
        if await self.get_portfolio(portfolio_id) is None:
            raise NotFoundError("Portfolio", portfolio_id)

        snapshot = PerformanceSnapshot(
            portfolio_id=portfolio_id,
            timestamp=_to_utc(timestamp),
            total_value=total_value,
        )
        async with self._writing("record performance"):
            for investment_id, close_price in closes.items():
                await self._upsert_close(investment_id, close_date, close_price)
            self.db.add(snapshot)
        await self._reload(snapshot, "reload performance snapshot")
        logger.info(
            f"Recorded {len(closes)} closes for {close_date} and snapshot for "
            f"portfolio {portfolio_id}: total=${total_value:.2f}"
        )
        return snapshot

    # Closing prices

    async def get_previous_closes(
        self, investment_ids: Sequence[int], before: date
    ) -> Dict[int, Decimal]:
        """Latest closing price strictly before `before`, per investment id."""
        if not investment_ids:
            return {}

        async with self._reading("load closing prices"):
            result = await self.db.execute(
                select(PriceClose)
                .where(
                    PriceClose.investment_id.in_(list(investment_ids)),
                    PriceClose.close_date < before,
                )
                .order_by(PriceClose.investment_id, PriceClose.close_date.desc())
            )
            closes = {}
            for close in result.scalars().all():
                closes.setdefault(close.investment_id, close.close_price)
            return closes

    async def record_close(self, investment_id: int, close_date: date, close_price: Decimal) -> PriceClose:
        """Store the closing price for a date, replacing one already recorded."""
        async with self._writing("record closing price"):
            close = await self._upsert_close(investment_id, close_date, close_price)
        return close

    async def _upsert_close(self, investment_id: int, close_date: date, close_price: Decimal) -> PriceClose:
        result = await self.db.execute(
            select(PriceClose).where(
                PriceClose.investment_id == investment_id,
                PriceClose.close_date == close_date,
            )
        )
        close = result.scalar_one_or_none()
        if close is None:
            close = PriceClose(investment_id=investment_id, close_date=close_date, close_price=close_price)
            self.db.add(close)
        else:
            close.close_price = close_price
        return close

    async def list_all_portfolios(self) -> List[Portfolio]:
        async with self._reading("list portfolios"):
            result = await self.db.execute(select(Portfolio).order_by(Portfolio.id))
            return list(result.scalars().all())
