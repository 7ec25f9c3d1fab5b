from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.store import PortfolioStore
from app.services.summary import SummaryService


async def get_store(db: AsyncSession = Depends(get_db)) -> PortfolioStore:
    return PortfolioStore(db)


async def get_summary_service(store: PortfolioStore = Depends(get_store)) -> SummaryService:
    return SummaryService(store)
