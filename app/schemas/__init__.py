from app.schemas.user import UserCreate, UserResponse
from app.schemas.portfolio import (
    PortfolioCreate,
    PortfolioUpdate,
    PortfolioResponse,
    PerformanceCreate,
    PerformanceSnapshotResponse,
    PerformancePointResponse,
    AssetAllocationResponse,
    PortfolioSummaryResponse,
)
from app.schemas.investment import (
    InvestmentCreate,
    InvestmentUpdate,
    InvestmentResponse,
    InvestmentWithPerformanceResponse,
)

__all__ = [
    "UserCreate",
    "UserResponse",
    "PortfolioCreate",
    "PortfolioUpdate",
    "PortfolioResponse",
    "PerformanceCreate",
    "PerformanceSnapshotResponse",
    "PerformancePointResponse",
    "AssetAllocationResponse",
    "PortfolioSummaryResponse",
    "InvestmentCreate",
    "InvestmentUpdate",
    "InvestmentResponse",
    "InvestmentWithPerformanceResponse",
]
