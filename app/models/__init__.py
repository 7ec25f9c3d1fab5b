from app.models.enums import RiskLevel, InvestmentType
from app.models.user import User
from app.models.portfolio import Portfolio, PerformanceSnapshot
from app.models.investment import Investment, PriceClose

__all__ = [
    "RiskLevel",
    "InvestmentType",
    "User",
    "Portfolio",
    "PerformanceSnapshot",
    "Investment",
    "PriceClose",
]
