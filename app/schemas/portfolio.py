from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from app.models.enums import RiskLevel


class PortfolioCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    risk_level: RiskLevel
    user_id: Optional[int] = None  # falls back to the configured default user

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class PortfolioUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    risk_level: Optional[RiskLevel] = None
    user_id: Optional[int] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class PortfolioResponse(BaseModel):
    id: int
    user_id: int
    name: str
    risk_level: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PerformanceCreate(BaseModel):
    total_value: Decimal = Field(ge=0, max_digits=18, decimal_places=6)
    timestamp: Optional[datetime] = None  # defaults to now

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PerformanceSnapshotResponse(BaseModel):
    id: int
    portfolio_id: int
    timestamp: datetime
    total_value: Decimal

    class Config:
        from_attributes = True


class PerformancePointResponse(BaseModel):
    date: str
    value: Decimal

    class Config:
        from_attributes = True


class AssetAllocationResponse(BaseModel):
    type: str
    percentage: Decimal
    value: Decimal

    class Config:
        from_attributes = True


class PortfolioSummaryResponse(BaseModel):
    id: int
    name: str
    risk_level: str
    total_value: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    ytd_return: Decimal
    ytd_return_value: Decimal
    performance_data: List[PerformancePointResponse]
    asset_allocation: List[AssetAllocationResponse]

    class Config:
        from_attributes = True
