from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.enums import InvestmentType


class InvestmentCreate(BaseModel):
    portfolio_id: int
    name: str = Field(min_length=1, max_length=255)
    symbol: str = Field(min_length=1, max_length=20)
    type: InvestmentType
    shares: Decimal = Field(gt=0, max_digits=18, decimal_places=6)
    purchase_price: Decimal = Field(gt=0, max_digits=18, decimal_places=6)
    current_price: Decimal = Field(gt=0, max_digits=18, decimal_places=6)
    purchase_date: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class InvestmentUpdate(BaseModel):
    portfolio_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    symbol: Optional[str] = Field(default=None, min_length=1, max_length=20)
    type: Optional[InvestmentType] = None
    shares: Optional[Decimal] = Field(default=None, gt=0, max_digits=18, decimal_places=6)
    purchase_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=18, decimal_places=6)
    current_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=18, decimal_places=6)
    purchase_date: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True


class InvestmentResponse(BaseModel):
    id: int
    portfolio_id: int
    name: str
    symbol: str
    type: str
    shares: Decimal
    purchase_price: Decimal
    current_price: Decimal
    purchase_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class InvestmentWithPerformanceResponse(InvestmentResponse):
    value: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    total_return: Decimal
    total_return_percent: Decimal
