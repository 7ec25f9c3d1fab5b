"""
Per-investment valuation.

Turns a stored investment (shares, purchase price, current price) into its
current economic state. Daily change is measured against the most recent
recorded closing price before today; without one it is zero.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

ZERO = Decimal("0")
HUNDRED = Decimal("100")
PERCENT_QUANTUM = Decimal("0.0001")


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, quantized; 0 when whole is 0."""
    if not whole:
        return ZERO.quantize(PERCENT_QUANTUM)
    return (part / whole * HUNDRED).quantize(PERCENT_QUANTUM)


@dataclass(frozen=True)
class ValuedInvestment:
    id: int
    portfolio_id: int
    name: str
    symbol: str
    type: str
    shares: Decimal
    purchase_price: Decimal
    current_price: Decimal
    purchase_date: Optional[datetime]
    value: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    total_return: Decimal
    total_return_percent: Decimal


def value_investment(investment, previous_close: Optional[Decimal] = None) -> ValuedInvestment:
    shares = Decimal(investment.shares)
    purchase_price = Decimal(investment.purchase_price)
    current_price = Decimal(investment.current_price)

    value = shares * current_price
    purchase_value = shares * purchase_price
    total_return = value - purchase_value

    if previous_close:
        price_delta = current_price - Decimal(previous_close)
        daily_change = shares * price_delta
        daily_change_percent = percent_of(price_delta, Decimal(previous_close))
    else:
        daily_change = ZERO
        daily_change_percent = ZERO.quantize(PERCENT_QUANTUM)

    return ValuedInvestment(
        id=investment.id,
        portfolio_id=investment.portfolio_id,
        name=investment.name,
        symbol=investment.symbol,
        type=investment.type,
        shares=shares,
        purchase_price=purchase_price,
        current_price=current_price,
        purchase_date=investment.purchase_date,
        value=value,
        daily_change=daily_change,
        daily_change_percent=daily_change_percent,
        total_return=total_return,
        total_return_percent=percent_of(total_return, purchase_value),
    )
