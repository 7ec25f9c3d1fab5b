from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime, ForeignKey, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from app.database import Base


class Investment(Base):
    __tablename__ = "investments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        Integer, ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    symbol = Column(String(20), nullable=False)
    type = Column(String(20), nullable=False)  # Stock, Bond, Mutual Fund
    shares = Column(Numeric(18, 6), nullable=False)
    purchase_price = Column(Numeric(18, 6), nullable=False)
    current_price = Column(Numeric(18, 6), nullable=False)
    purchase_date = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    portfolio = relationship("Portfolio", back_populates="investments")
    closes = relationship(
        "PriceClose", back_populates="investment", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<Investment(id={self.id}, symbol={self.symbol}, shares={self.shares})>"


class PriceClose(Base):
    """Closing price of one investment on one calendar date."""
    __tablename__ = "price_closes"
    __table_args__ = (
        UniqueConstraint("investment_id", "close_date", name="uq_price_close_investment_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    investment_id = Column(
        Integer, ForeignKey("investments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    close_date = Column(Date, nullable=False)
    close_price = Column(Numeric(18, 6), nullable=False)

    investment = relationship("Investment", back_populates="closes")

    def __repr__(self):
        return f"<PriceClose(investment_id={self.investment_id}, date={self.close_date}, price={self.close_price})>"
