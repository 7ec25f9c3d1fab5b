from sqlalchemy import Column, Integer, Numeric, DateTime, String, ForeignKey, func
from sqlalchemy.orm import relationship
from app.database import Base


class Portfolio(Base):
    __tablename__ = "portfolios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    risk_level = Column(String(20), nullable=False)  # Low, Moderate, High
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="portfolios")
    investments = relationship(
        "Investment", back_populates="portfolio", cascade="all, delete-orphan", passive_deletes=True
    )
    snapshots = relationship(
        "PerformanceSnapshot", back_populates="portfolio", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<Portfolio(id={self.id}, name={self.name})>"


class PerformanceSnapshot(Base):
    __tablename__ = "performance_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        Integer, ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    timestamp = Column(DateTime(timezone=True), nullable=False)
    total_value = Column(Numeric(18, 6), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    portfolio = relationship("Portfolio", back_populates="snapshots")

    def __repr__(self):
        return f"<PerformanceSnapshot(id={self.id}, total={self.total_value})>"
