from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from app.exceptions import NotFoundError, StoreError
from app.models import Investment, PerformanceSnapshot, Portfolio
from app.services.summary import (
    SummaryService,
    build_portfolio_summary,
    calculate_asset_allocation,
)
from app.services.valuation import value_investment

TODAY = date(2026, 6, 1)


def make_portfolio():
    return Portfolio(id=1, user_id=1, name="Retirement", risk_level="Moderate")


def make_investment(id_, type_, shares, purchase, current):
    return Investment(
        id=id_,
        portfolio_id=1,
        name=f"Holding {id_}",
        symbol=f"H{id_}",
        type=type_,
        shares=Decimal(str(shares)),
        purchase_price=Decimal(str(purchase)),
        current_price=Decimal(str(current)),
        purchase_date=datetime(2025, 1, 2, tzinfo=timezone.utc),
    )


def make_snapshot(id_, when, total):
    return PerformanceSnapshot(id=id_, portfolio_id=1, timestamp=when, total_value=Decimal(str(total)))


def test_total_value_sums_investments():
    investments = [
        make_investment(1, "Stock", 10, 100, 110),
        make_investment(2, "Bond", 5, 50, 40),
    ]

    summary = build_portfolio_summary(make_portfolio(), investments, [], today=TODAY)

    assert summary.total_value == Decimal("1300")
    assert summary.id == 1
    assert summary.name == "Retirement"
    assert summary.risk_level == "Moderate"


def test_empty_portfolio_summary_is_all_zero():
    summary = build_portfolio_summary(make_portfolio(), [], [], today=TODAY)

    assert summary.total_value == 0
    assert summary.daily_change == 0
    assert summary.ytd_return == 0
    assert summary.performance_data == []
    assert summary.asset_allocation == []


def test_daily_change_from_two_latest_snapshots():
    snapshots = [
        make_snapshot(1, datetime(2026, 5, 30, tzinfo=timezone.utc), 1000),
        make_snapshot(2, datetime(2026, 5, 31, tzinfo=timezone.utc), 1050),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.daily_change == Decimal("50")
    assert summary.daily_change_percent == Decimal("5")


def test_daily_change_ignores_input_order():
    snapshots = [
        make_snapshot(3, datetime(2026, 5, 31, tzinfo=timezone.utc), 1050),
        make_snapshot(1, datetime(2026, 5, 29, tzinfo=timezone.utc), 900),
        make_snapshot(2, datetime(2026, 5, 30, tzinfo=timezone.utc), 1000),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.daily_change == Decimal("50")
    assert [p.value for p in summary.performance_data] == [Decimal("900"), Decimal("1000"), Decimal("1050")]


def test_single_snapshot_has_no_daily_change():
    snapshots = [make_snapshot(1, datetime(2026, 5, 31, tzinfo=timezone.utc), 1000)]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.daily_change == 0
    assert summary.daily_change_percent == 0


def test_daily_change_percent_is_zero_when_previous_value_is_zero():
    snapshots = [
        make_snapshot(1, datetime(2026, 5, 30, tzinfo=timezone.utc), 0),
        make_snapshot(2, datetime(2026, 5, 31, tzinfo=timezone.utc), 500),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.daily_change == Decimal("500")
    assert summary.daily_change_percent == 0


def test_ytd_return_starts_at_first_snapshot_of_year():
    snapshots = [
        make_snapshot(1, datetime(2025, 12, 1, tzinfo=timezone.utc), 900),
        make_snapshot(2, datetime(2026, 1, 15, tzinfo=timezone.utc), 1000),
        make_snapshot(3, datetime(2026, 5, 1, tzinfo=timezone.utc), 1200),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.ytd_return_value == Decimal("200")
    assert summary.ytd_return == Decimal("20")


def test_ytd_includes_snapshot_exactly_on_january_first():
    snapshots = [
        make_snapshot(1, datetime(2026, 1, 1, tzinfo=timezone.utc), 800),
        make_snapshot(2, datetime(2026, 3, 1, tzinfo=timezone.utc), 1000),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.ytd_return_value == Decimal("200")
    assert summary.ytd_return == Decimal("25")


def test_ytd_is_zero_without_snapshot_this_year():
    snapshots = [
        make_snapshot(1, datetime(2025, 11, 1, tzinfo=timezone.utc), 900),
        make_snapshot(2, datetime(2025, 12, 1, tzinfo=timezone.utc), 1000),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.ytd_return == 0
    assert summary.ytd_return_value == 0


def test_naive_timestamps_are_treated_as_utc():
    snapshots = [
        make_snapshot(1, datetime(2026, 2, 1), 1000),
        make_snapshot(2, datetime(2026, 3, 1), 1100),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert summary.ytd_return_value == Decimal("100")
    assert summary.performance_data[0].date == "2026-02-01"


def test_performance_data_uses_iso_dates_in_order():
    snapshots = [
        make_snapshot(2, datetime(2026, 4, 1, 15, 30, tzinfo=timezone.utc), 1100),
        make_snapshot(1, datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc), 1000),
    ]

    summary = build_portfolio_summary(make_portfolio(), [], snapshots, today=TODAY)

    assert [(p.date, p.value) for p in summary.performance_data] == [
        ("2026-03-01", Decimal("1000")),
        ("2026-04-01", Decimal("1100")),
    ]


def test_asset_allocation_sums_to_hundred_and_orders_by_value():
    investments = [
        make_investment(1, "Bond", 10, 10, 10),          # 100
        make_investment(2, "Stock", 10, 10, 30),         # 300
        make_investment(3, "Mutual Fund", 10, 10, 20),   # 200
        make_investment(4, "Stock", 10, 10, 10),         # 100
    ]

    summary = build_portfolio_summary(make_portfolio(), investments, [], today=TODAY)
    allocation = summary.asset_allocation

    assert [a.type for a in allocation] == ["Stock", "Mutual Fund", "Bond"]
    assert [a.value for a in allocation] == [Decimal("400"), Decimal("200"), Decimal("100")]
    assert abs(sum(a.percentage for a in allocation) - 100) <= Decimal("0.001")


def test_asset_allocation_ties_keep_first_seen_order():
    valued = [
        value_investment(make_investment(1, "Bond", 1, 10, 10)),
        value_investment(make_investment(2, "Stock", 1, 10, 10)),
    ]

    allocation = calculate_asset_allocation(valued, Decimal("20"))

    assert [a.type for a in allocation] == ["Bond", "Stock"]
    assert [a.percentage for a in allocation] == [Decimal("50"), Decimal("50")]


def test_asset_allocation_percentages_are_zero_when_total_is_zero():
    valued = [
        value_investment(make_investment(1, "Stock", 10, 10, 0)),
        value_investment(make_investment(2, "Bond", 10, 10, 0)),
    ]

    allocation = calculate_asset_allocation(valued, Decimal("0"))

    assert len(allocation) == 2
    assert all(a.percentage == 0 for a in allocation)


def test_summary_is_idempotent():
    investments = [
        make_investment(1, "Stock", 10, 100, 110),
        make_investment(2, "Bond", 5, 50, 40),
    ]
    snapshots = [
        make_snapshot(1, datetime(2026, 1, 5, tzinfo=timezone.utc), 1000),
        make_snapshot(2, datetime(2026, 1, 6, tzinfo=timezone.utc), 1050),
    ]
    closes = {1: Decimal("105")}

    first = build_portfolio_summary(make_portfolio(), investments, snapshots, closes, TODAY)
    second = build_portfolio_summary(make_portfolio(), investments, snapshots, closes, TODAY)

    assert first == second


class FakeReader:
    def __init__(self, portfolio=None, investments=(), snapshots=(), closes=None, fail=False):
        self.portfolio = portfolio
        self.investments = list(investments)
        self.snapshots = list(snapshots)
        self.closes = closes or {}
        self.fail = fail

    async def get_portfolio(self, portfolio_id):
        if self.fail:
            raise StoreError("Failed to load portfolio")
        return self.portfolio

    async def get_investments(self, portfolio_id):
        return self.investments

    async def get_performance_snapshots(self, portfolio_id):
        return self.snapshots

    async def get_previous_closes(self, investment_ids, before):
        return {i: c for i, c in self.closes.items() if i in investment_ids}


@pytest.mark.asyncio
async def test_service_builds_summary_from_reader():
    reader = FakeReader(
        portfolio=make_portfolio(),
        investments=[make_investment(1, "Stock", 10, 100, 110)],
        snapshots=[
            make_snapshot(1, datetime(2026, 5, 30, tzinfo=timezone.utc), 1000),
            make_snapshot(2, datetime(2026, 5, 31, tzinfo=timezone.utc), 1050),
        ],
    )

    summary = await SummaryService(reader).get_portfolio_summary(1, today=TODAY)

    assert summary.total_value == Decimal("1100")
    assert summary.daily_change == Decimal("50")
    assert summary.asset_allocation[0].percentage == Decimal("100")


@pytest.mark.asyncio
async def test_service_valued_investments_use_previous_closes():
    reader = FakeReader(
        portfolio=make_portfolio(),
        investments=[make_investment(1, "Stock", 10, 100, 110)],
        closes={1: Decimal("100")},
    )

    valued = await SummaryService(reader).get_valued_investments(1, today=TODAY)

    assert valued[0].daily_change == Decimal("100")
    assert valued[0].daily_change_percent == Decimal("10")


@pytest.mark.asyncio
async def test_service_raises_not_found_for_missing_portfolio():
    with pytest.raises(NotFoundError):
        await SummaryService(FakeReader()).get_portfolio_summary(99, today=TODAY)


@pytest.mark.asyncio
async def test_service_propagates_store_errors():
    with pytest.raises(StoreError):
        await SummaryService(FakeReader(fail=True)).get_portfolio_summary(1, today=TODAY)
