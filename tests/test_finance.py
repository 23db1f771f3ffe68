"""Tests for per-day aggregation and cost allocation."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stallpilot.core.finance import (
    ZERO,
    EffectiveConfigCursor,
    build_period_figures,
    compute_fixed_costs_by_day,
    compute_input_costs_by_day,
    daily_fixed_cost,
    days_without_config,
    resolve_config_at,
    sum_by_day,
    sum_counts_by_day,
)
from stallpilot.utils.datetime import enumerate_days


@dataclass
class Config:
    effective_from: date
    cost_per_basket: Decimal = Decimal("0")
    monthly_rent: Decimal = Decimal("0")
    monthly_electricity: Decimal = Decimal("0")


class TestSumByDay:
    def test_rows_of_same_utc_day_share_a_bucket(self):
        rows = [
            (datetime(2024, 1, 1, 10, 0), Decimal("12.50")),
            (datetime(2024, 1, 1, 22, 0), Decimal("7.50")),
            (datetime(2024, 1, 2, 0, 0), Decimal("1.00")),
        ]
        assert sum_by_day(rows) == {"2024-01-01": Decimal("20.00"), "2024-01-02": Decimal("1.00")}

    def test_aware_timestamps_are_bucketed_by_utc_day(self):
        local = timezone(timedelta(hours=-3))
        rows = [(datetime(2024, 1, 1, 22, 30, tzinfo=local), Decimal("5.00"))]
        assert sum_by_day(rows) == {"2024-01-02": Decimal("5.00")}

    def test_empty_rows(self):
        assert sum_by_day([]) == {}

    def test_counts(self):
        rows = [(datetime(2024, 1, 1, 8), 2), (datetime(2024, 1, 1, 18), 3)]
        assert sum_counts_by_day(rows) == {"2024-01-01": 5}


class TestConfigResolution:
    configs = [
        Config(date(2024, 1, 1), cost_per_basket=Decimal("80")),
        Config(date(2024, 1, 5), cost_per_basket=Decimal("90")),
        Config(date(2024, 1, 10), cost_per_basket=Decimal("100")),
    ]

    def test_day_before_first_config_resolves_to_none(self):
        cursor = EffectiveConfigCursor(self.configs)
        assert cursor.resolve(date(2023, 12, 31)) is None

    def test_cursor_picks_latest_config_not_after_day(self):
        cursor = EffectiveConfigCursor(self.configs)
        assert cursor.resolve(date(2024, 1, 1)).cost_per_basket == Decimal("80")
        assert cursor.resolve(date(2024, 1, 4)).cost_per_basket == Decimal("80")
        assert cursor.resolve(date(2024, 1, 5)).cost_per_basket == Decimal("90")
        assert cursor.resolve(date(2024, 2, 1)).cost_per_basket == Decimal("100")

    def test_cursor_resolution_is_monotonic(self):
        cursor = EffectiveConfigCursor(self.configs)
        seen = []
        for day in enumerate_days(date(2023, 12, 25), date(2024, 1, 20)):
            config = cursor.resolve(day)
            if config is not None:
                seen.append(config.effective_from)
        assert seen == sorted(seen)

    def test_cursor_rejects_days_going_backwards(self):
        cursor = EffectiveConfigCursor(self.configs)
        cursor.resolve(date(2024, 1, 6))
        with pytest.raises(ValueError):
            cursor.resolve(date(2024, 1, 5))

    def test_cursor_matches_random_access_lookup(self):
        cursor = EffectiveConfigCursor(self.configs)
        for day in enumerate_days(date(2023, 12, 30), date(2024, 1, 15)):
            assert cursor.resolve(day) is resolve_config_at(self.configs, day)

    def test_no_configs(self):
        assert EffectiveConfigCursor([]).resolve(date(2024, 1, 1)) is None
        assert resolve_config_at([], date(2024, 1, 1)) is None


class TestCostAllocation:
    def test_input_cost_uses_config_in_effect_each_day(self):
        configs = [
            Config(date(2024, 1, 1), cost_per_basket=Decimal("80")),
            Config(date(2024, 1, 2), cost_per_basket=Decimal("100")),
        ]
        days = [date(2024, 1, 1), date(2024, 1, 2)]
        baskets = {"2024-01-01": 6, "2024-01-02": 2}

        costs = compute_input_costs_by_day(days, configs, baskets)

        assert costs == {"2024-01-01": Decimal("480.00"), "2024-01-02": Decimal("200.00")}

    def test_fixed_cost_is_monthly_costs_over_thirty_days(self):
        config = Config(
            date(2024, 1, 1), monthly_rent=Decimal("3000"), monthly_electricity=Decimal("600")
        )
        assert daily_fixed_cost(config) == Decimal("120.00")

    def test_fixed_cost_before_any_config_is_zero(self):
        configs = [Config(date(2024, 1, 3), monthly_rent=Decimal("3000"))]
        days = enumerate_days(date(2024, 1, 1), date(2024, 1, 5))

        fixed = compute_fixed_costs_by_day(days, configs)

        assert fixed["2024-01-01"] == ZERO
        assert fixed["2024-01-02"] == ZERO
        assert fixed["2024-01-03"] == Decimal("100")
        assert daily_fixed_cost(None) == ZERO

    def test_no_configs_yields_empty_maps(self):
        days = [date(2024, 1, 1)]
        assert compute_input_costs_by_day(days, [], {"2024-01-01": 4}) == {}
        assert compute_fixed_costs_by_day(days, []) == {}

    def test_days_without_config(self):
        days = enumerate_days(date(2024, 1, 1), date(2024, 1, 4))
        configs = [Config(date(2024, 1, 3))]
        assert days_without_config(days, configs) == [date(2024, 1, 1), date(2024, 1, 2)]
        assert days_without_config(days, []) == days


class TestPeriodFigures:
    def _figures(self):
        configs = [
            Config(
                date(2024, 1, 2),
                cost_per_basket=Decimal("80"),
                monthly_rent=Decimal("3000"),
                monthly_electricity=Decimal("600"),
            )
        ]
        days = enumerate_days(date(2024, 1, 1), date(2024, 1, 4))
        return build_period_figures(
            start=date(2024, 1, 1),
            end=date(2024, 1, 4),
            days=days,
            configs=configs,
            sales_by_day={"2024-01-01": Decimal("100.00"), "2024-01-02": Decimal("250.50")},
            credit_payments_by_day={"2024-01-03": Decimal("40.00")},
            expenses_by_day={"2024-01-02": Decimal("30.25"), "2024-01-09": Decimal("999")},
            baskets_by_day={"2024-01-02": 2, "2024-01-03": 1},
        )

    def test_totals_equal_sum_of_days(self):
        figures = self._figures()

        assert figures.total_sales == sum((d.sales for d in figures.days), ZERO)
        assert figures.total_credit_payments == sum((d.credit_payments for d in figures.days), ZERO)
        assert figures.total_expenses == sum((d.expenses for d in figures.days), ZERO)
        assert figures.total_input_cost == sum((d.input_cost for d in figures.days), ZERO)
        assert figures.total_fixed_cost == sum((d.fixed_cost for d in figures.days), ZERO)

    def test_out_of_range_rows_are_ignored(self):
        assert self._figures().total_expenses == Decimal("30.25")

    def test_profit_identity_is_exact(self):
        figures = self._figures()

        for day in figures.days:
            assert day.profit == day.inflow - day.expenses - day.input_cost - day.fixed_cost
        assert figures.profit == (
            figures.total_inflow
            - figures.total_expenses
            - figures.total_input_cost
            - figures.total_fixed_cost
        )
        assert figures.profit == sum((d.profit for d in figures.days), ZERO)

    def test_inflow_includes_credit_payments(self):
        figures = self._figures()
        assert figures.total_inflow == Decimal("390.50")
        assert figures.days[2].inflow == Decimal("40.00")

    def test_missing_config_days_reported(self):
        figures = self._figures()
        assert figures.missing_config_days == [date(2024, 1, 1)]
        assert figures.days[0].fixed_cost == ZERO
        assert figures.days[1].fixed_cost == Decimal("120")
        assert figures.days[1].input_cost == Decimal("160")
