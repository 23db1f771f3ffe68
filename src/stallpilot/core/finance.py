"""Per-day finance aggregation and cost allocation.

All money is summed as ``Decimal``. Per-day maps are keyed by the UTC day
as ``YYYY-MM-DD`` and only contain days that had rows; look them up with
``.get(key, ZERO)``.
"""

from bisect import bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Generic, Protocol, TypeVar

from stallpilot.core.logging import get_logger
from stallpilot.utils.datetime import day_key

logger = get_logger(__name__)

ZERO = Decimal("0")

# Monthly fixed costs are spread over a flat 30-day month
FIXED_COST_DAYS_PER_MONTH = Decimal("30")


class EffectiveDated(Protocol):
    effective_from: date


class CostConfig(EffectiveDated, Protocol):
    cost_per_basket: Decimal
    monthly_rent: Decimal
    monthly_electricity: Decimal


ConfigT = TypeVar("ConfigT", bound=EffectiveDated)


class EffectiveConfigCursor(Generic[ConfigT]):
    """Resolve the config in effect for days visited in ascending order.

    ``configs`` must be sorted by ``effective_from`` ascending. The cursor
    only ever moves forward, so a full report is a single merge pass over
    days and configs.
    """

    def __init__(self, configs: Sequence[ConfigT]):
        self._configs = configs
        self._idx = 0
        self._last_day: date | None = None

    def resolve(self, day: date) -> ConfigT | None:
        """Config with the greatest ``effective_from <= day``, or None."""
        if self._last_day is not None and day < self._last_day:
            raise ValueError(f"Days must be non-decreasing: {day} after {self._last_day}")
        self._last_day = day

        if not self._configs or self._configs[0].effective_from > day:
            return None

        while (
            self._idx + 1 < len(self._configs)
            and self._configs[self._idx + 1].effective_from <= day
        ):
            self._idx += 1
        return self._configs[self._idx]


def resolve_config_at(configs: Sequence[ConfigT], day: date) -> ConfigT | None:
    """Random-access lookup of the config in effect on ``day`` (binary search)."""
    keys = [c.effective_from for c in configs]
    idx = bisect_right(keys, day)
    if idx == 0:
        return None
    return configs[idx - 1]


def sum_by_day(rows: Iterable[tuple[datetime | date, Decimal]]) -> dict[str, Decimal]:
    """Sum decimal amounts per UTC calendar day."""
    totals: dict[str, Decimal] = {}
    for timestamp, amount in rows:
        key = day_key(timestamp)
        totals[key] = totals.get(key, ZERO) + Decimal(amount)
    return totals


def sum_counts_by_day(rows: Iterable[tuple[datetime | date, int]]) -> dict[str, int]:
    """Sum integer counts (e.g. baskets) per UTC calendar day."""
    totals: dict[str, int] = {}
    for timestamp, count in rows:
        key = day_key(timestamp)
        totals[key] = totals.get(key, 0) + count
    return totals


def daily_fixed_cost(config: CostConfig | None) -> Decimal:
    """(rent + electricity) / 30 for one day, zero without a config."""
    if config is None:
        return ZERO
    return (config.monthly_rent + config.monthly_electricity) / FIXED_COST_DAYS_PER_MONTH


def daily_input_cost(config: CostConfig | None, baskets: int) -> Decimal:
    """Baskets produced times cost per basket, zero without a config."""
    if config is None:
        return ZERO
    return config.cost_per_basket * baskets


def compute_input_costs_by_day(
    days: Sequence[date],
    configs: Sequence[CostConfig],
    baskets_by_day: dict[str, int],
) -> dict[str, Decimal]:
    """Input cost per day, using the config in effect on each day."""
    costs: dict[str, Decimal] = {}
    if not configs:
        return costs

    cursor = EffectiveConfigCursor(configs)
    for day in days:
        key = day.isoformat()
        costs[key] = daily_input_cost(cursor.resolve(day), baskets_by_day.get(key, 0))
    return costs


def compute_fixed_costs_by_day(
    days: Sequence[date],
    configs: Sequence[CostConfig],
) -> dict[str, Decimal]:
    """Fixed-cost share per day, using the config in effect on each day."""
    fixed: dict[str, Decimal] = {}
    if not configs:
        return fixed

    cursor = EffectiveConfigCursor(configs)
    for day in days:
        fixed[day.isoformat()] = daily_fixed_cost(cursor.resolve(day))
    return fixed


def days_without_config(days: Sequence[date], configs: Sequence[EffectiveDated]) -> list[date]:
    """Days that precede every config (their costs are reported as zero)."""
    if not configs:
        return list(days)
    first = configs[0].effective_from
    return [d for d in days if d < first]


def reduce_decimal_map(values: dict[str, Decimal]) -> Decimal:
    return sum(values.values(), ZERO)


def profit(inflow: Decimal, expenses: Decimal, input_costs: Decimal, fixed_costs: Decimal) -> Decimal:
    """inflow - approved expenses - input costs - fixed costs."""
    return inflow - expenses - input_costs - fixed_costs


@dataclass
class DayFigures:
    """Financial figures for one UTC day."""

    day: date
    sales: Decimal = ZERO
    credit_payments: Decimal = ZERO
    expenses: Decimal = ZERO
    baskets: int = 0
    input_cost: Decimal = ZERO
    fixed_cost: Decimal = ZERO

    @property
    def inflow(self) -> Decimal:
        return self.sales + self.credit_payments

    @property
    def profit(self) -> Decimal:
        return profit(self.inflow, self.expenses, self.input_cost, self.fixed_cost)


@dataclass
class PeriodFigures:
    """Totals for a half-open range of days plus the per-day breakdown."""

    start: date
    end: date
    days: list[DayFigures] = field(default_factory=list)
    total_sales: Decimal = ZERO
    total_credit_payments: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_input_cost: Decimal = ZERO
    total_fixed_cost: Decimal = ZERO
    missing_config_days: list[date] = field(default_factory=list)

    @property
    def total_inflow(self) -> Decimal:
        return self.total_sales + self.total_credit_payments

    @property
    def profit(self) -> Decimal:
        return profit(
            self.total_inflow,
            self.total_expenses,
            self.total_input_cost,
            self.total_fixed_cost,
        )


def build_period_figures(
    start: date,
    end: date,
    days: Sequence[date],
    configs: Sequence[CostConfig],
    sales_by_day: dict[str, Decimal],
    credit_payments_by_day: dict[str, Decimal],
    expenses_by_day: dict[str, Decimal],
    baskets_by_day: dict[str, int],
) -> PeriodFigures:
    """Combine per-day maps into per-day rows and period totals.

    Totals are reduced from the per-day maps, so they always equal the sum
    of the daily rows.
    """
    input_costs = compute_input_costs_by_day(days, configs, baskets_by_day)
    fixed_costs = compute_fixed_costs_by_day(days, configs)
    missing = days_without_config(days, configs)
    if missing:
        logger.warning(
            "finance.missing_config",
            start=start.isoformat(),
            end=end.isoformat(),
            missing_days=len(missing),
            first_missing=missing[0].isoformat(),
        )

    rows = []
    for day in days:
        key = day.isoformat()
        rows.append(
            DayFigures(
                day=day,
                sales=sales_by_day.get(key, ZERO),
                credit_payments=credit_payments_by_day.get(key, ZERO),
                expenses=expenses_by_day.get(key, ZERO),
                baskets=baskets_by_day.get(key, 0),
                input_cost=input_costs.get(key, ZERO),
                fixed_cost=fixed_costs.get(key, ZERO),
            )
        )

    in_range = {d.isoformat() for d in days}

    def _total(values: dict[str, Decimal]) -> Decimal:
        return reduce_decimal_map({k: v for k, v in values.items() if k in in_range})

    return PeriodFigures(
        start=start,
        end=end,
        days=rows,
        total_sales=_total(sales_by_day),
        total_credit_payments=_total(credit_payments_by_day),
        total_expenses=_total(expenses_by_day),
        total_input_cost=reduce_decimal_map(input_costs),
        total_fixed_cost=reduce_decimal_map(fixed_costs),
        missing_config_days=missing,
    )
