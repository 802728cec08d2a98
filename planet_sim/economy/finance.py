"""Income, taxation, maintenance and the per-turn credit settlement."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from planet_sim.core.config import (
    AUTHORITARIAN_TAX_RATE,
    AUTHORITARIAN_TAX_THRESHOLD,
    ECONOMY_CRITICAL_CREDITS,
    ECONOMY_STABLE_MARGIN,
    ECONOMY_WORRYING_CREDITS,
    INCOME_RATES,
    MAINTENANCE_COSTS,
    MAINTENANCE_UNIT_MW,
    SOCIAL_CLASSES,
    SUBSIDY_RATE,
    SUBSIDY_THRESHOLD,
)
from planet_sim.core.state import Capacity, Popularity


@dataclass(frozen=True)
class IncomeModifiers:
    modifier: int
    effective_income: int
    tax_rate: float
    subsidy_rate: float


@dataclass(frozen=True)
class EconomyReport:
    base_income: int
    income_by_class: dict[str, int]
    modifiers: IncomeModifiers
    effective_income: int  # after tax/subsidy, including international aid
    maintenance: int
    credits: int
    decision_credits: int = 0
    international_aid: int = 0
    maintenance_by_source: dict[str, int] = field(default_factory=dict)

    @property
    def net(self) -> int:
        return self.effective_income - self.maintenance


def income_by_class(popularity: Popularity) -> dict[str, int]:
    return {c: math.floor(popularity.get(c) * INCOME_RATES[c]) for c in SOCIAL_CLASSES}


def total_income(popularity: Popularity) -> int:
    return sum(income_by_class(popularity).values())


def apply_tax_and_subsidy(popularity: Popularity, base_income: int) -> IncomeModifiers:
    """Authoritarian tax when the rich are unhappy, subsidy when the poor are.

    The two modifiers are independent; both may apply in the same turn.
    """
    modifier = 0
    tax_rate = 0.0
    subsidy_rate = 0.0

    if popularity.rich < AUTHORITARIAN_TAX_THRESHOLD:
        tax_rate = AUTHORITARIAN_TAX_RATE
        modifier -= math.floor(base_income * tax_rate)

    if popularity.poor < SUBSIDY_THRESHOLD:
        subsidy_rate = SUBSIDY_RATE
        modifier += math.floor(base_income * subsidy_rate)

    return IncomeModifiers(
        modifier=modifier,
        effective_income=max(0, base_income + modifier),
        tax_rate=tax_rate,
        subsidy_rate=subsidy_rate,
    )


def maintenance_by_source(capacity: Capacity) -> dict[str, int]:
    costs: dict[str, int] = {}
    for source, rate in MAINTENANCE_COSTS.items():
        mw = capacity.get(source)
        if mw:
            costs[source] = math.floor(mw / MAINTENANCE_UNIT_MW * rate)
    return costs


def maintenance_cost(capacity: Capacity) -> int:
    return sum(maintenance_by_source(capacity).values())


def settle_credits(current: int, income: int, expenses: int, decision_delta: int = 0) -> int:
    """Floor and clamp at zero, then add the decision delta on top.

    The decision delta is applied after the clamp, so a punitive decision
    can push the result below zero; callers that own the state re-clamp.
    """
    return max(0, math.floor(current + income - expenses)) + decision_delta


def simulate_economy(
    popularity: Popularity,
    capacity: Capacity,
    credits: int,
    decision_credits: int = 0,
    international_aid: int = 0,
) -> EconomyReport:
    """Economy stage of the turn pipeline.

    When a decision is resolved the engine settles the turn again with the
    chosen branch: international_aid joins income before the zero floor,
    decision_credits land after it.
    """
    per_class = income_by_class(popularity)
    base_income = sum(per_class.values())
    modifiers = apply_tax_and_subsidy(popularity, base_income)
    upkeep = maintenance_by_source(capacity)
    maintenance = sum(upkeep.values())

    effective_income = modifiers.effective_income + international_aid
    final_credits = settle_credits(credits, effective_income, maintenance, decision_credits)

    return EconomyReport(
        base_income=base_income,
        income_by_class=per_class,
        modifiers=modifiers,
        effective_income=effective_income,
        maintenance=maintenance,
        credits=final_credits,
        decision_credits=decision_credits,
        international_aid=international_aid,
        maintenance_by_source=upkeep,
    )


def economic_health(credits: int, income: int, expenses: int) -> str:
    if credits < ECONOMY_CRITICAL_CREDITS:
        return "Critical"
    if credits < ECONOMY_WORRYING_CREDITS:
        return "Worrying"
    balance = income - expenses
    if balance < 0:
        return "Deficit"
    if balance < ECONOMY_STABLE_MARGIN:
        return "Stable"
    return "Prosperous"
