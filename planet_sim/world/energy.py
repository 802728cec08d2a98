"""Energy production, consumption, storage and the fossil transition."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from planet_sim.core.config import (
    CONSUMPTION_BASE,
    CRITICAL_DEFICIT,
    DEFAULT_MAX_STORAGE,
    EFFICIENCY_CONSUMPTION_REDUCTION,
    ENERGY_EFFICIENCIES,
    ENERGY_SOURCES,
    EXPANSION_COSTS,
    HYDRO_HEAT_DIVISOR,
    HYDRO_HEAT_THRESHOLD,
    HYDRO_MAX_PENALTY,
    RENEWABLE_SOURCES,
    SOLAR_POLLUTION_DIVISOR,
    STORAGE_LOSS_RATE,
    TRANSITION_MAX_REDUCTION,
    TRANSITION_STEP_MW,
    TRANSITION_THRESHOLD_MW,
    WIND_BONUS_DIVISOR,
    WIND_COLD_PENALTY,
    WIND_COLD_THRESHOLD,
    WIND_HOT_PENALTY,
    WIND_HOT_THRESHOLD,
)
from planet_sim.core.state import (
    Capacity,
    GameState,
    clamp,
    renewable_capacity,
    total_capacity,
)


@dataclass(frozen=True)
class EnergyReport:
    """Result of one turn of the energy grid."""

    production: int
    consumption: int
    balance: int
    storage: int
    renewable_ratio: float
    average_efficiency: float
    critical_deficit: bool
    by_source: dict[str, int] = field(default_factory=dict)


# ------------------------------------------------------------------
# Environmental modifiers
# ------------------------------------------------------------------


def solar_pollution_penalty(pollution: float) -> float:
    """Smog blocks sunlight: up to -0.5 at pollution 100."""
    return max(0.0, pollution / SOLAR_POLLUTION_DIVISOR)


def wind_temperature_modifier(temperature: float) -> float:
    """Weak wind when cold, erratic wind when hot, mild bonus in between."""
    if temperature < WIND_COLD_THRESHOLD:
        return WIND_COLD_PENALTY
    if temperature > WIND_HOT_THRESHOLD:
        return WIND_HOT_PENALTY
    return temperature / WIND_BONUS_DIVISOR


def hydro_temperature_penalty(temperature: float) -> float:
    """Droughts above 30 degrees."""
    if temperature > HYDRO_HEAT_THRESHOLD:
        return min(HYDRO_MAX_PENALTY, (temperature - HYDRO_HEAT_THRESHOLD) / HYDRO_HEAT_DIVISOR)
    return 0.0


def effective_efficiency(source: str, state: GameState) -> float:
    """Base efficiency adjusted by the environment and accumulated bonuses, in [0, 1]."""
    efficiency = ENERGY_EFFICIENCIES[source]

    if source == "solar":
        efficiency -= solar_pollution_penalty(state.pollution)
    elif source == "wind":
        efficiency += wind_temperature_modifier(state.temperature)
    elif source == "hydro":
        efficiency -= hydro_temperature_penalty(state.temperature)

    if source in RENEWABLE_SOURCES:
        efficiency += state.efficiency_bonus + state.renewable_bonus

    return clamp(efficiency, 0.0, 1.0)


# ------------------------------------------------------------------
# Production / consumption / storage
# ------------------------------------------------------------------


def source_production(source: str, capacity: int, state: GameState) -> int:
    """Effective MW delivered by one source."""
    if capacity <= 0:
        return 0
    return math.floor(capacity * effective_efficiency(source, state))


def production_by_source(state: GameState) -> dict[str, int]:
    cap = state.energy.capacity
    return {s: source_production(s, cap.get(s), state) for s in ENERGY_SOURCES}


def total_production(state: GameState) -> int:
    return sum(production_by_source(state).values())


def effective_consumption(
    base_consumption: int = CONSUMPTION_BASE,
    has_efficiency_upgrade: bool = False,
) -> int:
    """Demand for the turn. The efficiency upgrade is not yet purchasable."""
    if has_efficiency_upgrade:
        return math.floor(base_consumption * EFFICIENCY_CONSUMPTION_REDUCTION)
    return base_consumption


def update_storage(
    storage: int,
    production: int,
    consumption: int,
    max_storage: int = DEFAULT_MAX_STORAGE,
) -> int:
    """Charge/discharge the battery bank, then apply the flat 2% loss."""
    new_storage = storage + production - consumption
    new_storage = math.floor(new_storage * (1 - STORAGE_LOSS_RATE))
    return int(clamp(new_storage, 0, max_storage))


def energy_balance(production: int, consumption: int) -> int:
    """Negative = deficit, positive = surplus."""
    return production - consumption


def is_critical_deficit(energy_balance: int) -> bool:
    return energy_balance <= -CRITICAL_DEFICIT


def renewable_ratio(capacity: Capacity) -> float:
    """Share of installed capacity that is non-fossil; 0 with nothing installed."""
    total = total_capacity(capacity)
    if total == 0:
        return 0.0
    return renewable_capacity(capacity) / total


def average_efficiency(state: GameState) -> float:
    """Capacity-weighted mean efficiency of the installed park."""
    weighted = 0.0
    installed = 0
    for source in ENERGY_SOURCES:
        cap = state.energy.capacity.get(source)
        if cap > 0:
            weighted += cap * effective_efficiency(source, state)
            installed += cap
    return weighted / installed if installed > 0 else 0.0


def simulate_energy(state: GameState, has_efficiency_upgrade: bool = False) -> EnergyReport:
    """Run one turn of the grid against the current capacity."""
    by_source = production_by_source(state)
    production = sum(by_source.values())
    consumption = effective_consumption(state.energy.consumption_base, has_efficiency_upgrade)
    net = energy_balance(production, consumption)
    storage = update_storage(state.energy.storage, production, consumption, state.energy.max_storage)

    return EnergyReport(
        production=production,
        consumption=consumption,
        balance=net,
        storage=storage,
        renewable_ratio=renewable_ratio(state.energy.capacity),
        average_efficiency=average_efficiency(state),
        critical_deficit=is_critical_deficit(net),
        by_source=by_source,
    )


# ------------------------------------------------------------------
# Expansion
# ------------------------------------------------------------------


def expansion_cost(source: str, batches: int = 1) -> int:
    return EXPANSION_COSTS.get(source, 0) * batches


def can_afford_expansion(credits: int, source: str, batches: int = 1) -> bool:
    return credits >= expansion_cost(source, batches)


def apply_expansion(capacity: Capacity, source: str, amount: int) -> Capacity:
    """Add (or remove, if negative) MW of one source, never below zero."""
    if source not in ENERGY_SOURCES:
        return capacity
    return replace(capacity, **{source: max(0, capacity.get(source) + amount)})


def apply_automatic_transition(capacity: Capacity, renewable_increase: int) -> tuple[Capacity, int]:
    """Public and market pressure retire fossil plants after a big renewable push.

    Returns (new capacity, MW of fossil retired).
    """
    if renewable_increase < TRANSITION_THRESHOLD_MW or capacity.fossil <= 0:
        return capacity, 0
    reduction = min(TRANSITION_MAX_REDUCTION, renewable_increase // TRANSITION_STEP_MW)
    reduction = min(reduction, capacity.fossil)
    return replace(capacity, fossil=capacity.fossil - reduction), reduction
