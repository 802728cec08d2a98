"""Pollution, temperature and the planet's environmental health."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional

from planet_sim.core.config import (
    CLEANUP_REDUCTION,
    ENERGY_SOURCES,
    HEALTH_BANDS,
    HEALTH_POLLUTION_WEIGHT,
    HEALTH_TEMPERATURE_BASELINE,
    HEALTH_TEMPERATURE_WEIGHT,
    PASSIVE_COOLING,
    PASSIVE_COOLING_THRESHOLD,
    POLLUTION_RANGE,
    POLLUTION_RATES,
    PURIFICATION_CAP,
    PURIFICATION_RATE,
    RENEWABLE_COOLING_FACTOR,
    POLLUTION_TEMPERATURE_FACTOR,
    TEMPERATURE_RANGE,
)
from planet_sim.core.state import GameState, clamp
from planet_sim.world.energy import production_by_source, renewable_ratio


@dataclass(frozen=True)
class EnvironmentReport:
    pollution: float
    temperature: float
    pollution_generated: float
    temperature_change: float
    purification: float
    cleanup_applied: bool = False


@dataclass(frozen=True)
class HealthAssessment:
    score: int
    status: str
    recommendations: list[str] = field(default_factory=list)


def _one_decimal(value: float) -> float:
    """Truncate (floor) to one decimal place."""
    return math.floor(value * 10) / 10


def source_pollution(source: str, production: float) -> float:
    """Pollution emitted by one source for its effective production."""
    return production * POLLUTION_RATES.get(source, 0.0)


def total_pollution(
    state: GameState,
    production: Optional[Mapping[str, int]] = None,
) -> int:
    """Floored sum of rate x effective production over every source.

    `production` may be passed when the energy stage already computed it.
    """
    if production is None:
        production = production_by_source(state)
    total = sum(source_pollution(s, production.get(s, 0)) for s in ENERGY_SOURCES)
    return math.floor(total)


def temperature_change(
    current_temperature: float,
    pollution_generated: float,
    renewable_share: float,
) -> float:
    change = pollution_generated * POLLUTION_TEMPERATURE_FACTOR
    change -= renewable_share * RENEWABLE_COOLING_FACTOR
    if current_temperature > PASSIVE_COOLING_THRESHOLD:
        change -= PASSIVE_COOLING
    return change


def update_environment(
    pollution: float,
    temperature: float,
    pollution_generated: float,
    renewable_share: float,
    cleanup_active: bool = False,
) -> EnvironmentReport:
    """Advance pollution and temperature by one turn."""
    delta_t = temperature_change(temperature, pollution_generated, renewable_share)
    new_temperature = temperature + delta_t

    new_pollution = pollution + pollution_generated
    if cleanup_active:
        new_pollution = max(0.0, new_pollution - CLEANUP_REDUCTION)

    # Nature absorbs up to 2% of the pollution, at most 1 point per turn
    purification = min(PURIFICATION_CAP, new_pollution * PURIFICATION_RATE)
    new_pollution = max(0.0, new_pollution - purification)

    new_pollution = clamp(new_pollution, *POLLUTION_RANGE)
    new_temperature = clamp(new_temperature, *TEMPERATURE_RANGE)

    return EnvironmentReport(
        pollution=_one_decimal(new_pollution),
        temperature=_one_decimal(new_temperature),
        pollution_generated=pollution_generated,
        temperature_change=delta_t,
        purification=purification,
        cleanup_applied=cleanup_active,
    )


def simulate_environment(
    state: GameState,
    production: Optional[Mapping[str, int]] = None,
) -> EnvironmentReport:
    """Environment stage of the turn pipeline."""
    generated = total_pollution(state, production)
    return update_environment(
        state.pollution,
        state.temperature,
        generated,
        renewable_ratio(state.energy.capacity),
        cleanup_active=state.cleanup_active,
    )


# ------------------------------------------------------------------
# Advisory
# ------------------------------------------------------------------


def health_score(pollution: float, temperature: float) -> float:
    score = 100.0 - pollution * HEALTH_POLLUTION_WEIGHT
    if temperature > HEALTH_TEMPERATURE_BASELINE:
        score -= (temperature - HEALTH_TEMPERATURE_BASELINE) * HEALTH_TEMPERATURE_WEIGHT
    return clamp(score, 0.0, 100.0)


def health_status(score: float) -> str:
    for threshold, label in HEALTH_BANDS:
        if score >= threshold:
            return label
    return HEALTH_BANDS[-1][1]


def environmental_recommendations(state: GameState) -> list[str]:
    recs: list[str] = []
    if state.pollution > 50:
        recs.append("Run environmental programmes to bring pollution down")
    if state.temperature > 30:
        recs.append("Invest in cooling technology and renewable sources")
    if state.pollution > 30 and state.temperature > 25:
        recs.append("Combine emission cuts with the energy transition")
    if renewable_ratio(state.energy.capacity) < 0.5:
        recs.append("Raise the renewable share of the energy mix")
    return recs


def environmental_health(state: GameState) -> HealthAssessment:
    score = health_score(state.pollution, state.temperature)
    return HealthAssessment(
        score=round(score),
        status=health_status(score),
        recommendations=environmental_recommendations(state),
    )
