"""Class popularity: action reactions, long-term drift, migration and revolt risk."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

from planet_sim.core.config import (
    ACTIONS,
    DRIFT_DEFICIT_PENALTY,
    DRIFT_DEFICIT_THRESHOLD,
    DRIFT_LOW_CREDITS,
    DRIFT_LOW_CREDITS_PENALTY,
    DRIFT_POLLUTION_DIVISORS,
    DRIFT_POLLUTION_THRESHOLD,
    DRIFT_TEMPERATURE_DIVISORS,
    DRIFT_TEMPERATURE_THRESHOLD,
    MIGRATION_MIDDLE_DOWN,
    MIGRATION_MIDDLE_UP,
    MIGRATION_POOR_EMIGRATION,
    REVOLT_CERTAIN_POPULARITY,
    REVOLT_SAFE_POPULARITY,
    SATISFACTION_BANDS,
    SOCIAL_CLASSES,
)
from planet_sim.core.state import (
    GameState,
    Popularity,
    average_popularity,
    clamp,
    clamp_popularity,
)


@dataclass(frozen=True)
class SocietyReport:
    popularity: Popularity
    average: float
    satisfaction: dict[str, str]
    revolt_probability: float
    drift: dict[str, int]
    migration: dict[str, int]


def _zero() -> dict[str, int]:
    return {c: 0 for c in SOCIAL_CLASSES}


def apply_popularity_delta(popularity: Popularity, delta: Mapping[str, float]) -> Popularity:
    """Add per-class deltas and clamp each class to [0, 100]."""
    return clamp_popularity({c: popularity.get(c) + delta.get(c, 0) for c in SOCIAL_CLASSES})


def apply_action_popularity(popularity: Popularity, action: str, batches: int = 1) -> Popularity:
    """Fixed reaction of each class to a player action (scaled by batches)."""
    reaction = ACTIONS.get(action, {}).get("popularity", {})
    return apply_popularity_delta(popularity, {c: v * batches for c, v in reaction.items()})


def long_term_drift(state: GameState) -> dict[str, int]:
    """Slow erosion of approval under environmental and economic stress."""
    changes = _zero()

    if state.pollution > DRIFT_POLLUTION_THRESHOLD:
        for c, divisor in DRIFT_POLLUTION_DIVISORS.items():
            changes[c] -= math.floor(state.pollution / divisor)

    if state.temperature > DRIFT_TEMPERATURE_THRESHOLD:
        excess = state.temperature - DRIFT_TEMPERATURE_THRESHOLD
        for c, divisor in DRIFT_TEMPERATURE_DIVISORS.items():
            changes[c] -= math.floor(excess / divisor)

    if state.credits < DRIFT_LOW_CREDITS:
        for c, penalty in DRIFT_LOW_CREDITS_PENALTY.items():
            changes[c] -= penalty

    if state.energy.production - state.energy.consumption < DRIFT_DEFICIT_THRESHOLD:
        for c, penalty in DRIFT_DEFICIT_PENALTY.items():
            changes[c] -= penalty

    return changes


def class_migration(popularity: Popularity) -> dict[str, int]:
    """Population-weight shifts between classes, expressed as popularity points."""
    migration = _zero()

    # Emigration of the poor
    if popularity.poor < MIGRATION_POOR_EMIGRATION:
        migration["poor"] = -1

    # The middle class slides down or climbs up
    if popularity.middle < MIGRATION_MIDDLE_DOWN:
        migration["middle"] = -1
        migration["poor"] = 1
    elif popularity.middle > MIGRATION_MIDDLE_UP:
        migration["middle"] = -1
        migration["rich"] = 1

    return migration


def revolt_probability(popularity: Popularity) -> float:
    """Percent chance of revolt: 0 at avg >= 60, rising linearly to 100 at avg <= 20."""
    avg = average_popularity(popularity)
    span = REVOLT_SAFE_POPULARITY - REVOLT_CERTAIN_POPULARITY
    return clamp((REVOLT_SAFE_POPULARITY - avg) / span * 100.0, 0.0, 100.0)


def satisfaction_label(value: float) -> str:
    for threshold, label in SATISFACTION_BANDS:
        if value >= threshold:
            return label
    return SATISFACTION_BANDS[-1][1]


def class_satisfaction(popularity: Popularity) -> dict[str, str]:
    result = {c: satisfaction_label(popularity.get(c)) for c in SOCIAL_CLASSES}
    result["overall"] = satisfaction_label(round(average_popularity(popularity)))
    return result


def simulate_society(popularity: Popularity, state: GameState) -> SocietyReport:
    """Society stage of the turn pipeline.

    `state` must already carry this turn's pollution, temperature, credits
    and energy figures; `popularity` is the approval going into the stage.
    """
    drift = long_term_drift(state)
    new_pop = apply_popularity_delta(popularity, drift)

    migration = class_migration(new_pop)
    new_pop = apply_popularity_delta(new_pop, migration)

    return SocietyReport(
        popularity=new_pop,
        average=average_popularity(new_pop),
        satisfaction=class_satisfaction(new_pop),
        revolt_probability=revolt_probability(new_pop),
        drift=drift,
        migration=migration,
    )


def social_recommendations(popularity: Popularity) -> list[str]:
    satisfaction = class_satisfaction(popularity)
    recs: list[str] = []

    if satisfaction["poor"] == "Revolting":
        recs.append("The poor are in revolt: urgent social policies are needed")
    elif satisfaction["poor"] == "Dissatisfied":
        recs.append("Improve the poor's satisfaction with social programmes")

    if satisfaction["middle"] in ("Dissatisfied", "Revolting"):
        recs.append("The middle class needs more attention to its concerns")

    if satisfaction["rich"] == "Dissatisfied" and satisfaction["poor"] == "Satisfied":
        recs.append("Balance policies between the social classes")

    if revolt_probability(popularity) > 50:
        recs.append("High risk of revolt: act immediately")

    return recs
