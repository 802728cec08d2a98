"""End-of-game evaluation: defeat conditions, victory tiers and final scoring."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from planet_sim.core.config import (
    DEFEAT_CREDITS,
    DEFEAT_ENERGY_DEFICIT,
    DEFEAT_POLLUTION,
    DEFEAT_POPULARITY,
    DEFEAT_TEMPERATURE,
    ECOLOGY_RATINGS,
    ECOLOGY_WORST_RATING,
    ECONOMY_RATINGS,
    ECONOMY_WORST_RATING,
    SCORE_CREDIT_BANDS,
    SCORE_MAX,
    SCORE_POLLUTION_BANDS,
    SCORE_POPULARITY_BANDS,
    SCORE_SURPLUS_BANDS,
    SCORE_SURPLUS_FLOOR,
    SCORE_TURN_HORIZON,
    SOCIETY_RATINGS,
    SOCIETY_WORST_RATING,
    VICTORY_TIERS,
)
from planet_sim.core.state import (
    GameState,
    average_popularity,
    energy_balance,
    renewable_capacity,
    total_capacity,
)
from planet_sim.world.energy import renewable_ratio


# type -> (title, message)
_DEFEATS: dict[str, tuple[str, str]] = {
    "bankruptcy": (
        "National Bankruptcy",
        "Your credits ran out! The government collapsed financially.",
    ),
    "ecological_disaster": (
        "Ecological Disaster",
        "Pollution reached catastrophic levels. The planet became uninhabitable.",
    ),
    "climate_catastrophe": (
        "Climate Catastrophe",
        "Global warming made Planet 2500 uninhabitable.",
    ),
    "social_revolution": (
        "Social Revolution",
        "The population rose up against an unpopular government.",
    ),
    "energy_crisis": (
        "Energy Crisis",
        "A critical energy deficit brought the infrastructure down.",
    ),
}

# type -> (title, message, achievements)
_VICTORIES: dict[str, tuple[str, str, tuple[str, ...]]] = {
    "sustainable_complete": (
        "Complete Sustainable Victory!",
        "A full energy transition with environmental sustainability and social satisfaction.",
        ("Complete Transition", "Total Sustainability", "Social Harmony"),
    ),
    "energy_victory": (
        "Energy Victory!",
        "You mastered energy production, securing abundance for all.",
        ("Energy Abundance", "Robust Infrastructure"),
    ),
    "partial_victory": (
        "Partial Victory",
        "You struck a reasonable balance between energy, economy and society.",
        ("Balance Achieved", "Moderate Progress"),
    ),
}


@dataclass(frozen=True)
class GameResult:
    victory: bool
    type: str
    title: str
    message: str
    score: Optional[int] = None
    achievements: tuple[str, ...] = ()


@dataclass(frozen=True)
class FinalStatistics:
    turns_survived: int
    final_credits: int
    final_pollution: float
    final_temperature: float
    final_popularity: float
    total_capacity: int
    renewable_capacity: int
    renewable_ratio: float
    final_production: int
    final_consumption: int
    final_storage: int
    victory: bool
    ecology_rating: str
    society_rating: str
    economy_rating: str


# ------------------------------------------------------------------
# Defeat
# ------------------------------------------------------------------


def check_defeat(state: GameState) -> Optional[str]:
    """First matching defeat condition in priority order, or None."""
    if state.credits <= DEFEAT_CREDITS:
        return "bankruptcy"
    if state.pollution >= DEFEAT_POLLUTION:
        return "ecological_disaster"
    if state.temperature >= DEFEAT_TEMPERATURE:
        return "climate_catastrophe"
    if average_popularity(state.popularity) <= DEFEAT_POPULARITY:
        return "social_revolution"
    if state.energy.consumption - state.energy.production >= DEFEAT_ENERGY_DEFICIT:
        return "energy_crisis"
    return None


# ------------------------------------------------------------------
# Victory
# ------------------------------------------------------------------


def _meets(state: GameState, req: dict[str, float]) -> bool:
    checks = {
        "max_pollution": lambda v: state.pollution <= v,
        "min_renewable_ratio": lambda v: renewable_ratio(state.energy.capacity) >= v,
        "min_popularity": lambda v: average_popularity(state.popularity) >= v,
        "max_turn": lambda v: state.turn <= v,
        "min_surplus": lambda v: energy_balance(state) >= v,
        "min_credits": lambda v: state.credits >= v,
    }
    return all(checks[key](value) for key, value in req.items())


def check_victory(state: GameState) -> Optional[str]:
    """First satisfied victory tier, most demanding first, or None."""
    for tier, requirements in VICTORY_TIERS.items():
        if _meets(state, requirements):
            return tier
    return None


def _band(value: float, bands: list[tuple[float, int]]) -> int:
    for threshold, points in bands:
        if value >= threshold:
            return points
    return 0


def victory_score(state: GameState) -> int:
    """Composite 0-100 score of the final state."""
    score = 0

    for threshold, points in SCORE_POLLUTION_BANDS:
        if state.pollution <= threshold:
            score += points
            break

    score += _band(energy_balance(state), SCORE_SURPLUS_BANDS) or SCORE_SURPLUS_FLOOR
    score += _band(average_popularity(state.popularity), SCORE_POPULARITY_BANDS)
    score += _band(state.credits, SCORE_CREDIT_BANDS)

    # Faster wins score higher
    score += math.floor(max(0, SCORE_TURN_HORIZON - state.turn) / 2)

    return min(SCORE_MAX, score)


def evaluate(state: GameState) -> Optional[GameResult]:
    """Defeat first, then victory; None while the game goes on."""
    defeat = check_defeat(state)
    if defeat is not None:
        title, message = _DEFEATS[defeat]
        return GameResult(victory=False, type=defeat, title=title, message=message)

    tier = check_victory(state)
    if tier is not None:
        title, message, achievements = _VICTORIES[tier]
        return GameResult(
            victory=True,
            type=tier,
            title=title,
            message=message,
            score=victory_score(state),
            achievements=achievements,
        )
    return None


# ------------------------------------------------------------------
# Final report
# ------------------------------------------------------------------


def ecology_rating(state: GameState) -> str:
    for max_pollution, max_temperature, label in ECOLOGY_RATINGS:
        if state.pollution <= max_pollution and state.temperature <= max_temperature:
            return label
    return ECOLOGY_WORST_RATING


def society_rating(state: GameState) -> str:
    avg = average_popularity(state.popularity)
    for threshold, label in SOCIETY_RATINGS:
        if avg >= threshold:
            return label
    return SOCIETY_WORST_RATING


def economy_rating(state: GameState) -> str:
    for threshold, label in ECONOMY_RATINGS:
        if state.credits >= threshold:
            return label
    return ECONOMY_WORST_RATING


def final_statistics(state: GameState, victory: bool) -> FinalStatistics:
    cap = state.energy.capacity
    return FinalStatistics(
        turns_survived=state.turn,
        final_credits=state.credits,
        final_pollution=state.pollution,
        final_temperature=state.temperature,
        final_popularity=average_popularity(state.popularity),
        total_capacity=total_capacity(cap),
        renewable_capacity=renewable_capacity(cap),
        renewable_ratio=renewable_ratio(cap),
        final_production=state.energy.production,
        final_consumption=state.energy.consumption,
        final_storage=state.energy.storage,
        victory=victory,
        ecology_rating=ecology_rating(state),
        society_rating=society_rating(state),
        economy_rating=economy_rating(state),
    )


def final_message(result: GameResult, stats: FinalStatistics) -> str:
    if result.victory:
        return (
            f"Congratulations! You achieved a {result.title.rstrip('!')} in "
            f"{stats.turns_survived} turns. Planet 2500 prospers under your leadership."
        )
    return (
        f"Unfortunately, your government fell after {stats.turns_survived} turns. "
        "The lessons learned will serve future leaders. Try again!"
    )
