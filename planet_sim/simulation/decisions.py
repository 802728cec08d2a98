"""Scripted accept/reject decisions offered to the player."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from numpy.random import Generator

from planet_sim.core.config import (
    DECISION_BASE_CHANCE,
    DECISION_CRISIS_BONUS,
    DECISION_CRISIS_DEFICIT,
    DECISION_CRISIS_POLLUTION,
    DECISION_LOW_POPULARITY_BONUS,
    DECISION_LOW_POPULARITY_THRESHOLD,
    DECISION_MAX_CHANCE,
    SOCIAL_CLASSES,
    TARGET_CLASS_MARGIN,
)
from planet_sim.core.effects import Effects, apply_effects
from planet_sim.core.errors import InvalidActionError
from planet_sim.core.state import Cooldowns, GameState, average_popularity, energy_balance

CHOICES: tuple[str, ...] = ("accept", "reject")


@dataclass(frozen=True)
class DecisionDefinition:
    id: str
    title: str
    description: str
    target_class: str
    accept: Effects
    reject: Effects
    cooldown: int
    category: str
    precondition: Callable[[GameState], bool] = field(default=lambda state: True, compare=False)

    def effects_for(self, choice: str) -> Effects:
        if choice == "accept":
            return self.accept
        if choice == "reject":
            return self.reject
        raise InvalidActionError(f"Invalid decision choice: {choice!r}")


DECISIONS: tuple[DecisionDefinition, ...] = (
    DecisionDefinition(
        id="corporate_pressure",
        title="Corporate Pressure",
        description=(
            "Fossil energy companies offer a generous bribe to keep the old "
            "infrastructure running. Accepting pays now but slows the transition."
        ),
        target_class="rich",
        accept=Effects(credits=200, popularity={"rich": 10, "poor": -5, "middle": -2}, capacity={"fossil": 5}),
        reject=Effects(popularity={"rich": -5, "poor": 5, "middle": 2}),
        cooldown=3,
        category="economic",
        precondition=lambda s: s.energy.capacity.fossil > 20 and s.credits < 500,
    ),
    DecisionDefinition(
        id="green_initiative",
        title="Green Initiative",
        description=(
            "An organised popular movement demands an immediate energy transition "
            "and massive renewable investment. Support is costly but popular."
        ),
        target_class="poor",
        accept=Effects(popularity={"poor": 15, "middle": 5}, renewable_bonus=0.1, credits=-150),
        reject=Effects(popularity={"poor": -10, "middle": -5}, renewable_bonus=-0.05),
        cooldown=3,
        category="social",
        precondition=lambda s: s.popularity.poor < 40 and s.energy.capacity.solar + s.energy.capacity.wind < 50,
    ),
    DecisionDefinition(
        id="climate_summit",
        title="Climate Summit",
        description=(
            "An international conference proposes ambitious emission targets. "
            "Taking part shows leadership but demands economic concessions."
        ),
        target_class="middle",
        accept=Effects(pollution=-5, international_aid=100, popularity={"middle": 8}),
        reject=Effects(temperature=2, pollution=3, credits=-50),
        cooldown=4,
        category="environmental",
        precondition=lambda s: (s.pollution > 40 or s.temperature > 28) and s.turn >= 5,
    ),
    DecisionDefinition(
        id="tech_breakthrough",
        title="Technological Breakthrough",
        description=(
            "Researchers found a revolutionary energy storage method. Funding it "
            "speeds up innovation but consumes valuable resources."
        ),
        target_class="rich",
        accept=Effects(storage_capacity=20, efficiency_bonus=0.1, credits=-200),
        reject=Effects(credits=-50, efficiency_bonus=-0.05),
        cooldown=5,
        category="technological",
        precondition=lambda s: s.energy.storage < 30 and s.credits >= 300,
    ),
    DecisionDefinition(
        id="economic_crisis",
        title="Economic Crisis",
        description=(
            "A global recession hits renewable investment. The government can step "
            "in with subsidies or let the market sort itself out."
        ),
        target_class="middle",
        accept=Effects(credits=-100, capacity={"fossil": -10}, popularity={"middle": 10, "poor": 5}),
        reject=Effects(credits=-200, popularity={"middle": -10}, renewable_bonus=-0.1),
        cooldown=2,
        category="economic",
        precondition=lambda s: s.credits < 300 and s.energy.capacity.fossil > 30,
    ),
)

_DECISIONS_BY_ID: dict[str, DecisionDefinition] = {d.id: d for d in DECISIONS}


def get_decision(decision_id: str) -> Optional[DecisionDefinition]:
    return _DECISIONS_BY_ID.get(decision_id)


def all_decisions() -> list[DecisionDefinition]:
    return list(DECISIONS)


def is_available(decision: DecisionDefinition, state: GameState) -> bool:
    """The shared cooldown must be 0 and the decision's own condition must hold."""
    if state.cooldowns.decision > 0:
        return False
    return bool(decision.precondition(state))


def target_class(state: GameState) -> str:
    """Class lagging furthest behind the average, else a contextual fallback."""
    avg = average_popularity(state.popularity)
    worst: Optional[str] = None
    worst_gap = TARGET_CLASS_MARGIN
    for c in SOCIAL_CLASSES:
        gap = avg - state.popularity.get(c)
        if gap > worst_gap:
            worst, worst_gap = c, gap
    if worst is not None:
        return worst

    if state.pollution > 60:
        return "middle"
    if state.credits < 200:
        return "rich"
    if state.energy.production < state.energy.consumption:
        return "poor"
    return "middle"


def trigger_probability(state: GameState) -> float:
    """Percent chance that a decision is offered this turn (capped at 50)."""
    probability = DECISION_BASE_CHANCE

    if state.popularity.get(target_class(state)) < DECISION_LOW_POPULARITY_THRESHOLD:
        probability += DECISION_LOW_POPULARITY_BONUS

    if state.pollution > DECISION_CRISIS_POLLUTION or energy_balance(state) < DECISION_CRISIS_DEFICIT:
        probability += DECISION_CRISIS_BONUS

    return min(DECISION_MAX_CHANCE, probability)


def apply_decision(
    state: GameState,
    decision: DecisionDefinition,
    choice: str,
    credits_settled: bool = False,
) -> GameState:
    """Apply the chosen branch and start the shared decision cooldown.

    With credits_settled the credit and aid parts are skipped; the engine
    has already folded them into the turn's economy settlement.
    """
    effects = decision.effects_for(choice)
    if credits_settled:
        effects = replace(effects, credits=0, international_aid=0)
    new = apply_effects(state, effects)
    return replace(new, cooldowns=Cooldowns(decision=decision.cooldown))


class DecisionSystem:
    """Cooldown-gated, probability-triggered scripted decisions."""

    def __init__(self, rng: Generator, catalog: tuple[DecisionDefinition, ...] = DECISIONS) -> None:
        self._rng = rng
        self._catalog = catalog

    def available(self, state: GameState) -> list[DecisionDefinition]:
        return [d for d in self._catalog if is_available(d, state)]

    def select_decision(self, state: GameState) -> Optional[DecisionDefinition]:
        """Prefer decisions aimed at the target class, else any available one."""
        candidates = self.available(state)
        if not candidates:
            return None

        wanted = target_class(state)
        targeted = [d for d in candidates if d.target_class == wanted]
        pool = targeted or candidates
        return pool[int(self._rng.integers(len(pool)))]

    def should_show(self, state: GameState) -> Optional[DecisionDefinition]:
        if state.cooldowns.decision > 0:
            return None
        if self._rng.random() * 100 >= trigger_probability(state):
            return None
        return self.select_decision(state)
