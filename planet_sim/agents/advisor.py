"""Heuristic autoplayer used by the CLI's --auto mode and by Monte Carlo runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from numpy.random import Generator

from planet_sim.core.config import (
    ACTIONS,
    CONSUMPTION_BASE,
    EXPANSION_BATCH_MW,
    MAX_BATCHES_PER_ACTION,
    SOCIAL_CLASSES,
)
from planet_sim.core.effects import Effects
from planet_sim.core.state import GameState, average_popularity
from planet_sim.simulation.decisions import DecisionDefinition
from planet_sim.world.energy import effective_efficiency, total_production


@dataclass
class PlannedAction:
    action: str
    batches: int = 1


class Advisor:
    """Greedy heuristic player used for autoplay."""

    def __init__(
        self,
        rng: Generator,
        reserve: int = 250,
        max_expansion_batches: int = 5,
        deficit_margin: int = 0,
    ) -> None:
        self._rng = rng
        self.reserve = reserve
        self.max_expansion_batches = max_expansion_batches
        self.deficit_margin = deficit_margin

    def plan_turn(self, state: GameState) -> list[PlannedAction]:
        """
        Choose the actions for one turn.

        Process:
        1. Expand the renewable source with the best MW per credit
        2. Retire fossil capacity while projected production covers demand
        3. Spend leftovers on pollution cleanup and unhappy classes
        """
        plan: list[PlannedAction] = []
        budget = state.credits - self.reserve

        # 1. Renewables
        source_action = self._best_expansion(state)
        if source_action is not None:
            cost = ACTIONS[source_action]["credits"]
            batches = min(self.max_expansion_batches, max(0, budget) // cost)
            if batches > 0:
                plan.append(PlannedAction(source_action, int(batches)))
                budget -= cost * batches

        # 2. Fossil retirement, estimated against the planned capacity
        retire = self._fossil_batches(state, plan)
        if retire > 0:
            plan.append(PlannedAction("reduce_fossil", retire))

        # 3. Environment and society
        if state.pollution > 40 and not state.cleanup_active and budget >= ACTIONS["environmental_program"]["credits"]:
            plan.append(PlannedAction("environmental_program"))
            budget -= ACTIONS["environmental_program"]["credits"]

        if state.popularity.poor < 40 and budget >= ACTIONS["public_campaign"]["credits"]:
            plan.append(PlannedAction("public_campaign"))
            budget -= ACTIONS["public_campaign"]["credits"]

        if state.popularity.middle < 45 and budget >= ACTIONS["invest_research"]["credits"]:
            plan.append(PlannedAction("invest_research"))
            budget -= ACTIONS["invest_research"]["credits"]

        return plan

    def choose(self, decision: DecisionDefinition, state: GameState) -> str:
        """Pick the branch with the higher utility for the current state."""
        accept = self._utility(decision.accept, state)
        reject = self._utility(decision.reject, state)
        if accept == reject:
            return "accept" if self._rng.random() < 0.5 else "reject"
        return "accept" if accept > reject else "reject"

    # ------------------------------------------------------------------
    # Heuristics
    # ------------------------------------------------------------------

    def _best_expansion(self, state: GameState) -> Optional[str]:
        candidates: list[tuple[float, str]] = []
        for source, batch_mw in EXPANSION_BATCH_MW.items():
            action = f"expand_{source}"
            cost = ACTIONS[action]["credits"]
            value = batch_mw * effective_efficiency(source, state) / cost
            # Small noise breaks ties between equivalent sources
            candidates.append((value + self._rng.random() * 1e-6, action))
        candidates.sort(reverse=True)
        best_value, best_action = candidates[0]
        return best_action if best_value > 0 else None

    def _fossil_batches(self, state: GameState, plan: list[PlannedAction]) -> int:
        if state.energy.capacity.fossil <= 0:
            return 0

        projected = total_production(state)
        for item in plan:
            source = ACTIONS[item.action].get("source")
            if source in EXPANSION_BATCH_MW:
                projected += int(EXPANSION_BATCH_MW[source] * item.batches * effective_efficiency(source, state))

        demand = max(CONSUMPTION_BASE, state.energy.consumption_base) - self.deficit_margin
        fossil_eff = effective_efficiency("fossil", state)
        step = -ACTIONS["reduce_fossil"]["capacity"]
        batches = 0
        fossil = state.energy.capacity.fossil
        while batches < MAX_BATCHES_PER_ACTION and fossil > 0:
            if projected - step * fossil_eff < demand:
                break
            projected -= step * fossil_eff
            fossil -= step
            batches += 1
        return batches

    def _utility(self, effects: Effects, state: GameState) -> float:
        if state.credits + effects.credit_total < self.reserve:
            return float("-inf")

        weights = {c: 1.0 for c in SOCIAL_CLASSES}
        avg = average_popularity(state.popularity)
        for c in SOCIAL_CLASSES:
            if state.popularity.get(c) < avg:
                weights[c] = 1.5

        score = effects.credit_total / 20.0
        score += sum(weights[c] * effects.popularity.get(c, 0) for c in SOCIAL_CLASSES)
        score -= effects.pollution * (3.0 if state.pollution > 50 else 1.5)
        score -= effects.temperature * 5.0
        score -= effects.capacity.get("fossil", 0) * 1.0
        score += (effects.efficiency_bonus + effects.renewable_bonus) * 100.0
        score += effects.storage_capacity / 2.0
        return score
