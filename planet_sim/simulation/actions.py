"""Player actions applied between turns."""

from __future__ import annotations

from dataclasses import dataclass, replace

from planet_sim.core.config import ACTIONS, MAX_BATCHES_PER_ACTION, RENEWABLE_SOURCES
from planet_sim.core.effects import Effects, apply_effects
from planet_sim.core.errors import InsufficientResourcesError, InvalidActionError
from planet_sim.core.state import GameState
from planet_sim.social.society import apply_action_popularity
from planet_sim.world.energy import apply_automatic_transition


_ACTION_NAMES: dict[str, str] = {
    "expand_solar": "Expand solar power",
    "expand_wind": "Expand wind power",
    "expand_hydro": "Expand hydro power",
    "expand_geo": "Expand geothermal power",
    "reduce_fossil": "Reduce fossil power",
    "invest_research": "Invest in research",
    "public_campaign": "Public campaign",
    "environmental_program": "Environmental programme",
}


@dataclass(frozen=True)
class ActionResult:
    state: GameState
    action: str
    batches: int
    cost: int
    capacity_change: int = 0
    fossil_retired: int = 0

    @property
    def message(self) -> str:
        text = f"Action executed: {action_name(self.action)}"
        if self.batches > 1:
            text += f" x{self.batches}"
        return text


def action_name(action: str) -> str:
    return _ACTION_NAMES.get(action, action)


def available_actions() -> list[str]:
    return list(ACTIONS)


def action_cost(action: str, batches: int = 1) -> int:
    return ACTIONS[action]["credits"] * batches


def validate_action(state: GameState, action: str, batches: int = 1) -> None:
    """Raise an ActionError subclass if the action cannot be carried out."""
    if action not in ACTIONS:
        raise InvalidActionError(f"Invalid action: {action}")
    if isinstance(batches, bool) or not isinstance(batches, int):
        raise InvalidActionError(f"Invalid batch count for {action}: {batches!r}")
    if not 1 <= batches <= MAX_BATCHES_PER_ACTION:
        raise InvalidActionError(
            f"Batch count for {action} must be between 1 and {MAX_BATCHES_PER_ACTION}"
        )

    cost = action_cost(action, batches)
    if state.credits < cost:
        raise InsufficientResourcesError(
            f"Insufficient credits for {action_name(action)}: need {cost}, have {state.credits}"
        )
    definition = ACTIONS[action]
    if definition.get("source") == "fossil" and state.energy.capacity.fossil <= 0:
        raise InsufficientResourcesError("No fossil capacity left to retire")


def apply_action(state: GameState, action: str, batches: int = 1) -> ActionResult:
    """Apply one player action (repeated `batches` times) and return the new state.

    Pure: raises InvalidActionError / InsufficientResourcesError and leaves
    `state` untouched on failure.
    """
    validate_action(state, action, batches)
    definition = ACTIONS[action]
    cost = action_cost(action, batches)

    source = definition.get("source")
    capacity_change = definition.get("capacity", 0) * batches
    effects = Effects(
        credits=-cost,
        pollution=definition.get("pollution", 0) * batches,
        capacity={source: capacity_change} if source else {},
    )
    new = apply_effects(state, effects)

    # Large renewable pushes retire some fossil plants automatically
    retired = 0
    if source in RENEWABLE_SOURCES:
        capacity, retired = apply_automatic_transition(new.energy.capacity, capacity_change)
        if retired:
            new = replace(new, energy=replace(new.energy, capacity=capacity))

    new = replace(new, popularity=apply_action_popularity(new.popularity, action, batches))

    if definition.get("cleanup"):
        new = replace(new, cleanup_active=True)

    return ActionResult(
        state=new,
        action=action,
        batches=batches,
        cost=cost,
        capacity_change=capacity_change,
        fossil_retired=retired,
    )
