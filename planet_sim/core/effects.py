"""
core.effects
Partial state deltas and the clamp rules used to apply them.

Events, decisions and player actions all describe their consequences as an
Effects payload; apply_effects() is the single place the domain limits are
enforced.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from planet_sim.core.config import (
    ENERGY_SOURCES,
    POLLUTION_RANGE,
    SOCIAL_CLASSES,
    TEMPERATURE_RANGE,
)
from planet_sim.core.state import (
    GameState,
    clamp,
    clamp_popularity,
    with_capacity,
)


@dataclass(frozen=True)
class Effects:
    """A partial state delta. Zero / empty fields leave the state alone."""

    credits: int = 0
    international_aid: int = 0
    pollution: float = 0.0
    temperature: float = 0.0
    popularity: Mapping[str, int] = field(default_factory=dict)
    capacity: Mapping[str, int] = field(default_factory=dict)
    storage_capacity: int = 0
    efficiency_bonus: float = 0.0
    renewable_bonus: float = 0.0

    @property
    def credit_total(self) -> int:
        return self.credits + self.international_aid

    def describe(self) -> list[str]:
        """Short human-readable list of the non-zero parts."""
        parts: list[str] = []
        if self.credit_total:
            parts.append(f"credits {self.credit_total:+d}")
        if self.pollution:
            parts.append(f"pollution {self.pollution:+g}")
        if self.temperature:
            parts.append(f"temperature {self.temperature:+g}")
        for c in SOCIAL_CLASSES:
            if self.popularity.get(c):
                parts.append(f"{c} {self.popularity[c]:+d}")
        for s in ENERGY_SOURCES:
            if self.capacity.get(s):
                parts.append(f"{s} {self.capacity[s]:+d} MW")
        if self.storage_capacity:
            parts.append(f"storage capacity {self.storage_capacity:+d} MW")
        if self.efficiency_bonus:
            parts.append(f"efficiency {self.efficiency_bonus:+.0%}")
        if self.renewable_bonus:
            parts.append(f"renewable efficiency {self.renewable_bonus:+.0%}")
        return parts


def with_popularity_delta(state: GameState, delta: Mapping[str, float]) -> GameState:
    current = state.popularity.as_dict()
    return replace(
        state,
        popularity=clamp_popularity({c: current[c] + delta.get(c, 0) for c in SOCIAL_CLASSES}),
    )


def apply_effects(state: GameState, effects: Effects) -> GameState:
    """Apply an Effects payload with clamp rules (pure function)."""
    new = state

    if effects.capacity:
        cap = new.energy.capacity.as_dict()
        for source, change in effects.capacity.items():
            if source in cap:
                cap[source] = cap[source] + change
        new = with_capacity(new, cap)

    if effects.pollution:
        new = replace(new, pollution=clamp(new.pollution + effects.pollution, *POLLUTION_RANGE))

    if effects.temperature:
        new = replace(new, temperature=clamp(new.temperature + effects.temperature, *TEMPERATURE_RANGE))

    if effects.credit_total:
        new = replace(new, credits=max(0, new.credits + effects.credit_total))

    if effects.popularity:
        new = with_popularity_delta(new, effects.popularity)

    if effects.storage_capacity:
        max_storage = max(0, new.energy.max_storage + effects.storage_capacity)
        new = replace(
            new,
            energy=replace(
                new.energy,
                max_storage=max_storage,
                storage=min(new.energy.storage, max_storage),
            ),
        )

    if effects.efficiency_bonus or effects.renewable_bonus:
        new = replace(
            new,
            efficiency_bonus=new.efficiency_bonus + effects.efficiency_bonus,
            renewable_bonus=new.renewable_bonus + effects.renewable_bonus,
        )

    return new
