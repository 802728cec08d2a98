"""Random events that add dynamism to the simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np
from numpy.random import Generator

from planet_sim.core.config import EVENT_BASE_CHANCE
from planet_sim.core.effects import Effects, apply_effects
from planet_sim.core.state import GameState, average_popularity, energy_balance


@dataclass(frozen=True)
class EventDefinition:
    """A catalog entry. `weight` is the relative weight used during selection."""

    id: str
    name: str
    weight: float
    min_turn: int
    max_turn: int
    effects: Effects
    description: str
    log_message: str
    precondition: Callable[[GameState], bool] = field(default=lambda state: True, compare=False)
    temporary: bool = False   # one-turn bonus, never reverted
    permanent: bool = False   # accumulating bonus

    def can_occur(self, state: GameState) -> bool:
        if state.turn < self.min_turn or state.turn > self.max_turn:
            return False
        return bool(self.precondition(state))


@dataclass(frozen=True)
class EventOutcome:
    state: GameState
    event: Optional[EventDefinition] = None
    rolled: bool = False  # the base trigger roll succeeded

    @property
    def occurred(self) -> bool:
        return self.event is not None


EVENTS: tuple[EventDefinition, ...] = (
    EventDefinition(
        id="sabotage",
        name="Corporate Sabotage",
        weight=5, min_turn=3, max_turn=50,
        precondition=lambda s: s.energy.capacity.fossil > 20,
        effects=Effects(pollution=5, popularity={"poor": -5, "middle": -3, "rich": 2}),
        description="Fossil-fuel corporations sabotage renewable infrastructure in retaliation.",
        log_message="Corporate sabotage raises pollution and hurts popularity.",
    ),
    EventDefinition(
        id="natural_disaster",
        name="Natural Disaster",
        weight=8, min_turn=2, max_turn=50,
        precondition=lambda s: s.temperature > 25 or s.pollution > 30,
        effects=Effects(temperature=3, pollution=3, capacity={"solar": -2, "wind": -3}),
        description="A hurricane or severe storm damages energy infrastructure.",
        log_message="Natural disaster damages renewable plants and raises pollution.",
    ),
    EventDefinition(
        id="panel_breakage",
        name="Panel Breakage",
        weight=12, min_turn=1, max_turn=50,
        precondition=lambda s: s.energy.capacity.solar > 10,
        effects=Effects(capacity={"solar": -1}, pollution=1),
        description="Solar panels break down from weather or wear.",
        log_message="Broken solar panels reduce capacity and generate waste.",
    ),
    EventDefinition(
        id="sunny_day",
        name="Sunny Day",
        weight=20, min_turn=1, max_turn=50,
        precondition=lambda s: s.energy.capacity.solar > 0,
        effects=Effects(capacity={"solar": 2}),
        description="Perfect sunshine boosts solar output.",
        log_message="An exceptionally sunny day boosts solar production.",
        temporary=True,
    ),
    EventDefinition(
        id="strong_wind",
        name="Strong Wind",
        weight=15, min_turn=1, max_turn=50,
        precondition=lambda s: s.energy.capacity.wind > 0,
        effects=Effects(capacity={"wind": 3}),
        description="Exceptionally strong winds boost wind output.",
        log_message="Strong winds drive wind production up.",
        temporary=True,
    ),
    EventDefinition(
        id="tech_discovery",
        name="Technological Discovery",
        weight=3, min_turn=5, max_turn=50,
        precondition=lambda s: s.credits >= 200,
        effects=Effects(efficiency_bonus=0.05),
        description="A scientific advance raises the efficiency of every renewable source.",
        log_message="Technological discovery permanently raises energy efficiency.",
        permanent=True,
    ),
    EventDefinition(
        id="battery_advance",
        name="Battery Advance",
        weight=4, min_turn=4, max_turn=50,
        precondition=lambda s: s.energy.storage < 50,
        effects=Effects(storage_capacity=10),
        description="Better battery technology increases storage capacity.",
        log_message="Battery advance increases storage capacity.",
        permanent=True,
    ),
    EventDefinition(
        id="policy_shift",
        name="Policy Shift",
        weight=6, min_turn=3, max_turn=50,
        effects=Effects(popularity={"middle": 5, "rich": 3}),
        description="The political landscape turns in favour of green investment.",
        log_message="Political shift raises support for renewable energy.",
    ),
    EventDefinition(
        id="economic_boom",
        name="Economic Boom",
        weight=7, min_turn=2, max_turn=40,
        precondition=lambda s: s.credits < 800,
        effects=Effects(credits=150),
        description="Unexpected growth increases tax revenue.",
        log_message="Economic boom brings extra credits to the government.",
    ),
    EventDefinition(
        id="public_protest",
        name="Public Protest",
        weight=10, min_turn=2, max_turn=50,
        precondition=lambda s: average_popularity(s.popularity) < 40,
        effects=Effects(popularity={"poor": 10, "middle": 5}, credits=-50),
        description="Popular protests force changes in energy policy.",
        log_message="Public protests raise pressure for change.",
    ),
    EventDefinition(
        id="international_aid",
        name="International Aid",
        weight=4, min_turn=5, max_turn=50,
        precondition=lambda s: s.pollution > 40 or s.temperature > 28,
        effects=Effects(credits=200, pollution=-3),
        description="The international community funds the fight against climate change.",
        log_message="International aid arrives for environmental projects.",
    ),
    EventDefinition(
        id="corporate_scandal",
        name="Corporate Scandal",
        weight=6, min_turn=4, max_turn=50,
        precondition=lambda s: s.energy.capacity.fossil > 30,
        effects=Effects(popularity={"poor": 8, "middle": 5, "rich": -10}, credits=-100),
        description="A scandal involving fossil-energy companies comes to light.",
        log_message="Corporate scandal damages the energy companies' reputation.",
    ),
    EventDefinition(
        id="scientific_breakthrough",
        name="Scientific Breakthrough",
        weight=2, min_turn=8, max_turn=50,
        precondition=lambda s: s.credits >= 300,
        effects=Effects(efficiency_bonus=0.08, popularity={"middle": 3}),
        description="A revolutionary discovery in applied physics transforms energy.",
        log_message="Scientific breakthrough greatly raises energy efficiency.",
        permanent=True,
    ),
    EventDefinition(
        id="climate_miracle",
        name="Climate Miracle",
        weight=1, min_turn=10, max_turn=50,
        precondition=lambda s: s.pollution > 60 and s.temperature > 32,
        effects=Effects(pollution=-10, temperature=-5, popularity={"poor": 5, "middle": 5, "rich": 5}),
        description="A rare climate event naturally lowers pollution and temperature.",
        log_message="A rare climate miracle improves environmental conditions.",
    ),
    EventDefinition(
        id="energy_crisis",
        name="Global Energy Crisis",
        weight=3, min_turn=6, max_turn=50,
        precondition=lambda s: energy_balance(s) < 0,
        effects=Effects(popularity={"poor": -8, "middle": -5, "rich": -3}, credits=-200),
        description="A global energy crisis raises prices and erodes popularity.",
        log_message="Global energy crisis hits the economy and society.",
    ),
)

_EVENTS_BY_ID: dict[str, EventDefinition] = {e.id: e for e in EVENTS}


def get_event(event_id: str) -> Optional[EventDefinition]:
    return _EVENTS_BY_ID.get(event_id)


def all_events() -> list[EventDefinition]:
    return list(EVENTS)


def apply_event(state: GameState, event: EventDefinition) -> GameState:
    """Apply the event's effects. Temporary bonuses are not reverted later."""
    return apply_effects(state, event.effects)


class EventSystem:
    """Rolls for, selects and applies at most one random event per turn."""

    def __init__(self, rng: Generator, catalog: tuple[EventDefinition, ...] = EVENTS) -> None:
        self._rng = rng
        self._catalog = catalog

    def eligible_events(self, state: GameState) -> list[EventDefinition]:
        return [e for e in self._catalog if e.can_occur(state)]

    def modified_weight(self, event: EventDefinition, state: GameState) -> float:
        """Relative selection weight adjusted for narrative coherence."""
        weight = float(event.weight)

        if state.pollution > 70:
            if event.id == "natural_disaster":
                weight *= 1.5
            if event.id == "climate_miracle":
                weight *= 2.0

        if state.temperature > 35:
            if event.id == "natural_disaster":
                weight *= 1.3
            if event.id == "international_aid":
                weight *= 1.8

        if average_popularity(state.popularity) < 30 and event.id == "public_protest":
            weight *= 2.0

        if state.energy.capacity.fossil > 40 and event.id == "corporate_scandal":
            weight *= 1.5

        return weight

    def select_event(self, state: GameState) -> Optional[EventDefinition]:
        """Cumulative-weight draw among the currently eligible events."""
        eligible = self.eligible_events(state)
        if not eligible:
            return None

        cumulative = np.cumsum([self.modified_weight(e, state) for e in eligible])
        draw = self._rng.random() * cumulative[-1]
        idx = int(np.searchsorted(cumulative, draw, side="left"))
        return eligible[min(idx, len(eligible) - 1)]

    def roll(self, state: GameState, extra_chance: float = 0.0) -> EventOutcome:
        """Base 10% (+ extra) chance that any event fires this turn."""
        chance = EVENT_BASE_CHANCE + extra_chance
        if self._rng.random() * 100 >= chance:
            return EventOutcome(state=state)

        event = self.select_event(state)
        if event is None:
            return EventOutcome(state=state, rolled=True)
        return EventOutcome(state=apply_event(state, event), event=event, rolled=True)
