"""
core.state
Core domain data models (UI independent).

The game state is a tree of frozen dataclasses. Every turn, action or
decision builds a new tree; nothing is mutated in place.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from planet_sim.core.config import (
    CONSUMPTION_BASE,
    DEFAULT_MAX_STORAGE,
    ENERGY_SOURCES,
    LOG_BUFFER_SIZE,
    LOG_TYPES,
    POLLUTION_RANGE,
    POPULARITY_RANGE,
    RENEWABLE_SOURCES,
    SOCIAL_CLASSES,
    START_CAPACITY,
    START_CREDITS,
    START_POLLUTION,
    START_POPULARITY,
    START_TEMPERATURE,
    START_TURN,
    TEMPERATURE_RANGE,
)
from planet_sim.core.errors import InvalidStateError


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


@dataclass(frozen=True)
class Popularity:
    """Approval (0-100) of each social class."""

    poor: int
    middle: int
    rich: int

    def get(self, social_class: str) -> int:
        return getattr(self, social_class)

    def as_dict(self) -> dict[str, int]:
        return {c: self.get(c) for c in SOCIAL_CLASSES}


@dataclass(frozen=True)
class Capacity:
    """Installed MW per energy source."""

    solar: int = 0
    wind: int = 0
    hydro: int = 0
    geo: int = 0
    fossil: int = 0

    def get(self, source: str) -> int:
        return getattr(self, source)

    def as_dict(self) -> dict[str, int]:
        return {s: self.get(s) for s in ENERGY_SOURCES}


@dataclass(frozen=True)
class EnergyState:
    capacity: Capacity
    storage: int = 0
    consumption_base: int = CONSUMPTION_BASE
    production: int = 0
    consumption: int = 0
    max_storage: int = DEFAULT_MAX_STORAGE


@dataclass(frozen=True)
class Cooldowns:
    decision: int = 0  # turns before another scripted decision may trigger


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    message: str
    type: str = "info"


@dataclass(frozen=True)
class GameState:
    """Authoritative game state.

    The percentage-like fields are clamped by whoever builds a new state:
    - pollution 0..100, temperature 15..50, popularity 0..100 per class
    - credits >= 0, capacities >= 0, storage 0..max_storage

    efficiency_bonus / renewable_bonus accumulate from events and decisions
    and are never reset during a game. cleanup_active is raised by the
    environmental programme and consumed by the next turn.
    """

    turn: int
    credits: int
    pollution: float
    temperature: float
    popularity: Popularity
    energy: EnergyState
    cooldowns: Cooldowns = field(default_factory=Cooldowns)
    logs: tuple[LogEntry, ...] = ()
    efficiency_bonus: float = 0.0
    renewable_bonus: float = 0.0
    cleanup_active: bool = False


def default_start_state() -> GameState:
    """Baseline start state.

    Keep it in core so headless tests and the CLI share the same baseline.
    """
    return GameState(
        turn=START_TURN,
        credits=START_CREDITS,
        pollution=START_POLLUTION,
        temperature=START_TEMPERATURE,
        popularity=Popularity(
            poor=START_POPULARITY,
            middle=START_POPULARITY,
            rich=START_POPULARITY,
        ),
        energy=EnergyState(capacity=Capacity(**START_CAPACITY)),
    )


# -------------------------
# Derived values
# -------------------------


def average_popularity(popularity: Popularity) -> float:
    return (popularity.poor + popularity.middle + popularity.rich) / 3


def total_capacity(capacity: Capacity) -> int:
    return sum(capacity.get(s) for s in ENERGY_SOURCES)


def renewable_capacity(capacity: Capacity) -> int:
    return sum(capacity.get(s) for s in RENEWABLE_SOURCES)


def energy_balance(state: GameState) -> int:
    """Production minus consumption of the last resolved turn."""
    return state.energy.production - state.energy.consumption


# -------------------------
# Builders
# -------------------------


def clamp_popularity(values: Mapping[str, float]) -> Popularity:
    lo, hi = POPULARITY_RANGE
    return Popularity(**{c: int(clamp(values.get(c, 0), lo, hi)) for c in SOCIAL_CLASSES})


def with_capacity(state: GameState, capacity: Mapping[str, int]) -> GameState:
    """Return state with the given capacities (negative values floored at 0)."""
    cap = Capacity(**{s: max(0, int(capacity.get(s, 0))) for s in ENERGY_SOURCES})
    return replace(state, energy=replace(state.energy, capacity=cap))


def with_log(
    state: GameState,
    message: str,
    type: str = "info",
    timestamp: Optional[str] = None,
) -> GameState:
    """Append a log entry, keeping only the last LOG_BUFFER_SIZE entries."""
    if type not in LOG_TYPES:
        type = "info"
    entry = LogEntry(
        timestamp=timestamp or datetime.now().strftime("%H:%M:%S"),
        message=message,
        type=type,
    )
    logs = (*state.logs, entry)[-LOG_BUFFER_SIZE:]
    return replace(state, logs=logs)


# -------------------------
# Serialization / validation
# -------------------------


def state_to_dict(state: GameState) -> dict[str, Any]:
    d = asdict(state)
    d["logs"] = [dict(e) for e in d["logs"]]
    return d


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidStateError(f"'{name}' must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidStateError(f"'{name}' must be finite, got {value!r}")
    return value


def state_from_dict(d: Mapping[str, Any]) -> GameState:
    """Rebuild a GameState from its dict form. Raises InvalidStateError."""
    if not isinstance(d, Mapping):
        raise InvalidStateError("state must be a mapping")
    required = ("turn", "credits", "pollution", "temperature", "popularity", "energy", "cooldowns", "logs")
    for key in required:
        if key not in d:
            raise InvalidStateError(f"missing field '{key}'")

    try:
        pop = d["popularity"]
        energy = d["energy"]
        cap = energy["capacity"]
        state = GameState(
            turn=int(_number(d["turn"], "turn")),
            credits=int(_number(d["credits"], "credits")),
            pollution=float(_number(d["pollution"], "pollution")),
            temperature=float(_number(d["temperature"], "temperature")),
            popularity=Popularity(**{c: int(_number(pop[c], f"popularity.{c}")) for c in SOCIAL_CLASSES}),
            energy=EnergyState(
                capacity=Capacity(**{s: int(_number(cap[s], f"capacity.{s}")) for s in ENERGY_SOURCES}),
                storage=int(_number(energy["storage"], "energy.storage")),
                consumption_base=int(_number(energy.get("consumption_base", CONSUMPTION_BASE), "energy.consumption_base")),
                production=int(_number(energy.get("production", 0), "energy.production")),
                consumption=int(_number(energy.get("consumption", 0), "energy.consumption")),
                max_storage=int(_number(energy.get("max_storage", DEFAULT_MAX_STORAGE), "energy.max_storage")),
            ),
            cooldowns=Cooldowns(decision=int(_number(d["cooldowns"]["decision"], "cooldowns.decision"))),
            logs=tuple(
                LogEntry(timestamp=str(e["timestamp"]), message=str(e["message"]), type=str(e.get("type", "info")))
                for e in d["logs"]
            ),
            efficiency_bonus=float(_number(d.get("efficiency_bonus", 0.0), "efficiency_bonus")),
            renewable_bonus=float(_number(d.get("renewable_bonus", 0.0), "renewable_bonus")),
            cleanup_active=bool(d.get("cleanup_active", False)),
        )
    except (KeyError, TypeError) as e:
        raise InvalidStateError(f"malformed state: {e}") from e

    validate_state(state)
    return state


def validate_state(state: GameState) -> None:
    """Raise InvalidStateError if any model constraint does not hold."""
    if not 1 <= state.turn < math.inf:
        raise InvalidStateError("turn must be a finite number >= 1")
    if not 0 <= state.credits < math.inf:
        raise InvalidStateError("credits must be a finite number >= 0")
    lo, hi = POLLUTION_RANGE
    if not lo <= state.pollution <= hi:
        raise InvalidStateError(f"pollution must be within [{lo}, {hi}]")
    lo, hi = TEMPERATURE_RANGE
    if not lo <= state.temperature <= hi:
        raise InvalidStateError(f"temperature must be within [{lo}, {hi}]")
    lo, hi = POPULARITY_RANGE
    for c in SOCIAL_CLASSES:
        if not lo <= state.popularity.get(c) <= hi:
            raise InvalidStateError(f"popularity.{c} must be within [{lo}, {hi}]")
    for s in ENERGY_SOURCES:
        if state.energy.capacity.get(s) < 0:
            raise InvalidStateError(f"capacity.{s} must be >= 0")
    if state.energy.max_storage < 0 or not 0 <= state.energy.storage <= state.energy.max_storage:
        raise InvalidStateError("storage must be within [0, max_storage]")
    if state.cooldowns.decision < 0:
        raise InvalidStateError("cooldowns.decision must be >= 0")
    if len(state.logs) > LOG_BUFFER_SIZE:
        raise InvalidStateError(f"at most {LOG_BUFFER_SIZE} log entries are kept")
