from __future__ import annotations

import pytest

from planet_sim.simulation.engine import GameEngine


class FixedRng:
    """Generator stand-in: every random() returns the same value, integers() returns 0."""

    def __init__(self, value: float = 0.99) -> None:
        self.value = value

    def random(self) -> float:
        return self.value

    def integers(self, *args, **kwargs) -> int:
        return 0


@pytest.fixture
def quiet_engine():
    """Engine whose random rolls never fire an event or a decision."""
    return GameEngine(rng=FixedRng(0.99))


@pytest.fixture
def eager_engine():
    """Engine whose random rolls always fire."""
    return GameEngine(rng=FixedRng(0.0))
