from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from conftest import FixedRng
from planet_sim.core.effects import Effects
from planet_sim.core.state import Popularity, default_start_state, with_capacity
from planet_sim.simulation.events import (
    EVENTS,
    EventDefinition,
    EventSystem,
    all_events,
    apply_event,
    get_event,
)


def _state(turn=5, **overrides):
    return replace(default_start_state(), turn=turn, **overrides)


def test_catalog_is_well_formed():
    ids = [e.id for e in all_events()]
    assert len(ids) == 15
    assert len(set(ids)) == len(ids)
    for event in EVENTS:
        assert event.weight > 0
        assert 1 <= event.min_turn <= event.max_turn
    assert get_event("sunny_day").temporary
    assert get_event("tech_discovery").permanent
    assert get_event("alien_invasion") is None


def test_turn_window_and_precondition():
    disaster = get_event("natural_disaster")
    hot = dict(temperature=30.0)
    assert not disaster.can_occur(_state(turn=1, **hot))
    assert disaster.can_occur(_state(turn=2, **hot))
    assert not disaster.can_occur(_state(turn=2))

    boom = get_event("economic_boom")
    assert boom.can_occur(_state(turn=10, credits=500))
    assert not boom.can_occur(_state(turn=41, credits=500))


def test_weights_follow_the_narrative():
    system = EventSystem(FixedRng())
    disaster = get_event("natural_disaster")
    assert system.modified_weight(disaster, _state()) == 8
    assert system.modified_weight(disaster, _state(pollution=80.0)) == pytest.approx(12)
    assert system.modified_weight(disaster, _state(pollution=80.0, temperature=40.0)) == pytest.approx(15.6)

    protest = get_event("public_protest")
    assert system.modified_weight(protest, _state(popularity=Popularity(20, 20, 20))) == 20

    scandal = get_event("corporate_scandal")
    assert system.modified_weight(scandal, _state()) == pytest.approx(9)


def test_select_event_walks_the_cumulative_weights():
    s = _state(turn=3)  # eligible: sabotage (5), policy_shift (6)
    assert [e.id for e in EventSystem(FixedRng()).eligible_events(s)] == ["sabotage", "policy_shift"]

    assert EventSystem(FixedRng(0.0)).select_event(s).id == "sabotage"
    assert EventSystem(FixedRng(0.45)).select_event(s).id == "sabotage"
    assert EventSystem(FixedRng(0.46)).select_event(s).id == "policy_shift"
    assert EventSystem(FixedRng(0.999)).select_event(s).id == "policy_shift"


def test_select_event_with_nothing_eligible():
    s = with_capacity(_state(turn=1), {"fossil": 0})
    assert EventSystem(FixedRng(0.0)).select_event(s) is None


def test_roll_respects_base_chance():
    s = _state(turn=3)

    quiet = EventSystem(FixedRng(0.5)).roll(s)
    assert not quiet.occurred
    assert not quiet.rolled
    assert quiet.state is s

    fired = EventSystem(FixedRng(0.5)).roll(s, extra_chance=50)
    assert fired.rolled
    assert fired.event.id == "policy_shift"
    assert fired.state.popularity == Popularity(50, 55, 53)


def test_apply_event_effects():
    s = _state()
    assert apply_event(s, get_event("battery_advance")).energy.max_storage == 110
    assert apply_event(s, get_event("tech_discovery")).efficiency_bonus == pytest.approx(0.05)

    hit = apply_event(with_capacity(s, {"solar": 1, "wind": 10, "fossil": 50}), get_event("natural_disaster"))
    assert hit.energy.capacity.solar == 0
    assert hit.energy.capacity.wind == 7
    assert hit.temperature == 23


def test_custom_catalog():
    only = EventDefinition(
        id="meteor",
        name="Meteor",
        weight=1,
        min_turn=1,
        max_turn=99,
        effects=Effects(credits=-10),
        description="A small meteor lands.",
        log_message="Meteor strike.",
    )
    system = EventSystem(np.random.default_rng(0), catalog=(only,))
    outcome = system.roll(default_start_state(), extra_chance=100)
    assert outcome.event is only
    assert outcome.state.credits == 990
