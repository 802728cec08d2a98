from __future__ import annotations

from dataclasses import replace

import pytest

from conftest import FixedRng
from planet_sim.core.state import Popularity, default_start_state, state_to_dict, with_capacity
from planet_sim.simulation.decisions import DecisionSystem, get_decision
from planet_sim.simulation.engine import CONTINUE, DECISION_REQUIRED, GAME_OVER, GameEngine
from planet_sim.simulation.events import EventSystem


def _without_logs(state):
    return replace(state, logs=())


def test_new_engine_starts_from_the_baseline(quiet_engine):
    assert _without_logs(quiet_engine.state) == default_start_state()
    assert quiet_engine.state.logs[-1].message == "Game started. Welcome to Planet 2500!"
    assert quiet_engine.is_running
    assert quiet_engine.pending_decision is None


def test_build_solar_then_end_turn(quiet_engine):
    engine = quiet_engine
    assert engine.apply_action("expand_solar")
    assert engine.state.credits == 800
    assert engine.state.pollution == 2
    assert engine.state.popularity == Popularity(50, 53, 51)

    outcome = engine.end_turn()
    s = engine.state
    assert outcome.kind == CONTINUE
    assert s.turn == 2
    assert s.energy.production == 52
    assert s.energy.consumption == 50
    assert s.energy.storage == 1
    assert s.pollution == 91.0
    assert s.temperature == pytest.approx(28.9)
    assert s.credits == 2235
    assert s.popularity == Popularity(46, 50, 51)
    assert outcome.report.economy.maintenance == 110


def test_doing_nothing_ends_in_ecological_disaster(quiet_engine):
    engine = quiet_engine

    first = engine.end_turn()
    assert first.kind == CONTINUE
    s = engine.state
    assert s.turn == 2
    assert s.credits == 2400
    assert s.pollution == 89.0
    assert s.temperature == 29.0
    assert s.popularity == Popularity(46, 48, 50)

    second = engine.end_turn()
    assert second.kind == GAME_OVER
    assert second.result.type == "ecological_disaster"
    assert not second.result.victory
    assert not engine.is_running
    assert engine.state.pollution == 100.0

    # Once over, nothing else is accepted
    assert not engine.apply_action("expand_wind")
    assert engine.state.logs[-1].type == "warning"
    assert engine.end_turn().kind == GAME_OVER


def test_failed_actions_are_logged_and_change_nothing(quiet_engine):
    engine = quiet_engine
    before = _without_logs(engine.state)

    assert not engine.apply_action("expand_hydro", 4)
    assert engine.state.logs[-1].type == "warning"
    assert not engine.apply_action("teleport")
    assert engine.state.logs[-1].type == "error"
    assert not engine.apply_action("expand_solar", 0)

    assert _without_logs(engine.state) == before


def test_decision_suspends_the_turn(eager_engine):
    engine = eager_engine

    outcome = engine.end_turn()
    assert outcome.kind == DECISION_REQUIRED
    assert outcome.decision.id == "tech_breakthrough"
    assert engine.pending_decision is outcome.decision

    # Nothing is committed while the decision is pending
    assert engine.state.turn == 1
    assert engine.state.credits == 1000
    assert not engine.apply_action("expand_wind")
    assert engine.state.logs[-1].type == "warning"
    again = engine.end_turn()
    assert again.kind == DECISION_REQUIRED
    assert again.decision is outcome.decision

    assert engine.resolve_decision("maybe") is None
    assert engine.pending_decision is not None

    resolved = engine.resolve_decision("accept")
    s = engine.state
    assert resolved.kind == CONTINUE
    assert engine.pending_decision is None
    assert s.turn == 2
    assert s.credits == 2200
    assert s.energy.max_storage == 120
    assert s.efficiency_bonus == pytest.approx(0.1)
    assert s.cooldowns.decision == 5
    assert 'Decision "Technological Breakthrough" ACCEPTED' in [e.message for e in s.logs]
    assert engine.metrics.snapshots[-1].decision == "tech_breakthrough:accept"


def test_cooldown_counts_down_and_events_fire(eager_engine):
    engine = eager_engine
    engine.end_turn()
    engine.resolve_decision("reject")
    assert engine.state.cooldowns.decision == 5

    outcome = engine.end_turn()
    assert outcome.kind == GAME_OVER
    assert engine.state.cooldowns.decision == 4
    assert outcome.report.event.id == "natural_disaster"
    assert engine.metrics.snapshots[-1].event == "natural_disaster"


def _scripted_engine(state, *decisions):
    """Always-rolling engine with no events and only the given decisions."""
    engine = GameEngine(rng=FixedRng(0.0))
    engine.event_system = EventSystem(engine.rng, catalog=())
    engine.decision_system = DecisionSystem(engine.rng, catalog=decisions)
    assert engine.load_state(state)
    return engine


def test_decision_cooldown_runs_out_over_successive_turns():
    always = replace(get_decision("tech_breakthrough"), precondition=lambda s: True)
    engine = _scripted_engine(with_capacity(default_start_state(), {"wind": 55}), always)

    assert engine.end_turn().kind == DECISION_REQUIRED
    assert engine.resolve_decision("accept").kind == CONTINUE
    assert engine.state.cooldowns.decision == always.cooldown

    for remaining in range(always.cooldown - 1, -1, -1):
        outcome = engine.end_turn()
        assert outcome.kind == CONTINUE
        assert engine.pending_decision is None
        assert engine.state.cooldowns.decision == remaining

    again = engine.end_turn()
    assert again.kind == DECISION_REQUIRED
    assert again.decision.id == "tech_breakthrough"
    assert [s.decision for s in engine.metrics.snapshots if s.decision] == ["tech_breakthrough:accept"]


def test_summit_aid_is_income_before_the_zero_floor():
    # 40 + 1500 income - 1590 upkeep would floor at 0 without the aid
    state = with_capacity(replace(default_start_state(), turn=5, credits=40, pollution=60.0), {"hydro": 1060})
    engine = _scripted_engine(state, get_decision("climate_summit"))

    pending = engine.end_turn()
    assert pending.kind == DECISION_REQUIRED
    assert pending.decision.id == "climate_summit"

    outcome = engine.resolve_decision("accept")
    assert outcome.report.economy.maintenance == 1590
    assert outcome.report.economy.international_aid == 100
    assert outcome.report.economy.effective_income == 1600
    assert engine.state.credits == 50
    assert engine.state.cooldowns.decision == 4


def test_resolve_without_pending_decision(quiet_engine):
    assert quiet_engine.resolve_decision("accept") is None


def test_get_state_is_a_detached_snapshot(quiet_engine):
    a = quiet_engine.get_state()
    b = quiet_engine.get_state()
    assert a == b
    assert a is not quiet_engine.state
    assert quiet_engine.get_state() == quiet_engine.state


def test_load_state_round_trip(quiet_engine):
    engine = quiet_engine
    engine.apply_action("expand_geo", 2)
    engine.end_turn()
    saved = engine.get_state()

    other = GameEngine(seed=5)
    assert other.load_state(saved)
    assert other.state == saved
    assert other.load_state(state_to_dict(saved))
    assert other.state == saved


def test_load_state_rejects_bad_input(quiet_engine):
    engine = quiet_engine
    before = engine.state

    bad = state_to_dict(default_start_state())
    bad["popularity"]["poor"] = 400
    assert not engine.load_state(bad)
    assert not engine.load_state({"turn": 3})

    overflowing = state_to_dict(default_start_state())
    overflowing["credits"] = float("inf")
    assert not engine.load_state(overflowing)
    assert not engine.load_state(replace(default_start_state(), credits=float("nan")))
    assert engine.state == before


def test_load_state_clears_pending_decision(eager_engine):
    engine = eager_engine
    engine.end_turn()
    assert engine.pending_decision is not None
    assert engine.load_state(default_start_state())
    assert engine.pending_decision is None
    assert engine.is_running


def test_reset_state(quiet_engine):
    engine = quiet_engine
    engine.end_turn()
    engine.end_turn()
    assert not engine.is_running

    engine.reset_state()
    assert engine.is_running
    assert _without_logs(engine.state) == default_start_state()
    assert engine.metrics.snapshots == []


def test_same_seed_same_game():
    def play(seed):
        engine = GameEngine(seed=seed)
        for _ in range(6):
            if not engine.is_running:
                break
            engine.apply_action("expand_wind", 2)
            engine.apply_action("reduce_fossil", 2)
            outcome = engine.end_turn()
            if outcome.kind == DECISION_REQUIRED:
                engine.resolve_decision("accept")
        return engine

    a, b = play(123), play(123)
    assert _without_logs(a.state) == _without_logs(b.state)
    assert a.metrics.series("credits") == b.metrics.series("credits")


def test_engines_do_not_share_state():
    a = GameEngine(seed=1)
    b = GameEngine(seed=1)
    a.apply_action("expand_solar")
    assert b.state.credits == 1000
    assert b.state.energy.capacity.solar == 0
