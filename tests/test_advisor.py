from __future__ import annotations

import csv
from dataclasses import replace

import numpy as np

from planet_sim.agents.advisor import Advisor, PlannedAction
from planet_sim.core.state import default_start_state
from planet_sim.monte_carlo import monte_carlo, run_single
from planet_sim.simulation.actions import apply_action
from planet_sim.simulation.decisions import get_decision


def test_plan_from_the_start():
    advisor = Advisor(np.random.default_rng(0))
    plan = advisor.plan_turn(default_start_state())
    assert plan == [PlannedAction("expand_wind", 5), PlannedAction("reduce_fossil", 10)]

    # Every planned action is affordable and legal in order
    s = default_start_state()
    for planned in plan:
        s = apply_action(s, planned.action, planned.batches).state
    assert s.credits == 250
    assert s.energy.capacity.fossil == 0


def test_plan_respects_the_reserve():
    advisor = Advisor(np.random.default_rng(0), reserve=1000)
    s = default_start_state()
    assert advisor.plan_turn(s) == []


def test_plan_cleans_up_and_calms_the_poor():
    s = replace(default_start_state(), credits=260, pollution=60.0)
    s = replace(s, popularity=replace(s.popularity, poor=30))
    advisor = Advisor(np.random.default_rng(0), reserve=0, max_expansion_batches=0)
    plan = advisor.plan_turn(s)
    assert [p.action for p in plan] == ["environmental_program", "public_campaign"]


def test_choose_by_utility():
    advisor = Advisor(np.random.default_rng(0))
    tech = get_decision("tech_breakthrough")
    assert advisor.choose(tech, default_start_state()) == "accept"
    assert advisor.choose(tech, replace(default_start_state(), credits=300)) == "reject"


def test_run_single_is_reproducible():
    a = replace(run_single(7, 5), elapsed_seconds=0)
    b = replace(run_single(7, 5), elapsed_seconds=0)
    assert a == b
    assert 1 <= a.turns_played <= 5


def test_monte_carlo_exports_one_row_per_run(tmp_path):
    results = monte_carlo(n_runs=3, turns=4, output_dir=str(tmp_path))
    assert len(results) == 3

    with open(tmp_path / "monte_carlo_results.csv", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][:3] == ["seed", "outcome", "victory"]
    assert len(rows) == 4
