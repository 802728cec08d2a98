from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from planet_sim.core.state import Popularity, default_start_state
from planet_sim.social.society import (
    apply_action_popularity,
    apply_popularity_delta,
    class_migration,
    class_satisfaction,
    long_term_drift,
    revolt_probability,
    simulate_society,
    social_recommendations,
)


def test_popularity_stays_within_bounds():
    rng = np.random.default_rng(11)
    pop = Popularity(50, 50, 50)
    for _ in range(500):
        delta = {c: int(rng.integers(-40, 41)) for c in ("poor", "middle", "rich")}
        pop = apply_popularity_delta(pop, delta)
        for value in pop.as_dict().values():
            assert 0 <= value <= 100


def test_action_reactions_scale_with_batches():
    pop = Popularity(50, 50, 50)
    assert apply_action_popularity(pop, "reduce_fossil") == Popularity(54, 52, 47)
    assert apply_action_popularity(pop, "reduce_fossil", batches=3) == Popularity(62, 56, 41)
    assert apply_action_popularity(pop, "unknown") == pop


def test_no_drift_in_a_healthy_world():
    assert long_term_drift(default_start_state()) == {"poor": 0, "middle": 0, "rich": 0}


def test_drift_accumulates_every_stress():
    s = default_start_state()
    s = replace(
        s,
        pollution=60.0,
        temperature=40.0,
        credits=100,
        energy=replace(s.energy, production=30, consumption=50),
    )
    assert long_term_drift(s) == {"poor": -9, "middle": -5, "rich": -1}


def test_class_migration():
    assert class_migration(Popularity(50, 50, 50)) == {"poor": 0, "middle": 0, "rich": 0}
    assert class_migration(Popularity(15, 50, 50)) == {"poor": -1, "middle": 0, "rich": 0}
    assert class_migration(Popularity(50, 25, 50)) == {"poor": 1, "middle": -1, "rich": 0}
    assert class_migration(Popularity(50, 85, 50)) == {"poor": 0, "middle": -1, "rich": 1}


def test_revolt_probability_is_linear():
    assert revolt_probability(Popularity(60, 60, 60)) == 0
    assert revolt_probability(Popularity(90, 90, 90)) == 0
    assert revolt_probability(Popularity(40, 40, 40)) == pytest.approx(50)
    assert revolt_probability(Popularity(20, 20, 20)) == 100
    assert revolt_probability(Popularity(0, 0, 0)) == 100


def test_satisfaction_labels():
    sat = class_satisfaction(Popularity(75, 55, 10))
    assert sat == {"poor": "Satisfied", "middle": "Neutral", "rich": "Revolting", "overall": "Dissatisfied"}


def test_simulate_society_applies_drift_then_migration():
    s = replace(default_start_state(), pollution=89.0, temperature=29.0, credits=2400)
    report = simulate_society(s.popularity, s)
    assert report.drift == {"poor": -4, "middle": -2, "rich": 0}
    assert report.popularity == Popularity(46, 48, 50)
    assert report.migration == {"poor": 0, "middle": 0, "rich": 0}
    assert report.average == pytest.approx(48)


def test_social_recommendations():
    assert social_recommendations(Popularity(60, 60, 60)) == []
    recs = social_recommendations(Popularity(10, 20, 20))
    assert recs[0].startswith("The poor are in revolt")
    assert "High risk of revolt: act immediately" in recs
