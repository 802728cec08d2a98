from __future__ import annotations

from dataclasses import replace

from planet_sim.core.state import Popularity, default_start_state, with_capacity
from planet_sim.simulation.victory import (
    check_defeat,
    check_victory,
    evaluate,
    final_message,
    final_statistics,
    victory_score,
)


def _state(**overrides):
    return replace(default_start_state(), **overrides)


def _with_energy(state, production, consumption):
    return replace(state, energy=replace(state.energy, production=production, consumption=consumption))


def test_game_continues_from_the_start():
    assert evaluate(default_start_state()) is None


def test_defeat_conditions():
    assert check_defeat(_state(credits=0)) == "bankruptcy"
    assert check_defeat(_state(pollution=100.0)) == "ecological_disaster"
    assert check_defeat(_state(temperature=45.0)) == "climate_catastrophe"
    assert check_defeat(_state(popularity=Popularity(20, 20, 20))) == "social_revolution"
    assert check_defeat(_with_energy(default_start_state(), 20, 50)) == "energy_crisis"
    assert check_defeat(_with_energy(default_start_state(), 21, 50)) is None


def test_defeat_priority():
    assert check_defeat(_state(credits=0, pollution=100.0, temperature=50.0)) == "bankruptcy"
    assert check_defeat(_state(pollution=100.0, temperature=50.0)) == "ecological_disaster"
    assert check_defeat(_state(temperature=50.0, popularity=Popularity(0, 0, 0))) == "climate_catastrophe"


def test_defeat_beats_victory():
    s = with_capacity(_state(pollution=5.0, popularity=Popularity(80, 80, 80), credits=0), {"solar": 100})
    result = evaluate(s)
    assert not result.victory
    assert result.type == "bankruptcy"
    assert result.score is None


def test_sustainable_victory():
    s = with_capacity(
        _state(turn=20, pollution=5.0, popularity=Popularity(75, 75, 75)),
        {"solar": 80, "fossil": 10},
    )
    assert check_victory(s) == "sustainable_complete"
    result = evaluate(s)
    assert result.victory
    assert result.title == "Complete Sustainable Victory!"
    assert "Social Harmony" in result.achievements
    # pollution 30 + balance 15 + popularity 15 + credits 20 + speed 15
    assert result.score == 95


def test_energy_victory():
    s = _with_energy(_state(turn=10, pollution=40.0), 80, 50)
    assert check_victory(s) == "energy_victory"
    assert victory_score(s) == 20 + 25 + 10 + 20 + 20


def test_partial_victory_and_turn_limits():
    s = _state(turn=35, pollution=25.0, popularity=Popularity(65, 65, 65), credits=600)
    assert check_victory(s) == "partial_victory"
    assert check_victory(replace(s, turn=41)) is None


def test_final_statistics_and_message():
    s = with_capacity(
        _state(turn=12, pollution=5.0, temperature=18.0, popularity=Popularity(85, 85, 85), credits=50),
        {"solar": 30, "fossil": 10},
    )
    stats = final_statistics(s, victory=False)
    assert stats.turns_survived == 12
    assert stats.total_capacity == 40
    assert stats.renewable_capacity == 30
    assert stats.renewable_ratio == 0.75
    assert stats.ecology_rating == "Excellent"
    assert stats.society_rating == "Harmonious"
    assert stats.economy_rating == "Critical"

    result = evaluate(_state(credits=0))
    assert "12 turns" in final_message(result, stats)
    assert final_message(result, stats).startswith("Unfortunately")
