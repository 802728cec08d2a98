from __future__ import annotations

from planet_sim.core.state import Capacity, Popularity
from planet_sim.economy.finance import (
    apply_tax_and_subsidy,
    economic_health,
    income_by_class,
    maintenance_by_source,
    maintenance_cost,
    settle_credits,
    simulate_economy,
    total_income,
)


def test_income_by_class():
    pop = Popularity(50, 50, 50)
    assert income_by_class(pop) == {"poor": 250, "middle": 500, "rich": 750}
    assert total_income(pop) == 1500


def test_no_modifiers_for_a_content_population():
    mods = apply_tax_and_subsidy(Popularity(50, 50, 50), 1500)
    assert mods.modifier == 0
    assert mods.effective_income == 1500
    assert mods.tax_rate == 0
    assert mods.subsidy_rate == 0


def test_tax_and_subsidy_are_independent():
    pop = Popularity(poor=20, middle=50, rich=30)
    base = total_income(pop)
    assert base == 1050

    mods = apply_tax_and_subsidy(pop, base)
    assert mods.tax_rate == 0.10
    assert mods.subsidy_rate == 0.05
    assert mods.modifier == -105 + 52
    assert mods.effective_income == 997


def test_maintenance_per_ten_mw():
    cap = Capacity(solar=15, wind=10, fossil=50)
    assert maintenance_by_source(cap) == {"solar": 15, "wind": 8, "fossil": 100}
    assert maintenance_cost(cap) == 123
    assert maintenance_cost(Capacity()) == 0


def test_settle_credits_clamps_before_decision_delta():
    assert settle_credits(1000, 500, 100) == 1400
    assert settle_credits(100, 0, 500) == 0
    assert settle_credits(100, 0, 500, decision_delta=50) == 50
    assert settle_credits(100, 0, 500, decision_delta=-50) == -50


def test_simulate_economy_from_start():
    report = simulate_economy(Popularity(50, 50, 50), Capacity(fossil=50), 1000)
    assert report.base_income == 1500
    assert report.maintenance == 100
    assert report.credits == 2400
    assert report.net == 1400


def test_simulate_economy_after_a_solar_build():
    report = simulate_economy(Popularity(50, 53, 51), Capacity(solar=10, fossil=50), 800)
    assert report.effective_income == 1545
    assert report.maintenance == 110
    assert report.credits == 2235


def test_international_aid_counts_as_income():
    report = simulate_economy(Popularity(50, 50, 50), Capacity(fossil=50), 1000, international_aid=100)
    assert report.effective_income == 1600
    assert report.credits == 2500


def test_economic_health():
    assert economic_health(50, 1000, 0) == "Critical"
    assert economic_health(300, 1000, 0) == "Worrying"
    assert economic_health(1000, 100, 200) == "Deficit"
    assert economic_health(1000, 150, 100) == "Stable"
    assert economic_health(1000, 500, 100) == "Prosperous"
