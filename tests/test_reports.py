from __future__ import annotations

import csv
import json
import os
import sys

from planet_sim.core.storage import load_game
from planet_sim.simulation.metrics import MetricsCollector
from planet_sim.viz.dashboard import comprehensive_report
from planet_sim.viz.logger import GameLogger


def _played(engine, turns=2):
    engine.apply_action("expand_solar")
    for _ in range(turns):
        engine.end_turn()
    return engine


def test_metrics_snapshot_per_committed_turn(quiet_engine):
    engine = _played(quiet_engine)
    snaps = engine.metrics.snapshots
    assert [s.turn for s in snaps] == [2, 3]
    assert snaps[0].actions == ["expand_solar"]
    assert snaps[1].actions == []
    assert snaps[0].credits == 2235
    assert snaps[0].income == 1545
    assert snaps[0].maintenance == 110
    assert snaps[0].balance == 2
    assert snaps[0].capacity["solar"] == 10
    assert engine.metrics.series("pollution") == [91.0, 100.0]


def test_metrics_csv_and_summary(quiet_engine, tmp_path):
    engine = _played(quiet_engine)
    path = tmp_path / "out" / "metrics.csv"
    engine.metrics.export_csv(str(path))

    with open(path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2
    assert rows[0]["credits"] == "2235"
    assert rows[0]["cap_solar"] == "10"
    assert rows[0]["actions"] == "expand_solar"

    summary = engine.metrics.summary_report()
    assert "Turn 2 to Turn 3" in summary
    assert "Credits: 2235 ->" in summary
    assert MetricsCollector().summary_report() == "No data available for the specified period."


def test_logger_verbosity_filter(tmp_path):
    log_file = tmp_path / "game.log"
    logger = GameLogger(verbosity=0, log_file=str(log_file), stdout=False)
    logger.log(GameLogger.INFO, "Turn 1 completed", turn=1)
    logger.log(GameLogger.WARNING, "Energy deficit: 5 MW", turn=1)
    logger.log(GameLogger.EVENT, "Strong winds drive wind production up.", turn=1, event="strong_wind")
    logger.flush_turn(1)
    logger.close()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines == ["[Turn   1] [EVENT  ] Strong winds drive wind production up."]
    # Every entry is kept regardless of verbosity
    assert len(logger.entries) == 3


def test_logger_narrative_and_json(tmp_path):
    logger = GameLogger(verbosity=2, stdout=False)
    logger.log(GameLogger.SUCCESS, "Action executed: Public campaign", turn=4)
    assert "Public campaign" in logger.get_narrative(4)
    assert logger.get_narrative(5) == "Turn 5: Nothing notable happened."

    path = tmp_path / "events.json"
    logger.export_json(str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [{"turn": 4, "type": "success", "message": "Action executed: Public campaign", "data": {}}]


def test_logger_groups_entries_by_turn_and_type(tmp_path):
    logger = GameLogger(verbosity=2, stdout=False)
    logger.log(GameLogger.INFO, "Turn 3 completed", turn=3)
    logger.log(GameLogger.WARNING, "Energy deficit: 12 MW", turn=3)
    logger.log(GameLogger.INFO, "Turn 4 completed", turn=4)
    logger.log("shout", "Unknown types are kept as info", turn=4)
    logger.log(GameLogger.SUCCESS, "Action executed: Public campaign")

    # Open entries are already visible per turn
    assert [e.message for e in logger.entries_for(4)] == ["Turn 4 completed", "Unknown types are kept as info"]
    logger.flush_turn(4)
    assert logger.type_counts(4) == {"info": 2, "success": 1}

    assert logger.type_counts(3) == {"info": 1, "warning": 1}
    assert [e.message for e in logger.entries_for(3, types=["warning"])] == ["Energy deficit: 12 MW"]
    narrative = logger.get_narrative(3)
    assert narrative.splitlines()[0] == "=== Turn 3 (1 info, 1 warning) ==="
    assert narrative.splitlines()[1] == "  [warning] Energy deficit: 12 MW"

    path = tmp_path / "warnings.json"
    logger.export_json(str(path), types=["warning"])
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [e["message"] for e in data] == ["Energy deficit: 12 MW"]


def test_engine_writes_to_its_logger(quiet_engine):
    engine = _played(quiet_engine, turns=1)
    messages = [e.message for e in engine.logger.entries]
    assert "Game started. Welcome to Planet 2500!" in messages
    assert "Action executed: Expand solar power" in messages
    assert "Turn 1 completed" in messages
    assert "Pollution increase: 90.0" in messages


def test_comprehensive_report_writes_pngs(quiet_engine, tmp_path):
    engine = _played(quiet_engine)
    written = comprehensive_report(engine.metrics, str(tmp_path))
    names = sorted(os.path.basename(p) for p in written)
    assert names == ["capacity_mix.png", "credits.png", "energy.png", "environment.png", "popularity.png"]
    for name in names:
        assert (tmp_path / name).stat().st_size > 0

    assert comprehensive_report(MetricsCollector(), str(tmp_path / "empty")) == []


def test_cli_autoplay(tmp_path, monkeypatch):
    from planet_sim import main as cli

    out = tmp_path / "results"
    save = tmp_path / "save.json"
    monkeypatch.setattr(
        sys,
        "argv",
        ["planet-sim", "--auto", "--turns", "3", "--seed", "9", "--output-dir", str(out),
         "--save", str(save), "--no-plots"],
    )
    cli.main()

    assert (out / "metrics.csv").exists()
    assert (out / "events.json").exists()
    assert (out / "game.log").exists()
    assert load_game(str(save)) is not None
