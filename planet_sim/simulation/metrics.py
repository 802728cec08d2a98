"""Per-turn data collection, statistics and export."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from typing import Optional

from planet_sim.core.config import ENERGY_SOURCES
from planet_sim.core.state import GameState, average_popularity
from planet_sim.world.energy import renewable_ratio


@dataclass
class TurnSnapshot:
    """A snapshot of the committed state after one turn."""

    turn: int = 0
    credits: int = 0
    pollution: float = 0.0
    temperature: float = 0.0
    poor: int = 0
    middle: int = 0
    rich: int = 0
    avg_popularity: float = 0.0
    production: int = 0
    consumption: int = 0
    storage: int = 0
    renewable_ratio: float = 0.0
    income: int = 0
    maintenance: int = 0
    revolt_probability: float = 0.0
    capacity: dict[str, int] = field(default_factory=dict)
    actions: list[str] = field(default_factory=list)
    event: str = ""
    decision: str = ""

    @property
    def balance(self) -> int:
        return self.production - self.consumption


class MetricsCollector:
    """Collects time-series data every committed turn."""

    def __init__(self) -> None:
        self.snapshots: list[TurnSnapshot] = []
        self._turn_actions: list[str] = []
        self._turn_event: str = ""
        self._turn_decision: str = ""

    def record_action(self, action: str) -> None:
        self._turn_actions.append(action)

    def record_event(self, event_id: str) -> None:
        self._turn_event = event_id

    def record_decision(self, decision_id: str, choice: str) -> None:
        self._turn_decision = f"{decision_id}:{choice}"

    def collect_turn(
        self,
        state: GameState,
        report: Optional["TurnReport"] = None,  # noqa: F821
    ) -> TurnSnapshot:
        """Collect all metrics for the state just committed."""
        pop = state.popularity
        snapshot = TurnSnapshot(
            turn=state.turn,
            credits=state.credits,
            pollution=state.pollution,
            temperature=state.temperature,
            poor=pop.poor,
            middle=pop.middle,
            rich=pop.rich,
            avg_popularity=average_popularity(pop),
            production=state.energy.production,
            consumption=state.energy.consumption,
            storage=state.energy.storage,
            renewable_ratio=renewable_ratio(state.energy.capacity),
            capacity=state.energy.capacity.as_dict(),
            actions=list(self._turn_actions),
            event=self._turn_event,
            decision=self._turn_decision,
        )
        if report is not None:
            snapshot.income = report.economy.effective_income
            snapshot.maintenance = report.economy.maintenance
            snapshot.revolt_probability = report.society.revolt_probability

        self.snapshots.append(snapshot)

        # Reset per-turn counters
        self._turn_actions = []
        self._turn_event = ""
        self._turn_decision = ""

        return snapshot

    def series(self, name: str) -> list[float]:
        """One column of the time series, e.g. series("pollution")."""
        return [getattr(s, name) for s in self.snapshots]

    def export_csv(self, filepath: str) -> None:
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "turn", "credits", "pollution", "temperature",
                "poor", "middle", "rich", "avg_popularity",
                "production", "consumption", "balance", "storage",
                "renewable_ratio", "income", "maintenance", "revolt_probability",
                *(f"cap_{s}" for s in ENERGY_SOURCES),
                "actions", "event", "decision",
            ])
            for s in self.snapshots:
                writer.writerow([
                    s.turn, s.credits, f"{s.pollution:.1f}", f"{s.temperature:.1f}",
                    s.poor, s.middle, s.rich, f"{s.avg_popularity:.2f}",
                    s.production, s.consumption, s.balance, s.storage,
                    f"{s.renewable_ratio:.3f}", s.income, s.maintenance,
                    f"{s.revolt_probability:.1f}",
                    *(s.capacity.get(src, 0) for src in ENERGY_SOURCES),
                    ";".join(s.actions), s.event, s.decision,
                ])

    def summary_report(self, start_turn: int = 0, end_turn: Optional[int] = None) -> str:
        """Human-readable summary of the recorded period."""
        relevant = [
            s for s in self.snapshots
            if s.turn >= start_turn and (end_turn is None or s.turn <= end_turn)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        events = [s.event for s in relevant if s.event]
        decisions = [s.decision for s in relevant if s.decision]
        total_actions = sum(len(s.actions) for s in relevant)

        lines = [
            f"=== Game Summary: Turn {first.turn} to Turn {last.turn} ===",
            f"Duration: {last.turn - first.turn + 1} turns",
            "",
            f"Credits: {first.credits} -> {last.credits}",
            f"Pollution: {first.pollution:.1f} -> {last.pollution:.1f}",
            f"Temperature: {first.temperature:.1f} -> {last.temperature:.1f}",
            f"Avg popularity: {first.avg_popularity:.1f} -> {last.avg_popularity:.1f}",
            f"  poor {last.poor}, middle {last.middle}, rich {last.rich}",
            "",
            "Energy (final turn):",
            f"  Production: {last.production} MW / Consumption: {last.consumption} MW",
            f"  Storage: {last.storage} MW",
            f"  Renewable share: {last.renewable_ratio:.1%}",
            "",
            f"Actions taken: {total_actions}",
            f"Events: {len(events)}",
            f"Decisions: {len(decisions)}",
        ]

        if last.capacity:
            lines.append("")
            lines.append("Installed Capacity (final turn):")
            for source, mw in sorted(last.capacity.items(), key=lambda x: -x[1]):
                if mw > 0:
                    lines.append(f"  {source}: {mw} MW")

        return "\n".join(lines)
