"""Per-turn game log: typed entries, verbosity-filtered output, JSON export."""

from __future__ import annotations

import json
import os
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional, TextIO

from planet_sim.core.config import LOG_TYPES


@dataclass
class TurnLogEntry:
    turn: int
    type: str
    message: str
    data: dict = field(default_factory=dict)

    def render(self) -> str:
        return f"[Turn {self.turn:>3}] [{self.type.upper():<7}] {self.message}"


class GameLogger:
    """Collects log entries turn by turn and prints those the verbosity allows.

    verbosity levels:
        0 = only events and errors
        1 = + warnings and successful actions
        2 = everything (turn summaries included)
    """

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    EVENT = "event"

    # Lowest verbosity at which each entry type is written out
    MIN_VERBOSITY: dict[str, int] = {
        EVENT: 0,
        ERROR: 0,
        WARNING: 1,
        SUCCESS: 1,
        INFO: 2,
    }

    def __init__(
        self,
        verbosity: int = 1,
        log_file: Optional[str] = None,
        stdout: bool = True,
    ) -> None:
        self.verbosity = verbosity
        self._stdout = stdout
        self._file: Optional[TextIO] = None

        # Entries of the turn in progress, then the committed history
        self._open_turn: list[TurnLogEntry] = []
        self._history: list[TurnLogEntry] = []
        self._by_turn: dict[int, list[TurnLogEntry]] = {}

        if log_file:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            self._file = open(log_file, "w", encoding="utf-8")

    @property
    def entries(self) -> list[TurnLogEntry]:
        return self._history + self._open_turn

    def log(self, type: str, message: str, turn: int = 0, **data) -> None:
        if type not in LOG_TYPES:
            type = self.INFO
        self._open_turn.append(TurnLogEntry(turn=turn, type=type, message=message, data=data))

    def is_visible(self, entry: TurnLogEntry) -> bool:
        return self.MIN_VERBOSITY.get(entry.type, 2) <= self.verbosity

    def flush_turn(self, turn: int) -> None:
        """Close the turn: write the visible entries and move all to history.

        Entries logged without a turn number are stamped with this one.
        """
        for entry in self._open_turn:
            if not entry.turn:
                entry.turn = turn

        lines = [e.render() for e in self._open_turn if self.is_visible(e)]
        for line in lines:
            if self._stdout:
                print(line)
            if self._file:
                self._file.write(line + "\n")
        if self._file:
            self._file.flush()

        for entry in self._open_turn:
            self._by_turn.setdefault(entry.turn, []).append(entry)
        self._history.extend(self._open_turn)
        self._open_turn = []

    def entries_for(self, turn: int, types: Optional[Iterable[str]] = None) -> list[TurnLogEntry]:
        wanted = set(types) if types is not None else None
        found = self._by_turn.get(turn, []) + [e for e in self._open_turn if e.turn == turn]
        return [e for e in found if wanted is None or e.type in wanted]

    def type_counts(self, turn: int) -> dict[str, int]:
        return dict(Counter(e.type for e in self.entries_for(turn)))

    def get_narrative(self, turn: int) -> str:
        """Human-readable summary of one turn, most severe types first."""
        turn_entries = self.entries_for(turn)
        if not turn_entries:
            return f"Turn {turn}: Nothing notable happened."

        counts = self.type_counts(turn)
        header = ", ".join(f"{n} {t}" for t, n in counts.items())
        lines = [f"=== Turn {turn} ({header}) ==="]
        for entry in sorted(turn_entries, key=lambda e: self.MIN_VERBOSITY.get(e.type, 2)):
            lines.append(f"  [{entry.type}] {entry.message}")
        return "\n".join(lines)

    def export_json(self, filepath: str, types: Optional[Iterable[str]] = None) -> None:
        """Dump every entry (or only the given types) as a JSON list."""
        wanted = set(types) if types is not None else None
        data = [asdict(e) for e in self.entries if wanted is None or e.type in wanted]
        os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None
