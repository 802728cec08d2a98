"""core.storage

Save files: a versioned JSON envelope around the game state.

    {"version": "1.0.0", "timestamp": "...", "state": {...}}
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from typing import Any, Dict, Optional

from planet_sim.core.config import SAVE_VERSION
from planet_sim.core.errors import InvalidStateError
from planet_sim.core.state import GameState, state_from_dict, state_to_dict


def make_save(state: GameState) -> Dict[str, Any]:
    return {
        "version": SAVE_VERSION,
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "state": state_to_dict(state),
    }


def dumps_save(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)


def read_save(obj: Any) -> GameState:
    """Unwrap a save envelope. Raises InvalidStateError."""
    if not isinstance(obj, dict):
        raise InvalidStateError("save file must contain a JSON object")
    if obj.get("version") != SAVE_VERSION:
        raise InvalidStateError(f"unsupported save version {obj.get('version')!r}")
    if "state" not in obj:
        raise InvalidStateError("save file has no state")
    return state_from_dict(obj["state"])


def save_game(state: GameState, path: str) -> None:
    os.makedirs(os.path.dirname(path) if os.path.dirname(path) else ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps_save(make_save(state)))


def load_game(path: str) -> Optional[GameState]:
    """Load a saved game; None if the file is missing, unreadable or invalid."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
        return read_save(obj)
    except (OSError, json.JSONDecodeError, InvalidStateError):
        return None
