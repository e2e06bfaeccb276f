"""core/save.py — Game state persistence.

Save files (JSON) store only runtime state:
- Game clock time (the recovery timestamps are relative to it)
- Every subject: identity, humanity, cyberware load, recovery state

Timers are NOT saved.  A restored subject is re-attached, which starts
a fresh recovery cycle; the restored ``RecoveryState.last_sample_time``
makes that first cycle account for the time between the last sample
and the save.

Recovery state layout per subject::

    "recovery": {"last_sample_time": float, "remainder": float}

Missing keys (or a missing block) load as zero.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from core.ecs import World


SAVES_DIR = Path("saves")
FORMAT_VERSION = 1


def get_save_file(slot: int = 0, saves_dir: Path | None = None) -> Path:
    """Get the path for a save slot."""
    root = Path(saves_dir) if saves_dir is not None else SAVES_DIR
    root.mkdir(parents=True, exist_ok=True)
    return root / f"slot{slot}.json"


def save_game_state(world: "World", slot: int = 0,
                    saves_dir: Path | None = None) -> Path:
    """Write every subject's runtime state.  Returns path to save file."""
    from components import GameClock, Humanity, RecoveryState
    from logic.entity_factory import describe

    save_path = get_save_file(slot, saves_dir)

    clock = world.res(GameClock)
    entities_data: dict[str, Any] = {}
    for eid, _hum in world.all_of(Humanity):
        desc = describe(world, eid)
        state = world.get(eid, RecoveryState)
        if state is not None:
            desc["recovery"] = state.to_dict()
        entities_data[str(eid)] = desc

    save_data = {
        "format_version": FORMAT_VERSION,
        "clock": {"time": float(clock.time) if clock else 0.0},
        "entities": entities_data,
    }

    with open(save_path, "w") as f:
        json.dump(save_data, f, indent=2)

    print(f"[SAVE] Wrote {len(entities_data)} subjects to {save_path}")
    return save_path


def load_game_state(slot: int = 0,
                    saves_dir: Path | None = None) -> dict[str, Any] | None:
    """Load game state from save file.

    Returns None if the save file doesn't exist or can't be parsed.
    Caller applies it with ``restore_game_state``.
    """
    save_path = get_save_file(slot, saves_dir)
    if not save_path.exists():
        return None

    try:
        with open(save_path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as ex:
        print(f"[SAVE] Error loading save file: {ex}")
        return None
    if not isinstance(data, dict):
        print(f"[SAVE] {save_path} is not a save object — ignored")
        return None
    return data


def restore_game_state(world: "World", data: dict[str, Any]) -> list[int]:
    """Re-create saved subjects under their old ids.  Returns their eids.

    Subjects are not attached here; the caller emits ``SubjectAttached``
    once the world is ready.
    """
    from components import GameClock, RecoveryState
    from logic.entity_factory import spawn_from_descriptor

    clock = world.res(GameClock)
    if clock is not None:
        clock.time = float(data.get("clock", {}).get("time", 0.0))

    eids: list[int] = []
    for key, desc in data.get("entities", {}).items():
        try:
            eid = int(key)
        except ValueError:
            print(f"[SAVE] skipping entity with bad id {key!r}")
            continue
        if not isinstance(desc, dict):
            continue
        spawn_from_descriptor(world, desc, eid=eid)
        if "recovery" in desc:
            recovery = desc["recovery"]
            world.add(eid, RecoveryState.from_dict(
                recovery if isinstance(recovery, dict) else None))
        eids.append(eid)
    return eids
