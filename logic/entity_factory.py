"""logic/entity_factory.py — Table-driven subject spawning.

A single ``_COMPONENT_TABLE`` maps descriptor keys to component classes
and their field schemas.  ``spawn_from_descriptor`` iterates the table,
reads the sub-dict for each key, casts fields, and attaches components.

The same descriptor shape is used by ``data/tuning.toml`` ``[subject]``
(flattened, see ``descriptor_from_tuning``) and by save files.
``RecoveryState`` is not in the table; ``core/save.py`` persists it
itself.
"""

from __future__ import annotations
from typing import Any, Callable
from core import tuning
from core.ecs import World
from components import Identity, Humanity, CyberwareLoad


# ── Field-schema helpers ─────────────────────────────────────────────

def _float(v: Any, default: float = 0.0) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


def _int(v: Any, default: int = 0) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _str(v: Any, default: str = "") -> str:
    return str(v) if v is not None else default


# ── Component table ──────────────────────────────────────────────────
# Each entry: (descriptor_key, ComponentClass, field_map)
# field_map: dict mapping component-kwarg → (descriptor-sub-key, cast, default)

_COMPONENT_TABLE: list[tuple[str, type, dict[str, tuple[str, Callable, Any]]]] = [
    ("identity", Identity, {
        "name": ("name", _str, "?"),
        "kind": ("kind", _str, "player"),
    }),
    ("humanity", Humanity, {
        "damage":  ("damage",  _int, 0),
        "maximum": ("maximum", _int, 100),
    }),
    ("cyberware", CyberwareLoad, {
        "equipped": ("equipped", _float, 0.0),
        "capacity": ("capacity", _float, 0.0),
    }),
]


def _build_component(cls: type, field_map: dict, sub: dict) -> Any:
    """Construct a component from its field_map and descriptor sub-dict."""
    kwargs: dict[str, Any] = {}
    for kwarg_name, (sub_key, cast_fn, default) in field_map.items():
        raw = sub.get(sub_key)
        kwargs[kwarg_name] = default if raw is None else cast_fn(raw, default)
    return cls(**kwargs)


def spawn_from_descriptor(world: World, desc: dict, eid: int | None = None) -> int:
    """Create (or re-create under *eid*) a subject from a descriptor dict.

    Returns the entity ID.
    """
    if eid is None:
        eid = world.spawn()
    else:
        world.reserve(eid)

    for key, cls, field_map in _COMPONENT_TABLE:
        sub = desc.get(key)
        if not isinstance(sub, dict):
            continue
        world.add(eid, _build_component(cls, field_map, sub))

    # Damage never starts above the cap
    hum = world.get(eid, Humanity)
    if hum is not None:
        hum.damage = max(0, min(hum.damage, hum.maximum))

    return eid


def describe(world: World, eid: int) -> dict:
    """Inverse of ``spawn_from_descriptor`` — used by the save system."""
    desc: dict[str, dict] = {}
    for key, cls, field_map in _COMPONENT_TABLE:
        comp = world.get(eid, cls)
        if comp is None:
            continue
        desc[key] = {sub_key: getattr(comp, kwarg)
                     for kwarg, (sub_key, _, _) in field_map.items()}
    return desc


def descriptor_from_tuning() -> dict:
    """Build the starting subject from the flat ``[subject]`` tuning table."""
    sub = tuning.section("subject")
    return {
        "identity": {"name": sub.get("name", "V"), "kind": "player"},
        "humanity": {
            "damage": sub.get("humanity_damage", 0),
            "maximum": sub.get("humanity_max", 100),
        },
        "cyberware": {
            "equipped": sub.get("cyberware_equipped", 0.0),
            "capacity": sub.get("cyberware_capacity", 0.0),
        },
    }
