"""core/tuning.py — Data-driven tuning constants and settings provider.

All user-facing numbers live in ``data/tuning.toml`` and are loaded once
at startup.  Any system can read a value with::

    from core.tuning import get
    rate = get("recovery", "rate", 2.5)

Hot-reload: call ``reload()`` to re-read the file.  In the preview,
press F4.  Systems that cache a snapshot of the settings register a
listener with ``subscribe()``; every ``load()``/``reload()`` bumps
``version()`` and calls each listener with no arguments.
"""

from __future__ import annotations
from pathlib import Path
from typing import Callable

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli


_data: dict = {}
_path: Path | None = None
_version: int = 0
_listeners: list[Callable[[], None]] = []


def load(path: str | Path | None = None) -> None:
    """Load (or reload) tuning constants from *path*.

    If *path* is ``None``, default to ``data/tuning.toml`` relative to
    the project root (one level above ``core/``).
    """
    global _data, _path, _version

    if path is None:
        root = Path(__file__).resolve().parent.parent
        path = root / "data" / "tuning.toml"
    else:
        path = Path(path)

    _path = path

    if not path.exists():
        print(f"[TUNING] {path} not found — using defaults")
        _data = {}
    else:
        try:
            with open(path, "rb") as f:
                _data = tomllib.load(f)
        except tomllib.TOMLDecodeError as ex:
            print(f"[TUNING] {path} is not valid TOML ({ex}) — keeping previous values")
            return
        print(f"[TUNING] Loaded {_count_leaves(_data)} values from {path}")

    _version += 1
    _notify()


def reload() -> None:
    """Re-read the tuning file from disk (hot-reload)."""
    load(_path)


def replace(data: dict) -> None:
    """Swap in an in-memory settings table and notify listeners.

    Used by the preview scene's live sliders and by headless tests
    that don't want to touch the disk.
    """
    global _data, _version
    _data = data
    _version += 1
    _notify()


def version() -> int:
    """Monotonic counter bumped on every load/reload/replace."""
    return _version


def subscribe(listener: Callable[[], None]) -> None:
    """Call *listener* after every settings change."""
    if listener not in _listeners:
        _listeners.append(listener)


def unsubscribe(listener: Callable[[], None]) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def get(section: str, key: str, default=None):
    """Read a tuning value.

    *section* uses dot-notation to traverse nested tables, e.g.
    ``"recovery"`` looks up ``[recovery]``.

    >>> get("recovery", "no_such_key", 3.0)
    3.0
    """
    node = _data
    for part in section.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return default
        if node is None:
            return default
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def section(section_path: str) -> dict:
    """Return an entire section dict (shallow copy), or empty dict."""
    node = _data
    for part in section_path.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return {}
        if node is None:
            return {}
    if isinstance(node, dict):
        return dict(node)
    return {}


def _notify() -> None:
    for listener in list(_listeners):
        listener()


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n
