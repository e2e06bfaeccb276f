"""components — ECS component dataclasses, organised by domain.

Submodules
----------
subject        Identity, Humanity, CyberwareLoad, RecoveryState
resources      GameClock
dev_log        DevLog

All public names are re-exported here so code can do
``from components import Humanity``.
"""

# ── Per-subject ──────────────────────────────────────────────────────
from components.subject import Identity, Humanity, CyberwareLoad, RecoveryState

# ── World resources / singletons ─────────────────────────────────────
from components.resources import GameClock
from components.dev_log import DevLog

__all__ = [
    # subject
    "Identity", "Humanity", "CyberwareLoad", "RecoveryState",
    # resources
    "GameClock", "DevLog",
]
