"""components.subject — Per-subject state: identity, humanity, cyberware, recovery."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Identity:
    name: str = "?"
    kind: str = "player"


@dataclass
class Humanity:
    """Humanity damage gauge — the resource the recovery system reduces.

    ``damage`` runs from 0 (fully human) upward, capped at ``maximum``.
    Always a whole number; fractional recovery is carried separately in
    ``RecoveryState.remainder``.
    """
    damage: int = 0
    maximum: int = 100


@dataclass
class CyberwareLoad:
    """Equipped cyberware versus the subject's total capacity.

    Both are capacity units (the cost column of the cyberware sheet).
    """
    equipped: float = 0.0
    capacity: float = 0.0


@dataclass
class RecoveryState:
    """Persisted accumulator state for humanity recovery.

    ``last_sample_time`` is the game-clock time (seconds) of the last
    recovery cycle; 0.0 means the subject was never sampled.
    ``remainder`` is the fractional recovery not yet applied to
    ``Humanity.damage`` — normally in (-1, 1).
    """
    last_sample_time: float = 0.0
    remainder: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "last_sample_time": float(self.last_sample_time),
            "remainder": float(self.remainder),
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "RecoveryState":
        """Rebuild from save data; missing fields default to zero."""
        if not data:
            return cls()
        return cls(
            last_sample_time=float(data.get("last_sample_time", 0.0)),
            remainder=float(data.get("remainder", 0.0)),
        )
