from __future__ import annotations
import datetime
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MovementFamily(str, Enum):
    """Coarse exercise classification used to group history."""

    BENCH = "Bench"
    DEADLIFT = "Deadlift"
    SQUAT = "Squat"
    ROW = "Row"
    CARRY = "Carry"
    CONDITIONING = "Conditioning"
    ACCESSORY = "Accessory"

    @classmethod
    def parse(cls, value: "str | MovementFamily") -> "MovementFamily":
        """Return the member named by ``value`` or raise ``ValueError``."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"movement family must be one of: {allowed}")


def parse_timestamp(ts: Optional[str]) -> Optional[datetime.datetime]:
    """Return ``ts`` as timezone-aware datetime in UTC."""
    if not ts:
        return None
    dt = datetime.datetime.fromisoformat(ts.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


@dataclass(frozen=True)
class LoggedSet:
    """One executed set joined with the flags of its prescription row."""

    weight: float
    reps: int
    rpe: Optional[float] = None
    performed_at: Optional[datetime.datetime] = None
    movement_family: Optional[MovementFamily] = None
    is_anchor: bool = False

    @classmethod
    def from_row(cls, row: tuple) -> "LoggedSet":
        """Build from a ``(weight, reps, rpe, date, family, is_anchor)`` row."""
        weight, reps, rpe, date, family, is_anchor = row[:6]
        return cls(
            weight=float(weight),
            reps=int(reps),
            rpe=float(rpe) if rpe is not None else None,
            performed_at=parse_timestamp(date),
            movement_family=MovementFamily.parse(family) if family else None,
            is_anchor=bool(is_anchor),
        )

    @property
    def date(self) -> str:
        return self.performed_at.isoformat() if self.performed_at else ""


@dataclass(frozen=True)
class E1RMPoint:
    date: str
    e1rm: int
    weight: float
    reps: int
    rpe: Optional[float]

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "e1rm": self.e1rm,
            "weight": self.weight,
            "reps": self.reps,
            "rpe": self.rpe,
        }


@dataclass(frozen=True)
class Target:
    """Caller requested rep/RPE pair for a load recommendation."""

    reps: float
    rpe: float

    @classmethod
    def parse(cls, reps, rpe) -> Optional["Target"]:
        """Return a target when both values are positive numbers, else ``None``."""
        if isinstance(reps, bool) or isinstance(rpe, bool):
            return None
        try:
            reps_val = float(reps)
            rpe_val = float(rpe)
        except (TypeError, ValueError):
            return None
        for val in (reps_val, rpe_val):
            if not math.isfinite(val) or val <= 0:
                return None
        return cls(reps_val, rpe_val)


@dataclass(frozen=True)
class Recommendation:
    suggestion_1x3: Optional[float] = None
    suggestion_1x5: Optional[float] = None
    recommended_weight: Optional[float] = None
    recommended_raw: Optional[float] = None
    e1rm_used: Optional[float] = None
    based_on: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "suggestion1x3": self.suggestion_1x3,
            "suggestion1x5": self.suggestion_1x5,
            "recommendedWeight": self.recommended_weight,
            "recommendedRaw": self.recommended_raw,
            "e1rmUsed": self.e1rm_used,
            "basedOn": dict(self.based_on) if self.based_on is not None else None,
        }
