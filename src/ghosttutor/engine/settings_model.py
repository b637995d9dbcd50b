"""The difficulty knob vector and the arithmetic done on it."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Optional


# field name -> (lower, upper)
NUMERIC_BOUNDS: dict[str, tuple[float, float]] = {
    "ghost_complexity": (0.0, 1.0),
    "patch_risk_multiplier": (0.5, 2.0),
    "hint_availability": (0.0, 1.0),
    "educational_depth": (0.0, 1.0),
    "error_tolerance": (0.0, 1.0),
    "feedback_frequency": (0.0, 1.0),
}

BOOLEAN_FIELDS: tuple[str, ...] = ("time_constraints", "adaptive_assistance")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class DifficultySettings:
    ghost_complexity: float = 0.5
    patch_risk_multiplier: float = 1.0
    hint_availability: float = 0.6
    time_constraints: bool = False
    adaptive_assistance: bool = True
    educational_depth: float = 0.7
    error_tolerance: float = 0.6
    feedback_frequency: float = 0.7

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def field_for(cls, key: str) -> Optional[str]:
        """Map a wire key (camelCase or snake_case) to its field name, or None."""
        return _FIELD_BY_KEY.get(key)

    @classmethod
    def from_dict(cls, data: dict) -> DifficultySettings:
        known = {}
        for key, value in data.items():
            name = cls.field_for(key)
            if name is not None:
                known[name] = value
        return cls(**known).clamped()

    def to_dict(self) -> dict:
        """camelCase keys, like every other payload the bridge sends."""
        return {_camel(name): value for name, value in asdict(self).items()}

    def values(self) -> dict:
        """Field values keyed by attribute name."""
        return asdict(self)

    def clamped(self) -> DifficultySettings:
        """Return a copy with every numeric field pulled inside its bounds."""
        changes = {
            name: clamp(float(getattr(self, name)), lower, upper)
            for name, (lower, upper) in NUMERIC_BOUNDS.items()
        }
        changes.update({name: bool(getattr(self, name)) for name in BOOLEAN_FIELDS})
        return replace(self, **changes)

    def with_changes(self, **changes) -> DifficultySettings:
        return replace(self, **changes).clamped()

    def difference(self, other: DifficultySettings) -> float:
        """Mean absolute difference over the numeric fields."""
        total = sum(abs(getattr(self, n) - getattr(other, n)) for n in NUMERIC_BOUNDS)
        return total / len(NUMERIC_BOUNDS)

    def similarity(self, other: DifficultySettings) -> float:
        """Mean per-field similarity over every field, booleans included.

        Numbers score ``1 - |a - b|``; booleans score 1 when equal, else 0.
        """
        scores = [1 - abs(getattr(self, n) - getattr(other, n)) for n in NUMERIC_BOUNDS]
        scores.extend(1.0 if getattr(self, n) == getattr(other, n) else 0.0 for n in BOOLEAN_FIELDS)
        return sum(scores) / len(scores)

    def differs_from(self, other: DifficultySettings, epsilon: float = 0.01) -> bool:
        """True when a boolean flipped or some number moved by at least ``epsilon``."""
        if any(getattr(self, n) != getattr(other, n) for n in BOOLEAN_FIELDS):
            return True
        return any(abs(getattr(self, n) - getattr(other, n)) >= epsilon for n in NUMERIC_BOUNDS)


_FIELD_BY_KEY: dict[str, str] = {
    key: name for name in DifficultySettings.field_names() for key in (name, _camel(name))
}
