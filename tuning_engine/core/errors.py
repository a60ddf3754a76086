"""Error taxonomy for the tuning engine.

Every engine checks its preconditions up front and raises one of these
before doing any work.  Each class also derives from the closest builtin
so callers may catch ``ValueError`` / ``LookupError`` directly.
"""

from __future__ import annotations

import math


class TuningError(Exception):
    """Base class for all tuning engine failures."""


class InvalidGeometry(TuningError, ValueError):
    """Vehicle dimensions are inconsistent or non-physical."""


class OutOfRangeInput(TuningError, ValueError):
    """An input lies outside the modelled range (g-force, speed, load, ...)."""


class UnknownTrack(TuningError, LookupError):
    """Track identifier is absent from the reference dataset."""


class UnknownCompound(TuningError, LookupError):
    """Tire compound identifier is absent from the reference dataset."""


class NoEquilibriumFound(TuningError, ArithmeticError):
    """Top-speed search found no drive/drag equilibrium in range."""


def check_finite(name: str, value: float) -> None:
    """Raise :class:`OutOfRangeInput` unless *value* is a finite number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OutOfRangeInput(f"{name} must be a number, got {type(value).__name__}.")
    if not math.isfinite(value):
        raise OutOfRangeInput(f"{name} must be finite, got {value}.")


def check_choice(name: str, value: str, choices: tuple[str, ...]) -> None:
    """Raise :class:`OutOfRangeInput` unless *value* is one of *choices*."""
    if value not in choices:
        raise OutOfRangeInput(f"{name} must be one of {', '.join(choices)}; got {value!r}.")
