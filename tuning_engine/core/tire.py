"""Tire compound and tire-selection criteria records.

Compounds are reference data loaded from ``data/tire_compounds.yaml``;
criteria describe a single selection request.  Pressures are in kPa.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from tuning_engine.core.errors import OutOfRangeInput, check_choice, check_finite
from tuning_engine.core.track import SURFACES
from tuning_engine.core.vehicle import DRIVE_TYPES

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TUNE_TYPES: tuple[str, ...] = ("grip", "drift", "offroad", "drag", "rally", "street")

COMPOUND_CATEGORIES: tuple[str, ...] = ("road", "racing", "specialty")

PRIORITIES: tuple[str, ...] = ("grip", "speed", "durability", "balanced")

PRESSURE_CONDITIONS: tuple[str, ...] = (
    "hot_climate",
    "cold_climate",
    "high_speed",
    "technical",
    "offroad",
)


# ---------------------------------------------------------------------------
# Compound
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TireCompound:
    """Immutable description of a tire compound.

    Attributes:
        id: Compound identifier (e.g. ``"sport"``).
        name: Display name.
        category: One of ``COMPOUND_CATEGORIES``.
        base_grip: Grip multiplier relative to the sport compound (1.0).
        dry_grip: Grip on dry asphalt.
        wet_grip: Grip on wet asphalt.
        dirt_grip: Grip on dirt.
        gravel_grip: Grip on gravel.
        cold_pressure_kpa: Recommended cold pressure.
        warm_pressure_kpa: Expected pressure once up to temperature.
        wear_rate: Laps to full wear; lower means faster wear.
        power_to_weight_range: ``(min, max)`` suitable kW per tonne.
        tune_types: Tune types the compound is designed for.
        drive_types: Drive layouts the compound suits.
        ideal_tracks: Track ids where the compound excels.
        pressure_adjustments: kPa offsets keyed by ``PRESSURE_CONDITIONS``.
    """

    id: str
    name: str
    category: str
    base_grip: float
    dry_grip: float
    wet_grip: float
    dirt_grip: float
    gravel_grip: float
    cold_pressure_kpa: float
    warm_pressure_kpa: float
    wear_rate: float
    power_to_weight_range: tuple[float, float]
    tune_types: tuple[str, ...] = ()
    drive_types: tuple[str, ...] = DRIVE_TYPES
    ideal_tracks: tuple[str, ...] = ()
    pressure_adjustments: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Compound id must be non-empty.")
        check_choice("category", self.category, COMPOUND_CATEGORIES)
        for name in (
            "base_grip",
            "dry_grip",
            "wet_grip",
            "dirt_grip",
            "gravel_grip",
            "cold_pressure_kpa",
            "warm_pressure_kpa",
            "wear_rate",
        ):
            value = getattr(self, name)
            check_finite(name, value)
            if value <= 0.0:
                raise OutOfRangeInput(f"{name} must be > 0.")
        low, high = self.power_to_weight_range
        check_finite("power_to_weight_range", low)
        check_finite("power_to_weight_range", high)
        if low < 0.0 or high < low:
            raise OutOfRangeInput("power_to_weight_range must satisfy 0 <= min <= max.")
        for tune_type in self.tune_types:
            check_choice("tune_types", tune_type, TUNE_TYPES)
        for drive_type in self.drive_types:
            check_choice("drive_types", drive_type, DRIVE_TYPES)
        for condition, offset in self.pressure_adjustments.items():
            check_choice("pressure_adjustments", condition, PRESSURE_CONDITIONS)
            check_finite(condition, offset)

    def grip_on(self, surface: str) -> float:
        """Return the grip multiplier of this compound on *surface*.

        ``mixed`` is the average of dry and dirt grip.
        """
        check_choice("surface", surface, SURFACES)
        if surface == "asphalt":
            return self.dry_grip
        if surface == "wet":
            return self.wet_grip
        if surface == "dirt":
            return self.dirt_grip
        if surface == "gravel":
            return self.gravel_grip
        return (self.dry_grip + self.dirt_grip) / 2.0

    def suits_power_to_weight(self, power_to_weight: float) -> bool:
        low, high = self.power_to_weight_range
        return low <= power_to_weight <= high


# ---------------------------------------------------------------------------
# Selection criteria
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TireSelectionCriteria:
    """Inputs for a tire recommendation.

    Attributes:
        tune_type: One of ``TUNE_TYPES``.
        drive_type: One of ``DRIVE_TYPES``.
        surface: One of ``SURFACES``.
        power_kw: Engine power in kW (> 0).
        mass: Vehicle mass in kg (> 0).
        priority: One of ``PRIORITIES``.
        front_weight_fraction: Static front weight fraction [0, 1].
        track_id: Optional target track id.
    """

    tune_type: str
    drive_type: str
    surface: str
    power_kw: float
    mass: float
    priority: str = "balanced"
    front_weight_fraction: float = 0.5
    track_id: str | None = None

    def __post_init__(self) -> None:
        check_choice("tune_type", self.tune_type, TUNE_TYPES)
        check_choice("drive_type", self.drive_type, DRIVE_TYPES)
        check_choice("surface", self.surface, SURFACES)
        check_choice("priority", self.priority, PRIORITIES)
        check_finite("power_kw", self.power_kw)
        check_finite("mass", self.mass)
        check_finite("front_weight_fraction", self.front_weight_fraction)
        if self.power_kw <= 0.0:
            raise OutOfRangeInput("power_kw must be > 0.")
        if self.mass <= 0.0:
            raise OutOfRangeInput("mass must be > 0.")
        if not 0.0 <= self.front_weight_fraction <= 1.0:
            raise OutOfRangeInput("front_weight_fraction must be between 0.0 and 1.0.")

    @property
    def power_to_weight(self) -> float:
        """Power-to-weight ratio in kW per tonne."""
        return self.power_kw / (self.mass / 1000.0)
