"""Aerodynamic, drivetrain and speed-profile records.

These are the inputs of the aerodynamics engine.  Coefficients are
dimensionless and referenced to ``frontal_area``; speeds are km/h.
"""

from __future__ import annotations

from dataclasses import dataclass

from tuning_engine.core.errors import OutOfRangeInput, check_finite

AIR_DENSITY: float = 1.225  # kg/m^3, sea level ISA


# ---------------------------------------------------------------------------
# Aerodynamics setup
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AerodynamicsSetup:
    """Per-car aerodynamic reference.

    Attributes:
        drag_coefficient: Cd (>= 0).  Zero is representable as a reference
            value, but top-speed estimation rejects it.
        frontal_area: Frontal area in m^2 (> 0).
        front_downforce_coefficient: Front-axle lift coefficient (>= 0).
        rear_downforce_coefficient: Rear-axle lift coefficient (>= 0).
        max_downforce_speed: Speed in km/h beyond which the coefficients are
            no longer valid and downforce stops growing.  ``None`` = no cap.
        air_density: Air density in kg/m^3 (> 0).
        name: Optional label (e.g. aero profile id).
    """

    drag_coefficient: float
    frontal_area: float
    front_downforce_coefficient: float
    rear_downforce_coefficient: float
    max_downforce_speed: float | None = None
    air_density: float = AIR_DENSITY
    name: str = ""

    def __post_init__(self) -> None:
        for field in (
            "drag_coefficient",
            "frontal_area",
            "front_downforce_coefficient",
            "rear_downforce_coefficient",
            "air_density",
        ):
            check_finite(field, getattr(self, field))
        if self.drag_coefficient < 0.0:
            raise OutOfRangeInput("drag_coefficient must be >= 0.")
        if self.frontal_area <= 0.0:
            raise OutOfRangeInput("frontal_area must be > 0.")
        if self.front_downforce_coefficient < 0.0 or self.rear_downforce_coefficient < 0.0:
            raise OutOfRangeInput("downforce coefficients must be >= 0.")
        if self.air_density <= 0.0:
            raise OutOfRangeInput("air_density must be > 0.")
        if self.max_downforce_speed is not None:
            check_finite("max_downforce_speed", self.max_downforce_speed)
            if self.max_downforce_speed <= 0.0:
                raise OutOfRangeInput("max_downforce_speed must be > 0.")

    @property
    def total_downforce_coefficient(self) -> float:
        return self.front_downforce_coefficient + self.rear_downforce_coefficient


# ---------------------------------------------------------------------------
# Drivetrain
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Drivetrain:
    """Power and gearing input for top-speed estimation.

    Attributes:
        peak_power_kw: Peak engine power in kW (> 0).
        mass: Vehicle mass in kg used for rolling resistance (> 0).
        efficiency: Fraction of engine power reaching the wheels (0, 1].
        rolling_resistance: Rolling-resistance coefficient (>= 0).
        gear_limited_speed: Top speed allowed by the gearing in km/h, or
            ``None`` if the car is drag limited.
    """

    peak_power_kw: float
    mass: float
    efficiency: float = 0.85
    rolling_resistance: float = 0.015
    gear_limited_speed: float | None = None

    def __post_init__(self) -> None:
        for field in ("peak_power_kw", "mass", "efficiency", "rolling_resistance"):
            check_finite(field, getattr(self, field))
        if self.peak_power_kw <= 0.0:
            raise OutOfRangeInput("peak_power_kw must be > 0.")
        if self.mass <= 0.0:
            raise OutOfRangeInput("mass must be > 0.")
        if not 0.0 < self.efficiency <= 1.0:
            raise OutOfRangeInput("efficiency must be in (0, 1].")
        if self.rolling_resistance < 0.0:
            raise OutOfRangeInput("rolling_resistance must be >= 0.")
        if self.gear_limited_speed is not None:
            check_finite("gear_limited_speed", self.gear_limited_speed)
            if self.gear_limited_speed <= 0.0:
                raise OutOfRangeInput("gear_limited_speed must be > 0.")


# ---------------------------------------------------------------------------
# Speed profile
# ---------------------------------------------------------------------------

SEGMENTS: tuple[str, ...] = (
    "low_speed_corners",
    "medium_speed_corners",
    "high_speed_corners",
    "straights",
)


@dataclass(frozen=True)
class SpeedProfile:
    """Weighted mix of a lap's speed segments.

    Each fraction lies in [0, 1] and the four sum to 1.
    """

    low_speed_corners: float
    medium_speed_corners: float
    high_speed_corners: float
    straights: float

    def __post_init__(self) -> None:
        for segment in SEGMENTS:
            value = getattr(self, segment)
            check_finite(segment, value)
            if not 0.0 <= value <= 1.0:
                raise OutOfRangeInput(f"{segment} must be in [0, 1], got {value}.")
        total = sum(self.fractions().values())
        if abs(total - 1.0) > 1e-6:
            raise OutOfRangeInput(f"speed profile fractions must sum to 1.0, got {total}.")

    def fractions(self) -> dict[str, float]:
        """Return ``{segment: fraction}`` in ``SEGMENTS`` order."""
        return {segment: getattr(self, segment) for segment in SEGMENTS}
