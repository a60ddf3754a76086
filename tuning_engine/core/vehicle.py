"""Vehicle setup model for the tuning engine.

A :class:`VehicleSetup` is an immutable snapshot of one tuning attempt:
mass, centre-of-gravity position, axle geometry and the per-axle
suspension settings.  Geometry is validated on construction so that every
engine can rely on a physically consistent car.

Units: mass in kg, lengths in mm, spring and anti-roll bar rates in N/mm
at the wheel, damping in N·s/m.
"""

from __future__ import annotations

from dataclasses import dataclass

from tuning_engine.core.errors import (
    InvalidGeometry,
    OutOfRangeInput,
    check_choice,
    check_finite,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GRAVITY: float = 9.81  # m/s^2

DRIVE_TYPES: tuple[str, ...] = ("FWD", "RWD", "AWD")

GEOMETRY_TOLERANCE_MM: float = 1.0  # allowed |cg_front + cg_rear - wheelbase|


# ---------------------------------------------------------------------------
# Suspension
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AxleSuspension:
    """Suspension settings for one axle.

    Attributes:
        spring_rate: Wheel-rate spring stiffness in N/mm (> 0).
        bump_damping: Bump (compression) damping in N·s/m (>= 0).
        rebound_damping: Rebound damping in N·s/m (>= 0).
        anti_roll_bar: Anti-roll bar stiffness expressed at the wheel in
            N/mm (>= 0, 0 = bar disconnected).
        ride_height: Static ride height in mm (> 0).
    """

    spring_rate: float
    bump_damping: float
    rebound_damping: float
    anti_roll_bar: float
    ride_height: float

    def __post_init__(self) -> None:
        """Validate suspension parameters."""
        for name in (
            "spring_rate",
            "bump_damping",
            "rebound_damping",
            "anti_roll_bar",
            "ride_height",
        ):
            check_finite(name, getattr(self, name))
        if self.spring_rate <= 0.0:
            raise OutOfRangeInput("spring_rate must be > 0.")
        if self.bump_damping < 0.0 or self.rebound_damping < 0.0:
            raise OutOfRangeInput("damping values must be >= 0.")
        if self.anti_roll_bar < 0.0:
            raise OutOfRangeInput("anti_roll_bar must be >= 0.")
        if self.ride_height <= 0.0:
            raise InvalidGeometry("ride_height must be > 0.")


# ---------------------------------------------------------------------------
# Vehicle setup
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VehicleSetup:
    """Immutable description of a car's mass distribution and setup.

    Attributes:
        mass: Total vehicle mass in kg (> 0).
        wheelbase: Axle-to-axle distance in mm (> 0).
        cg_height: Centre-of-gravity height above ground in mm (>= 0).
        cg_to_front_axle: Horizontal CG distance from the front axle in mm.
        cg_to_rear_axle: Horizontal CG distance from the rear axle in mm.
            Together with ``cg_to_front_axle`` must equal ``wheelbase``
            within ``GEOMETRY_TOLERANCE_MM``.
        track_width_front: Front track width in mm (> 0).
        track_width_rear: Rear track width in mm (> 0).
        front_suspension: Front axle suspension settings.
        rear_suspension: Rear axle suspension settings.
        drive_type: One of ``DRIVE_TYPES``.
    """

    mass: float
    wheelbase: float
    cg_height: float
    cg_to_front_axle: float
    cg_to_rear_axle: float
    track_width_front: float
    track_width_rear: float
    front_suspension: AxleSuspension
    rear_suspension: AxleSuspension
    drive_type: str = "RWD"

    def __post_init__(self) -> None:
        """Validate geometry and mass."""
        for name in (
            "mass",
            "wheelbase",
            "cg_height",
            "cg_to_front_axle",
            "cg_to_rear_axle",
            "track_width_front",
            "track_width_rear",
        ):
            check_finite(name, getattr(self, name))
        check_choice("drive_type", self.drive_type, DRIVE_TYPES)

        if self.mass <= 0.0:
            raise OutOfRangeInput("mass must be > 0.")
        if self.wheelbase <= 0.0:
            raise InvalidGeometry("wheelbase must be > 0.")
        if self.cg_height < 0.0:
            raise InvalidGeometry("cg_height must be >= 0.")
        if self.cg_to_front_axle <= 0.0 or self.cg_to_rear_axle <= 0.0:
            raise InvalidGeometry("CG must lie strictly between the axles.")
        if self.track_width_front <= 0.0 or self.track_width_rear <= 0.0:
            raise InvalidGeometry("track widths must be > 0.")
        mismatch = abs(self.cg_to_front_axle + self.cg_to_rear_axle - self.wheelbase)
        if mismatch > GEOMETRY_TOLERANCE_MM:
            raise InvalidGeometry(
                f"cg_to_front_axle + cg_to_rear_axle must equal wheelbase "
                f"(off by {mismatch:.3f} mm)."
            )

    @classmethod
    def from_weight_distribution(
        cls,
        mass: float,
        wheelbase: float,
        front_weight_fraction: float,
        cg_height: float,
        track_width_front: float,
        track_width_rear: float,
        front_suspension: AxleSuspension,
        rear_suspension: AxleSuspension,
        drive_type: str = "RWD",
    ) -> VehicleSetup:
        """Build a setup from a supplied static front weight fraction.

        The CG position is derived so that
        ``static_weight_distribution_front == front_weight_fraction``.

        Raises:
            OutOfRangeInput: If the fraction is not finite or outside [0, 1].
            InvalidGeometry: If the fraction puts the CG on an axle.
        """
        check_finite("front_weight_fraction", front_weight_fraction)
        check_finite("wheelbase", wheelbase)
        if not 0.0 <= front_weight_fraction <= 1.0:
            raise OutOfRangeInput("front_weight_fraction must be between 0.0 and 1.0.")
        return cls(
            mass=mass,
            wheelbase=wheelbase,
            cg_height=cg_height,
            cg_to_front_axle=wheelbase * (1.0 - front_weight_fraction),
            cg_to_rear_axle=wheelbase * front_weight_fraction,
            track_width_front=track_width_front,
            track_width_rear=track_width_rear,
            front_suspension=front_suspension,
            rear_suspension=rear_suspension,
            drive_type=drive_type,
        )

    @property
    def weight(self) -> float:
        """Total static weight in N."""
        return self.mass * GRAVITY

    @property
    def static_weight_distribution_front(self) -> float:
        """Fraction of static weight carried by the front axle (0-1)."""
        return self.cg_to_rear_axle / (self.cg_to_front_axle + self.cg_to_rear_axle)

    def is_driven(self, axle: str) -> bool:
        """Return True if *axle* (``"front"`` or ``"rear"``) receives drive."""
        check_choice("axle", axle, ("front", "rear"))
        if self.drive_type == "AWD":
            return True
        return (self.drive_type == "FWD") == (axle == "front")
