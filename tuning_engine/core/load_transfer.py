"""Load transfer engine.

Static and dynamic weight distribution, tire load sensitivity, balance
bias and suspension-adjustment recommendations.

Sign conventions:
    * positive ``accel_g`` is acceleration and moves load rearward;
      negative is braking and moves load forward.
    * positive ``lateral_g`` is a right-hand corner and moves load onto
      the left (outside) wheels.
    * positive balance bias is understeer, negative is oversteer.

Corner loads are always ordered front-left, front-right, rear-left,
rear-right and always sum to ``mass * GRAVITY``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from tuning_engine.core.errors import OutOfRangeInput, check_choice, check_finite
from tuning_engine.core.track import SURFACES
from tuning_engine.core.vehicle import GRAVITY, VehicleSetup

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_G: float = 4.0

NEUTRAL_BALANCE_BAND: float = 1.0

MIN_LOAD_SENSITIVITY: float = 0.5

# Grip fall-off per unit of squared load deviation, by surface.
LOAD_SENSITIVITY_BY_SURFACE: dict[str, float] = {
    "asphalt": 0.08,
    "wet": 0.10,
    "mixed": 0.11,
    "gravel": 0.12,
    "dirt": 0.14,
}

MAX_ADJUSTMENT_FRACTION: float = 0.30
ADJUSTMENT_BIAS_SCALE: float = 10.0


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AxleLoads:
    """A front/rear pair of forces in N."""

    front: float
    rear: float

    @property
    def total(self) -> float:
        return self.front + self.rear


@dataclass(frozen=True)
class CornerLoads:
    """Vertical load on each wheel in N."""

    front_left: float
    front_right: float
    rear_left: float
    rear_right: float

    @property
    def total(self) -> float:
        return self.front_left + self.front_right + self.rear_left + self.rear_right

    @property
    def front(self) -> float:
        return self.front_left + self.front_right

    @property
    def rear(self) -> float:
        return self.rear_left + self.rear_right

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.front_left, self.front_right, self.rear_left, self.rear_right)


@dataclass(frozen=True)
class LoadTransferResult:
    """Combined load transfer for one (accel_g, lateral_g) condition.

    Attributes:
        accel_g: Longitudinal acceleration that produced this result.
        lateral_g: Lateral acceleration that produced this result.
        static_front: Static front axle load in N.
        static_rear: Static rear axle load in N.
        longitudinal_transfer: Load moved onto the rear axle in N.
        lateral_transfer_front: Load moved onto the front-left wheel in N.
        lateral_transfer_rear: Load moved onto the rear-left wheel in N.
        corner_loads: Resulting wheel loads.
        balance_bias: Understeer (+) / oversteer (-) scalar on asphalt.
    """

    accel_g: float
    lateral_g: float
    static_front: float
    static_rear: float
    longitudinal_transfer: float
    lateral_transfer_front: float
    lateral_transfer_rear: float
    corner_loads: CornerLoads
    balance_bias: float


@dataclass(frozen=True)
class BalanceAnalysis:
    bias: str  # "understeer", "oversteer" or "neutral"
    value: float
    description: str


@dataclass(frozen=True)
class SuspensionAdjustments:
    """Suggested deltas in N/mm, positive = stiffer."""

    front_spring_delta: float
    rear_spring_delta: float
    front_arb_delta: float
    rear_arb_delta: float
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class SuspensionTravel:
    """Wheel travel in mm needed to absorb a transferred load."""

    front_compression: float
    rear_extension: float
    max_needed: float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_g(name: str, value: float) -> None:
    check_finite(name, value)
    if abs(value) > MAX_G:
        raise OutOfRangeInput(f"{name} must be within +/-{MAX_G} g, got {value}.")


def _roll_stiffness(spring_rate: float, anti_roll_bar: float, track_width: float) -> float:
    return (spring_rate + anti_roll_bar) * track_width**2 / 2.0


def _front_roll_share(setup: VehicleSetup) -> float:
    front = _roll_stiffness(
        setup.front_suspension.spring_rate,
        setup.front_suspension.anti_roll_bar,
        setup.track_width_front,
    )
    rear = _roll_stiffness(
        setup.rear_suspension.spring_rate,
        setup.rear_suspension.anti_roll_bar,
        setup.track_width_rear,
    )
    return front / (front + rear)


def _split_axle(axle_load: float, transfer: float) -> tuple[float, float]:
    """Split an axle load into (left, right), moving lift onto the other wheel."""
    left = axle_load / 2.0 + transfer
    right = axle_load / 2.0 - transfer
    if right < 0.0:
        return axle_load, 0.0
    if left < 0.0:
        return 0.0, axle_load
    return left, right


def _balance_scalar(
    loads: CornerLoads, static_front: float, static_rear: float, surface: str
) -> float:
    front_nominal = static_front / 2.0
    rear_nominal = static_rear / 2.0
    front_capacity = sum(
        load * calculate_tire_load_sensitivity(front_nominal, load, surface)
        for load in (loads.front_left, loads.front_right)
    )
    rear_capacity = sum(
        load * calculate_tire_load_sensitivity(rear_nominal, load, surface)
        for load in (loads.rear_left, loads.rear_right)
    )
    return 100.0 * (rear_capacity / static_rear - front_capacity / static_front)


# ---------------------------------------------------------------------------
# Weight distribution
# ---------------------------------------------------------------------------


def calculate_static_weight_distribution(setup: VehicleSetup) -> AxleLoads:
    """Static axle loads in N.

    Geometry has already been validated by :class:`VehicleSetup`, so a
    zero wheelbase or mismatched CG distances cannot reach this point.
    The axles are split on the CG distances so that they sum to exactly
    ``mass * GRAVITY`` inside the 1 mm geometry tolerance.
    """
    weight = setup.mass * GRAVITY
    front = weight * setup.static_weight_distribution_front
    return AxleLoads(front=front, rear=weight - front)


def calculate_longitudinal_transfer(setup: VehicleSetup, accel_g: float) -> float:
    """Load moved from the front to the rear axle in N.

    ``mass * accel_g * g * cg_height / wheelbase``.  Braking (negative
    ``accel_g``) returns a negative value, i.e. load moved forward.

    Raises:
        OutOfRangeInput: If ``accel_g`` is not finite or beyond +/-4 g.
    """
    _check_g("accel_g", accel_g)
    return setup.mass * accel_g * GRAVITY * setup.cg_height / setup.wheelbase


def calculate_lateral_transfer(setup: VehicleSetup, lateral_g: float) -> AxleLoads:
    """Per-axle lateral load transfer in N.

    Total transfer ``m * g * ay * h`` is shared between the axles in
    proportion to their roll stiffness (springs plus anti-roll bar), then
    divided by each axle's track width.  Each value is the load added to
    the left wheel and removed from the right wheel of that axle.

    Raises:
        OutOfRangeInput: If ``lateral_g`` is not finite or beyond +/-4 g.
    """
    _check_g("lateral_g", lateral_g)
    moment = setup.mass * GRAVITY * lateral_g * setup.cg_height
    share = _front_roll_share(setup)
    return AxleLoads(
        front=moment * share / setup.track_width_front,
        rear=moment * (1.0 - share) / setup.track_width_rear,
    )


def calculate_combined_load_transfer(
    setup: VehicleSetup, accel_g: float, lateral_g: float
) -> LoadTransferResult:
    """Superpose longitudinal and lateral transfer onto the static loads.

    Wheel lift is handled by carrying the unloaded share on the opposite
    wheel of the same axle (or on the other axle for a full axle lift),
    so the four corner loads always sum to ``mass * GRAVITY``.

    Args:
        setup: Vehicle setup.
        accel_g: Longitudinal acceleration in g (+ accelerate, - brake).
        lateral_g: Lateral acceleration in g (+ right-hand corner).

    Returns:
        A fully populated :class:`LoadTransferResult`.

    Raises:
        OutOfRangeInput: If either g-force is outside the modelled range.
    """
    _check_g("accel_g", accel_g)
    _check_g("lateral_g", lateral_g)

    static = calculate_static_weight_distribution(setup)
    longitudinal = calculate_longitudinal_transfer(setup, accel_g)
    lateral = calculate_lateral_transfer(setup, lateral_g)

    weight = static.total
    front_axle = min(max(static.front - longitudinal, 0.0), weight)
    rear_axle = weight - front_axle

    front_left, front_right = _split_axle(front_axle, lateral.front)
    rear_left, rear_right = _split_axle(rear_axle, lateral.rear)
    corners = CornerLoads(front_left, front_right, rear_left, rear_right)

    return LoadTransferResult(
        accel_g=accel_g,
        lateral_g=lateral_g,
        static_front=static.front,
        static_rear=static.rear,
        longitudinal_transfer=longitudinal,
        lateral_transfer_front=lateral.front,
        lateral_transfer_rear=lateral.rear,
        corner_loads=corners,
        balance_bias=_balance_scalar(corners, static.front, static.rear, "asphalt"),
    )


# ---------------------------------------------------------------------------
# Grip and balance
# ---------------------------------------------------------------------------


def calculate_tire_load_sensitivity(
    nominal_load: float, actual_load: float, surface: str = "asphalt"
) -> float:
    """Effective grip multiplier of a tire at *actual_load*.

    Grip falls off quadratically as load deviates from nominal:
    ``1 - k * (actual / nominal - 1) ** 2``, floored at 0.5, where ``k``
    depends on the surface.

    Raises:
        OutOfRangeInput: If ``nominal_load`` <= 0, ``actual_load`` < 0,
            either is not finite, or *surface* is unknown.
    """
    check_finite("nominal_load", nominal_load)
    check_finite("actual_load", actual_load)
    check_choice("surface", surface, SURFACES)
    if nominal_load <= 0.0:
        raise OutOfRangeInput("nominal_load must be > 0.")
    if actual_load < 0.0:
        raise OutOfRangeInput("actual_load must be >= 0.")
    k = LOAD_SENSITIVITY_BY_SURFACE[surface]
    ratio = actual_load / nominal_load
    return max(MIN_LOAD_SENSITIVITY, 1.0 - k * (ratio - 1.0) ** 2)


def analyze_balance_bias(
    result: LoadTransferResult, surface: str = "asphalt"
) -> BalanceAnalysis:
    """Classify the front/rear grip balance of a combined load result.

    Each axle's grip capacity is the sum of wheel load times load
    sensitivity, relative to its static load.  The bias is the rear
    ratio minus the front ratio in percent; the axle that loses more
    relative grip limits the car.
    """
    check_choice("surface", surface, SURFACES)
    value = _balance_scalar(
        result.corner_loads, result.static_front, result.static_rear, surface
    )
    if value > NEUTRAL_BALANCE_BAND:
        return BalanceAnalysis(
            bias="understeer",
            value=value,
            description=(
                f"Front axle saturates first ({value:+.1f}). The car will push wide; "
                "soften the front or stiffen the rear."
            ),
        )
    if value < -NEUTRAL_BALANCE_BAND:
        return BalanceAnalysis(
            bias="oversteer",
            value=value,
            description=(
                f"Rear axle saturates first ({value:+.1f}). The rear will step out; "
                "stiffen the front or soften the rear."
            ),
        )
    return BalanceAnalysis(
        bias="neutral",
        value=value,
        description="Balance is neutral.",
    )


# ---------------------------------------------------------------------------
# Suspension recommendations
# ---------------------------------------------------------------------------


def recommend_suspension_adjustments(
    setup: VehicleSetup, balance_bias: float
) -> SuspensionAdjustments:
    """Suggest spring and anti-roll bar deltas that move balance to neutral.

    The adjustment fraction ``0.30 * tanh(|bias| / 10)`` grows with the
    magnitude of the imbalance and is applied to the current anti-roll
    bar rates; springs receive half of it.  Understeer softens the front
    and stiffens the rear, oversteer does the opposite.

    Args:
        setup: Current vehicle setup.
        balance_bias: Understeer (+) / oversteer (-) scalar.

    Returns:
        Deltas in N/mm, positive meaning stiffer.
    """
    check_finite("balance_bias", balance_bias)
    fraction = MAX_ADJUSTMENT_FRACTION * math.tanh(abs(balance_bias) / ADJUSTMENT_BIAS_SCALE)
    direction = 1.0 if balance_bias > 0.0 else -1.0

    front = setup.front_suspension
    rear = setup.rear_suspension
    notes: list[str] = []
    if abs(balance_bias) <= NEUTRAL_BALANCE_BAND:
        notes.append("Balance is within the neutral band; changes are fine trims only.")
    elif balance_bias > 0.0:
        notes.append("Understeer: soften front anti-roll bar and springs, stiffen the rear.")
    else:
        notes.append("Oversteer: stiffen front anti-roll bar and springs, soften the rear.")
    if front.anti_roll_bar == 0.0 or rear.anti_roll_bar == 0.0:
        notes.append("An anti-roll bar is disconnected; balance relies on springs.")

    return SuspensionAdjustments(
        front_spring_delta=-direction * fraction / 2.0 * front.spring_rate,
        rear_spring_delta=direction * fraction / 2.0 * rear.spring_rate,
        front_arb_delta=-direction * fraction * front.anti_roll_bar,
        rear_arb_delta=direction * fraction * rear.anti_roll_bar,
        notes=tuple(notes),
    )


def apply_suspension_adjustments(
    setup: VehicleSetup, adjustments: SuspensionAdjustments
) -> VehicleSetup:
    """Return a new setup with *adjustments* applied.

    Raises:
        OutOfRangeInput: If the result would have a non-positive spring
            rate or a negative anti-roll bar.
    """
    front = setup.front_suspension
    rear = setup.rear_suspension
    return replace(
        setup,
        front_suspension=replace(
            front,
            spring_rate=front.spring_rate + adjustments.front_spring_delta,
            anti_roll_bar=front.anti_roll_bar + adjustments.front_arb_delta,
        ),
        rear_suspension=replace(
            rear,
            spring_rate=rear.spring_rate + adjustments.rear_spring_delta,
            anti_roll_bar=rear.anti_roll_bar + adjustments.rear_arb_delta,
        ),
    )


def calculate_suspension_travel(
    setup: VehicleSetup, transferred_load: float
) -> SuspensionTravel:
    """Wheel travel needed to absorb *transferred_load* N.

    The load is shared by the two wheels of an axle, so each wheel moves
    ``|load| / 2 / spring_rate`` mm.
    """
    check_finite("transferred_load", transferred_load)
    per_wheel = abs(transferred_load) / 2.0
    compression = per_wheel / setup.front_suspension.spring_rate
    extension = per_wheel / setup.rear_suspension.spring_rate
    return SuspensionTravel(
        front_compression=compression,
        rear_extension=extension,
        max_needed=max(compression, extension),
    )
