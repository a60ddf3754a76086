"""Aerodynamics engine.

Downforce and drag follow the standard quadratic relation
``F = 0.5 * rho * v^2 * A * C``.  Speeds are km/h at the API and m/s
internally; forces are N.

Top speed is the equilibrium between wheel power and resistance
(aerodynamic drag plus rolling resistance), found by bisection over a
bounded speed range with a fixed iteration count.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from tuning_engine.core.aero import SEGMENTS, AerodynamicsSetup, Drivetrain, SpeedProfile
from tuning_engine.core.errors import NoEquilibriumFound, OutOfRangeInput, check_finite
from tuning_engine.core.vehicle import GRAVITY

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

KMH_TO_MS: float = 1.0 / 3.6

REFERENCE_SPEED_KMH: float = 160.0

TOP_SPEED_SEARCH_MIN_KMH: float = 1.0
TOP_SPEED_SEARCH_MAX_KMH: float = 800.0
TOP_SPEED_ITERATIONS: int = 60

REAR_HEAVY_BELOW: float = 0.45
FRONT_HEAVY_ABOVE: float = 0.55

STABLE_DEVIATION_PCT: float = 5.0
UNSTABLE_DEVIATION_PCT: float = 20.0

LOW_DOWNFORCE_TO_WEIGHT: float = 0.3
HIGH_DOWNFORCE_TO_WEIGHT: float = 0.8
LOW_TOP_SPEED_KMH: float = 240.0


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AeroForces:
    """Aerodynamic loads at a single speed, in N."""

    speed_kmh: float
    downforce_front: float
    downforce_rear: float
    drag_force: float

    @property
    def downforce_total(self) -> float:
        return self.downforce_front + self.downforce_rear


@dataclass(frozen=True)
class AeroBalance:
    """Downforce balance classification.

    Attributes:
        front_fraction: Share of total downforce on the front axle (0-1).
        bias: ``"front-heavy"``, ``"balanced"`` or ``"rear-heavy"``.
        deviation: Front share minus 50 %, in percentage points.
        description: Human-readable summary.
    """

    front_fraction: float
    bias: str
    deviation: float
    description: str


@dataclass(frozen=True)
class AeroResult:
    """Composite aerodynamic summary.

    The sweep arrays are aligned with ``speeds``.
    """

    speeds: NDArray[np.float64]
    downforce_front: NDArray[np.float64]
    downforce_rear: NDArray[np.float64]
    drag_force: NDArray[np.float64]
    reference: AeroForces
    estimated_top_speed: float
    aero_balance_front: float
    balance: AeroBalance
    downforce_to_weight: float
    stability: str
    recommendations: tuple[str, ...]


@dataclass(frozen=True)
class AeroPackage:
    """A candidate aero configuration relative to the base setup.

    Attributes:
        name: Package label.
        downforce_scale: Multiplier on total downforce coefficient.
        drag_scale: Multiplier on drag coefficient.
        rear_shift: Downforce balance moved to the rear axle (fraction).
    """

    name: str
    downforce_scale: float
    drag_scale: float
    rear_shift: float

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Aero package name must be non-empty.")
        for field in ("downforce_scale", "drag_scale", "rear_shift"):
            check_finite(field, getattr(self, field))
        if self.downforce_scale < 0.0 or self.drag_scale <= 0.0:
            raise OutOfRangeInput("package scales must be positive.")
        if abs(self.rear_shift) > 0.5:
            raise OutOfRangeInput("rear_shift must be within +/-0.5.")


@dataclass(frozen=True)
class SegmentWeights:
    """Scoring weights for one speed segment."""

    downforce: float
    drag: float
    rear_shift: float


@dataclass(frozen=True)
class AeroOptimization:
    package: AeroPackage
    setup: AerodynamicsSetup
    score: float
    aero_balance_front: float
    scores: tuple[tuple[str, float], ...]
    expected_top_speed: float | None = None


# Candidate packages and segment weights.  Mirrored by data/scoring.yaml.
AERO_PACKAGES: tuple[AeroPackage, ...] = (
    AeroPackage("low-drag", downforce_scale=0.6, drag_scale=0.85, rear_shift=-0.02),
    AeroPackage("balanced", downforce_scale=1.0, drag_scale=1.0, rear_shift=0.0),
    AeroPackage("high-downforce", downforce_scale=1.4, drag_scale=1.12, rear_shift=0.03),
    AeroPackage("maximum-downforce", downforce_scale=1.7, drag_scale=1.30, rear_shift=0.05),
)

SEGMENT_WEIGHTS: dict[str, SegmentWeights] = {
    "low_speed_corners": SegmentWeights(downforce=0.2, drag=0.1, rear_shift=0.5),
    "medium_speed_corners": SegmentWeights(downforce=0.8, drag=0.3, rear_shift=0.1),
    "high_speed_corners": SegmentWeights(downforce=1.2, drag=0.8, rear_shift=-0.2),
    "straights": SegmentWeights(downforce=0.0, drag=6.0, rear_shift=0.0),
}


# ---------------------------------------------------------------------------
# Forces
# ---------------------------------------------------------------------------


def _check_speed(speed_kmh: float) -> None:
    check_finite("speed_kmh", speed_kmh)
    if speed_kmh < 0.0:
        raise OutOfRangeInput(f"speed_kmh must be >= 0, got {speed_kmh}.")


def _dynamic_pressure(aero: AerodynamicsSetup, speed_kmh: float) -> float:
    v = speed_kmh * KMH_TO_MS
    return 0.5 * aero.air_density * v * v


def _downforce_speed(aero: AerodynamicsSetup, speed_kmh: float) -> float:
    if aero.max_downforce_speed is None:
        return speed_kmh
    return min(speed_kmh, aero.max_downforce_speed)


def calculate_drag_force(aero: AerodynamicsSetup, speed_kmh: float) -> float:
    """Aerodynamic drag in N at *speed_kmh*."""
    _check_speed(speed_kmh)
    return _dynamic_pressure(aero, speed_kmh) * aero.frontal_area * aero.drag_coefficient


def calculate_downforce_distribution(
    aero: AerodynamicsSetup, speed_kmh: float
) -> AeroForces:
    """Front and rear downforce plus drag at *speed_kmh*.

    Downforce grows with speed squared up to ``max_downforce_speed`` and
    is held constant beyond it; drag keeps growing.

    Raises:
        OutOfRangeInput: If the speed is negative or not finite.
    """
    _check_speed(speed_kmh)
    q = _dynamic_pressure(aero, _downforce_speed(aero, speed_kmh))
    return AeroForces(
        speed_kmh=speed_kmh,
        downforce_front=q * aero.frontal_area * aero.front_downforce_coefficient,
        downforce_rear=q * aero.frontal_area * aero.rear_downforce_coefficient,
        drag_force=calculate_drag_force(aero, speed_kmh),
    )


# ---------------------------------------------------------------------------
# Top speed
# ---------------------------------------------------------------------------


def _net_force(aero: AerodynamicsSetup, drivetrain: Drivetrain, speed_kmh: float) -> float:
    v = speed_kmh * KMH_TO_MS
    drive = drivetrain.peak_power_kw * 1000.0 * drivetrain.efficiency / v
    rolling = drivetrain.rolling_resistance * drivetrain.mass * GRAVITY
    return drive - calculate_drag_force(aero, speed_kmh) - rolling


def estimate_top_speed(aero: AerodynamicsSetup, drivetrain: Drivetrain) -> float:
    """Estimate top speed in km/h from the power/drag equilibrium.

    Bisects ``P * eta / v - drag(v) - Crr * m * g`` over
    1-800 km/h for a fixed number of iterations, then caps the result at
    the drivetrain's gear-limited speed.

    Args:
        aero: Aerodynamic setup; drag coefficient must be > 0.
        drivetrain: Power and gearing.

    Returns:
        Top speed in km/h.

    Raises:
        OutOfRangeInput: If the drag coefficient is zero.
        NoEquilibriumFound: If power cannot overcome resistance at the
            bottom of the range, or the equilibrium lies above it.
    """
    if aero.drag_coefficient <= 0.0:
        raise OutOfRangeInput("drag_coefficient must be > 0 to estimate top speed.")

    low = TOP_SPEED_SEARCH_MIN_KMH
    high = TOP_SPEED_SEARCH_MAX_KMH
    if _net_force(aero, drivetrain, low) <= 0.0:
        raise NoEquilibriumFound(
            f"Power of {drivetrain.peak_power_kw} kW cannot overcome resistance "
            f"at {low} km/h."
        )
    if _net_force(aero, drivetrain, high) > 0.0:
        raise NoEquilibriumFound(f"Drive/drag equilibrium lies above {high} km/h.")

    for _ in range(TOP_SPEED_ITERATIONS):
        mid = (low + high) / 2.0
        if _net_force(aero, drivetrain, mid) > 0.0:
            low = mid
        else:
            high = mid
    top_speed = (low + high) / 2.0

    if drivetrain.gear_limited_speed is not None:
        top_speed = min(top_speed, drivetrain.gear_limited_speed)
    return top_speed


# ---------------------------------------------------------------------------
# Balance and summary
# ---------------------------------------------------------------------------


def analyze_aero_balance(
    aero: AerodynamicsSetup, speed_kmh: float = REFERENCE_SPEED_KMH
) -> AeroBalance:
    """Classify the front/rear downforce split at *speed_kmh*.

    With no downforce at all (standstill, or a car with no aero) the
    coefficient ratio is used, falling back to an even split.
    """
    forces = calculate_downforce_distribution(aero, speed_kmh)
    if forces.downforce_total > 0.0:
        front = forces.downforce_front / forces.downforce_total
    elif aero.total_downforce_coefficient > 0.0:
        front = aero.front_downforce_coefficient / aero.total_downforce_coefficient
    else:
        front = 0.5

    deviation = (front - 0.5) * 100.0
    if front < REAR_HEAVY_BELOW:
        bias = "rear-heavy"
        description = f"Rear-biased downforce ({front:.0%} front)."
        if deviation < -15.0:
            description += " High oversteer tendency at speed."
    elif front > FRONT_HEAVY_ABOVE:
        bias = "front-heavy"
        description = f"Front-biased downforce ({front:.0%} front)."
        if deviation > 15.0:
            description += " High understeer tendency at speed."
    else:
        bias = "balanced"
        description = "Neutral downforce balance."
    return AeroBalance(
        front_fraction=front, bias=bias, deviation=deviation, description=description
    )


def analyze_aerodynamics(
    aero: AerodynamicsSetup,
    drivetrain: Drivetrain,
    speeds: NDArray[np.float64] | None = None,
) -> AeroResult:
    """Summarise aerodynamic behaviour across a representative speed range.

    Args:
        aero: Aerodynamic setup.
        drivetrain: Power and mass, used for top speed and
            downforce-to-weight.
        speeds: Optional sweep in km/h; defaults to 7 points over
            40-280 km/h.

    Returns:
        A fully populated :class:`AeroResult`.

    Raises:
        OutOfRangeInput: If a sweep speed is negative, or drag is zero.
        NoEquilibriumFound: If no top speed exists in range.
    """
    if speeds is None:
        speeds = np.linspace(40.0, 280.0, 7)
    speeds = np.asarray(speeds, dtype=np.float64)
    if speeds.size == 0:
        raise OutOfRangeInput("speeds must not be empty.")
    if not np.all(np.isfinite(speeds)) or np.any(speeds < 0.0):
        raise OutOfRangeInput("speeds must be finite and >= 0.")

    q_df = 0.5 * aero.air_density * (
        np.minimum(speeds, aero.max_downforce_speed or np.inf) * KMH_TO_MS
    ) ** 2
    q_drag = 0.5 * aero.air_density * (speeds * KMH_TO_MS) ** 2
    front = q_df * aero.frontal_area * aero.front_downforce_coefficient
    rear = q_df * aero.frontal_area * aero.rear_downforce_coefficient
    drag = q_drag * aero.frontal_area * aero.drag_coefficient

    reference = calculate_downforce_distribution(aero, REFERENCE_SPEED_KMH)
    balance = analyze_aero_balance(aero, REFERENCE_SPEED_KMH)
    top_speed = estimate_top_speed(aero, drivetrain)
    downforce_to_weight = reference.downforce_total / (drivetrain.mass * GRAVITY)

    if abs(balance.deviation) > UNSTABLE_DEVIATION_PCT:
        stability = "unstable"
    elif abs(balance.deviation) < STABLE_DEVIATION_PCT:
        stability = "stable"
    else:
        stability = "balanced"

    recommendations: list[str] = []
    if balance.bias == "rear-heavy":
        recommendations.append("Add front wing angle for more front downforce.")
        recommendations.append("Lower the front ride height.")
    elif balance.bias == "front-heavy":
        recommendations.append("Reduce front wing angle or add rear wing.")
        recommendations.append("Raise the front ride height or lower the rear.")
    if downforce_to_weight < LOW_DOWNFORCE_TO_WEIGHT:
        recommendations.append("Add wing angle for more high-speed stability.")
    elif downforce_to_weight > HIGH_DOWNFORCE_TO_WEIGHT:
        recommendations.append("Consider trimming downforce; the drag penalty is high.")
    if top_speed < LOW_TOP_SPEED_KMH:
        recommendations.append("Reduce wing angles or raise ride height to cut drag.")
    if not recommendations:
        recommendations.append("Setup is well balanced. No adjustments needed.")

    return AeroResult(
        speeds=speeds,
        downforce_front=front,
        downforce_rear=rear,
        drag_force=drag,
        reference=reference,
        estimated_top_speed=top_speed,
        aero_balance_front=balance.front_fraction,
        balance=balance,
        downforce_to_weight=downforce_to_weight,
        stability=stability,
        recommendations=tuple(recommendations),
    )


# ---------------------------------------------------------------------------
# Speed-profile optimisation
# ---------------------------------------------------------------------------


def score_aero_package(
    package: AeroPackage,
    profile: SpeedProfile,
    weights: dict[str, SegmentWeights] | None = None,
) -> float:
    """Weighted score of *package* over the segments of *profile*.

    Each segment rewards downforce gain, penalises drag gain and rewards
    (or, in fast corners, penalises) moving balance rearward.
    """
    weights = SEGMENT_WEIGHTS if weights is None else weights
    score = 0.0
    for segment, fraction in profile.fractions().items():
        w = weights[segment]
        score += fraction * (
            w.downforce * (package.downforce_scale - 1.0)
            - w.drag * (package.drag_scale - 1.0)
            + w.rear_shift * package.rear_shift * 100.0
        )
    return score


def apply_aero_package(aero: AerodynamicsSetup, package: AeroPackage) -> AerodynamicsSetup:
    """Return a new setup with *package* applied to *aero*."""
    total = aero.total_downforce_coefficient * package.downforce_scale
    if aero.total_downforce_coefficient > 0.0:
        base_front = aero.front_downforce_coefficient / aero.total_downforce_coefficient
    else:
        base_front = 0.5
    front = min(max(base_front - package.rear_shift, 0.0), 1.0)
    return AerodynamicsSetup(
        drag_coefficient=aero.drag_coefficient * package.drag_scale,
        frontal_area=aero.frontal_area,
        front_downforce_coefficient=total * front,
        rear_downforce_coefficient=total * (1.0 - front),
        max_downforce_speed=aero.max_downforce_speed,
        air_density=aero.air_density,
        name=aero.name,
    )


def optimize_for_speed_profile(
    aero: AerodynamicsSetup,
    profile: SpeedProfile,
    packages: tuple[AeroPackage, ...] = AERO_PACKAGES,
    weights: dict[str, SegmentWeights] | None = None,
    drivetrain: Drivetrain | None = None,
) -> AeroOptimization:
    """Pick the highest-scoring aero package for a track's speed mix.

    Tight tracks reward rear downforce, fast tracks reward low drag.
    Ties keep the earlier candidate in *packages*.

    Args:
        aero: Base aerodynamic setup.
        profile: Segment mix of the target track.
        packages: Candidate configurations.
        weights: Per-segment weights; defaults to ``SEGMENT_WEIGHTS``.
        drivetrain: If given, the expected top speed of the chosen
            configuration is included.

    Raises:
        OutOfRangeInput: If *packages* is empty or *weights* misses a
            segment.
    """
    if not packages:
        raise OutOfRangeInput("packages must not be empty.")
    weights = SEGMENT_WEIGHTS if weights is None else weights
    missing = [segment for segment in SEGMENTS if segment not in weights]
    if missing:
        raise OutOfRangeInput(f"segment weights missing for {', '.join(missing)}.")

    scores = tuple((p.name, score_aero_package(p, profile, weights)) for p in packages)
    best_index = 0
    for idx, (_, score) in enumerate(scores):
        if score > scores[best_index][1]:
            best_index = idx

    best = packages[best_index]
    tuned = apply_aero_package(aero, best)
    if tuned.total_downforce_coefficient > 0.0:
        balance_front = tuned.front_downforce_coefficient / tuned.total_downforce_coefficient
    else:
        balance_front = 0.5
    top_speed = None
    if drivetrain is not None:
        top_speed = estimate_top_speed(tuned, drivetrain)

    return AeroOptimization(
        package=best,
        setup=tuned,
        score=scores[best_index][1],
        aero_balance_front=balance_front,
        scores=scores,
        expected_top_speed=top_speed,
    )
