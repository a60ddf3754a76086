"""Track-specific tuning engine.

Maps a track's attributes to deltas on a base setup.  The mapping is
table driven: every attribute contributes its own additive term and no
term depends on another, so the result does not depend on rule order.

Track lookups go through a read-only ``{id: TrackProfile}`` table, normally
the one returned by :func:`tuning_engine.config.load_tracks`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping

from tuning_engine.core.aero import AerodynamicsSetup, SpeedProfile
from tuning_engine.core.aerodynamics import AeroOptimization, optimize_for_speed_profile
from tuning_engine.core.errors import UnknownTrack
from tuning_engine.core.load_transfer import calculate_static_weight_distribution
from tuning_engine.core.track import TrackProfile
from tuning_engine.core.vehicle import VehicleSetup

# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

# Per corner class: spring %, front ARB %, rear ARB %, final drive %,
# ride height mm, downforce-target bias.
CORNER_CLASS_RULES: dict[str, dict[str, float]] = {
    "tight": {
        "spring": -0.05,
        "front_arb": -0.08,
        "rear_arb": 0.04,
        "final_drive": 0.06,
        "ride_height": 0.0,
        "downforce": 0.10,
    },
    "medium": {
        "spring": 0.0,
        "front_arb": 0.0,
        "rear_arb": 0.0,
        "final_drive": 0.0,
        "ride_height": 0.0,
        "downforce": 0.0,
    },
    "fast": {
        "spring": 0.08,
        "front_arb": 0.05,
        "rear_arb": 0.05,
        "final_drive": -0.06,
        "ride_height": -5.0,
        "downforce": -0.10,
    },
}

# Per-unit coefficients of the continuous rules.
REFERENCE_ROUGHNESS: float = 0.2
ROUGHNESS_SPRING: float = -0.25
ROUGHNESS_DAMPING: float = -0.3
ROUGHNESS_RIDE_HEIGHT_MM: float = 30.0

REFERENCE_TECHNICALITY: int = 5
TECHNICALITY_SPRING: float = -0.01
TECHNICALITY_FRONT_ARB: float = -0.01
TECHNICALITY_DIFF_ACCEL: float = 0.02
TECHNICALITY_BRAKE_BALANCE: float = 0.4

ELEVATION_SPRING: float = 0.05
ELEVATION_SPRING_SCALE_M: float = 500.0
ELEVATION_FINAL_DRIVE: float = 0.02
ELEVATION_FINAL_DRIVE_SCALE_M: float = 600.0

REFERENCE_STRAIGHT_FRACTION: float = 0.3
STRAIGHT_FINAL_DRIVE: float = -0.10
STRAIGHT_DOWNFORCE: float = -0.5

GRIP_PRESSURE_KPA: float = -60.0
GRIP_RIDE_HEIGHT_MM: float = 40.0
GRIP_DIFF_ACCEL: float = 0.2
GRIP_DIFF_BRAKE: float = -0.2

WEIGHT_FRONT_ARB: float = -0.3

DOWNFORCE_TARGET_BAND: float = 0.05

# Corner mix (low, medium, high) of the non-straight part of a lap.
CORNER_MIX: dict[str, tuple[float, float, float]] = {
    "tight": (0.6, 0.3, 0.1),
    "medium": (0.25, 0.5, 0.25),
    "fast": (0.1, 0.3, 0.6),
}


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrackAdjustments:
    """Suggested changes to a base setup for one track.

    Spring and anti-roll bar deltas are N/mm, ride-height deltas mm and
    pressure kPa.  ``*_factor`` fields multiply the current value.
    ``brake_balance_shift`` is in percentage points toward the front.
    """

    track_id: str
    front_spring_delta: float
    rear_spring_delta: float
    front_arb_delta: float
    rear_arb_delta: float
    front_ride_height_delta: float
    rear_ride_height_delta: float
    damping_factor: float
    final_drive_factor: float
    downforce_scale: float
    downforce_target: str
    recommended_compound: str
    pressure_delta_kpa: float
    brake_balance_shift: float
    diff_accel_lock_factor: float
    diff_brake_lock_factor: float
    reasoning: tuple[str, ...]
    aero_package: AeroOptimization | None = None


@dataclass(frozen=True)
class TrackSummary:
    track_id: str
    name: str
    corner_class: str
    corner_mix: SpeedProfile
    surface: str
    surface_grip: float
    technicality: int
    elevation_change_m: float
    straight_fraction: float
    text: str


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def find_track(track_id: str, tracks: Mapping[str, TrackProfile]) -> TrackProfile:
    """Resolve *track_id* by id, then by case-insensitive name or alias.

    Raises:
        UnknownTrack: If no track matches.
    """
    if track_id in tracks:
        return tracks[track_id]
    needle = track_id.strip().lower()
    if needle in tracks:
        return tracks[needle]
    for track in tracks.values():
        if track.matches(needle):
            return track
    raise UnknownTrack(f"Unknown track: {track_id!r}")


def filter_tracks(
    tracks: Mapping[str, TrackProfile],
    track_type: str | None = None,
    tune_type: str | None = None,
    speed_profile: str | None = None,
) -> tuple[TrackProfile, ...]:
    """Return the tracks matching every given filter, in table order."""
    selected = []
    for track in tracks.values():
        if track_type is not None and track.track_type != track_type:
            continue
        if tune_type is not None and tune_type.lower() not in track.recommended_tune_types:
            continue
        if speed_profile is not None and track.speed_profile != speed_profile:
            continue
        selected.append(track)
    return tuple(selected)


def speed_profile_for_track(track: TrackProfile) -> SpeedProfile:
    """Derive a segment mix from straight fraction and corner class."""
    low, medium, high = CORNER_MIX[track.corner_class]
    cornering = 1.0 - track.straight_fraction
    return SpeedProfile(
        low_speed_corners=cornering * low,
        medium_speed_corners=cornering * medium,
        high_speed_corners=cornering * high,
        straights=track.straight_fraction,
    )


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


def _recommended_compound(track: TrackProfile) -> str:
    if track.track_type == "drag":
        return "drag"
    if track.surface in ("mixed", "gravel"):
        return "rally"
    if track.surface == "dirt":
        return "offroad"
    if track.speed_profile == "high-speed":
        return "racing"
    return "sport"


def calculate_track_adjustments(
    track: TrackProfile,
    base_setup: VehicleSetup,
    aero: AerodynamicsSetup | None = None,
) -> TrackAdjustments:
    """Map track attributes to setup deltas.

    Rules, each independent and additive:
        * corner class: tight tracks soften the front and shorten gearing,
          fast tracks stiffen, lower and lengthen gearing.
        * roughness: softer springs and damping, more ride height.
        * technicality: softer front, more diff lock, more front brake.
        * elevation: slightly stiffer springs and shorter gearing.
        * straight fraction: longer gearing, less downforce.
        * surface grip: lower pressure, more ride height, looser diff.
        * static weight distribution: nose-heavy cars get a softer
          front anti-roll bar.

    Args:
        track: Track reference profile.
        base_setup: Setup the deltas apply to.
        aero: If given, the best aero package for the track's speed mix
            is included.

    Returns:
        A fully populated :class:`TrackAdjustments`.
    """
    corner = CORNER_CLASS_RULES[track.corner_class]
    roughness = track.roughness - REFERENCE_ROUGHNESS
    technicality = track.technicality - REFERENCE_TECHNICALITY
    elevation_spring = min(track.elevation_change_m / ELEVATION_SPRING_SCALE_M, 1.0)
    elevation_gearing = min(track.elevation_change_m / ELEVATION_FINAL_DRIVE_SCALE_M, 1.0)
    straights = track.straight_fraction - REFERENCE_STRAIGHT_FRACTION
    grip_loss = 1.0 - track.surface_grip
    static = calculate_static_weight_distribution(base_setup)
    nose_weight = static.front / static.total - 0.5

    spring_pct = (
        corner["spring"]
        + ROUGHNESS_SPRING * roughness
        + TECHNICALITY_SPRING * technicality
        + ELEVATION_SPRING * elevation_spring
    )
    front_arb_pct = (
        corner["front_arb"]
        + TECHNICALITY_FRONT_ARB * technicality
        + WEIGHT_FRONT_ARB * nose_weight
    )
    rear_arb_pct = corner["rear_arb"]
    damping_pct = ROUGHNESS_DAMPING * roughness
    final_drive_pct = (
        corner["final_drive"]
        + ELEVATION_FINAL_DRIVE * elevation_gearing
        + STRAIGHT_FINAL_DRIVE * straights
    )
    ride_height_mm = (
        corner["ride_height"]
        + ROUGHNESS_RIDE_HEIGHT_MM * roughness
        + GRIP_RIDE_HEIGHT_MM * grip_loss
    )
    downforce_pct = STRAIGHT_DOWNFORCE * straights
    target_score = downforce_pct + corner["downforce"]
    if target_score > DOWNFORCE_TARGET_BAND:
        downforce_target = "high"
    elif target_score < -DOWNFORCE_TARGET_BAND:
        downforce_target = "low"
    else:
        downforce_target = "medium"

    reasoning: list[str] = []
    if track.corner_class == "tight":
        reasoning.append(
            f"Tight corners ({track.avg_corner_radius_m:.0f} m avg) - softer front, "
            "shorter gearing for corner exits"
        )
    elif track.corner_class == "fast":
        reasoning.append(
            f"Fast corners ({track.avg_corner_radius_m:.0f} m avg) - stiffer, lower, "
            "longer gearing"
        )
    if roughness > 0.0:
        reasoning.append(f"Rough surface ({track.roughness:.2f}) - softer springs and damping")
    elif roughness < 0.0:
        reasoning.append(f"Smooth surface ({track.roughness:.2f}) - firmer springs and damping")
    if technicality > 0:
        reasoning.append(
            f"High technicality ({track.technicality}/10) - softer front, more diff lock, "
            "front brake bias"
        )
    elif technicality < 0:
        reasoning.append(f"Flowing layout ({track.technicality}/10) - stiffer front")
    if track.elevation_change_m > 0.0:
        reasoning.append(
            f"Elevation change {track.elevation_change_m:.0f} m - firmer springs, shorter gearing"
        )
    if straights > 0.0:
        reasoning.append(
            f"Long straights ({track.straight_fraction:.0%} of lap) - longer gearing, "
            "less downforce"
        )
    if grip_loss > 0.0:
        reasoning.append(
            f"Low-grip {track.surface} surface ({track.surface_grip:.2f}) - lower pressures, "
            "more ride height, looser braking diff"
        )
    if nose_weight != 0.0:
        side = "Nose" if nose_weight > 0.0 else "Tail"
        reasoning.append(
            f"{side}-heavy car ({static.front / static.total:.0%} front) - front anti-roll bar "
            "adjusted"
        )

    aero_package = None
    if aero is not None:
        aero_package = optimize_for_speed_profile(aero, speed_profile_for_track(track))
        reasoning.append(f"Aero package: {aero_package.package.name}")

    front = base_setup.front_suspension
    rear = base_setup.rear_suspension
    return TrackAdjustments(
        track_id=track.id,
        front_spring_delta=front.spring_rate * spring_pct,
        rear_spring_delta=rear.spring_rate * spring_pct,
        front_arb_delta=front.anti_roll_bar * front_arb_pct,
        rear_arb_delta=rear.anti_roll_bar * rear_arb_pct,
        front_ride_height_delta=ride_height_mm,
        rear_ride_height_delta=ride_height_mm,
        damping_factor=1.0 + damping_pct,
        final_drive_factor=1.0 + final_drive_pct,
        downforce_scale=1.0 + downforce_pct,
        downforce_target=downforce_target,
        recommended_compound=_recommended_compound(track),
        pressure_delta_kpa=GRIP_PRESSURE_KPA * grip_loss,
        brake_balance_shift=TECHNICALITY_BRAKE_BALANCE * technicality,
        diff_accel_lock_factor=(
            1.0 + TECHNICALITY_DIFF_ACCEL * technicality + GRIP_DIFF_ACCEL * grip_loss
        ),
        diff_brake_lock_factor=1.0 + GRIP_DIFF_BRAKE * grip_loss,
        reasoning=tuple(reasoning),
        aero_package=aero_package,
    )


def apply_track_adjustments(
    setup: VehicleSetup, adjustments: TrackAdjustments
) -> VehicleSetup:
    """Return a new setup with the suspension part of *adjustments* applied.

    Raises:
        OutOfRangeInput: If a spring rate would become non-positive.
        InvalidGeometry: If a ride height would become non-positive.
    """
    front = setup.front_suspension
    rear = setup.rear_suspension
    factor = adjustments.damping_factor
    return replace(
        setup,
        front_suspension=replace(
            front,
            spring_rate=front.spring_rate + adjustments.front_spring_delta,
            anti_roll_bar=front.anti_roll_bar + adjustments.front_arb_delta,
            ride_height=front.ride_height + adjustments.front_ride_height_delta,
            bump_damping=front.bump_damping * factor,
            rebound_damping=front.rebound_damping * factor,
        ),
        rear_suspension=replace(
            rear,
            spring_rate=rear.spring_rate + adjustments.rear_spring_delta,
            anti_roll_bar=rear.anti_roll_bar + adjustments.rear_arb_delta,
            ride_height=rear.ride_height + adjustments.rear_ride_height_delta,
            bump_damping=rear.bump_damping * factor,
            rebound_damping=rear.rebound_damping * factor,
        ),
    )


def get_track_adjustments(
    track_id: str,
    base_setup: VehicleSetup,
    tracks: Mapping[str, TrackProfile],
    aero: AerodynamicsSetup | None = None,
) -> TrackAdjustments:
    """Look up *track_id* and calculate its adjustments.

    Raises:
        UnknownTrack: If the track is not in *tracks*.
    """
    track = find_track(track_id, tracks)
    return calculate_track_adjustments(track, base_setup, aero)


def get_track_summary(track_id: str, tracks: Mapping[str, TrackProfile]) -> TrackSummary:
    """Human-readable characterisation of a track.

    Raises:
        UnknownTrack: If the track is not in *tracks*.
    """
    track = find_track(track_id, tracks)
    mix = speed_profile_for_track(track)
    parts = [
        f"{track.name} ({track.track_type})",
        f"Length: {track.length_km:.1f} km",
        f"Technicality: {track.technicality}/10",
        f"Profile: {track.speed_profile}",
        f"Corners: {track.corner_class}",
        f"Surface: {track.surface} (grip {track.surface_grip:.2f})",
    ]
    if track.notes:
        parts.append(f"Tips: {', '.join(track.notes[:2])}")
    return TrackSummary(
        track_id=track.id,
        name=track.name,
        corner_class=track.corner_class,
        corner_mix=mix,
        surface=track.surface,
        surface_grip=track.surface_grip,
        technicality=track.technicality,
        elevation_change_m=track.elevation_change_m,
        straight_fraction=track.straight_fraction,
        text=" | ".join(parts),
    )
