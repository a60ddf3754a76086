"""Tire selection engine.

Scores compounds against selection criteria with a weighted rule set,
compares candidates, offers a quick lookup for common tune types and
derives pressures from corner load.

Scoring rules (weights in :class:`TireScoringWeights`):
    * power-to-weight inside the compound's range earns the full fit
      weight, less a penalty per kW/t outside it.
    * a compound designed for the tune type earns the tune weight; one
      designed for a related tune type earns a smaller bonus.
    * grip on the requested surface, scaled by the surface weight.
    * a compound suited to the drive layout earns the drive weight.
    * the priority (grip, speed, durability, balanced) adds its own term.
    * a compound listed for the target track earns the track weight.

Scores are clamped to [0, 100].  Ties are broken by ``COMPOUND_PRIORITY``
and then by id, so rankings are fully deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Mapping

from tuning_engine.core.errors import (
    OutOfRangeInput,
    UnknownCompound,
    check_choice,
    check_finite,
)
from tuning_engine.core.load_transfer import calculate_static_weight_distribution
from tuning_engine.core.tire import TUNE_TYPES, TireCompound, TireSelectionCriteria
from tuning_engine.core.track import SPEED_PROFILE_LABELS, SURFACES
from tuning_engine.core.vehicle import GRAVITY, VehicleSetup

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

COMPOUND_PRIORITY: tuple[str, ...] = (
    "sport",
    "racing",
    "street",
    "rally",
    "slick",
    "offroad",
    "drag",
)

RELATED_TUNE_TYPES: dict[str, tuple[str, ...]] = {
    "grip": ("street",),
    "street": ("grip",),
    "drift": ("grip",),
    "rally": ("offroad",),
    "offroad": ("rally",),
    "drag": (),
}

QUICK_PICKS: dict[str, str] = {
    "grip": "racing",
    "drift": "sport",
    "offroad": "offroad",
    "drag": "drag",
    "rally": "rally",
    "street": "sport",
}

ALTERNATIVE_SCORE_RATIO: float = 0.7
MAX_ALTERNATIVES: int = 3

MIN_PRESSURE_KPA: float = 96.5  # 14 psi
MAX_PRESSURE_KPA: float = 379.2  # 55 psi
MAX_TIRE_LOAD_N: float = 20_000.0
DRIVEN_AXLE_PRESSURE_FACTOR: float = 0.97

REFERENCE_WEAR_RATE: float = 180.0


# ---------------------------------------------------------------------------
# Configuration records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TireScoringWeights:
    """Weights of the tire scoring rule set.  Mirrored by data/scoring.yaml."""

    power_fit: float = 20.0
    power_penalty_per_unit: float = 0.5
    tune_match: float = 25.0
    related_tune: float = 10.0
    surface: float = 20.0
    drive_type: float = 5.0
    grip_priority: float = 10.0
    speed_priority: float = 8.0
    durability_priority: float = 10.0
    balanced_priority: float = 5.0
    track: float = 10.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            check_finite(f.name, value)
            if value < 0.0:
                raise OutOfRangeInput(f"{f.name} must be >= 0.")


@dataclass(frozen=True)
class PressureModel:
    """Linear load-to-pressure model for one tune type, in kPa."""

    base_kpa: float
    kpa_per_newton: float
    min_kpa: float
    max_kpa: float


PRESSURE_MODELS: dict[str, PressureModel] = {
    "grip": PressureModel(130.0, 0.018, 165.0, 235.0),
    "street": PressureModel(150.0, 0.018, 180.0, 250.0),
    "drift": PressureModel(140.0, 0.020, 150.0, 260.0),
    "rally": PressureModel(110.0, 0.015, 130.0, 200.0),
    "offroad": PressureModel(80.0, 0.012, 100.0, 170.0),
    "drag": PressureModel(250.0, 0.030, 200.0, MAX_PRESSURE_KPA),
}


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoredCompound:
    compound: TireCompound
    score: float
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()


@dataclass(frozen=True)
class TireOption:
    """Selectable compound as shown in a picker."""

    id: str
    name: str
    grip: float
    best_for: str


@dataclass(frozen=True)
class TireRecommendation:
    """Best compound for a set of criteria.

    Attributes:
        compound: The recommended compound.
        score: Suitability score in [0, 100].
        alternatives: Up to three runners-up scoring at least 70 % of
            the recommendation.
        reasoning: Why the compound was chosen.
        pressure_front_kpa: Recommended front pressure.
        pressure_rear_kpa: Recommended rear pressure.
    """

    compound: TireCompound
    score: float
    alternatives: tuple[ScoredCompound, ...]
    reasoning: tuple[str, ...]
    pressure_front_kpa: float
    pressure_rear_kpa: float


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def _priority_index(compound: TireCompound) -> int:
    if compound.id in COMPOUND_PRIORITY:
        return COMPOUND_PRIORITY.index(compound.id)
    return len(COMPOUND_PRIORITY)


def _rank_key(scored: ScoredCompound) -> tuple[float, int, str]:
    return (-scored.score, _priority_index(scored.compound), scored.compound.id)


def score_tire(
    compound: TireCompound,
    criteria: TireSelectionCriteria,
    weights: TireScoringWeights | None = None,
) -> float:
    """Suitability of *compound* for *criteria*, in [0, 100]."""
    w = weights or TireScoringWeights()
    score = 0.0

    low, high = compound.power_to_weight_range
    ptw = criteria.power_to_weight
    distance = max(low - ptw, ptw - high, 0.0)
    score += max(0.0, w.power_fit - w.power_penalty_per_unit * distance)

    if criteria.tune_type in compound.tune_types:
        score += w.tune_match
    elif any(t in compound.tune_types for t in RELATED_TUNE_TYPES[criteria.tune_type]):
        score += w.related_tune

    score += w.surface * compound.grip_on(criteria.surface)

    if criteria.drive_type in compound.drive_types:
        score += w.drive_type

    if criteria.priority == "grip":
        score += w.grip_priority * compound.base_grip
    elif criteria.priority == "speed":
        score += w.speed_priority * (2.0 - compound.base_grip)
    elif criteria.priority == "durability":
        score += w.durability_priority * compound.wear_rate / REFERENCE_WEAR_RATE
    else:
        score += w.balanced_priority

    if criteria.track_id is not None and criteria.track_id in compound.ideal_tracks:
        score += w.track

    return min(max(score, 0.0), 100.0)


def _pros_and_cons(
    compound: TireCompound, criteria: TireSelectionCriteria
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    pros: list[str] = []
    cons: list[str] = []
    if criteria.tune_type in compound.tune_types:
        pros.append(f"Ideal for {criteria.tune_type}")
    if compound.base_grip > 1.2:
        pros.append("Excellent grip")
    if compound.wear_rate > 120:
        pros.append("Long lasting")
    if criteria.track_id is not None and criteria.track_id in compound.ideal_tracks:
        pros.append("Track optimised")
    if compound.grip_on(criteria.surface) >= 0.9:
        pros.append(f"Strong on {criteria.surface}")
    if compound.base_grip < 0.9:
        cons.append("Lower grip")
    if compound.wear_rate < 80:
        cons.append("Fast wear")
    low, high = compound.power_to_weight_range
    if criteria.power_to_weight > high:
        cons.append("Better for lower power-to-weight")
    elif criteria.power_to_weight < low:
        cons.append("Better for higher power-to-weight")
    if criteria.drive_type not in compound.drive_types:
        cons.append(f"Not suited to {criteria.drive_type}")
    return tuple(pros), tuple(cons)


def _score_all(
    candidates: list[TireCompound],
    criteria: TireSelectionCriteria,
    weights: TireScoringWeights | None,
) -> list[ScoredCompound]:
    scored = []
    for compound in candidates:
        pros, cons = _pros_and_cons(compound, criteria)
        scored.append(
            ScoredCompound(
                compound=compound,
                score=score_tire(compound, criteria, weights),
                pros=pros,
                cons=cons,
            )
        )
    return sorted(scored, key=_rank_key)


# ---------------------------------------------------------------------------
# Pressure
# ---------------------------------------------------------------------------


def _pressure_for_load(tire_load: float, tune_type: str, driven: bool) -> float:
    check_finite("tire_load", tire_load)
    check_choice("tune_type", tune_type, TUNE_TYPES)
    if not 0.0 <= tire_load <= MAX_TIRE_LOAD_N:
        raise OutOfRangeInput(
            f"tire_load must be within 0-{MAX_TIRE_LOAD_N:.0f} N, got {tire_load}."
        )
    model = PRESSURE_MODELS[tune_type]
    pressure = model.base_kpa + model.kpa_per_newton * tire_load
    pressure = min(max(pressure, model.min_kpa), model.max_kpa)
    if driven:
        pressure *= DRIVEN_AXLE_PRESSURE_FACTOR
    return min(max(pressure, MIN_PRESSURE_KPA), MAX_PRESSURE_KPA)


def calculate_optimal_pressure(
    setup: VehicleSetup,
    tire_load: float,
    tune_type: str = "grip",
    axle: str = "front",
) -> float:
    """Recommended tire pressure in kPa for a corner carrying *tire_load* N.

    Pressure grows linearly with load inside a tune-type window, driven
    axles run 3 % lower for a larger contact patch, and the result is
    clamped to 96.5-379.2 kPa (14-55 psi).  The output is non-decreasing
    in load.

    Raises:
        OutOfRangeInput: If the load is outside 0-20000 N or the tune
            type or axle is unknown.
    """
    driven = setup.is_driven(axle)
    return _pressure_for_load(tire_load, tune_type, driven)


def adjust_tire_pressure(
    compound: TireCompound,
    climate: str | None = None,
    speed_profile: str | None = None,
    surface: str | None = None,
) -> float:
    """Cold pressure of *compound* adjusted for conditions, in kPa."""
    pressure = compound.cold_pressure_kpa
    adjustments = compound.pressure_adjustments
    if climate is not None:
        check_choice("climate", climate, ("hot", "cold"))
        pressure += adjustments.get(f"{climate}_climate", 0.0)
    if speed_profile is not None:
        check_choice("speed_profile", speed_profile, SPEED_PROFILE_LABELS)
        if speed_profile == "high-speed":
            pressure += adjustments.get("high_speed", 0.0)
        elif speed_profile == "technical":
            pressure += adjustments.get("technical", 0.0)
    if surface is not None:
        check_choice("surface", surface, SURFACES)
        if surface in ("dirt", "gravel"):
            pressure += adjustments.get("offroad", 0.0)
    return round(min(max(pressure, MIN_PRESSURE_KPA), MAX_PRESSURE_KPA), 1)


# ---------------------------------------------------------------------------
# Recommendation
# ---------------------------------------------------------------------------


def recommend_tire(
    criteria: TireSelectionCriteria,
    compounds: Mapping[str, TireCompound],
    setup: VehicleSetup | None = None,
    weights: TireScoringWeights | None = None,
) -> TireRecommendation:
    """Recommend the best compound for *criteria*.

    Args:
        criteria: Selection criteria.
        compounds: Candidate table keyed by compound id.
        setup: Optional vehicle setup; when given its static corner loads
            and drive layout drive the pressures, otherwise they are
            derived from the criteria's mass and weight distribution.
            Corner loads above 20000 N are treated as 20000 N.
        weights: Scoring weights; defaults to :class:`TireScoringWeights`.

    Raises:
        UnknownCompound: If *compounds* is empty.
    """
    if not compounds:
        raise UnknownCompound("No tire compounds to choose from.")

    ranked = _score_all(list(compounds.values()), criteria, weights)
    best = ranked[0]
    alternatives = tuple(
        s for s in ranked[1 : 1 + MAX_ALTERNATIVES]
        if s.score >= ALTERNATIVE_SCORE_RATIO * best.score
    )

    if setup is not None:
        static = calculate_static_weight_distribution(setup)
        front_load, rear_load = static.front / 2.0, static.rear / 2.0
        front_driven, rear_driven = setup.is_driven("front"), setup.is_driven("rear")
    else:
        weight = criteria.mass * GRAVITY
        front_load = weight * criteria.front_weight_fraction / 2.0
        rear_load = weight * (1.0 - criteria.front_weight_fraction) / 2.0
        front_driven = criteria.drive_type in ("FWD", "AWD")
        rear_driven = criteria.drive_type in ("RWD", "AWD")
    # Heavy vehicles sit at the top of the supported load range.
    front_load = min(front_load, MAX_TIRE_LOAD_N)
    rear_load = min(rear_load, MAX_TIRE_LOAD_N)

    compound = best.compound
    reasoning: list[str] = []
    if criteria.track_id is not None and criteria.track_id in compound.ideal_tracks:
        reasoning.append(f"{compound.name} is proven on {criteria.track_id}")
    if criteria.tune_type in compound.tune_types:
        reasoning.append(f"Designed for {criteria.tune_type} tuning")
    if compound.suits_power_to_weight(criteria.power_to_weight):
        reasoning.append(f"Matches {criteria.power_to_weight:.0f} kW/t power-to-weight")
    if criteria.priority == "grip" and compound.base_grip > 1.15:
        reasoning.append("Maximum grip for competitive racing")
    if criteria.priority == "durability" and compound.wear_rate >= 120:
        reasoning.append("Long tire life")
    if criteria.surface != "asphalt" and compound.grip_on(criteria.surface) >= 0.85:
        reasoning.append(f"Good grip on {criteria.surface}")
    if not reasoning:
        reasoning.append("Good all-round choice")

    return TireRecommendation(
        compound=compound,
        score=best.score,
        alternatives=alternatives,
        reasoning=tuple(reasoning),
        pressure_front_kpa=_pressure_for_load(front_load, criteria.tune_type, front_driven),
        pressure_rear_kpa=_pressure_for_load(rear_load, criteria.tune_type, rear_driven),
    )


def compare_tires(
    compound_ids: list[str] | tuple[str, ...],
    criteria: TireSelectionCriteria,
    compounds: Mapping[str, TireCompound],
    weights: TireScoringWeights | None = None,
) -> tuple[ScoredCompound, ...]:
    """Rank the named compounds for *criteria*, best first.

    Ties are broken exactly as in :func:`recommend_tire`.

    Raises:
        UnknownCompound: If an id is not in *compounds*.
    """
    candidates = []
    for compound_id in compound_ids:
        if compound_id not in compounds:
            raise UnknownCompound(f"Unknown tire compound: {compound_id!r}")
        candidates.append(compounds[compound_id])
    return tuple(_score_all(candidates, criteria, weights))


def list_tire_options(compounds: Mapping[str, TireCompound]) -> tuple[TireOption, ...]:
    """Summarise every compound in *compounds*, in table order."""
    return tuple(
        TireOption(
            id=compound.id,
            name=compound.name,
            grip=compound.base_grip,
            best_for=", ".join(compound.tune_types),
        )
        for compound in compounds.values()
    )


def get_quick_recommendation(
    tune_type: str, compounds: Mapping[str, TireCompound]
) -> TireCompound:
    """Default compound for *tune_type* without scoring.

    Raises:
        OutOfRangeInput: If the tune type is unknown.
        UnknownCompound: If the default compound is missing from *compounds*.
    """
    check_choice("tune_type", tune_type, TUNE_TYPES)
    compound_id = QUICK_PICKS[tune_type]
    if compound_id not in compounds:
        raise UnknownCompound(f"Unknown tire compound: {compound_id!r}")
    return compounds[compound_id]
