"""Reference dataset loader for the vehicle tuning engine.

Datasets live in ``tuning_engine/data`` as YAML.  Each loader validates
its entries and returns an immutable table keyed by id; engines receive
these tables as arguments and never read files themselves.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from tuning_engine.core.aero import SEGMENTS, AerodynamicsSetup
from tuning_engine.core.aerodynamics import AeroPackage, SegmentWeights
from tuning_engine.core.errors import TuningError
from tuning_engine.core.tire import TireCompound
from tuning_engine.core.tire_selection import TireScoringWeights
from tuning_engine.core.track import TrackProfile

logger = logging.getLogger(__name__)

DATA_DIR: Path = Path(__file__).resolve().parent / "data"
TRACKS_PATH: Path = DATA_DIR / "tracks.yaml"
TIRE_COMPOUNDS_PATH: Path = DATA_DIR / "tire_compounds.yaml"
AERO_PROFILES_PATH: Path = DATA_DIR / "aero_profiles.yaml"
SCORING_PATH: Path = DATA_DIR / "scoring.yaml"

_TRACK_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "track_type",
    "length_km",
    "avg_corner_radius_m",
    "elevation_change_m",
    "straight_fraction",
    "technicality",
    "surface",
    "surface_grip",
    "roughness",
)

_COMPOUND_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "category",
    "base_grip",
    "dry_grip",
    "wet_grip",
    "dirt_grip",
    "gravel_grip",
    "cold_pressure_kpa",
    "warm_pressure_kpa",
    "wear_rate",
    "power_to_weight_range",
)

_AERO_FIELDS: tuple[str, ...] = (
    "id",
    "drag_coefficient",
    "frontal_area",
    "front_downforce_coefficient",
    "rear_downforce_coefficient",
)

_PACKAGE_FIELDS: tuple[str, ...] = ("name", "downforce_scale", "drag_scale", "rear_shift")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_section(path: Path, section: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict) or section not in data:
        raise ValueError(f"{path.name} is missing the '{section}' section")
    return data[section]


def _check_fields(kind: str, idx: int, entry: Any, required: tuple[str, ...]) -> None:
    if not isinstance(entry, dict):
        raise ValueError(f"{kind} entry {idx} must be a mapping, got {type(entry).__name__}")
    for field in required:
        if field not in entry:
            raise ValueError(
                f"{kind} entry {idx} ({entry.get('id', entry.get('name', '<unknown>'))}) "
                f"is missing required field '{field}'"
            )


def _build_table(kind: str, entries: Any, build) -> Mapping[str, Any]:
    if not isinstance(entries, list):
        raise ValueError(f"{kind} data must be a list of entries")
    table: dict[str, Any] = {}
    for idx, entry in enumerate(entries):
        try:
            record = build(idx, entry)
        except (TuningError, TypeError) as exc:
            raise ValueError(f"{kind} entry {idx}: {exc}") from exc
        if record.id in table:
            raise ValueError(f"{kind} entry {idx}: duplicate id '{record.id}'")
        table[record.id] = record
    return MappingProxyType(table)


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def load_tracks(path: Path | None = None) -> Mapping[str, TrackProfile]:
    """Load the track reference dataset.

    Args:
        path: Optional override for the tracks file path.

    Returns:
        Read-only mapping of track id to :class:`TrackProfile`, in file
        order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If any entry is missing fields, has out-of-range
            values or repeats an id.
    """
    tracks_path = path or TRACKS_PATH

    def build(idx: int, entry: Any) -> TrackProfile:
        _check_fields("Track", idx, entry, _TRACK_FIELDS)
        return TrackProfile(
            id=str(entry["id"]),
            name=str(entry["name"]),
            track_type=str(entry["track_type"]),
            length_km=entry["length_km"],
            avg_corner_radius_m=entry["avg_corner_radius_m"],
            elevation_change_m=entry["elevation_change_m"],
            straight_fraction=entry["straight_fraction"],
            technicality=entry["technicality"],
            surface=str(entry["surface"]),
            surface_grip=entry["surface_grip"],
            roughness=entry["roughness"],
            speed_profile=str(entry.get("speed_profile", "balanced")),
            aliases=tuple(str(a) for a in entry.get("aliases", ())),
            recommended_tune_types=tuple(
                str(t) for t in entry.get("recommended_tune_types", ())
            ),
            notes=tuple(str(n) for n in entry.get("notes", ())),
        )

    tracks = _build_table("Track", _read_section(tracks_path, "tracks"), build)
    logger.debug("Loaded %d tracks from %s", len(tracks), tracks_path)
    return tracks


def load_tire_compounds(path: Path | None = None) -> Mapping[str, TireCompound]:
    """Load the tire compound reference dataset.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If any entry is malformed.
    """
    compounds_path = path or TIRE_COMPOUNDS_PATH

    def build(idx: int, entry: Any) -> TireCompound:
        _check_fields("Compound", idx, entry, _COMPOUND_FIELDS)
        ptw = entry["power_to_weight_range"]
        if not isinstance(ptw, list) or len(ptw) != 2:
            raise ValueError(
                f"Compound entry {idx} ({entry['id']}): "
                "'power_to_weight_range' must be a [min, max] pair"
            )
        return TireCompound(
            id=str(entry["id"]),
            name=str(entry["name"]),
            category=str(entry["category"]),
            base_grip=entry["base_grip"],
            dry_grip=entry["dry_grip"],
            wet_grip=entry["wet_grip"],
            dirt_grip=entry["dirt_grip"],
            gravel_grip=entry["gravel_grip"],
            cold_pressure_kpa=entry["cold_pressure_kpa"],
            warm_pressure_kpa=entry["warm_pressure_kpa"],
            wear_rate=entry["wear_rate"],
            power_to_weight_range=(ptw[0], ptw[1]),
            tune_types=tuple(str(t) for t in entry.get("tune_types", ())),
            drive_types=tuple(str(d) for d in entry.get("drive_types", ("FWD", "RWD", "AWD"))),
            ideal_tracks=tuple(str(t) for t in entry.get("ideal_tracks", ())),
            pressure_adjustments=MappingProxyType(
                dict(entry.get("pressure_adjustments", {}))
            ),
        )

    compounds = _build_table(
        "Compound", _read_section(compounds_path, "compounds"), build
    )
    logger.debug("Loaded %d tire compounds from %s", len(compounds), compounds_path)
    return compounds


def load_aero_profiles(path: Path | None = None) -> Mapping[str, AerodynamicsSetup]:
    """Load per-category aerodynamic profiles, keyed by category id.

    The category id becomes the profile's ``name``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If any entry is malformed.
    """
    profiles_path = path or AERO_PROFILES_PATH
    entries = _read_section(profiles_path, "profiles")
    if not isinstance(entries, list):
        raise ValueError("Aero profile data must be a list of entries")

    profiles: dict[str, AerodynamicsSetup] = {}
    for idx, entry in enumerate(entries):
        _check_fields("Aero profile", idx, entry, _AERO_FIELDS)
        profile_id = str(entry["id"])
        if profile_id in profiles:
            raise ValueError(f"Aero profile entry {idx}: duplicate id '{profile_id}'")
        try:
            profiles[profile_id] = AerodynamicsSetup(
                drag_coefficient=entry["drag_coefficient"],
                frontal_area=entry["frontal_area"],
                front_downforce_coefficient=entry["front_downforce_coefficient"],
                rear_downforce_coefficient=entry["rear_downforce_coefficient"],
                max_downforce_speed=entry.get("max_downforce_speed"),
                air_density=entry.get("air_density", 1.225),
                name=profile_id,
            )
        except TuningError as exc:
            raise ValueError(f"Aero profile entry {idx} ({profile_id}): {exc}") from exc

    logger.debug("Loaded %d aero profiles from %s", len(profiles), profiles_path)
    return MappingProxyType(profiles)


def load_tire_scoring_weights(path: Path | None = None) -> TireScoringWeights:
    """Load the tire scoring weights; missing keys keep their defaults.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: On unknown keys or invalid values.
    """
    scoring_path = path or SCORING_PATH
    section = _read_section(scoring_path, "tire_scoring")
    if not isinstance(section, dict):
        raise ValueError("'tire_scoring' must be a mapping")
    try:
        weights = TireScoringWeights(**section)
    except (TuningError, TypeError) as exc:
        raise ValueError(f"Invalid tire scoring weights: {exc}") from exc
    logger.debug("Loaded tire scoring weights from %s", scoring_path)
    return weights


def load_aero_packages(path: Path | None = None) -> tuple[AeroPackage, ...]:
    """Load candidate aero packages in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the list is empty or an entry is malformed.
    """
    scoring_path = path or SCORING_PATH
    entries = _read_section(scoring_path, "aero_packages")
    if not isinstance(entries, list) or not entries:
        raise ValueError("'aero_packages' must be a non-empty list")

    packages: list[AeroPackage] = []
    for idx, entry in enumerate(entries):
        _check_fields("Aero package", idx, entry, _PACKAGE_FIELDS)
        try:
            packages.append(
                AeroPackage(
                    name=str(entry["name"]),
                    downforce_scale=entry["downforce_scale"],
                    drag_scale=entry["drag_scale"],
                    rear_shift=entry["rear_shift"],
                )
            )
        except TuningError as exc:
            raise ValueError(f"Aero package entry {idx} ({entry['name']}): {exc}") from exc

    logger.debug("Loaded %d aero packages from %s", len(packages), scoring_path)
    return tuple(packages)


def load_segment_weights(path: Path | None = None) -> dict[str, SegmentWeights]:
    """Load per-segment aero scoring weights.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a segment is missing or malformed.
    """
    scoring_path = path or SCORING_PATH
    section = _read_section(scoring_path, "segment_weights")
    if not isinstance(section, dict):
        raise ValueError("'segment_weights' must be a mapping")

    weights: dict[str, SegmentWeights] = {}
    for segment in SEGMENTS:
        if segment not in section:
            raise ValueError(f"'segment_weights' is missing segment '{segment}'")
        entry = section[segment]
        try:
            weights[segment] = SegmentWeights(
                downforce=float(entry["downforce"]),
                drag=float(entry["drag"]),
                rear_shift=float(entry["rear_shift"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Segment weights for '{segment}' are malformed: {exc}") from exc

    logger.debug("Loaded segment weights from %s", scoring_path)
    return weights
