"""Track reference model for the tuning engine.

Each :class:`TrackProfile` is a read-only characterisation of one venue.
Profiles are loaded from ``data/tracks.yaml`` by
:func:`tuning_engine.config.load_tracks` and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass

from tuning_engine.core.errors import OutOfRangeInput, check_choice, check_finite

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TRACK_TYPES: tuple[str, ...] = ("road", "street", "offroad", "drag", "circuit", "sprint")

SURFACES: tuple[str, ...] = ("asphalt", "wet", "dirt", "gravel", "mixed")

SPEED_PROFILE_LABELS: tuple[str, ...] = ("balanced", "high-speed", "technical", "mixed")

CORNER_CLASSES: tuple[str, ...] = ("tight", "medium", "fast")

TIGHT_CORNER_RADIUS_M: float = 35.0
MEDIUM_CORNER_RADIUS_M: float = 70.0


@dataclass(frozen=True)
class TrackProfile:
    """Static reference data for a single track.

    Attributes:
        id: Unique identifier (e.g. ``"lago-azul"``).
        name: Display name.
        track_type: One of ``TRACK_TYPES``.
        length_km: Lap or stage length in km (> 0).
        avg_corner_radius_m: Average corner radius in metres (> 0).
        elevation_change_m: Maximum elevation gain in metres (>= 0).
        straight_fraction: Longest straight as a fraction of the lap [0, 1].
        technicality: 1 (flowing) to 10 (very tight and technical).
        surface: One of ``SURFACES``.
        surface_grip: Surface friction relative to dry asphalt (0, 1].
        roughness: Surface bumpiness, 0 = billiard table, 1 = rutted.
        speed_profile: One of ``SPEED_PROFILE_LABELS``.
        aliases: Alternative names players use.
        recommended_tune_types: Tune types that suit the track.
        notes: Free-form driving notes.
    """

    id: str
    name: str
    track_type: str
    length_km: float
    avg_corner_radius_m: float
    elevation_change_m: float
    straight_fraction: float
    technicality: int
    surface: str
    surface_grip: float
    roughness: float
    speed_profile: str = "balanced"
    aliases: tuple[str, ...] = ()
    recommended_tune_types: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Track id must be non-empty.")
        if not self.name:
            raise ValueError("Track name must be non-empty.")
        check_choice("track_type", self.track_type, TRACK_TYPES)
        check_choice("surface", self.surface, SURFACES)
        check_choice("speed_profile", self.speed_profile, SPEED_PROFILE_LABELS)
        for field in (
            "length_km",
            "avg_corner_radius_m",
            "elevation_change_m",
            "straight_fraction",
            "technicality",
            "surface_grip",
            "roughness",
        ):
            check_finite(field, getattr(self, field))
        if self.length_km <= 0.0:
            raise OutOfRangeInput("length_km must be > 0.")
        if self.avg_corner_radius_m <= 0.0:
            raise OutOfRangeInput("avg_corner_radius_m must be > 0.")
        if self.elevation_change_m < 0.0:
            raise OutOfRangeInput("elevation_change_m must be >= 0.")
        if not 0.0 <= self.straight_fraction <= 1.0:
            raise OutOfRangeInput("straight_fraction must be between 0.0 and 1.0.")
        if not 1 <= self.technicality <= 10:
            raise OutOfRangeInput("technicality must be between 1 and 10.")
        if not 0.0 < self.surface_grip <= 1.0:
            raise OutOfRangeInput("surface_grip must be in (0, 1].")
        if not 0.0 <= self.roughness <= 1.0:
            raise OutOfRangeInput("roughness must be between 0.0 and 1.0.")

    @property
    def corner_class(self) -> str:
        """Classify the average corner radius as tight, medium or fast."""
        if self.avg_corner_radius_m < TIGHT_CORNER_RADIUS_M:
            return "tight"
        if self.avg_corner_radius_m < MEDIUM_CORNER_RADIUS_M:
            return "medium"
        return "fast"

    def matches(self, query: str) -> bool:
        """Return True if *query* names this track by name or alias."""
        needle = query.strip().lower()
        if self.name.lower() == needle:
            return True
        return any(alias.lower() == needle for alias in self.aliases)
