"""Tests for the track-specific tuning engine."""

import dataclasses

import pytest

from tuning_engine.config import load_aero_profiles, load_tracks
from tuning_engine.core.errors import UnknownTrack
from tuning_engine.core.track_tuning import (
    apply_track_adjustments,
    calculate_track_adjustments,
    filter_tracks,
    find_track,
    get_track_adjustments,
    get_track_summary,
    speed_profile_for_track,
)
from tuning_engine.core.vehicle import AxleSuspension, VehicleSetup

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_setup(front_weight_fraction: float = 0.5) -> VehicleSetup:
    return VehicleSetup.from_weight_distribution(
        mass=1400.0,
        wheelbase=2600.0,
        front_weight_fraction=front_weight_fraction,
        cg_height=480.0,
        track_width_front=1560.0,
        track_width_rear=1560.0,
        front_suspension=AxleSuspension(
            spring_rate=90.0,
            bump_damping=3000.0,
            rebound_damping=5000.0,
            anti_roll_bar=30.0,
            ride_height=120.0,
        ),
        rear_suspension=AxleSuspension(
            spring_rate=80.0,
            bump_damping=3000.0,
            rebound_damping=5000.0,
            anti_roll_bar=20.0,
            ride_height=125.0,
        ),
    )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def test_unknown_track_raises() -> None:
    """Looking up a missing track raises UnknownTrack."""
    tracks = load_tracks()
    with pytest.raises(UnknownTrack, match="unknown-track-id"):
        get_track_adjustments("unknown-track-id", _sample_setup(), tracks)


def test_unknown_track_is_a_lookup_error() -> None:
    """UnknownTrack is a LookupError."""
    with pytest.raises(LookupError):
        get_track_summary("nowhere", load_tracks())


def test_find_track_by_id_name_and_alias() -> None:
    """Ids, display names and aliases resolve case-insensitively."""
    tracks = load_tracks()
    assert find_track("lago-azul", tracks).id == "lago-azul"
    assert find_track("GOLIATH", tracks).id == "goliath"
    assert find_track("blue lake", tracks).id == "lago-azul"
    assert find_track("Mexico City Street Circuit", tracks).id == "mexico-city"
    assert find_track("  Quarter Mile ", tracks).id == "drag-strip"


def test_filter_tracks() -> None:
    """Tracks filter by type, tune type and speed profile."""
    tracks = load_tracks()
    offroad = filter_tracks(tracks, track_type="offroad")
    assert [t.id for t in offroad] == [
        "mulege-offroad",
        "baja-offroad",
        "tres-cruces-offroad",
    ]
    drag = filter_tracks(tracks, tune_type="drag")
    assert [t.id for t in drag] == ["drag-strip", "el-mirador-sprint"]
    fast_sprints = filter_tracks(tracks, track_type="sprint", speed_profile="high-speed")
    assert {t.id for t in fast_sprints} == {
        "el-mirador-sprint",
        "punto-final-sprint",
        "highway-1-north",
        "highway-1-south",
    }


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


def test_tight_track_shortens_gearing_fast_track_lengthens() -> None:
    """Tight tracks shorten gearing and fast tracks lengthen it."""
    tracks = load_tracks()
    setup = _sample_setup()
    tight = get_track_adjustments("lago-azul", setup, tracks)
    fast = get_track_adjustments("highway-1-north", setup, tracks)
    assert tight.final_drive_factor > 1.0 > fast.final_drive_factor
    assert tight.front_arb_delta < 0.0, "Tight track should soften the front bar"
    assert fast.front_ride_height_delta < tight.front_ride_height_delta


def test_downforce_target_follows_layout() -> None:
    """Downforce target follows the track layout."""
    tracks = load_tracks()
    setup = _sample_setup()
    assert get_track_adjustments("lago-azul", setup, tracks).downforce_target == "high"
    assert get_track_adjustments("highway-1-north", setup, tracks).downforce_target == "low"


def test_roughness_rule_is_independent() -> None:
    """Changing roughness moves only the roughness-driven outputs."""
    base = find_track("lago-azul", load_tracks())
    setup = _sample_setup()
    smooth = calculate_track_adjustments(dataclasses.replace(base, roughness=0.1), setup)
    rough = calculate_track_adjustments(dataclasses.replace(base, roughness=0.8), setup)

    assert abs((rough.front_spring_delta - smooth.front_spring_delta) - 90.0 * -0.175) < 1e-9
    assert abs((rough.rear_spring_delta - smooth.rear_spring_delta) - 80.0 * -0.175) < 1e-9
    assert abs((rough.damping_factor - smooth.damping_factor) + 0.21) < 1e-9
    assert abs((rough.front_ride_height_delta - smooth.front_ride_height_delta) - 21.0) < 1e-9
    assert rough.final_drive_factor == smooth.final_drive_factor
    assert rough.front_arb_delta == smooth.front_arb_delta
    assert rough.pressure_delta_kpa == smooth.pressure_delta_kpa


def test_reference_roughness_keeps_ride_height() -> None:
    """A medium, full-grip track at reference roughness leaves ride height alone."""
    goliath = find_track("goliath", load_tracks())
    track = dataclasses.replace(goliath, roughness=0.2)
    assert track.corner_class == "medium"
    adjustments = calculate_track_adjustments(track, _sample_setup())
    assert abs(adjustments.front_ride_height_delta) < 1e-9
    assert abs(adjustments.rear_ride_height_delta) < 1e-9
    smoother = calculate_track_adjustments(goliath, _sample_setup())
    assert smoother.front_ride_height_delta < 0.0, "Smooth tracks should run lower"


def test_low_grip_surface_lowers_pressure_and_loosens_diff() -> None:
    """Low grip lowers pressure and loosens the diff."""
    tracks = load_tracks()
    setup = _sample_setup()
    dirt = get_track_adjustments("tres-cruces-offroad", setup, tracks)
    asphalt = get_track_adjustments("calafata", setup, tracks)
    assert abs(dirt.pressure_delta_kpa + 24.0) < 1e-9
    assert dirt.diff_brake_lock_factor < 1.0
    assert asphalt.pressure_delta_kpa == 0.0
    assert asphalt.diff_brake_lock_factor == 1.0


def test_nose_heavy_car_gets_softer_front_bar() -> None:
    """A nose-heavy car gets a softer front bar."""
    track = find_track("calafata", load_tracks())
    balanced = calculate_track_adjustments(track, _sample_setup(0.5))
    nose_heavy = calculate_track_adjustments(track, _sample_setup(0.6))
    assert nose_heavy.front_arb_delta < balanced.front_arb_delta
    assert nose_heavy.rear_arb_delta == balanced.rear_arb_delta


def test_recommended_compound_by_track() -> None:
    """Each track type recommends its compound."""
    tracks = load_tracks()
    setup = _sample_setup()
    expected = {
        "drag-strip": "drag",
        "tres-cruces-offroad": "offroad",
        "mulege-offroad": "rally",
        "highway-1-north": "racing",
        "calafata": "sport",
    }
    for track_id, compound in expected.items():
        got = get_track_adjustments(track_id, setup, tracks).recommended_compound
        assert got == compound, f"{track_id}: expected {compound}, got {got}"


def test_aero_package_chosen_for_track() -> None:
    """The aero package is chosen from the track profile."""
    tracks = load_tracks()
    aero = load_aero_profiles()["sports"]
    setup = _sample_setup()
    tight = get_track_adjustments("lago-azul", setup, tracks, aero=aero)
    fast = get_track_adjustments("highway-1-north", setup, tracks, aero=aero)
    assert tight.aero_package is not None and fast.aero_package is not None
    assert tight.aero_package.package.name == "maximum-downforce"
    assert fast.aero_package.package.name == "low-drag"
    assert get_track_adjustments("lago-azul", setup, tracks).aero_package is None


def test_adjustments_are_deterministic() -> None:
    """Identical inputs give identical adjustments."""
    tracks = load_tracks()
    setup = _sample_setup()
    first = get_track_adjustments("mulege-to-baja", setup, tracks)
    second = get_track_adjustments("mulege-to-baja", setup, tracks)
    assert first == second


def test_every_track_produces_a_valid_adjusted_setup() -> None:
    """Applying each track's deltas to the sample setup stays physical."""
    tracks = load_tracks()
    setup = _sample_setup()
    for track_id in tracks:
        adjustments = get_track_adjustments(track_id, setup, tracks)
        tuned = apply_track_adjustments(setup, adjustments)
        assert tuned.front_suspension.spring_rate > 0.0
        assert tuned.rear_suspension.ride_height > 0.0
        assert len(adjustments.reasoning) > 0


def test_apply_track_adjustments() -> None:
    """Adjustments are applied onto a copy of the setup."""
    tracks = load_tracks()
    setup = _sample_setup()
    adjustments = get_track_adjustments("lago-azul", setup, tracks)
    tuned = apply_track_adjustments(setup, adjustments)
    assert abs(
        tuned.front_suspension.spring_rate - (90.0 + adjustments.front_spring_delta)
    ) < 1e-12
    assert abs(tuned.front_suspension.ride_height - 118.5) < 1e-9
    assert abs(tuned.rear_suspension.bump_damping - 3000.0 * adjustments.damping_factor) < 1e-9
    assert tuned.wheelbase == setup.wheelbase


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def test_track_summary() -> None:
    """Summary resolves a track by name and reports its traits."""
    summary = get_track_summary("Blue Lake", load_tracks())
    assert summary.track_id == "lago-azul"
    assert summary.corner_class == "tight"
    assert "Lago Azul Circuit" in summary.text
    assert "Technicality: 7/10" in summary.text
    assert abs(sum(summary.corner_mix.fractions().values()) - 1.0) < 1e-9


def test_speed_profile_uses_straight_fraction() -> None:
    """Speed profile is derived from the straight fraction."""
    track = find_track("drag-strip", load_tracks())
    profile = speed_profile_for_track(track)
    assert profile.straights == 1.0
    assert profile.low_speed_corners == 0.0
