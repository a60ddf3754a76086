"""Tests for the vehicle setup records."""

import dataclasses
import math

import pytest

from tuning_engine.core.errors import InvalidGeometry, OutOfRangeInput
from tuning_engine.core.vehicle import AxleSuspension, VehicleSetup

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _axle(spring_rate: float = 90.0, anti_roll_bar: float = 30.0) -> AxleSuspension:
    return AxleSuspension(
        spring_rate=spring_rate,
        bump_damping=3000.0,
        rebound_damping=5000.0,
        anti_roll_bar=anti_roll_bar,
        ride_height=120.0,
    )


def _setup(**overrides) -> VehicleSetup:
    params = dict(
        mass=1500.0,
        wheelbase=2600.0,
        cg_height=500.0,
        cg_to_front_axle=1300.0,
        cg_to_rear_axle=1300.0,
        track_width_front=1550.0,
        track_width_rear=1550.0,
        front_suspension=_axle(),
        rear_suspension=_axle(80.0, 20.0),
        drive_type="RWD",
    )
    params.update(overrides)
    return VehicleSetup(**params)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


def test_valid_setup_derives_weight_distribution() -> None:
    """A 60/40 CG position must give 40 % static weight on the front axle."""
    setup = _setup(cg_to_front_axle=1560.0, cg_to_rear_axle=1040.0)
    assert abs(setup.static_weight_distribution_front - 0.4) < 1e-12
    assert abs(setup.weight - 1500.0 * 9.81) < 1e-9


def test_from_weight_distribution_places_cg() -> None:
    """The supplied front fraction must be reproduced by the derived CG."""
    setup = VehicleSetup.from_weight_distribution(
        mass=1300.0,
        wheelbase=2500.0,
        front_weight_fraction=0.55,
        cg_height=450.0,
        track_width_front=1500.0,
        track_width_rear=1500.0,
        front_suspension=_axle(),
        rear_suspension=_axle(),
    )
    assert abs(setup.cg_to_front_axle - 1125.0) < 1e-9
    assert abs(setup.cg_to_rear_axle - 1375.0) < 1e-9
    assert abs(setup.static_weight_distribution_front - 0.55) < 1e-12


def test_from_weight_distribution_rejects_fraction_outside_unit_interval() -> None:
    """A front weight fraction above 1 is out of range."""
    with pytest.raises(OutOfRangeInput, match="front_weight_fraction"):
        VehicleSetup.from_weight_distribution(
            mass=1300.0,
            wheelbase=2500.0,
            front_weight_fraction=1.2,
            cg_height=450.0,
            track_width_front=1500.0,
            track_width_rear=1500.0,
            front_suspension=_axle(),
            rear_suspension=_axle(),
        )


def test_cg_distances_must_sum_to_wheelbase() -> None:
    """A 2 mm mismatch between CG distances and wheelbase is rejected."""
    with pytest.raises(InvalidGeometry, match="must equal wheelbase"):
        _setup(cg_to_front_axle=1300.0, cg_to_rear_axle=1302.0)


def test_cg_mismatch_within_tolerance_is_accepted() -> None:
    """A sub-millimetre mismatch is within tolerance."""
    setup = _setup(cg_to_front_axle=1300.0, cg_to_rear_axle=1300.5)
    assert setup.wheelbase == 2600.0


def test_zero_wheelbase_is_invalid_geometry() -> None:
    """A zero wheelbase raises InvalidGeometry."""
    with pytest.raises(InvalidGeometry, match="wheelbase"):
        _setup(wheelbase=0.0)


def test_negative_cg_height_is_invalid_geometry() -> None:
    """A negative CG height raises InvalidGeometry."""
    with pytest.raises(InvalidGeometry, match="cg_height"):
        _setup(cg_height=-10.0)


def test_non_positive_track_width_is_invalid_geometry() -> None:
    """A non-positive track width raises InvalidGeometry."""
    with pytest.raises(InvalidGeometry, match="track widths"):
        _setup(track_width_rear=0.0)


def test_non_finite_mass_is_rejected() -> None:
    """NaN and infinity are rejected before any other check."""
    with pytest.raises(OutOfRangeInput, match="finite"):
        _setup(mass=math.nan)
    with pytest.raises(OutOfRangeInput, match="finite"):
        _setup(mass=math.inf)


def test_unknown_drive_type_is_rejected() -> None:
    """An unknown drive type raises."""
    with pytest.raises(OutOfRangeInput, match="drive_type"):
        _setup(drive_type="4WD")


def test_suspension_validation() -> None:
    """Spring rate must be positive and anti-roll bar non-negative."""
    with pytest.raises(OutOfRangeInput, match="spring_rate"):
        _axle(spring_rate=0.0)
    with pytest.raises(OutOfRangeInput, match="anti_roll_bar"):
        _axle(anti_roll_bar=-1.0)


def test_geometry_errors_are_value_errors() -> None:
    """Callers may catch the builtin ValueError."""
    with pytest.raises(ValueError):
        _setup(wheelbase=-1.0)


def test_setup_is_immutable() -> None:
    """Setups cannot be mutated in place."""
    setup = _setup()
    with pytest.raises(dataclasses.FrozenInstanceError):
        setup.mass = 1200.0  # type: ignore[misc]


def test_driven_axles_follow_drive_type() -> None:
    """RWD drives only the rear, FWD only the front, AWD both."""
    assert _setup(drive_type="RWD").is_driven("rear")
    assert not _setup(drive_type="RWD").is_driven("front")
    assert _setup(drive_type="FWD").is_driven("front")
    assert not _setup(drive_type="FWD").is_driven("rear")
    awd = _setup(drive_type="AWD")
    assert awd.is_driven("front") and awd.is_driven("rear")
