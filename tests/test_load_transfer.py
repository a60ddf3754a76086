"""Tests for the load transfer engine."""

import pytest

from tuning_engine.core.errors import OutOfRangeInput
from tuning_engine.core.load_transfer import (
    SuspensionAdjustments,
    analyze_balance_bias,
    apply_suspension_adjustments,
    calculate_combined_load_transfer,
    calculate_lateral_transfer,
    calculate_longitudinal_transfer,
    calculate_static_weight_distribution,
    calculate_suspension_travel,
    calculate_tire_load_sensitivity,
    recommend_suspension_adjustments,
)
from tuning_engine.core.vehicle import GRAVITY, AxleSuspension, VehicleSetup

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_setup(
    front_arb: float = 30.0,
    rear_arb: float = 20.0,
    front_weight_fraction: float = 0.5,
) -> VehicleSetup:
    """1500 kg, 2600 mm wheelbase, 500 mm CG height."""
    return VehicleSetup.from_weight_distribution(
        mass=1500.0,
        wheelbase=2600.0,
        front_weight_fraction=front_weight_fraction,
        cg_height=500.0,
        track_width_front=1550.0,
        track_width_rear=1550.0,
        front_suspension=AxleSuspension(
            spring_rate=90.0,
            bump_damping=3000.0,
            rebound_damping=5000.0,
            anti_roll_bar=front_arb,
            ride_height=120.0,
        ),
        rear_suspension=AxleSuspension(
            spring_rate=80.0,
            bump_damping=3000.0,
            rebound_damping=5000.0,
            anti_roll_bar=rear_arb,
            ride_height=125.0,
        ),
    )


_G_GRID = (-4.0, -1.5, -0.5, 0.0, 0.8, 2.0, 4.0)


# ---------------------------------------------------------------------------
# Static distribution
# ---------------------------------------------------------------------------


def test_static_distribution_sums_to_weight() -> None:
    """Axle loads must add up to m * g for any weight split."""
    for fraction in (0.35, 0.5, 0.54, 0.62):
        setup = _sample_setup(front_weight_fraction=fraction)
        static = calculate_static_weight_distribution(setup)
        weight = setup.mass * GRAVITY
        assert abs(static.total - weight) < 1e-9 * weight
        assert abs(static.front / weight - fraction) < 1e-9, (
            f"Front share {static.front / weight} != {fraction}"
        )


# ---------------------------------------------------------------------------
# Longitudinal transfer
# ---------------------------------------------------------------------------


def test_braking_moves_expected_load_forward() -> None:
    """1 g braking moves m * g * h / wb onto the front axle."""
    setup = _sample_setup()
    expected = 1500.0 * 1.0 * GRAVITY * 500.0 / 2600.0

    transfer = calculate_longitudinal_transfer(setup, -1.0)
    assert abs(transfer + expected) < 1e-9, f"Got {transfer}, expected {-expected}"

    result = calculate_combined_load_transfer(setup, -1.0, 0.0)
    gained = result.corner_loads.front - result.static_front
    assert abs(gained - expected) < 1e-6, f"Front gained {gained}, expected {expected}"


def test_longitudinal_transfer_is_antisymmetric() -> None:
    """Braking and accelerating move equal load in opposite directions."""
    setup = _sample_setup()
    for g in (0.3, 1.0, 2.5, 4.0):
        forward = calculate_longitudinal_transfer(setup, g)
        backward = calculate_longitudinal_transfer(setup, -g)
        assert abs(forward + backward) < 1e-9


def test_acceleration_loads_the_rear() -> None:
    """Acceleration shifts load onto the rear axle."""
    setup = _sample_setup()
    result = calculate_combined_load_transfer(setup, 0.6, 0.0)
    assert result.corner_loads.rear > result.static_rear
    assert result.corner_loads.front < result.static_front


# ---------------------------------------------------------------------------
# Lateral transfer
# ---------------------------------------------------------------------------


def test_lateral_transfer_balances_roll_moment() -> None:
    """Per-axle transfer times track width must equal m * g * ay * h."""
    setup = _sample_setup()
    lateral = calculate_lateral_transfer(setup, 1.2)
    moment = lateral.front * setup.track_width_front + lateral.rear * setup.track_width_rear
    expected = setup.mass * GRAVITY * 1.2 * setup.cg_height
    assert abs(moment - expected) < 1e-6 * expected


def test_right_hand_corner_loads_left_wheels() -> None:
    """A right-hand corner loads the left side."""
    setup = _sample_setup()
    loads = calculate_combined_load_transfer(setup, 0.0, 0.8).corner_loads
    assert loads.front_left > loads.front_right
    assert loads.rear_left > loads.rear_right


def test_stiffer_front_roll_takes_more_front_transfer() -> None:
    """A stiffer front anti-roll bar shifts lateral transfer to the front."""
    soft = calculate_lateral_transfer(_sample_setup(front_arb=10.0), 1.0)
    stiff = calculate_lateral_transfer(_sample_setup(front_arb=60.0), 1.0)
    assert stiff.front > soft.front
    assert stiff.rear < soft.rear


# ---------------------------------------------------------------------------
# Combined transfer
# ---------------------------------------------------------------------------


def test_zero_g_equals_static() -> None:
    """With no acceleration the corner loads are the static loads halved."""
    setup = _sample_setup(front_weight_fraction=0.56)
    static = calculate_static_weight_distribution(setup)
    result = calculate_combined_load_transfer(setup, 0.0, 0.0)
    loads = result.corner_loads
    assert loads.front_left == static.front / 2.0
    assert loads.front_right == static.front / 2.0
    assert abs(loads.rear_left - static.rear / 2.0) < 1e-9
    assert abs(loads.rear_right - static.rear / 2.0) < 1e-9


def test_corner_loads_always_sum_to_weight() -> None:
    """Sum of corner loads equals m * g across the whole g-grid, lift included."""
    setup = _sample_setup()
    weight = setup.mass * GRAVITY
    for accel_g in _G_GRID:
        for lateral_g in _G_GRID:
            loads = calculate_combined_load_transfer(setup, accel_g, lateral_g).corner_loads
            assert abs(loads.total - weight) <= 1e-6 * weight, (
                f"Sum {loads.total} != {weight} at ({accel_g}, {lateral_g})"
            )
            assert min(loads.as_tuple()) >= 0.0, (
                f"Negative wheel load at ({accel_g}, {lateral_g}): {loads.as_tuple()}"
            )


def test_wheel_lift_moves_load_to_outside_wheel() -> None:
    """At 4 g lateral the inside front wheel lifts and carries nothing."""
    setup = _sample_setup(front_arb=80.0, rear_arb=0.0)
    result = calculate_combined_load_transfer(setup, 0.0, 4.0)
    assert result.corner_loads.front_right == 0.0
    assert abs(result.corner_loads.front_left - result.static_front) < 1e-9


def test_g_beyond_range_is_rejected() -> None:
    """Accelerations outside the supported range raise."""
    setup = _sample_setup()
    with pytest.raises(OutOfRangeInput, match="accel_g"):
        calculate_combined_load_transfer(setup, 4.5, 0.0)
    with pytest.raises(OutOfRangeInput, match="lateral_g"):
        calculate_combined_load_transfer(setup, 0.0, float("nan"))


# ---------------------------------------------------------------------------
# Load sensitivity
# ---------------------------------------------------------------------------


def test_sensitivity_is_one_at_nominal_load() -> None:
    """Grip multiplier is one at nominal load."""
    assert calculate_tire_load_sensitivity(4000.0, 4000.0) == 1.0


def test_sensitivity_falls_with_load_deviation() -> None:
    """Grip multiplier drops as load moves away from nominal in either direction."""
    near = calculate_tire_load_sensitivity(4000.0, 4400.0)
    far = calculate_tire_load_sensitivity(4000.0, 6000.0)
    light = calculate_tire_load_sensitivity(4000.0, 2000.0)
    assert 1.0 > near > far
    assert abs(far - light) < 1e-12, "Deviation penalty should be symmetric"


def test_sensitivity_is_floored() -> None:
    """Grip multiplier never drops below its floor."""
    assert calculate_tire_load_sensitivity(1000.0, 10000.0) == 0.5


def test_loose_surfaces_are_more_load_sensitive() -> None:
    """Loose surfaces lose grip faster under load."""
    asphalt = calculate_tire_load_sensitivity(4000.0, 6000.0, "asphalt")
    dirt = calculate_tire_load_sensitivity(4000.0, 6000.0, "dirt")
    assert dirt < asphalt


def test_sensitivity_rejects_bad_input() -> None:
    """Bad loads and unknown surfaces raise."""
    with pytest.raises(OutOfRangeInput, match="nominal_load"):
        calculate_tire_load_sensitivity(0.0, 1000.0)
    with pytest.raises(OutOfRangeInput, match="actual_load"):
        calculate_tire_load_sensitivity(1000.0, -1.0)
    with pytest.raises(OutOfRangeInput, match="surface"):
        calculate_tire_load_sensitivity(1000.0, 1000.0, "ice")


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------


def test_static_balance_is_neutral() -> None:
    """A balanced car at rest is neutral."""
    result = calculate_combined_load_transfer(_sample_setup(), 0.0, 0.0)
    balance = analyze_balance_bias(result)
    assert balance.bias == "neutral"
    assert abs(balance.value) < 1e-9


def test_stiff_front_roll_understeers() -> None:
    """A front-heavy roll stiffness split saturates the front axle first."""
    result = calculate_combined_load_transfer(
        _sample_setup(front_arb=80.0, rear_arb=0.0), 0.0, 1.2
    )
    balance = analyze_balance_bias(result)
    assert balance.bias == "understeer", f"Got {balance.bias} ({balance.value})"
    assert balance.value > 1.0


def test_stiff_rear_roll_oversteers() -> None:
    """A stiff rear bar pushes balance toward oversteer."""
    result = calculate_combined_load_transfer(
        _sample_setup(front_arb=0.0, rear_arb=80.0), 0.0, 1.2
    )
    balance = analyze_balance_bias(result)
    assert balance.bias == "oversteer", f"Got {balance.bias} ({balance.value})"
    assert balance.value < -1.0


def test_heavy_braking_unloads_rear_into_oversteer() -> None:
    """Heavy braking unloads the rear toward oversteer."""
    result = calculate_combined_load_transfer(_sample_setup(), -1.0, 0.0)
    assert analyze_balance_bias(result).bias == "oversteer"
    assert result.balance_bias < 0.0


def test_balance_value_matches_result_scalar_on_asphalt() -> None:
    """Balance value agrees with the transfer result on asphalt."""
    result = calculate_combined_load_transfer(_sample_setup(), -0.4, 0.9)
    assert analyze_balance_bias(result, "asphalt").value == result.balance_bias


# ---------------------------------------------------------------------------
# Suspension recommendations
# ---------------------------------------------------------------------------


def test_neutral_balance_needs_no_adjustment() -> None:
    """A neutral car gets no bar changes."""
    adjustments = recommend_suspension_adjustments(_sample_setup(), 0.0)
    assert adjustments.front_arb_delta == 0.0
    assert adjustments.rear_arb_delta == 0.0
    assert adjustments.front_spring_delta == 0.0
    assert adjustments.rear_spring_delta == 0.0


def test_understeer_softens_front_and_stiffens_rear() -> None:
    """Understeer softens the front bar and stiffens the rear."""
    adjustments = recommend_suspension_adjustments(_sample_setup(), 6.0)
    assert adjustments.front_arb_delta < 0.0
    assert adjustments.rear_arb_delta > 0.0
    assert adjustments.front_spring_delta < 0.0
    assert adjustments.rear_spring_delta > 0.0


def test_oversteer_stiffens_front_and_softens_rear() -> None:
    """Oversteer stiffens the front bar and softens the rear."""
    adjustments = recommend_suspension_adjustments(_sample_setup(), -6.0)
    assert adjustments.front_arb_delta > 0.0
    assert adjustments.rear_arb_delta < 0.0


def test_adjustment_grows_with_imbalance() -> None:
    """Larger bias magnitude produces a strictly larger correction."""
    setup = _sample_setup()
    previous = 0.0
    for bias in (0.5, 2.0, 5.0, 10.0, 25.0):
        delta = abs(recommend_suspension_adjustments(setup, bias).front_arb_delta)
        assert delta > previous, f"Adjustment did not grow at bias {bias}"
        previous = delta


def test_adjustment_magnitude_is_symmetric() -> None:
    """Opposite balances get equal and opposite changes."""
    setup = _sample_setup()
    under = recommend_suspension_adjustments(setup, 7.5)
    over = recommend_suspension_adjustments(setup, -7.5)
    assert abs(under.front_arb_delta + over.front_arb_delta) < 1e-12
    assert abs(under.rear_spring_delta + over.rear_spring_delta) < 1e-12


def test_apply_adjustments_returns_new_setup() -> None:
    """Applying adjustments leaves the input setup untouched."""
    setup = _sample_setup()
    adjustments = SuspensionAdjustments(
        front_spring_delta=-5.0,
        rear_spring_delta=4.0,
        front_arb_delta=-3.0,
        rear_arb_delta=2.0,
    )
    tuned = apply_suspension_adjustments(setup, adjustments)
    assert tuned.front_suspension.spring_rate == 85.0
    assert tuned.rear_suspension.spring_rate == 84.0
    assert tuned.front_suspension.anti_roll_bar == 27.0
    assert tuned.rear_suspension.anti_roll_bar == 22.0
    assert setup.front_suspension.spring_rate == 90.0, "Input setup must not change"


def test_apply_adjustments_rejects_negative_roll_bar() -> None:
    """An adjustment that drives a bar negative raises."""
    adjustments = SuspensionAdjustments(0.0, 0.0, -50.0, 0.0)
    with pytest.raises(OutOfRangeInput):
        apply_suspension_adjustments(_sample_setup(), adjustments)


def test_suspension_travel() -> None:
    """1800 N across an axle on 90 and 80 N/mm springs."""
    travel = calculate_suspension_travel(_sample_setup(), 1800.0)
    assert abs(travel.front_compression - 10.0) < 1e-12
    assert abs(travel.rear_extension - 11.25) < 1e-12
    assert travel.max_needed == travel.rear_extension
