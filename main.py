"""CLI entrypoint for the vehicle tuning engine."""

from __future__ import annotations

import logging
import sys

from tuning_engine import __version__
from tuning_engine.config import (
    load_aero_profiles,
    load_tire_compounds,
    load_tire_scoring_weights,
    load_tracks,
)
from tuning_engine.core.aero import Drivetrain
from tuning_engine.core.aerodynamics import analyze_aerodynamics
from tuning_engine.core.handling import analyze_handling_balance
from tuning_engine.core.load_transfer import (
    analyze_balance_bias,
    calculate_combined_load_transfer,
    recommend_suspension_adjustments,
)
from tuning_engine.core.tire import TireSelectionCriteria
from tuning_engine.core.tire_selection import recommend_tire
from tuning_engine.core.track_tuning import get_track_adjustments, get_track_summary
from tuning_engine.core.vehicle import AxleSuspension, VehicleSetup

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("tuning_engine.main")


def main() -> None:
    """Run a demonstration of the tuning calculation engine."""
    print(f"Vehicle Tuning Engine v{__version__}")
    print("=" * 56)

    # -- Reference data -------------------------------------------------------
    tracks = load_tracks()
    compounds = load_tire_compounds()
    aero_profiles = load_aero_profiles()
    weights = load_tire_scoring_weights()
    logger.info(
        "Reference data: %d tracks, %d compounds, %d aero profiles",
        len(tracks),
        len(compounds),
        len(aero_profiles),
    )

    # -- Sample car -----------------------------------------------------------
    setup = VehicleSetup.from_weight_distribution(
        mass=1420.0,
        wheelbase=2570.0,
        front_weight_fraction=0.54,
        cg_height=480.0,
        track_width_front=1590.0,
        track_width_rear=1570.0,
        front_suspension=AxleSuspension(
            spring_rate=95.0,
            bump_damping=3200.0,
            rebound_damping=5400.0,
            anti_roll_bar=38.0,
            ride_height=120.0,
        ),
        rear_suspension=AxleSuspension(
            spring_rate=85.0,
            bump_damping=3000.0,
            rebound_damping=5000.0,
            anti_roll_bar=24.0,
            ride_height=125.0,
        ),
        drive_type="RWD",
    )
    aero = aero_profiles["sports"]
    drivetrain = Drivetrain(peak_power_kw=310.0, mass=setup.mass)

    print(f"\nCar   : {setup.mass:.0f} kg, {setup.drive_type}, "
          f"{setup.static_weight_distribution_front:.0%} front")
    print(f"Aero  : {aero.name} (Cd {aero.drag_coefficient:.2f})")
    print("-" * 56)

    # -- Load transfer --------------------------------------------------------
    print(f"\n  {'Condition':<22}  {'FL':>7}  {'FR':>7}  {'RL':>7}  {'RR':>7}  {'Bias':>6}")
    for label, accel_g, lateral_g in (
        ("Static", 0.0, 0.0),
        ("Braking -1.0 g", -1.0, 0.0),
        ("Launch +0.6 g", 0.6, 0.0),
        ("Right-hander 1.1 g", 0.0, 1.1),
        ("Trail brake", -0.5, 0.9),
    ):
        result = calculate_combined_load_transfer(setup, accel_g, lateral_g)
        fl, fr, rl, rr = result.corner_loads.as_tuple()
        print(
            f"  {label:<22}  {fl:7.0f}  {fr:7.0f}  {rl:7.0f}  {rr:7.0f}  "
            f"{result.balance_bias:+6.2f}"
        )

    cornering = calculate_combined_load_transfer(setup, 0.0, 1.1)
    balance = analyze_balance_bias(cornering)
    print(f"\nBalance: {balance.bias} ({balance.value:+.2f}) - {balance.description}")
    adjustments = recommend_suspension_adjustments(setup, balance.value)
    print(
        f"Suggested ARB deltas: front {adjustments.front_arb_delta:+.1f} N/mm, "
        f"rear {adjustments.rear_arb_delta:+.1f} N/mm"
    )

    # -- Aerodynamics ---------------------------------------------------------
    summary = analyze_aerodynamics(aero, drivetrain)
    print(f"\nTop speed        : {summary.estimated_top_speed:.1f} km/h")
    print(f"Aero balance     : {summary.aero_balance_front:.1%} front ({summary.stability})")
    print(f"Downforce/weight : {summary.downforce_to_weight:.2f} at 160 km/h")
    for speed, front, rear, drag in zip(
        summary.speeds, summary.downforce_front, summary.downforce_rear, summary.drag_force
    ):
        print(f"  {speed:5.0f} km/h  DF {front + rear:7.0f} N  drag {drag:6.0f} N")

    handling = analyze_handling_balance(setup, aero, speed_kmh=200.0)
    print(f"Handling at 200 km/h: {handling.classification} ({handling.combined_bias:+.2f})")

    # -- Track ----------------------------------------------------------------
    track_id = "lago-azul"
    print(f"\n{get_track_summary(track_id, tracks).text}")
    track_adj = get_track_adjustments(track_id, setup, tracks, aero=aero)
    print(f"  Springs     : {track_adj.front_spring_delta:+.1f} / "
          f"{track_adj.rear_spring_delta:+.1f} N/mm")
    print(f"  Final drive : x{track_adj.final_drive_factor:.3f}")
    print(f"  Compound    : {track_adj.recommended_compound}")
    if track_adj.aero_package is not None:
        print(f"  Aero package: {track_adj.aero_package.package.name}")
    for reason in track_adj.reasoning:
        print(f"    - {reason}")

    # -- Tires ----------------------------------------------------------------
    criteria = TireSelectionCriteria(
        tune_type="grip",
        drive_type=setup.drive_type,
        surface="asphalt",
        power_kw=drivetrain.peak_power_kw,
        mass=setup.mass,
        track_id=track_id,
    )
    tire = recommend_tire(criteria, compounds, setup=setup, weights=weights)
    print(f"\nTire: {tire.compound.name} (score {tire.score:.1f})")
    print(f"  Pressures: {tire.pressure_front_kpa:.1f} / {tire.pressure_rear_kpa:.1f} kPa")
    for alt in tire.alternatives:
        print(f"  Alternative: {alt.compound.name} ({alt.score:.1f})")

    print("\nTuning analysis complete.")


if __name__ == "__main__":
    sys.exit(main() or 0)
