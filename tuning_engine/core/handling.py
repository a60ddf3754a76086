"""Combined mechanical and aerodynamic handling balance."""

from __future__ import annotations

from dataclasses import dataclass

from tuning_engine.core.aero import AerodynamicsSetup
from tuning_engine.core.aerodynamics import (
    AeroBalance,
    analyze_aero_balance,
    calculate_downforce_distribution,
)
from tuning_engine.core.load_transfer import (
    NEUTRAL_BALANCE_BAND,
    BalanceAnalysis,
    analyze_balance_bias,
    calculate_combined_load_transfer,
)
from tuning_engine.core.vehicle import GRAVITY, VehicleSetup


@dataclass(frozen=True)
class HandlingBalance:
    """Balance at one speed and load condition.

    Attributes:
        speed_kmh: Speed of the analysis.
        mechanical: Load-transfer balance.
        aero: Downforce balance at ``speed_kmh``.
        aero_bias: Understeer (+) / oversteer (-) contribution of aero.
        combined_bias: ``mechanical.value + aero_bias``.
        classification: ``"understeer"``, ``"oversteer"`` or ``"neutral"``.
    """

    speed_kmh: float
    mechanical: BalanceAnalysis
    aero: AeroBalance
    aero_bias: float
    combined_bias: float
    classification: str


def analyze_handling_balance(
    setup: VehicleSetup,
    aero: AerodynamicsSetup,
    speed_kmh: float,
    accel_g: float = 0.0,
    lateral_g: float = 1.0,
    surface: str = "asphalt",
) -> HandlingBalance:
    """Combine load-transfer balance with aerodynamic balance.

    Downforce split further rearward than the static weight adds rear
    grip and pushes the car toward understeer; the effect is scaled by
    total downforce relative to the car's weight.
    """
    result = calculate_combined_load_transfer(setup, accel_g, lateral_g)
    mechanical = analyze_balance_bias(result, surface)
    aero_balance = analyze_aero_balance(aero, speed_kmh)
    forces = calculate_downforce_distribution(aero, speed_kmh)

    weight = setup.mass * GRAVITY
    aero_bias = (
        100.0
        * (setup.static_weight_distribution_front - aero_balance.front_fraction)
        * forces.downforce_total
        / weight
    )
    combined = mechanical.value + aero_bias
    if combined > NEUTRAL_BALANCE_BAND:
        classification = "understeer"
    elif combined < -NEUTRAL_BALANCE_BAND:
        classification = "oversteer"
    else:
        classification = "neutral"

    return HandlingBalance(
        speed_kmh=speed_kmh,
        mechanical=mechanical,
        aero=aero_balance,
        aero_bias=aero_bias,
        combined_bias=combined,
        classification=classification,
    )
