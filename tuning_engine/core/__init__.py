"""Core calculation modules for the vehicle tuning engine."""

from tuning_engine.core.aero import AerodynamicsSetup, Drivetrain, SpeedProfile
from tuning_engine.core.aerodynamics import (
    AERO_PACKAGES,
    SEGMENT_WEIGHTS,
    AeroBalance,
    AeroForces,
    AeroOptimization,
    AeroPackage,
    AeroResult,
    SegmentWeights,
    analyze_aero_balance,
    analyze_aerodynamics,
    calculate_downforce_distribution,
    calculate_drag_force,
    estimate_top_speed,
    optimize_for_speed_profile,
)
from tuning_engine.core.errors import (
    InvalidGeometry,
    NoEquilibriumFound,
    OutOfRangeInput,
    TuningError,
    UnknownCompound,
    UnknownTrack,
)
from tuning_engine.core.handling import HandlingBalance, analyze_handling_balance
from tuning_engine.core.load_transfer import (
    AxleLoads,
    BalanceAnalysis,
    CornerLoads,
    LoadTransferResult,
    SuspensionAdjustments,
    SuspensionTravel,
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
from tuning_engine.core.tire import TUNE_TYPES, TireCompound, TireSelectionCriteria
from tuning_engine.core.tire_selection import (
    ScoredCompound,
    TireOption,
    TireRecommendation,
    TireScoringWeights,
    adjust_tire_pressure,
    calculate_optimal_pressure,
    compare_tires,
    get_quick_recommendation,
    list_tire_options,
    recommend_tire,
)
from tuning_engine.core.track import CORNER_CLASSES, SURFACES, TrackProfile
from tuning_engine.core.track_tuning import (
    TrackAdjustments,
    TrackSummary,
    apply_track_adjustments,
    calculate_track_adjustments,
    filter_tracks,
    find_track,
    get_track_adjustments,
    get_track_summary,
    speed_profile_for_track,
)
from tuning_engine.core.vehicle import DRIVE_TYPES, GRAVITY, AxleSuspension, VehicleSetup

__all__ = [
    "AERO_PACKAGES",
    "AeroBalance",
    "AeroForces",
    "AeroOptimization",
    "AeroPackage",
    "AeroResult",
    "AerodynamicsSetup",
    "AxleLoads",
    "AxleSuspension",
    "BalanceAnalysis",
    "CORNER_CLASSES",
    "CornerLoads",
    "DRIVE_TYPES",
    "Drivetrain",
    "GRAVITY",
    "HandlingBalance",
    "InvalidGeometry",
    "LoadTransferResult",
    "NoEquilibriumFound",
    "OutOfRangeInput",
    "SEGMENT_WEIGHTS",
    "SURFACES",
    "ScoredCompound",
    "SegmentWeights",
    "SpeedProfile",
    "SuspensionAdjustments",
    "SuspensionTravel",
    "TUNE_TYPES",
    "TireCompound",
    "TireOption",
    "TireRecommendation",
    "TireScoringWeights",
    "TireSelectionCriteria",
    "TrackAdjustments",
    "TrackProfile",
    "TrackSummary",
    "TuningError",
    "UnknownCompound",
    "UnknownTrack",
    "VehicleSetup",
    "adjust_tire_pressure",
    "analyze_aero_balance",
    "analyze_aerodynamics",
    "analyze_balance_bias",
    "analyze_handling_balance",
    "apply_suspension_adjustments",
    "apply_track_adjustments",
    "calculate_combined_load_transfer",
    "calculate_downforce_distribution",
    "calculate_drag_force",
    "calculate_lateral_transfer",
    "calculate_longitudinal_transfer",
    "calculate_optimal_pressure",
    "calculate_static_weight_distribution",
    "calculate_suspension_travel",
    "calculate_tire_load_sensitivity",
    "calculate_track_adjustments",
    "compare_tires",
    "estimate_top_speed",
    "filter_tracks",
    "find_track",
    "get_quick_recommendation",
    "get_track_adjustments",
    "get_track_summary",
    "list_tire_options",
    "optimize_for_speed_profile",
    "recommend_suspension_adjustments",
    "recommend_tire",
    "speed_profile_for_track",
]
