"""
swimjax traces charged particles through magnetic fields by adaptive
Runge-Kutta integration, implemented in JAX.
"""

from .constants import (
    DEFAULT_MIN_STEP,
    DEFAULT_MAX_STEP,
    STEP_GROWTH,
    STEP_SHRINK,
    SPEED_OF_LIGHT_FACTOR,
)

from .config import set_dtype, get_dtype

from .integrators import (
    AdaptiveDriver,
    AdvanceResult,
    HalfStepAdvance,
    IntegrationResult,
    IntegrationStatus,
    RK4Advance,
    StepSizeLimits,
    StepStatistics,
    TableauAdvance,
    ThresholdStopper,
    TrajectoryRecorder,
)

from .dynamics import (
    straight_line,
    uniform_field,
    make_swimz_derivative,
)

__all__ = [
    # Constants
    "DEFAULT_MIN_STEP",
    "DEFAULT_MAX_STEP",
    "STEP_GROWTH",
    "STEP_SHRINK",
    "SPEED_OF_LIGHT_FACTOR",
    # Config
    "set_dtype",
    "get_dtype",
    # Integrators
    "AdaptiveDriver",
    "AdvanceResult",
    "HalfStepAdvance",
    "IntegrationResult",
    "IntegrationStatus",
    "RK4Advance",
    "StepSizeLimits",
    "StepStatistics",
    "TableauAdvance",
    "ThresholdStopper",
    "TrajectoryRecorder",
    # Dynamics
    "straight_line",
    "uniform_field",
    "make_swimz_derivative",
]
