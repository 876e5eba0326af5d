"""Adaptive step-size integration of first-order ODE systems.

The :class:`AdaptiveDriver` owns the control loop; everything else is a
pluggable capability:

- advance strategies: :class:`HalfStepAdvance` (RK4 with a step-doubling
  error estimate, the default), :class:`TableauAdvance` (any explicit
  Butcher tableau, e.g. :data:`FEHLBERG_45` or :data:`DORMAND_PRINCE_54`),
  and :class:`RK4Advance` (fixed step, no error estimate),
- stoppers: :class:`ThresholdStopper`, :class:`PredicateStopper`,
- listeners: :class:`TrajectoryRecorder`, :class:`CallbackListener`.

Every advance strategy shares a common interface::

    result = strategy.advance(z, y, dydz, h, derivative)

where ``derivative(z, y) -> dy/dz`` defines the ODE right-hand side and the
result is an :class:`AdvanceResult` named tuple.
"""

from swimjax.integrators._protocols import AdvanceStrategy, DerivativeFn, StepListener, Stopper
from swimjax.integrators._types import (
    AdvanceResult,
    IntegrationResult,
    IntegrationStatus,
    StepSizeLimits,
    StepStatistics,
)
from swimjax.integrators.driver import AdaptiveDriver
from swimjax.integrators.half_step import HalfStepAdvance
from swimjax.integrators.observers import (
    CallbackListener,
    PredicateStopper,
    ThresholdStopper,
    TrajectoryRecorder,
    as_listener,
    as_stopper,
)
from swimjax.integrators.rk4 import RK4Advance, rk4_step
from swimjax.integrators.tableau import (
    CLASSIC_RK4,
    DORMAND_PRINCE_54,
    FEHLBERG_45,
    ButcherTableau,
    TableauAdvance,
)

__all__ = [
    "AdaptiveDriver",
    "AdvanceResult",
    "AdvanceStrategy",
    "ButcherTableau",
    "CLASSIC_RK4",
    "CallbackListener",
    "DORMAND_PRINCE_54",
    "DerivativeFn",
    "FEHLBERG_45",
    "HalfStepAdvance",
    "IntegrationResult",
    "IntegrationStatus",
    "PredicateStopper",
    "RK4Advance",
    "StepListener",
    "StepSizeLimits",
    "StepStatistics",
    "Stopper",
    "TableauAdvance",
    "ThresholdStopper",
    "TrajectoryRecorder",
    "as_listener",
    "as_stopper",
    "rk4_step",
]
