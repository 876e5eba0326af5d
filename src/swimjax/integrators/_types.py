"""Type definitions for the adaptive integration driver.

Provides the data types shared by the driver and the advance strategies:

- :class:`StepSizeLimits`: Immutable minimum/maximum step-size bounds held
  by an :class:`~swimjax.integrators.AdaptiveDriver`.
- :class:`AdvanceResult`: Output of every advance strategy, containing the
  candidate state and an optional per-component error estimate.
- :class:`StepStatistics`: Mutable min/mean/max record of the step sizes
  actually used during one integration call.
- :class:`IntegrationStatus`: How an integration call ended.
- :class:`IntegrationResult`: Everything :meth:`AdaptiveDriver.solve`
  reports back.

The value types are :class:`~typing.NamedTuple` instances, which JAX treats
as pytrees automatically.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import NamedTuple

from jax import Array

from swimjax.constants import DEFAULT_MAX_STEP, DEFAULT_MIN_STEP


class StepSizeLimits(NamedTuple):
    """Step-size bounds for adaptive integration.

    Attributes:
        min_step: Smallest step size the driver will retry with. When a
            rejected step halves below this value the integration ends.
        max_step: Largest step size the driver will grow to after an
            accepted step.
    """

    min_step: float = DEFAULT_MIN_STEP
    max_step: float = DEFAULT_MAX_STEP

    def validate(self) -> StepSizeLimits:
        """Check the bounds and return ``self``.

        Raises:
            ValueError: If ``min_step`` is not positive or ``max_step`` is
                smaller than ``min_step``.
        """
        if not self.min_step > 0.0:
            raise ValueError(f"min_step must be positive, got {self.min_step}")
        if not self.max_step >= self.min_step:
            raise ValueError(
                f"max_step ({self.max_step}) must be >= min_step ({self.min_step})"
            )
        return self


class AdvanceResult(NamedTuple):
    """Result of a single advance-strategy call.

    Attributes:
        state: Candidate state vector at ``z + h``.
        error: Per-component absolute error estimate, or ``None`` for
            strategies that do not estimate error.
    """

    state: Array
    error: Array | None = None


@dataclass
class StepStatistics:
    """Min, mean and max step size used across the accepted steps of a call.

    Pass an instance to :meth:`AdaptiveDriver.integrate` to have it filled
    in. At the start of the call all three slots hold the initial step size;
    if no step is ever accepted they keep that value.

    The initial step size stays in the running sum, so ``mean_step`` is
    ``(h0 + sum(h)) / n``. :attr:`accepted_mean` is the plain average over
    the accepted steps.

    Attributes:
        min_step: Smallest step size used.
        mean_step: Seeded average step size (a running sum until finalized).
        max_step: Largest step size used.
        accepted_mean: Average over accepted steps only.
    """

    min_step: float = 0.0
    mean_step: float = 0.0
    max_step: float = 0.0
    accepted_mean: float = 0.0
    _accepted_sum: float = field(default=0.0, init=False, repr=False, compare=False)

    def reset(self, h: float) -> None:
        self.min_step = h
        self.mean_step = h
        self.max_step = h
        self.accepted_mean = h
        self._accepted_sum = 0.0

    def record(self, h: float) -> None:
        self.min_step = min(self.min_step, h)
        self.mean_step += h
        self.max_step = max(self.max_step, h)
        self._accepted_sum += h

    def finalize(self, n_accepted: int) -> None:
        if n_accepted > 0:
            self.mean_step = self.mean_step / n_accepted
            self.accepted_mean = self._accepted_sum / n_accepted

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.min_step, self.mean_step, self.max_step)


class IntegrationStatus(enum.Enum):
    """How an integration call terminated."""

    TARGET_REACHED = "target_reached"
    """The final boundary-clamped step landed on the target."""

    STOPPED = "stopped"
    """The stopper ended integration early."""

    STEP_COLLAPSED = "step_collapsed"
    """A rejected step halved below the minimum step size."""

    UNSUPPORTED = "unsupported"
    """The advance strategy cannot estimate error; nothing was done."""


class IntegrationResult(NamedTuple):
    """Outcome of :meth:`AdaptiveDriver.solve`.

    Attributes:
        steps: Number of accepted steps.
        z: Final value of the independent variable.
        state: Final state vector (a copy; the driver keeps no reference).
        status: How the call terminated.
        statistics: Step-size statistics for the call.
    """

    steps: int
    z: float
    state: Array
    status: IntegrationStatus
    statistics: StepStatistics

    @property
    def reached_target(self) -> bool:
        return self.status is IntegrationStatus.TARGET_REACHED
