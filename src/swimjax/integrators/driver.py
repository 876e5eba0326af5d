"""Adaptive step-size integration driver.

:class:`AdaptiveDriver` integrates ``dy/dz = f(z, y)`` from ``start`` to
``target`` with a pluggable advance strategy, controlling the step size
from the strategy's per-component error estimate:

1. Evaluate the derivative at the current point.
2. If a step of ``h`` would reach or pass ``target``, clamp ``h`` to the
   remaining distance and mark the step as the last one.
3. Advance with the signed step ``+h`` (forward) or ``-h`` (backward).
4. Reject the step if it is not the last one and any error component
   exceeds its tolerance. A rejected step halves ``h``; if ``h`` drops below
   the minimum step size the integration ends where it is.
5. Otherwise commit the new state, notify the listener, consult the
   stopper and grow ``h`` by :data:`~swimjax.constants.STEP_GROWTH`,
   capped at the maximum step size.

The loop runs eagerly in Python (listeners and stoppers are arbitrary
Python callbacks), so it is not meant to be wrapped in ``jax.jit``. The
advance strategies themselves are pure and jit-compatible.

A driver holds only its immutable step-size limits; every call allocates
its own working state, so one instance can be reused for any number of
sequential calls.
"""

from __future__ import annotations

import logging
import math

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from swimjax.config import get_dtype
from swimjax.constants import DEFAULT_MAX_STEP, DEFAULT_MIN_STEP, STEP_GROWTH, STEP_SHRINK
from swimjax.integrators._protocols import AdvanceStrategy, DerivativeFn
from swimjax.integrators._types import (
    IntegrationResult,
    IntegrationStatus,
    StepSizeLimits,
    StepStatistics,
)
from swimjax.integrators.half_step import HalfStepAdvance
from swimjax.integrators.observers import TrajectoryRecorder, as_listener, as_stopper
from swimjax.integrators.rk4 import RK4Advance

logger = logging.getLogger(__name__)


def _as_state(y0: ArrayLike) -> Array:
    y = jnp.asarray(y0, dtype=get_dtype())
    if y.ndim != 1 or y.shape[0] == 0:
        raise ValueError(f"Initial state must be a non-empty 1-D vector, got shape {y.shape}")
    return y


def _check_step(initial_step: float) -> float:
    h = float(initial_step)
    if not (h > 0.0 and math.isfinite(h)):
        raise ValueError(f"initial_step must be positive and finite, got {initial_step}")
    return h


def _check_bounds(start: float, target: float) -> tuple[float, float]:
    start, target = float(start), float(target)
    if not (math.isfinite(start) and math.isfinite(target)):
        raise ValueError(f"start and target must be finite, got start={start}, target={target}")
    return start, target


def _check_advance(advance: AdvanceStrategy | None, default: type) -> AdvanceStrategy:
    if advance is None:
        return default()
    if not isinstance(advance, AdvanceStrategy):
        raise TypeError(
            f"advance must be an AdvanceStrategy, got {type(advance).__name__}"
        )
    return advance


class AdaptiveDriver:
    """Adaptive step-size driver for first-order ODE systems.

    Args:
        min_step: Minimum step size. Default: 1e-3.
        max_step: Maximum step size. Default: 40.
        limits: Alternative to ``min_step``/``max_step``. Takes precedence
            when given.

    Raises:
        ValueError: If the limits are invalid.

    Examples:
        ```python
        import jax.numpy as jnp
        from swimjax.integrators import AdaptiveDriver
        from swimjax.dynamics import straight_line
        driver = AdaptiveDriver()
        result = driver.solve(
            jnp.array([0.0, 0.0, 0.1, 0.2]), 0.0, 10.0, 1.0,
            straight_line, tolerance=jnp.full(4, 1e-6),
        )
        result.z, result.state  # 10.0, [1.0, 2.0, 0.1, 0.2]
        ```
    """

    def __init__(
        self,
        min_step: float = DEFAULT_MIN_STEP,
        max_step: float = DEFAULT_MAX_STEP,
        *,
        limits: StepSizeLimits | None = None,
    ):
        if limits is None:
            limits = StepSizeLimits(float(min_step), float(max_step))
        self._limits = limits.validate()

    def __repr__(self) -> str:
        return f"AdaptiveDriver(min_step={self.min_step}, max_step={self.max_step})"

    @property
    def limits(self) -> StepSizeLimits:
        return self._limits

    @property
    def min_step(self) -> float:
        return self._limits.min_step

    @property
    def max_step(self) -> float:
        return self._limits.max_step

    def with_limits(
        self, min_step: float | None = None, max_step: float | None = None
    ) -> AdaptiveDriver:
        """Return a new driver with some step-size limits overridden."""
        return AdaptiveDriver(
            limits=StepSizeLimits(
                self.min_step if min_step is None else float(min_step),
                self.max_step if max_step is None else float(max_step),
            )
        )

    def integrate(
        self,
        y0: ArrayLike,
        start: float,
        target: float,
        initial_step: float,
        derivative: DerivativeFn,
        tolerance: ArrayLike,
        *,
        stopper=None,
        listener=None,
        advance: AdvanceStrategy | None = None,
        statistics: StepStatistics | None = None,
    ) -> int:
        """Integrate from ``start`` to ``target`` with adaptive step size.

        Args:
            y0: Initial state vector.
            start: Initial value of the independent variable.
            target: Value of the independent variable to integrate to. May
                be smaller than ``start`` for backward integration.
            initial_step: Starting step size (positive). Only later steps
                are capped at the maximum step size.
            derivative: Right-hand side ``f(z, y) -> dy/dz``.
            tolerance: Absolute error tolerance per state component.
            stopper: Optional :class:`Stopper` or callable ``fn(z, y) -> bool``
                that can end integration early.
            listener: Optional :class:`StepListener` or callable
                ``fn(z, y, h)`` notified after each accepted step.
            advance: Advance strategy. Default: :class:`HalfStepAdvance`.
            statistics: If given, filled with the min/mean/max step size
                used.

        Returns:
            int: Number of accepted steps. Zero if ``advance`` cannot
            estimate error.

        Raises:
            ValueError: On malformed inputs, including a non-finite ``start``
                or ``target``.
            TypeError: If ``advance``, ``stopper``, ``listener`` or
                ``statistics`` has the wrong type.
        """
        return self.solve(
            y0,
            start,
            target,
            initial_step,
            derivative,
            tolerance,
            stopper=stopper,
            listener=listener,
            advance=advance,
            statistics=statistics,
        ).steps

    def integrate_trajectory(
        self,
        y0: ArrayLike,
        start: float,
        target: float,
        initial_step: float,
        derivative: DerivativeFn,
        tolerance: ArrayLike,
        *,
        stopper=None,
        advance: AdvanceStrategy | None = None,
        statistics: StepStatistics | None = None,
    ) -> tuple[int, TrajectoryRecorder]:
        """Like :meth:`integrate`, recording every point including the start.

        Returns:
            tuple: ``(steps, recorder)`` where ``recorder`` holds
            ``steps + 1`` points.
        """
        recorder = TrajectoryRecorder()
        recorder.on_step(float(start), _as_state(y0), 0.0)
        steps = self.integrate(
            y0,
            start,
            target,
            initial_step,
            derivative,
            tolerance,
            stopper=stopper,
            listener=recorder,
            advance=advance,
            statistics=statistics,
        )
        return steps, recorder

    def solve(
        self,
        y0: ArrayLike,
        start: float,
        target: float,
        initial_step: float,
        derivative: DerivativeFn,
        tolerance: ArrayLike,
        *,
        stopper=None,
        listener=None,
        advance: AdvanceStrategy | None = None,
        statistics: StepStatistics | None = None,
    ) -> IntegrationResult:
        """Integrate and report how the integration ended.

        Same arguments as :meth:`integrate`.

        Returns:
            IntegrationResult: Step count, final ``z`` and state, the
            termination status and the step statistics.
        """
        advance = _check_advance(advance, HalfStepAdvance)
        if statistics is None:
            statistics = StepStatistics()
        elif not isinstance(statistics, StepStatistics):
            raise TypeError(
                f"statistics must be a StepStatistics, got {type(statistics).__name__}"
            )
        stopper = as_stopper(stopper)
        listener = as_listener(listener)

        y = _as_state(y0)
        h = _check_step(initial_step)
        tol = jnp.asarray(tolerance, dtype=get_dtype())
        if tol.shape != y.shape:
            raise ValueError(
                f"tolerance shape {tol.shape} does not match state shape {y.shape}"
            )
        z, target = _check_bounds(start, target)

        if not advance.computes_error:
            logger.warning(
                "%s does not estimate error; adaptive integration skipped",
                type(advance).__name__,
            )
            return IntegrationResult(0, z, y, IntegrationStatus.UNSUPPORTED, statistics)

        statistics.reset(h)
        if z == target:
            return IntegrationResult(0, z, y, IntegrationStatus.TARGET_REACHED, statistics)

        sign = 1.0 if target > z else -1.0
        min_step = self.min_step
        max_step = self.max_step

        nstep = 0
        status = IntegrationStatus.STEP_COLLAPSED
        last_step = False

        while True:
            dydz = derivative(z, y)

            # Reaching or passing the target clamps the step and ends the loop.
            if sign * (target - (z + sign * h)) <= 0.0:
                h = abs(target - z)
                last_step = True
                logger.debug("Clamping step to boundary: z=%g, h=%g", z, h)

            y_next, error = advance.advance(z, y, dydz, sign * h, derivative)

            if not last_step and bool(jnp.any(error > tol)):
                logger.debug("Rejected step at z=%g, h=%g", z, h)
                h *= STEP_SHRINK
                if h < min_step:
                    logger.warning(
                        "Step size collapsed below %g at z=%g before reaching %g",
                        min_step,
                        z,
                        target,
                    )
                    break
                continue

            y = y_next
            z = target if last_step else z + sign * h
            nstep += 1
            statistics.record(h)

            # JAX arrays are immutable, so the listener cannot alias driver state.
            if listener is not None:
                listener.on_step(z, y, h)

            if stopper is not None:
                stopper.record_reached(z)
                if stopper.should_stop(z, y):
                    logger.debug("Stopper ended integration at z=%g after %d steps", z, nstep)
                    status = IntegrationStatus.STOPPED
                    break

            if last_step:
                status = IntegrationStatus.TARGET_REACHED
                break

            h = min(h * STEP_GROWTH, max_step)

        statistics.finalize(nstep)
        return IntegrationResult(nstep, z, y, status, statistics)

    def uniform_step(
        self,
        y0: ArrayLike,
        start: float,
        target: float,
        n_steps: int,
        derivative: DerivativeFn,
        *,
        advance: AdvanceStrategy | None = None,
        stopper=None,
        listener=None,
    ) -> int:
        """Integrate from ``start`` to ``target`` in ``n_steps`` equal steps.

        No error control is applied, so any advance strategy works. The
        listener and stopper follow the same protocol as in :meth:`integrate`.

        Args:
            y0: Initial state vector.
            start: Initial value of the independent variable.
            target: Final value of the independent variable.
            n_steps: Number of steps (at least 1).
            derivative: Right-hand side ``f(z, y) -> dy/dz``.
            advance: Advance strategy. Default: :class:`RK4Advance`.
            stopper: Optional stopper.
            listener: Optional listener.

        Returns:
            int: Number of steps taken.

        Raises:
            ValueError: If ``n_steps < 1`` or ``start``/``target`` is not finite.
            TypeError: If ``advance`` is not an advance strategy.
        """
        if n_steps < 1:
            raise ValueError(f"n_steps must be at least 1, got {n_steps}")
        advance = _check_advance(advance, RK4Advance)
        stopper = as_stopper(stopper)
        listener = as_listener(listener)

        y = _as_state(y0)
        start, target = _check_bounds(start, target)
        dz = (target - start) / n_steps
        h = abs(dz)

        z = start
        for i in range(1, n_steps + 1):
            dydz = derivative(z, y)
            y = advance.advance(z, y, dydz, dz, derivative).state
            z = target if i == n_steps else start + i * dz

            if listener is not None:
                listener.on_step(z, y, h)
            if stopper is not None:
                stopper.record_reached(z)
                if stopper.should_stop(z, y):
                    return i

        return n_steps
