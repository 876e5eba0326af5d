"""Capability interfaces consumed by the adaptive driver.

The driver only talks to the outside world through four capabilities:

- a derivative function ``derivative(z, y) -> dy/dz``,
- an :class:`AdvanceStrategy` that takes one candidate step,
- an optional :class:`Stopper` that can end integration early,
- an optional :class:`StepListener` notified after every accepted step.

Stoppers and listeners may also be given as plain callables; see
:func:`swimjax.integrators.observers.as_stopper`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from jax import Array
from jax.typing import ArrayLike

from swimjax.integrators._types import AdvanceResult

DerivativeFn = Callable[[ArrayLike, ArrayLike], Array]
"""Right-hand side ``f(z, y) -> dy/dz`` with the same shape as ``y``."""


@runtime_checkable
class AdvanceStrategy(Protocol):
    """Protocol for single-step advance strategies.

    Implementations must be pure functions of their inputs so the driver can
    retry a rejected step with a different ``h``.
    """

    @property
    def computes_error(self) -> bool:
        """Whether :meth:`advance` returns a per-component error estimate."""
        ...

    def advance(
        self,
        z: ArrayLike,
        y: ArrayLike,
        dydz: ArrayLike,
        h: ArrayLike,
        derivative: DerivativeFn,
    ) -> AdvanceResult:
        """Take one step of signed size ``h`` from ``(z, y)``.

        Args:
            z: Current value of the independent variable.
            y: Current state vector.
            dydz: Derivative already evaluated at ``(z, y)``.
            h: Signed step size (negative for backward integration).
            derivative: Right-hand side function.

        Returns:
            AdvanceResult: Candidate state at ``z + h`` and, when
            ``computes_error`` is true, the absolute error estimate.
        """
        ...


@runtime_checkable
class Stopper(Protocol):
    """Protocol for early-termination predicates."""

    def record_reached(self, z: float) -> None:
        """Informs the stopper of the independent-variable value just reached."""
        ...

    def should_stop(self, z: float, y: Array) -> bool:
        """Return ``True`` to end integration after the current step."""
        ...


@runtime_checkable
class StepListener(Protocol):
    """Protocol for per-step observers."""

    def on_step(self, z: float, y: Array, h: float) -> None:
        """Called once per accepted step with a copy of the new state."""
        ...

