"""Classic 4th-order Runge-Kutta step (RK4).

Implements the standard four-stage, 4th-order explicit Runge-Kutta method.
:func:`rk4_step` is the pure building block reused by
:class:`~swimjax.integrators.HalfStepAdvance`; :class:`RK4Advance` wraps it
as a fixed-step advance strategy.

The Butcher tableau for RK4 is:

.. math::

    \\begin{array}{c|cccc}
    0   &     &     &     &   \\\\
    1/2 & 1/2 &     &     &   \\\\
    1/2 &  0  & 1/2 &     &   \\\\
    1   &  0  &  0  &  1  &   \\\\
    \\hline
        & 1/6 & 1/3 & 1/3 & 1/6
    \\end{array}

The method achieves 4th-order accuracy, meaning the local truncation error
is :math:`O(h^5)` and the global error is :math:`O(h^4)`.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from swimjax.config import get_dtype
from swimjax.integrators._protocols import DerivativeFn
from swimjax.integrators._types import AdvanceResult


def rk4_step(
    derivative: DerivativeFn,
    z: ArrayLike,
    y: ArrayLike,
    h: ArrayLike,
    dydz: ArrayLike | None = None,
) -> Array:
    """Perform a single RK4 step.

    Advances the state from ``z`` to ``z + h``. Compatible with ``jax.jit``
    and ``jax.vmap``.

    Args:
        derivative: Right-hand side ``f(z, y) -> dy/dz``.
        z: Current value of the independent variable.
        y: Current state vector.
        h: Step to take. May be negative for backward integration.
        dydz: Derivative at ``(z, y)`` if already known. Saves one
            evaluation of ``derivative``.

    Returns:
        jax.Array: State at ``z + h``.

    Examples:
        ```python
        import jax.numpy as jnp
        from swimjax.integrators import rk4_step
        def harmonic(z, y):
            return jnp.array([y[1], -y[0]])
        rk4_step(harmonic, 0.0, jnp.array([1.0, 0.0]), 0.01)  # ~[cos(0.01), -sin(0.01)]
        ```
    """
    dtype = get_dtype()
    z = jnp.asarray(z, dtype=dtype)
    y = jnp.asarray(y, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)

    k1 = derivative(z, y) if dydz is None else jnp.asarray(dydz, dtype=dtype)
    k2 = derivative(z + 0.5 * h, y + 0.5 * h * k1)
    k3 = derivative(z + 0.5 * h, y + 0.5 * h * k2)
    k4 = derivative(z + h, y + h * k3)

    return y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


@dataclass(frozen=True)
class RK4Advance:
    """Fixed-step RK4 advance strategy.

    Produces no error estimate, so it cannot drive adaptive integration:
    :meth:`AdaptiveDriver.integrate` returns zero steps when given one. Use
    it with :meth:`AdaptiveDriver.uniform_step`.
    """

    @property
    def computes_error(self) -> bool:
        return False

    def advance(self, z, y, dydz, h, derivative: DerivativeFn) -> AdvanceResult:
        return AdvanceResult(state=rk4_step(derivative, z, y, h, dydz), error=None)
