"""Derivative providers for charged-particle transport along z.

The state vector is ``[x, y, tx, ty]`` where ``tx = dx/dz`` and
``ty = dy/dz`` are the track slopes and ``z`` is the independent variable.

- :func:`straight_line`: field-free motion, ``d/dz [x, y, tx, ty] = [tx, ty, 0, 0]``.
- :func:`make_swimz_derivative`: motion of a charged particle through a
  magnetic field given as a callable.
- :func:`uniform_field`: a constant field callable.

Units follow the usual tracking convention: lengths in cm, momentum in
GeV/c and field in kG.
"""

from __future__ import annotations

from collections.abc import Callable

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from swimjax.config import get_dtype
from swimjax.constants import SPEED_OF_LIGHT_FACTOR

FieldFn = Callable[[ArrayLike, ArrayLike, ArrayLike], Array]
"""Magnetic field ``field(x, y, z) -> [Bx, By, Bz]`` in kG."""


def straight_line(z: ArrayLike, state: ArrayLike) -> Array:
    """Derivative of a straight track with constant slopes.

    Args:
        z: Independent variable (unused).
        state: ``[x, y, tx, ty]``.

    Returns:
        jax.Array: ``[tx, ty, 0, 0]``.
    """
    state = jnp.asarray(state, dtype=get_dtype())
    return jnp.concatenate([state[2:4], jnp.zeros(2, dtype=state.dtype)])


def uniform_field(bx: float = 0.0, by: float = 0.0, bz: float = 0.0) -> FieldFn:
    """Return a field callable that is ``[bx, by, bz]`` everywhere.

    Args:
        bx: Field x-component [kG].
        by: Field y-component [kG].
        bz: Field z-component [kG].

    Returns:
        Callable ``field(x, y, z) -> [bx, by, bz]``.
    """

    def field(x, y, z):
        return jnp.array([bx, by, bz], dtype=get_dtype())

    return field


def make_swimz_derivative(charge: int, momentum: float, field: FieldFn) -> Callable:
    """Build the derivative of a charged particle transported along z.

    With ``N = sqrt(1 + tx^2 + ty^2)`` and ``k = c q / p``:

    .. math::

        \\frac{dt_x}{dz} = k N \\left(t_y (t_x B_x + B_z) - (1 + t_x^2) B_y\\right)

        \\frac{dt_y}{dz} = k N \\left(-t_x (t_y B_y + B_z) + (1 + t_y^2) B_x\\right)

    Args:
        charge: Particle charge in units of e (e.g. -1 for an electron).
        momentum: Momentum magnitude [GeV/c]. Must be positive.
        field: Field callable ``field(x, y, z) -> [Bx, By, Bz]`` [kG].

    Returns:
        Callable ``f(z, state) -> d(state)/dz`` for ``state = [x, y, tx, ty]``.

    Raises:
        ValueError: If ``momentum`` is not positive.

    Examples:
        ```python
        import jax.numpy as jnp
        from swimjax.dynamics import make_swimz_derivative, uniform_field
        f = make_swimz_derivative(-1, 2.0, uniform_field(by=5.0))
        f(0.0, jnp.array([0.0, 0.0, 0.0, 0.0]))  # bends in x
        ```
    """
    if not momentum > 0.0:
        raise ValueError(f"momentum must be positive, got {momentum}")
    k = SPEED_OF_LIGHT_FACTOR * charge / momentum

    def derivative(z: ArrayLike, state: ArrayLike) -> Array:
        state = jnp.asarray(state, dtype=get_dtype())
        x, y, tx, ty = state[0], state[1], state[2], state[3]
        b = field(x, y, z)
        bx, by, bz = b[0], b[1], b[2]

        norm = jnp.sqrt(1.0 + tx * tx + ty * ty)
        ax = norm * (ty * (tx * bx + bz) - (1.0 + tx * tx) * by)
        ay = norm * (-tx * (ty * by + bz) + (1.0 + ty * ty) * bx)

        return jnp.stack([tx, ty, k * ax, k * ay])

    return derivative
