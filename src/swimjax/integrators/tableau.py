"""Butcher-tableau driven advance strategy.

:class:`TableauAdvance` evaluates any explicit Runge-Kutta method given as a
:class:`ButcherTableau`. When the tableau is *augmented* (it carries a second
set of weights ``b_star`` of a different order) the difference between the
two solutions is returned as the per-component error estimate and the
strategy can drive adaptive integration.

Predefined tableaux:

- :data:`FEHLBERG_45` -- Runge-Kutta-Fehlberg 4(5), 6 stages.
- :data:`DORMAND_PRINCE_54` -- Dormand-Prince 5(4), 7 stages.
- :data:`CLASSIC_RK4` -- classic RK4, not augmented.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp

from swimjax.config import get_dtype
from swimjax.integrators._protocols import DerivativeFn
from swimjax.integrators._types import AdvanceResult


@dataclass(frozen=True)
class ButcherTableau:
    """Coefficients of an explicit Runge-Kutta method.

    Args:
        c: Nodes, one per stage. ``c[0]`` must be 0.
        a: Lower-triangular coupling coefficients. Row ``s`` holds the
            ``s`` coefficients of stage ``s + 1`` (stage 0 has no row).
        b: Weights of the propagated solution.
        b_star: Weights of the embedded solution used for the error
            estimate, or ``None`` for a non-augmented tableau.
        order: Order of the propagated solution.
        name: Human-readable name.

    Raises:
        ValueError: If the coefficient shapes are inconsistent.
    """

    c: tuple[float, ...]
    a: tuple[tuple[float, ...], ...]
    b: tuple[float, ...]
    b_star: tuple[float, ...] | None = None
    order: int = 4
    name: str = ""

    def __post_init__(self):
        n_stages = len(self.c)
        if n_stages < 1:
            raise ValueError("A Butcher tableau needs at least one stage")
        if len(self.a) != n_stages - 1:
            raise ValueError(
                f"Expected {n_stages - 1} coupling rows for {n_stages} stages, got {len(self.a)}"
            )
        for s, row in enumerate(self.a, start=1):
            if len(row) != s:
                raise ValueError(f"Coupling row for stage {s} must have {s} entries, got {len(row)}")
        if len(self.b) != n_stages:
            raise ValueError(f"Expected {n_stages} weights, got {len(self.b)}")
        if self.b_star is not None and len(self.b_star) != n_stages:
            raise ValueError(f"Expected {n_stages} embedded weights, got {len(self.b_star)}")

    @property
    def n_stages(self) -> int:
        return len(self.c)

    @property
    def is_augmented(self) -> bool:
        return self.b_star is not None

    @property
    def b_diff(self) -> tuple[float, ...]:
        """Weights of the error estimate, ``b - b_star``."""
        if self.b_star is None:
            raise ValueError(f"Tableau {self.name!r} is not augmented")
        return tuple(bi - bsi for bi, bsi in zip(self.b, self.b_star))


FEHLBERG_45 = ButcherTableau(
    c=(0.0, 1.0 / 4.0, 3.0 / 8.0, 12.0 / 13.0, 1.0, 1.0 / 2.0),
    a=(
        (1.0 / 4.0,),
        (3.0 / 32.0, 9.0 / 32.0),
        (1932.0 / 2197.0, -7200.0 / 2197.0, 7296.0 / 2197.0),
        (439.0 / 216.0, -8.0, 3680.0 / 513.0, -845.0 / 4104.0),
        (-8.0 / 27.0, 2.0, -3544.0 / 2565.0, 1859.0 / 4104.0, -11.0 / 40.0),
    ),
    b=(16.0 / 135.0, 0.0, 6656.0 / 12825.0, 28561.0 / 56430.0, -9.0 / 50.0, 2.0 / 55.0),
    b_star=(25.0 / 216.0, 0.0, 1408.0 / 2565.0, 2197.0 / 4104.0, -1.0 / 5.0, 0.0),
    order=5,
    name="Fehlberg 4(5)",
)

DORMAND_PRINCE_54 = ButcherTableau(
    c=(0.0, 1.0 / 5.0, 3.0 / 10.0, 4.0 / 5.0, 8.0 / 9.0, 1.0, 1.0),
    a=(
        (1.0 / 5.0,),
        (3.0 / 40.0, 9.0 / 40.0),
        (44.0 / 45.0, -56.0 / 15.0, 32.0 / 9.0),
        (19372.0 / 6561.0, -25360.0 / 2187.0, 64448.0 / 6561.0, -212.0 / 729.0),
        (9017.0 / 3168.0, -355.0 / 33.0, 46732.0 / 5247.0, 49.0 / 176.0, -5103.0 / 18656.0),
        (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0),
    ),
    b=(35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0, 0.0),
    b_star=(
        5179.0 / 57600.0,
        0.0,
        7571.0 / 16695.0,
        393.0 / 640.0,
        -92097.0 / 339200.0,
        187.0 / 2100.0,
        1.0 / 40.0,
    ),
    order=5,
    name="Dormand-Prince 5(4)",
)

CLASSIC_RK4 = ButcherTableau(
    c=(0.0, 1.0 / 2.0, 1.0 / 2.0, 1.0),
    a=(
        (1.0 / 2.0,),
        (0.0, 1.0 / 2.0),
        (0.0, 0.0, 1.0),
    ),
    b=(1.0 / 6.0, 1.0 / 3.0, 1.0 / 3.0, 1.0 / 6.0),
    order=4,
    name="Classic RK4",
)


@dataclass(frozen=True)
class TableauAdvance:
    """Explicit Runge-Kutta advance driven by a :class:`ButcherTableau`.

    Args:
        tableau: The method coefficients. Adaptive integration requires an
            augmented tableau.
    """

    tableau: ButcherTableau = FEHLBERG_45

    @property
    def computes_error(self) -> bool:
        return self.tableau.is_augmented

    def advance(self, z, y, dydz, h, derivative: DerivativeFn) -> AdvanceResult:
        dtype = get_dtype()
        z = jnp.asarray(z, dtype=dtype)
        y = jnp.asarray(y, dtype=dtype)
        h = jnp.asarray(h, dtype=dtype)
        tab = self.tableau

        k = [jnp.asarray(dydz, dtype=dtype)]
        for s in range(1, tab.n_stages):
            incr = sum(a_sj * k[j] for j, a_sj in enumerate(tab.a[s - 1]) if a_sj != 0.0)
            k.append(derivative(z + tab.c[s] * h, y + h * incr))

        state = y + h * sum(b_s * k_s for b_s, k_s in zip(tab.b, k) if b_s != 0.0)

        if not tab.is_augmented:
            return AdvanceResult(state=state, error=None)

        err = h * sum(d_s * k_s for d_s, k_s in zip(tab.b_diff, k) if d_s != 0.0)
        return AdvanceResult(state=state, error=jnp.abs(err))
