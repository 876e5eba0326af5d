"""Float precision used by swimjax.

Every state, derivative and error vector the integrators build is cast to
the dtype returned by :func:`get_dtype`. The default, ``jnp.float32``, is
fine for short swims and loose tolerances. A track through a long field map
takes thousands of steps, and in single precision the accumulated round-off
in ``z`` and the position components soon exceeds tolerances near 1e-6, so
long swims should run in double precision::

    import jax.numpy as jnp
    from swimjax import set_dtype
    set_dtype(jnp.float64)

Switching to ``jnp.float64`` turns on ``jax_enable_x64``. Set the dtype
before building any state vectors; arrays created earlier keep their dtype.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_dtype = jnp.float32


def set_dtype(dtype) -> None:
    """Select the float dtype for states, derivatives and error estimates.

    Args:
        dtype: ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32`` or
            ``jnp.float64``. The half-precision types are accepted but are
            too coarse for the default 1e-3 minimum step.

    Raises:
        ValueError: If *dtype* is not one of the above.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the float dtype integrators currently cast to."""
    return _dtype
