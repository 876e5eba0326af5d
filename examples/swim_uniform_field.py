# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "swimjax"]
#
# [tool.uv.sources]
# swimjax = { path = ".." }
# ///
"""Swim a charged particle through a uniform magnetic field.

Integrates the track state ``[x, y, tx, ty]`` along z with the adaptive
driver and prints the final state, the step statistics and how the
integration ended.

Requires swimjax to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/swim_uniform_field.py [OPTIONS]

Examples:
    # 2 GeV/c negative track through a 5 kG dipole field, 5 m downstream
    uv run examples/swim_uniform_field.py --momentum 2.0 --by 5.0 --z-final 500

    # Swim backward to the target
    uv run examples/swim_uniform_field.py --z-start 500 --z-final 0

    # Stop early once x passes 10 cm
    uv run examples/swim_uniform_field.py --stop-x 10
"""

import logging
import time
from typing import Annotated

import jax.numpy as jnp
import typer

from swimjax import set_dtype
from swimjax.dynamics import make_swimz_derivative, uniform_field
from swimjax.integrators import AdaptiveDriver, StepStatistics

set_dtype(jnp.float64)


def main(
    charge: Annotated[int, typer.Option(help="Particle charge in units of e")] = -1,
    momentum: Annotated[float, typer.Option(help="Momentum in GeV/c")] = 2.0,
    bx: Annotated[float, typer.Option(help="Field x-component in kG")] = 0.0,
    by: Annotated[float, typer.Option(help="Field y-component in kG")] = 5.0,
    bz: Annotated[float, typer.Option(help="Field z-component in kG")] = 0.0,
    z_start: Annotated[float, typer.Option(help="Starting z in cm")] = 0.0,
    z_final: Annotated[float, typer.Option(help="Target z in cm")] = 500.0,
    tx: Annotated[float, typer.Option(help="Initial dx/dz")] = 0.0,
    ty: Annotated[float, typer.Option(help="Initial dy/dz")] = 0.0,
    step: Annotated[float, typer.Option(help="Initial step size in cm")] = 1.0,
    tolerance: Annotated[float, typer.Option(help="Absolute tolerance per component")] = 1e-6,
    min_step: Annotated[float, typer.Option(help="Minimum step size in cm")] = 1e-3,
    max_step: Annotated[float, typer.Option(help="Maximum step size in cm")] = 40.0,
    stop_x: Annotated[
        float | None, typer.Option(help="Stop once |x| passes this value in cm")
    ] = None,
    verbose: Annotated[bool, typer.Option(help="Log every rejected step")] = False,
):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    derivative = make_swimz_derivative(charge, momentum, uniform_field(bx, by, bz))
    driver = AdaptiveDriver(min_step=min_step, max_step=max_step)
    stopper = None
    if stop_x is not None:
        stopper = lambda z, y: abs(float(y[0])) > stop_x  # noqa: E731

    y0 = jnp.array([0.0, 0.0, tx, ty])
    stats = StepStatistics()

    t0 = time.perf_counter()
    result = driver.solve(
        y0,
        z_start,
        z_final,
        step,
        derivative,
        jnp.full(4, tolerance),
        stopper=stopper,
        statistics=stats,
    )
    elapsed = time.perf_counter() - t0

    x, y, tx_f, ty_f = (float(v) for v in result.state)
    print(f"Status:  {result.status.value}")
    print(f"Steps:   {result.steps} in {elapsed:.3f}s")
    print(f"Final z: {result.z:.4f} cm")
    print(f"State:   x={x:.6f} cm  y={y:.6f} cm  tx={tx_f:.6f}  ty={ty_f:.6f}")
    print(
        f"Steps used: min={stats.min_step:.4g}  mean={stats.mean_step:.4g}  max={stats.max_step:.4g} cm"
    )


if __name__ == "__main__":
    typer.run(main)
