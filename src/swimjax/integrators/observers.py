"""Ready-made listeners and stoppers.

- :class:`TrajectoryRecorder` stores every accepted ``(z, state)`` pair.
- :class:`CallbackListener` and :class:`PredicateStopper` adapt plain
  callables to the listener and stopper protocols.
- :class:`ThresholdStopper` stops once ``z`` (or a state component) passes
  a threshold in the direction of travel.
"""

from __future__ import annotations

from collections.abc import Callable

import jax.numpy as jnp
from jax import Array

from swimjax.integrators._protocols import StepListener, Stopper


class TrajectoryRecorder:
    """Listener that records the trajectory point by point.

    Examples:
        ```python
        recorder = TrajectoryRecorder()
        driver.integrate(y0, 0.0, 10.0, 1.0, f, tol, listener=recorder)
        recorder.z, recorder.states  # shapes (n,), (n, dim)
        ```
    """

    def __init__(self):
        self._z: list[float] = []
        self._states: list[Array] = []
        self._steps: list[float] = []

    def __len__(self) -> int:
        return len(self._z)

    def on_step(self, z: float, y: Array, h: float) -> None:
        self._z.append(float(z))
        self._states.append(y)
        self._steps.append(float(h))

    @property
    def z(self) -> Array:
        return jnp.asarray(self._z)

    @property
    def states(self) -> Array:
        if not self._states:
            raise ValueError("No points recorded")
        return jnp.stack(self._states)

    @property
    def step_sizes(self) -> Array:
        return jnp.asarray(self._steps)

    @property
    def final_z(self) -> float:
        if not self._z:
            raise ValueError("No points recorded")
        return self._z[-1]

    @property
    def final_state(self) -> Array:
        if not self._states:
            raise ValueError("No points recorded")
        return self._states[-1]


class CallbackListener:
    """Wrap ``fn(z, y, h)`` as a step listener."""

    def __init__(self, fn: Callable[[float, Array, float], None]):
        self.fn = fn

    def on_step(self, z: float, y: Array, h: float) -> None:
        self.fn(z, y, h)


class PredicateStopper:
    """Wrap ``fn(z, y) -> bool`` as a stopper.

    Also tracks the last independent-variable value reported by the driver
    in :attr:`final_z`.
    """

    def __init__(self, fn: Callable[[float, Array], bool]):
        self.fn = fn
        self.final_z: float | None = None

    def record_reached(self, z: float) -> None:
        self.final_z = z

    def should_stop(self, z: float, y: Array) -> bool:
        return bool(self.fn(z, y))


class ThresholdStopper:
    """Stop the first time a value passes ``threshold``.

    Args:
        threshold: Value to compare against.
        component: Index of the state component to watch. ``None`` watches
            the independent variable itself.
        increasing: Direction of travel. ``True`` stops once the value
            exceeds ``threshold``, ``False`` once it falls below it.
    """

    def __init__(self, threshold: float, component: int | None = None, increasing: bool = True):
        self.threshold = float(threshold)
        self.component = component
        self.increasing = increasing
        self.final_z: float | None = None

    def record_reached(self, z: float) -> None:
        self.final_z = z

    def should_stop(self, z: float, y: Array) -> bool:
        value = z if self.component is None else float(y[self.component])
        if self.increasing:
            return value > self.threshold
        return value < self.threshold


def as_stopper(stopper) -> Stopper | None:
    """Coerce ``stopper`` into a :class:`Stopper`.

    ``None`` and objects already implementing the protocol pass through; a
    plain callable ``fn(z, y) -> bool`` is wrapped in a
    :class:`PredicateStopper`.

    Raises:
        TypeError: If ``stopper`` is neither.
    """
    if stopper is None or isinstance(stopper, Stopper):
        return stopper
    if callable(stopper):
        return PredicateStopper(stopper)
    raise TypeError(f"stopper must be a Stopper or a callable, got {type(stopper).__name__}")


def as_listener(listener) -> StepListener | None:
    """Coerce ``listener`` into a :class:`StepListener`.

    ``None`` and objects already implementing the protocol pass through; a
    plain callable ``fn(z, y, h)`` is wrapped in a :class:`CallbackListener`.

    Raises:
        TypeError: If ``listener`` is neither.
    """
    if listener is None or isinstance(listener, StepListener):
        return listener
    if callable(listener):
        return CallbackListener(listener)
    raise TypeError(
        f"listener must be a StepListener or a callable, got {type(listener).__name__}"
    )
