"""
The `constants` module defines the fixed step-size control constants of the
adaptive driver and the physical constants used by the derivative providers.
"""

# Step-size control

"""
Default minimum step size. A rejected step that halves below this ends the
integration. Units: *caller length units (cm for the z swimmer)*
"""
DEFAULT_MIN_STEP = 1.0e-3

"""
Default maximum step size. Accepted steps never grow beyond this. Units:
*caller length units (cm for the z swimmer)*
"""
DEFAULT_MAX_STEP = 40.0

"""
Multiplicative growth applied to the step size after every accepted step.
"""
STEP_GROWTH = 1.5

"""
Multiplicative shrink applied to the step size after every rejected step.
"""
STEP_SHRINK = 0.5

# Physical Constants

"""
Speed of light expressed as the momentum-to-field conversion factor for
charged particle transport. Units: *(GeV/c) / (kG cm)*
"""
SPEED_OF_LIGHT_FACTOR = 2.99792458e-4
