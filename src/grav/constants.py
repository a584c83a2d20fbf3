# MIT License (see LICENSE)
"""
Default simulation constants.

The simulation works in dimensionless units: both coupling constants
default to 1 rather than their SI values, so populations of unit masses and
unit charges interact on comparable scales.
"""
from __future__ import annotations

GRAVITATIONAL_CONSTANT: float = 1.0
ELECTROSTATIC_CONSTANT: float = 1.0
DELTA_TIME: float = 1.0

# Collision detection thresholds. Pairs closer than the minimum always
# collide; pairs at or beyond the maximum are never tested.
MIN_DETECTION_THRESHOLD: float = 1.0
MAX_DETECTION_THRESHOLD: float = 100.0

# Splitting
MIN_LIFETIME: int = 100
MAX_LIFETIME: int = 1000
SEPARATION_MULTIPLIER: float = 2.0
VELOCITY_MULTIPLIER: float = 1.0

# Mass per unit by which the split threshold is divided.
SPLIT_MASS_UNIT: float = 10.0

# Pairs closer than this are treated as coincident and exert no force.
DISTANCE_EPS: float = 1e-9

# Interaction names used in force map keys.
GRAVITY: str = "gravity"
ELECTROSTATICS: str = "electrostatics"
