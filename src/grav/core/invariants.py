# MIT License (see LICENSE)
"""
System-wide totals for checking simulation behaviour.

Merging conserves mass and charge exactly for pairwise merges and splitting
conserves mass (and integer charge), so these totals make good regression
checks. Momentum and kinetic energy are reported for diagnostics only; the
merge rule does not conserve them.
"""
from __future__ import annotations

import numpy as np

from ..ecs import World
from ..types import Charge, Dynamics, Mass


def total_mass(world: World) -> float:
    """Σ m over every live entity with a Mass."""
    return float(sum(m.value for _, (m,) in world.join(Mass)))


def total_charge(world: World) -> float:
    """Σ q over every live entity with a Charge."""
    return float(sum(q.value for _, (q,) in world.join(Charge)))


def linear_momentum(world: World) -> np.ndarray:
    """
    Total linear momentum P = Σ m·v.

    Returns:
        Momentum vector [Px, Py, Pz].
    """
    p = np.zeros(3, dtype=np.float64)
    for _, (m, dyn) in world.join(Mass, Dynamics):
        p += m.value * dyn.velocity
    return p


def kinetic_energy(world: World) -> float:
    """Total kinetic energy T = Σ ½·m·v²."""
    ke = 0.0
    for _, (m, dyn) in world.join(Mass, Dynamics):
        ke += 0.5 * m.value * float(np.dot(dyn.velocity, dyn.velocity))
    return ke
