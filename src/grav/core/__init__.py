# MIT License (see LICENSE)
"""
Core simulation systems.

This subpackage provides:
    - Force systems: Pairwise gravity and electrostatics, force aggregation.
    - Integrators: Clamped Euler steps for dynamics and orientation.
    - Splitting: Lifetime aging and division of old entities.
    - Invariants: System totals (mass, charge, momentum, energy).

Every system has the signature ``system(world, ctx)`` so the scheduler can
run any of them as a stage.

Typical usage:
    from grav.core import apply_gravity, aggregate_forces, integrate_dynamics

    apply_gravity(world, ctx)
    aggregate_forces(world, ctx)
    integrate_dynamics(world, ctx)
"""
from .forces import (
    aggregate_forces,
    apply_electrostatics,
    apply_gravity,
    clear_forces,
)
from .integrators import (
    integrate_dynamics,
    integrate_orientation,
    step_dynamics,
    step_orientation,
)
from .invariants import kinetic_energy, linear_momentum, total_charge, total_mass
from .splitting import (
    advance_lifetimes,
    should_split,
    split_entities,
    split_entity,
    split_threshold,
)

__all__ = [
    # Forces
    "clear_forces",
    "apply_gravity",
    "apply_electrostatics",
    "aggregate_forces",
    # Integrators
    "integrate_dynamics",
    "integrate_orientation",
    "step_dynamics",
    "step_orientation",
    # Splitting
    "advance_lifetimes",
    "should_split",
    "split_entities",
    "split_entity",
    "split_threshold",
    # Invariants
    "kinetic_energy",
    "linear_momentum",
    "total_charge",
    "total_mass",
]
