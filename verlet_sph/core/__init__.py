"""Core components: vectors, particles, constraints, spatial partitioning, and integration."""

from .vector import Vector2
from .elements import WorldElement
from .particles import Particle
from .constraints import (
    Constraint,
    ConstraintKind,
    ContactConstraint,
    DistanceConstraint,
    PointConstraint,
    adjusted_stiffness
)
from .spatial_hash import (
    SpatialPartitioning,
    SpatialIndex,
    Grid,
    HashBuckets,
    BruteForceIndex,
    create_spatial_index
)
from .integrator import (
    integrate_verlet,
    apply_boundary_restitution,
    resolve_velocities
)

__all__ = [
    'Vector2',
    'WorldElement',
    'Particle',
    'Constraint',
    'ConstraintKind',
    'ContactConstraint',
    'DistanceConstraint',
    'PointConstraint',
    'adjusted_stiffness',
    'SpatialPartitioning',
    'SpatialIndex',
    'Grid',
    'HashBuckets',
    'BruteForceIndex',
    'create_spatial_index',
    'integrate_verlet',
    'apply_boundary_restitution',
    'resolve_velocities'
]
