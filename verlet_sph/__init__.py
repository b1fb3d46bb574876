"""2D particle physics: Verlet integration, Gauss-Seidel constraints, and SPH fluid."""

from . import core
from . import physics

from .errors import (
    SimulationError,
    InvalidParameter,
    InvalidHandle,
    DegenerateGeometry
)
from .config import WorldConfig
from .core import (
    Vector2,
    Particle,
    ConstraintKind,
    DistanceConstraint,
    ContactConstraint,
    PointConstraint,
    SpatialPartitioning
)
from .world import World
from .driver import FixedStepDriver
from .logging_config import setup_logging

__version__ = "0.1.0"

__all__ = [
    # Modules
    'core',
    'physics',

    # Simulation
    'World',
    'WorldConfig',
    'FixedStepDriver',
    'setup_logging',

    # Entities
    'Vector2',
    'Particle',
    'ConstraintKind',
    'DistanceConstraint',
    'ContactConstraint',
    'PointConstraint',
    'SpatialPartitioning',

    # Errors
    'SimulationError',
    'InvalidParameter',
    'InvalidHandle',
    'DegenerateGeometry'
]
