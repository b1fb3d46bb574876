"""
Exception types raised by the simulation engine.

All errors are local to the call that raised them; none of them is raised
from inside ``World.update()`` for a degenerate particle pair.
"""


class SimulationError(Exception):
    """Base class for all engine errors."""


class InvalidParameter(SimulationError, ValueError):
    """A constructor or factory argument is outside its valid range."""


class InvalidHandle(SimulationError, LookupError):
    """A particle or constraint is not owned by the world it was passed to."""


class DegenerateGeometry(SimulationError, ArithmeticError):
    """A direction was requested between two coincident points."""
