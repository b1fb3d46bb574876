"""
Position-based constraints relaxed by the Gauss-Seidel solver.

Variants:
- DistanceConstraint: keeps two particles at a target separation
- ContactConstraint: one-sided distance constraint created per step on overlap
- PointConstraint: pins a particle to a movable anchor

Each variant exposes ``enforce(solver_iterations)`` and ``has_broken()``.
The stiffness is rescaled per sub-iteration so that ``n`` sweeps converge at
the configured overall stiffness whatever ``n`` is.
"""

import enum
import logging
from typing import Tuple

from .elements import WorldElement
from .particles import Particle
from .vector import Vector2
from ..errors import InvalidParameter

logger = logging.getLogger(__name__)

# Separation axis for coincident particles
FALLBACK_AXIS = Vector2(1.0, 0.0)


class ConstraintKind(enum.Enum):
    """Tag identifying the constraint variant."""
    DISTANCE = "distance"
    CONTACT = "contact"
    POINT = "point"


def adjusted_stiffness(stiffness: float, solver_iterations: int) -> float:
    """Per-sweep stiffness giving ``stiffness`` overall after all sweeps."""
    return 1.0 - (1.0 - stiffness) ** (1.0 / solver_iterations)


def _check_stiffness(stiffness: float) -> float:
    if not 0.0 < stiffness <= 1.0:
        raise InvalidParameter(f"Stiffness must be in (0, 1], got {stiffness}")
    return float(stiffness)


class Constraint(WorldElement):
    """Shared state for all constraint variants."""

    kind: ConstraintKind

    def __init__(self):
        super().__init__()
        self.breakable = False
        self.breaking_strain = 2.0

    @property
    def particles(self) -> Tuple[Particle, ...]:
        raise NotImplementedError

    def references(self, particle: Particle) -> bool:
        """True if this constraint holds ``particle`` (by identity)."""
        return any(p is particle for p in self.particles)

    def enforce(self, solver_iterations: int) -> None:
        raise NotImplementedError

    def has_broken(self) -> bool:
        return False


class DistanceConstraint(Constraint):
    """Two-sided constraint holding ``p1`` and ``p2`` at ``distance``."""

    kind = ConstraintKind.DISTANCE

    def __init__(self, p1: Particle, p2: Particle, distance: float, stiffness: float):
        super().__init__()
        if p1 is p2:
            raise InvalidParameter("A distance constraint needs two distinct particles")
        if not distance > 0.0:
            raise InvalidParameter(f"Constraint distance must be positive, got {distance}")
        self.p1 = p1
        self.p2 = p2
        self.distance = float(distance)
        self.stiffness = _check_stiffness(stiffness)
        self.current_distance = p2.pos.distance_from(p1.pos)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(distance={self.distance:.4g}, "
                f"current={self.current_distance:.4g}, stiffness={self.stiffness})")

    @property
    def particles(self) -> Tuple[Particle, ...]:
        return (self.p1, self.p2)

    @property
    def strain(self) -> float:
        return abs(self.current_distance - self.distance) / self.distance

    def _needs_correction(self) -> bool:
        return self.current_distance != self.distance

    def enforce(self, solver_iterations: int) -> None:
        p1, p2 = self.p1, self.p2
        self.current_distance = p2.pos.distance_from(p1.pos)
        if not self._needs_correction():
            return
        if p1.fixed and p2.fixed:
            return

        deltad = (self.current_distance - self.distance) * adjusted_stiffness(
            self.stiffness, solver_iterations)

        if self.current_distance > 0.0:
            direction = p2.pos.subtract(p1.pos).unit_vector()
        else:
            logger.debug("Coincident particles in %r, separating along x", self)
            direction = FALLBACK_AXIS

        if p2.fixed:
            p1.pos.add_to_this(direction.scale(deltad))
        elif p1.fixed:
            p2.pos.add_to_this(direction.scale(-deltad))
        else:
            total_mass = p1.mass + p2.mass
            p1.pos.add_to_this(direction.scale(deltad * p2.mass / total_mass))
            p2.pos.add_to_this(direction.scale(-deltad * p1.mass / total_mass))

    def has_broken(self) -> bool:
        return self.breakable and self.strain > self.breaking_strain


class ContactConstraint(DistanceConstraint):
    """Non-penetration constraint for one step of overlap.

    Its lifetime equals its age at creation, so it is pruned at the next
    cleanup unless the overlap is detected again.
    """

    kind = ConstraintKind.CONTACT

    def __init__(self, p1: Particle, p2: Particle, stiffness: float = 0.9):
        super().__init__(p1, p2, p1.radius + p2.radius, stiffness)
        self.lifetime = self.age

    def _needs_correction(self) -> bool:
        # Only resolve penetration, never pull apart particles together
        return self.current_distance <= self.distance


class PointConstraint(Constraint):
    """Pulls ``p1`` toward ``anchor``, a point of infinite mass."""

    kind = ConstraintKind.POINT

    def __init__(self, p1: Particle, x: float, y: float, stiffness: float):
        super().__init__()
        self.p1 = p1
        self.anchor = Vector2(x, y)
        self.stiffness = _check_stiffness(stiffness)
        self.current_distance = p1.pos.distance_from(self.anchor)

    def __repr__(self) -> str:
        return (f"PointConstraint(anchor=({self.anchor.x:.4g}, {self.anchor.y:.4g}), "
                f"stiffness={self.stiffness})")

    @property
    def particles(self) -> Tuple[Particle, ...]:
        return (self.p1,)

    def enforce(self, solver_iterations: int) -> None:
        p1 = self.p1
        self.current_distance = p1.pos.distance_from(self.anchor)
        if self.current_distance == 0.0 or p1.fixed:
            return
        deltad = self.current_distance * adjusted_stiffness(self.stiffness, solver_iterations)
        direction = p1.pos.subtract(self.anchor).unit_vector()
        p1.pos.add_to_this(direction.scale(-deltad))

    def has_broken(self) -> bool:
        if not self.breakable:
            return False
        self.current_distance = self.p1.pos.distance_from(self.anchor)
        return self.current_distance > self.breaking_strain
