"""
Physics world: owns all entities and advances them by one fixed step.

Each ``update()`` runs five phases in a fixed order:
1. Cleanup: age and prune constraints and particles, reset accumulators
2. Force accumulation: gravity, then SPH density/pressure/viscosity
3. Collision detection: transient contact constraints for overlapping pairs
4. Constraint resolution: Gauss-Seidel sweeps, velocities and wall
   restitution, pruning of broken constraints
5. Integration: Verlet position update, time and step counters
"""

import dataclasses
import logging
from typing import List, Optional, Tuple, Union

import numpy as np

from .config import WorldConfig
from .core.constraints import (Constraint, ContactConstraint, DistanceConstraint,
                               PointConstraint)
from .core.integrator import integrate_verlet, resolve_velocities
from .core.particles import Particle
from .core.spatial_hash import SpatialIndex, create_spatial_index
from .core.vector import Vector2
from .errors import InvalidHandle, InvalidParameter
from .physics.collisions import detect_contacts
from .physics.fluid import FluidParameters, compute_fluid
from .physics.gravity import compute_gravity_uniform
from .physics.kernels import MullerKernels

# Options whose change requires a new spatial index
_INDEX_OPTIONS = {'smoothing_length', 'partitioning'}


class World:
    """Bounded 2D particle world on [0, width] x [0, height].

    Args:
        width: Domain width
        height: Domain height
        timestep: Fixed step size in seconds
        solver_iterations: Gauss-Seidel sweeps per step
        config: Tunables; defaults to ``WorldConfig()``
        log_level: Level of this world's logger; when omitted it inherits
            the level of the ``verlet_sph`` package logger
    """

    def __init__(self, width: float, height: float, timestep: float,
                 solver_iterations: int, config: Optional[WorldConfig] = None,
                 log_level: Optional[Union[str, int]] = None):
        self._check_bounds(width, height)
        if not timestep > 0.0:
            raise InvalidParameter(f"Timestep must be positive, got {timestep}")
        self._check_iterations(solver_iterations)

        self.logger = logging.getLogger(f"verlet_sph.World_{id(self)}")
        if isinstance(log_level, str):
            log_level = getattr(logging, log_level.upper(), logging.INFO)
        # NOTSET defers to the package logger
        self.logger.setLevel(logging.NOTSET if log_level is None else log_level)

        self.width = float(width)
        self.height = float(height)
        self.timestep = float(timestep)
        self.solver_iterations = int(solver_iterations)
        self._config = config if config is not None else WorldConfig()

        self._particles: List[Particle] = []
        self._constraints: List[Constraint] = []
        self._contacts: List[ContactConstraint] = []

        self.time = 0.0
        self.step_count = 0

        self._apply_config()
        self._rebuild_index()
        self.logger.info("World %gx%g, dt=%g, %d solver iterations, %s partitioning",
                         self.width, self.height, self.timestep, self.solver_iterations,
                         self._config.partitioning.value)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @staticmethod
    def _check_bounds(width: float, height: float) -> None:
        if not (width > 0.0 and height > 0.0):
            raise InvalidParameter(f"World extents must be positive, got {width}x{height}")

    @staticmethod
    def _check_iterations(solver_iterations: int) -> None:
        if int(solver_iterations) != solver_iterations or solver_iterations < 1:
            raise InvalidParameter(
                f"solver_iterations must be a positive integer, got {solver_iterations}")

    @property
    def config(self) -> WorldConfig:
        return self._config

    def _apply_config(self) -> None:
        cfg = self._config
        self.gravity = Vector2(*cfg.gravity)
        self.kernels = MullerKernels(cfg.smoothing_length)
        self.fluid_params = FluidParameters(cfg.rest_density, cfg.pressure_stiffness,
                                            cfg.viscosity)

    def _rebuild_index(self) -> None:
        cfg = self._config
        self._spatial_index = create_spatial_index(cfg.partitioning, cfg.smoothing_length,
                                                   self.width, self.height)
        self.logger.debug("Spatial index rebuilt: %s, cell size %g",
                          type(self._spatial_index).__name__, cfg.smoothing_length)

    def configure(self, **options) -> WorldConfig:
        """Change settings between steps.

        Accepts any ``WorldConfig`` field plus ``width``, ``height`` and
        ``solver_iterations``. Kernel coefficients are recomputed when the
        smoothing length changes; the spatial index is rebuilt when the
        smoothing length, the bounds or the partitioning mode change.

        Returns:
            The new configuration

        Raises:
            InvalidParameter: On an unknown option or out-of-range value
        """
        width = options.pop('width', self.width)
        height = options.pop('height', self.height)
        iterations = options.pop('solver_iterations', self.solver_iterations)
        self._check_bounds(width, height)
        self._check_iterations(iterations)

        known = {f.name for f in dataclasses.fields(WorldConfig)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise InvalidParameter(f"Unknown configuration options: {', '.join(unknown)}")

        new_config = dataclasses.replace(self._config, **options)
        bounds_changed = (width, height) != (self.width, self.height)
        index_changed = bounds_changed or any(
            getattr(new_config, name) != getattr(self._config, name) for name in _INDEX_OPTIONS)

        self.width = float(width)
        self.height = float(height)
        self.solver_iterations = int(iterations)
        self._config = new_config
        self._apply_config()
        if index_changed:
            self._rebuild_index()
        return new_config

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def particles(self) -> Tuple[Particle, ...]:
        return tuple(self._particles)

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return tuple(self._constraints)

    @property
    def contacts(self) -> Tuple[ContactConstraint, ...]:
        """Contact constraints generated during the latest step."""
        return tuple(self._contacts)

    @property
    def spatial_index(self) -> SpatialIndex:
        return self._spatial_index

    @property
    def particle_count(self) -> int:
        return len(self._particles)

    def positions(self) -> np.ndarray:
        """Particle positions as an (N, 2) array."""
        return np.array([(p.pos.x, p.pos.y) for p in self._particles],
                        dtype=np.float64).reshape(-1, 2)

    def velocities(self) -> np.ndarray:
        """Particle velocities as an (N, 2) array."""
        return np.array([(p.vel.x, p.vel.y) for p in self._particles],
                        dtype=np.float64).reshape(-1, 2)

    def densities(self) -> np.ndarray:
        """Fluid densities as an (N,) array (zero for non-fluid particles)."""
        return np.array([p.fluid_density for p in self._particles], dtype=np.float64)

    # ------------------------------------------------------------------
    # Entity creation
    # ------------------------------------------------------------------
    def create_particle(self, x: float, y: float, vx: float = 0.0, vy: float = 0.0,
                        ax: float = 0.0, ay: float = 0.0, fx: float = 0.0, fy: float = 0.0,
                        mass: float = 1.0, radius: Optional[float] = None,
                        fixed: bool = False, *, fluid: bool = False, collides: bool = True,
                        restitution: Optional[float] = None,
                        lifetime: Optional[int] = None) -> Particle:
        """Create a particle and add it to the world.

        The initial velocity is honoured by back-projecting the previous
        position one timestep.

        Returns:
            The new particle, which serves as its handle
        """
        if radius is None:
            radius = self._config.contact_radius
        if restitution is None:
            restitution = self._config.restitution
        elif not 0.0 <= restitution <= 1.0:
            raise InvalidParameter(f"restitution must be in [0, 1], got {restitution}")
        if lifetime is not None and lifetime < 0:
            raise InvalidParameter(f"lifetime must be >= 0, got {lifetime}")

        particle = Particle(x, y, vx, vy, ax, ay, fx, fy, mass, radius, fixed,
                            time_step=self.timestep)
        particle.is_fluid = bool(fluid)
        particle.collides = bool(collides)
        particle.restitution = float(restitution)
        particle.lifetime = lifetime
        self._particles.append(particle)
        return particle

    def create_fluid_cluster(self, x: float, y: float, angle: float, width: float,
                             height: float, divisions_x: int, divisions_y: int,
                             radius: Optional[float] = None, density: float = 1000.0,
                             collides: bool = True) -> List[Particle]:
        """Create a rectangular lattice of fluid particles.

        The lattice has ``(divisions_x + 1) * (divisions_y + 1)`` particles
        centred on (x, y) and rotated counter-clockwise by ``angle`` radians.
        The total mass is ``density * width * height``, shared equally.

        Returns:
            The new particles, row by row from the top
        """
        if divisions_x < 1 or divisions_y < 1:
            raise InvalidParameter("Fluid cluster needs at least one division per side")
        if not (width > 0.0 and height > 0.0 and density > 0.0):
            raise InvalidParameter("Fluid cluster width, height and density must be positive")

        centre = Vector2(x, y)
        count = (divisions_x + 1) * (divisions_y + 1)
        mass = density * width * height / count
        xs = np.linspace(x - width / 2.0, x + width / 2.0, divisions_x + 1)
        ys = np.linspace(y + height / 2.0, y - height / 2.0, divisions_y + 1)

        created = []
        for py in ys:
            for px in xs:
                pos = Vector2(px, py).rotate_about(centre, angle)
                created.append(self.create_particle(pos.x, pos.y, mass=mass, radius=radius,
                                                    fluid=True, collides=collides))
        self.logger.debug("Created fluid cluster of %d particles, mass %g each", count, mass)
        return created

    def create_distance_constraint(self, p1: Particle, p2: Particle,
                                   distance: Optional[float] = None,
                                   stiffness: Optional[float] = None) -> DistanceConstraint:
        """Link two particles; ``distance`` defaults to their current separation."""
        self._require_particle(p1)
        self._require_particle(p2)
        if distance is None:
            distance = p2.pos.distance_from(p1.pos)
        if stiffness is None:
            stiffness = self._config.constraint_stiffness
        constraint = DistanceConstraint(p1, p2, distance, stiffness)
        self._constraints.append(constraint)
        return constraint

    def create_point_constraint(self, p1: Particle, x: Optional[float] = None,
                                y: Optional[float] = None,
                                stiffness: Optional[float] = None) -> PointConstraint:
        """Pin a particle to an anchor; the anchor defaults to its position."""
        self._require_particle(p1)
        if x is None:
            x = p1.pos.x
        if y is None:
            y = p1.pos.y
        if stiffness is None:
            stiffness = self._config.constraint_stiffness
        constraint = PointConstraint(p1, x, y, stiffness)
        self._constraints.append(constraint)
        return constraint

    def set_anchor(self, constraint: PointConstraint, x: float, y: float) -> None:
        """Move a point constraint's anchor (e.g. following a pointer)."""
        self._require_constraint(constraint)
        if not isinstance(constraint, PointConstraint):
            raise InvalidParameter(f"{constraint!r} has no anchor")
        constraint.anchor.x = float(x)
        constraint.anchor.y = float(y)

    # ------------------------------------------------------------------
    # Entity deletion
    # ------------------------------------------------------------------
    def _require_particle(self, particle: Particle) -> int:
        for index, candidate in enumerate(self._particles):
            if candidate is particle:
                return index
        raise InvalidHandle(f"{particle!r} does not belong to this world")

    def _require_constraint(self, constraint: Constraint) -> int:
        for index, candidate in enumerate(self._constraints):
            if candidate is constraint:
                return index
        raise InvalidHandle(f"{constraint!r} does not belong to this world")

    def delete_particle_by_index(self, index: int) -> None:
        """Remove a particle and every constraint that references it."""
        if not 0 <= index < len(self._particles):
            raise InvalidHandle(f"No particle at index {index}")
        particle = self._particles.pop(index)
        before = len(self._constraints)
        self._constraints = [c for c in self._constraints if not c.references(particle)]
        self._contacts = [c for c in self._contacts if not c.references(particle)]
        removed = before - len(self._constraints)
        if removed:
            self.logger.debug("Deleted %d constraints attached to %r", removed, particle)

    def delete_particle(self, particle: Particle) -> None:
        self.delete_particle_by_index(self._require_particle(particle))

    def delete_constraint_by_index(self, index: int) -> None:
        if not 0 <= index < len(self._constraints):
            raise InvalidHandle(f"No constraint at index {index}")
        del self._constraints[index]

    def delete_constraint(self, constraint: Constraint) -> None:
        self.delete_constraint_by_index(self._require_constraint(constraint))

    # ------------------------------------------------------------------
    # Step pipeline
    # ------------------------------------------------------------------
    def update(self) -> None:
        """Advance the world by exactly one timestep."""
        self._clean_up()
        self._accumulate_forces()
        self._detect_collisions()
        self._resolve_constraints()
        self._integrate()
        self.time += self.timestep
        self.step_count += 1

    def _clean_up(self) -> None:
        self._spatial_index.clear()
        self._contacts.clear()

        survivors = []
        for constraint in self._constraints:
            constraint.advance_age()
            if not constraint.has_expired():
                survivors.append(constraint)
        self._constraints = survivors

        expired = []
        for particle in self._particles:
            particle.advance_age()
            if particle.has_expired():
                expired.append(particle)
            else:
                particle.reset_step_state()
        for particle in expired:
            self.delete_particle(particle)
        if expired:
            self.logger.debug("Step %d: %d particles expired", self.step_count, len(expired))

    def _accumulate_forces(self) -> None:
        compute_gravity_uniform(self._particles, self.gravity)
        compute_fluid(self._particles, self._spatial_index, self.kernels, self.fluid_params)

    def _detect_collisions(self) -> None:
        if not self._config.particle_collisions:
            return
        self._contacts = detect_contacts(self._particles, self._config.contact_stiffness)
        self._constraints.extend(self._contacts)

    def _resolve_constraints(self) -> None:
        iterations = self.solver_iterations
        for _ in range(iterations):
            for constraint in self._constraints:
                constraint.enforce(iterations)

        resolve_velocities(self._particles, self.width, self.height, self.timestep,
                           self._config.boundary_collisions)

        before = len(self._constraints)
        self._constraints = [c for c in self._constraints if not c.has_broken()]
        broken = before - len(self._constraints)
        if broken:
            self.logger.debug("Step %d: %d constraints broke", self.step_count, broken)

    def _integrate(self) -> None:
        integrate_verlet(self._particles, self.timestep)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def get_statistics(self) -> dict:
        """Scalar diagnostics for monitoring a run."""
        densities = np.array([p.fluid_density for p in self._particles if p.is_fluid],
                             dtype=np.float64)
        speeds = np.linalg.norm(self.velocities(), axis=1) if self._particles else np.zeros(0)
        rest = self._config.rest_density
        return {
            'time': self.time,
            'steps': self.step_count,
            'particles': len(self._particles),
            'fluid_particles': int(densities.size),
            'constraints': len(self._constraints),
            'contacts': len(self._contacts),
            'max_speed': float(np.max(speeds)) if speeds.size else 0.0,
            'max_density_error': float(np.max(np.abs(densities - rest)) / rest) if densities.size else 0.0,
        }
