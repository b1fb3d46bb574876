"""
Simulation configuration.

``WorldConfig`` gathers every tunable of a world. It is immutable; a world
changes its configuration between steps through ``World.configure`` which
builds a new instance with ``dataclasses.replace``.
"""

import json
from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple

from .core.spatial_hash import SpatialPartitioning
from .errors import InvalidParameter


@dataclass(frozen=True)
class WorldConfig:
    """Tunables of a physics world.

    Attributes:
        gravity: Uniform gravity acceleration (gx, gy)
        rest_density: SPH rest density ρ0
        pressure_stiffness: k in the linear equation of state
        viscosity: Viscosity coefficient μ
        smoothing_length: SPH kernel support h, also the grid cell size
        partitioning: Neighbor search strategy (none, grid or hash)
        particle_collisions: Generate contact constraints on overlap
        boundary_collisions: Bounce particles off the domain walls
        restitution: Default particle-wall restitution for new particles
        contact_radius: Default radius for new particles
        contact_stiffness: Stiffness of generated contact constraints
        constraint_stiffness: Default stiffness of user constraints
    """
    gravity: Tuple[float, float] = (0.0, -9.81)
    rest_density: float = 1000.0
    pressure_stiffness: float = 16.0
    viscosity: float = 35.0
    smoothing_length: float = 1.0
    partitioning: SpatialPartitioning = SpatialPartitioning.GRID
    particle_collisions: bool = True
    boundary_collisions: bool = True
    restitution: float = 0.3
    contact_radius: float = 0.1
    contact_stiffness: float = 0.9
    constraint_stiffness: float = 0.9

    def __post_init__(self):
        # Normalise plain-data inputs
        object.__setattr__(self, 'gravity', tuple(float(g) for g in self.gravity))
        try:
            object.__setattr__(self, 'partitioning', SpatialPartitioning(self.partitioning))
        except ValueError:
            raise InvalidParameter(
                f"Unknown partitioning mode {self.partitioning!r}") from None
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            InvalidParameter: On the first out-of-range value
        """
        if len(self.gravity) != 2:
            raise InvalidParameter(f"Gravity must have two components, got {self.gravity}")
        if not self.smoothing_length > 0.0:
            raise InvalidParameter(f"smoothing_length must be positive, got {self.smoothing_length}")
        if not self.rest_density > 0.0:
            raise InvalidParameter(f"rest_density must be positive, got {self.rest_density}")
        if self.pressure_stiffness < 0.0:
            raise InvalidParameter(f"pressure_stiffness must be >= 0, got {self.pressure_stiffness}")
        if self.viscosity < 0.0:
            raise InvalidParameter(f"viscosity must be >= 0, got {self.viscosity}")
        if not 0.0 <= self.restitution <= 1.0:
            raise InvalidParameter(f"restitution must be in [0, 1], got {self.restitution}")
        if not self.contact_radius > 0.0:
            raise InvalidParameter(f"contact_radius must be positive, got {self.contact_radius}")
        for name in ('contact_stiffness', 'constraint_stiffness'):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise InvalidParameter(f"{name} must be in (0, 1], got {value}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'WorldConfig':
        """Build a config from plain data, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidParameter(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_json(cls, config_path: str) -> 'WorldConfig':
        """Load a config from a JSON file.

        The file holds a single object whose keys are ``WorldConfig`` fields;
        ``partitioning`` is given by name ("none", "grid" or "hash").
        """
        with open(config_path, 'r') as f:
            data = json.load(f)
        return cls.from_mapping(data)
