"""
Point-mass particle with Verlet position history.

A particle is either a plain collider or, when ``is_fluid`` is set, an SPH
fluid sample. The SPH fields (neighbors, density, pressure) are rebuilt by
the world every step and carry no meaning between steps.
"""

from typing import List, Optional

from .elements import WorldElement
from .vector import Vector2
from ..errors import InvalidParameter


class Particle(WorldElement):
    """Point mass integrated with the Störmer-Verlet scheme.

    Args:
        px, py: Initial position
        vx, vy: Initial velocity
        ax, ay: Initial acceleration (cleared at the start of every step)
        fx, fy: Initial force (cleared at the start of every step)
        mass: Mass, must be positive
        radius: Contact radius, must be positive
        fixed: Immovable particle
        time_step: If given, ``pos_previous`` is back-projected from the
            initial velocity so the first step honours it
    """

    def __init__(self, px: float, py: float, vx: float, vy: float,
                 ax: float, ay: float, fx: float, fy: float,
                 mass: float, radius: float, fixed: bool = False,
                 time_step: Optional[float] = None):
        super().__init__()
        if not mass > 0.0:
            raise InvalidParameter(f"Particle mass must be positive, got {mass}")
        if not radius > 0.0:
            raise InvalidParameter(f"Particle radius must be positive, got {radius}")

        self.mass = float(mass)
        self.inv_mass = 1.0 / self.mass
        self.radius = float(radius)
        self.fixed = bool(fixed)

        self.pos = Vector2(px, py)
        self.pos_previous = Vector2(px, py)
        self.vel = Vector2(vx, vy)
        self.acc = Vector2(ax, ay)
        self.force = Vector2(fx, fy)

        if time_step is not None and not self.fixed:
            self.pos_previous = self.pos.subtract(self.vel.scale(time_step))

        self.collides = True
        self.restitution = 0.3

        # SPH state
        self.is_fluid = False
        self.fluid_neighbors: List["Particle"] = []
        self.fluid_density = 0.0
        self.fluid_pressure = 0.0

    def __repr__(self) -> str:
        kind = "fluid" if self.is_fluid else "solid"
        return (f"Particle({kind}, pos=({self.pos.x:.4g}, {self.pos.y:.4g}), "
                f"mass={self.mass:.4g}, fixed={self.fixed})")

    def reset_step_state(self) -> None:
        """Zero the per-step accumulators ahead of force accumulation."""
        self.force.set_to_zero()
        self.acc.set_to_zero()
        self.fluid_density = 0.0
        self.fluid_neighbors.clear()

    def integrate(self, time_step: float) -> None:
        """Advance position by one step from the accumulated acceleration."""
        if self.fixed:
            return
        # Convert accumulated force into acceleration
        self.acc.x += self.force.x * self.inv_mass
        self.acc.y += self.force.y * self.inv_mass

        dt2 = time_step * time_step
        new_x = 2.0 * self.pos.x - self.pos_previous.x + self.acc.x * dt2
        new_y = 2.0 * self.pos.y - self.pos_previous.y + self.acc.y * dt2

        self.pos_previous.set_to(self.pos)
        self.pos.x = new_x
        self.pos.y = new_y

    def calculate_velocity(self, time_step: float) -> None:
        """Derive velocity from the (constrained) position history."""
        inv_dt = 1.0 / time_step
        self.vel.x = (self.pos.x - self.pos_previous.x) * inv_dt
        self.vel.y = (self.pos.y - self.pos_previous.y) * inv_dt
