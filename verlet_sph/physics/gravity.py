"""Uniform external gravity field."""

from typing import Iterable

from ..core.particles import Particle
from ..core.vector import Vector2


def compute_gravity_uniform(particles: Iterable[Particle], g_vector: Vector2) -> None:
    """Apply a uniform gravitational field as an acceleration (not a force).

    Every particle is affected, fluid or not; fixed particles ignore it at
    integration time.

    Args:
        particles: Particles whose acceleration was reset this step
        g_vector: Gravity acceleration
    """
    for particle in particles:
        particle.acc.add_to_this(g_vector)
