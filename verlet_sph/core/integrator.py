"""
Time integration for the particle set.

Includes:
- Störmer-Verlet position update
- Velocity recovery from the corrected position history
- Restitution against the four walls of the bounded domain
"""

from typing import Iterable

from .particles import Particle


def integrate_verlet(particles: Iterable[Particle], dt: float) -> None:
    """Verlet-integrate every particle by one step.

    Fixed particles are skipped by ``Particle.integrate``.

    Args:
        particles: Particles with acceleration and force accumulated
        dt: Time step
    """
    for particle in particles:
        particle.integrate(dt)


def apply_boundary_restitution(particle: Particle, width: float, height: float,
                               dt: float) -> None:
    """Reflect and clamp a particle against the domain walls.

    Each axis is handled independently. The velocity component normal to a
    wall is reversed and scaled by the particle's restitution, the position
    is clamped so the particle touches the wall, and ``pos_previous`` is
    rebuilt from the new velocity to keep the Verlet state consistent.

    Args:
        particle: Particle whose velocity was just recalculated
        width: Domain width
        height: Domain height
        dt: Time step
    """
    pos = particle.pos
    vel = particle.vel
    radius = particle.radius
    restitution = particle.restitution

    if pos.y + radius > height:
        vel.y = -restitution * vel.y
        pos.y = height - radius
    elif pos.y - radius < 0.0:
        vel.y = -restitution * vel.y
        pos.y = radius

    if pos.x + radius > width:
        vel.x = -restitution * vel.x
        pos.x = width - radius
    elif pos.x - radius < 0.0:
        vel.x = -restitution * vel.x
        pos.x = radius

    particle.pos_previous.x = pos.x - vel.x * dt
    particle.pos_previous.y = pos.y - vel.y * dt


def resolve_velocities(particles: Iterable[Particle], width: float, height: float,
                       dt: float, boundary_collisions: bool = True) -> None:
    """Recompute velocities after constraint solving and apply the walls.

    Fixed particles keep their position and a zero velocity.

    Args:
        particles: All particles in the world
        width, height: Domain extents
        dt: Time step
        boundary_collisions: Whether the domain walls are active
    """
    for particle in particles:
        if particle.fixed:
            particle.vel.set_to_zero()
            continue
        particle.calculate_velocity(dt)
        if boundary_collisions:
            apply_boundary_restitution(particle, width, height, dt)
