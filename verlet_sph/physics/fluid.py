"""
SPH fluid forces: density, pressure and viscosity.

Per step, for every fluid particle:
1. Neighbor search through the active spatial index (self included)
2. Density from the poly6 kernel, clamped at the rest density
3. Pressure from a linear equation of state
4. Symmetric pressure force and viscous diffusion accumulated into ``force``
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..core.particles import Particle
from ..core.spatial_hash import SpatialIndex
from .kernels import MullerKernels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FluidParameters:
    """Material constants of the SPH fluid."""
    rest_density: float = 1000.0
    pressure_stiffness: float = 16.0  # k in p = k (ρ - ρ0)
    viscosity: float = 35.0           # μ


def find_fluid_neighbors(fluid: Sequence[Particle], index: SpatialIndex) -> None:
    """Rebuild the index from the fluid particles and query each of them.

    Args:
        fluid: Fluid particles with cleared neighbor lists
        index: Spatial index, cleared this step
    """
    for particle in fluid:
        index.insert(particle)
    for particle in fluid:
        index.query_neighbors(particle)


def compute_density_pressure(fluid: Sequence[Particle], kernels: MullerKernels,
                             params: FluidParameters) -> None:
    """Interpolate density and derive pressure for each fluid particle.

    Neighbor offsets are gathered into arrays and weighted in one pass.
    Density is clamped from below at the rest density, which keeps the
    pressure non-negative and prevents tensile clumping.
    """
    for particle in fluid:
        neighbors = particle.fluid_neighbors
        count = len(neighbors)
        xs = np.fromiter((n.pos.x for n in neighbors), dtype=np.float64, count=count)
        ys = np.fromiter((n.pos.y for n in neighbors), dtype=np.float64, count=count)
        masses = np.fromiter((n.mass for n in neighbors), dtype=np.float64, count=count)
        r_squared = (xs - particle.pos.x) ** 2 + (ys - particle.pos.y) ** 2
        density = float(np.dot(masses, kernels.density_vectorized(r_squared)))
        particle.fluid_density = max(density, params.rest_density)
        particle.fluid_pressure = params.pressure_stiffness * (
            particle.fluid_density - params.rest_density)


def compute_fluid_forces(fluid: Sequence[Particle], kernels: MullerKernels,
                         params: FluidParameters) -> None:
    """Accumulate pressure and viscosity forces from the neighbor lists.

    The particle itself is skipped, and so is the pressure term of a
    co-located neighbor (no direction is defined for it).
    """
    skipped = 0
    for particle in fluid:
        px, py = particle.pos.x, particle.pos.y
        force = particle.force
        for neighbor in particle.fluid_neighbors:
            if neighbor is particle:
                continue
            dx = neighbor.pos.x - px
            dy = neighbor.pos.y - py
            r_squared = dx * dx + dy * dy
            r = math.sqrt(r_squared)
            mass_over_density = neighbor.mass / neighbor.fluid_density

            if r_squared > 0.0:
                # Symmetric pressure, along the unit vector towards the neighbor
                magnitude = (mass_over_density * 0.5
                             * (particle.fluid_pressure + neighbor.fluid_pressure)
                             * kernels.pressure_gradient(r))
                force.x += dx / r * magnitude
                force.y += dy / r * magnitude
            else:
                skipped += 1

            weight = mass_over_density * kernels.viscosity_laplacian(r) * params.viscosity
            force.x += (neighbor.vel.x - particle.vel.x) * weight
            force.y += (neighbor.vel.y - particle.vel.y) * weight

    if skipped:
        logger.debug("Skipped pressure for %d co-located fluid pairs", skipped)


def compute_fluid(particles: Sequence[Particle], index: SpatialIndex,
                  kernels: MullerKernels, params: FluidParameters) -> List[Particle]:
    """Run the full SPH force model for one step.

    Args:
        particles: All particles in the world
        index: Cleared spatial index
        kernels: Kernel coefficients for the current smoothing length
        params: Fluid constants

    Returns:
        The fluid particles that were processed
    """
    fluid = [p for p in particles if p.is_fluid]
    if not fluid:
        return fluid
    find_fluid_neighbors(fluid, index)
    compute_density_pressure(fluid, kernels, params)
    compute_fluid_forces(fluid, kernels, params)
    return fluid
