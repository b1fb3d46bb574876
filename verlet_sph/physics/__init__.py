"""Physics modules: SPH kernels and fluid forces, gravity, and collision detection."""

from .kernels import MullerKernels
from .fluid import (
    FluidParameters,
    find_fluid_neighbors,
    compute_density_pressure,
    compute_fluid_forces,
    compute_fluid
)
from .gravity import compute_gravity_uniform
from .collisions import detect_contacts

__all__ = [
    'MullerKernels',
    'FluidParameters',
    'find_fluid_neighbors',
    'compute_density_pressure',
    'compute_fluid_forces',
    'compute_fluid',
    'compute_gravity_uniform',
    'detect_contacts'
]
