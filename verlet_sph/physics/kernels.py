"""
SPH smoothing kernels of Müller, Charypar & Gross (2003).

Particle-based fluid simulation for interactive applications:
- poly6 kernel for density
- spiky kernel gradient for pressure
- viscosity kernel Laplacian for viscous diffusion

The normalisation constants are the 3D ones from the paper and are kept
as-is for a 2D domain; the pressure stiffness and viscosity coefficients are
tuned against them.
"""

import numpy as np

from ..errors import InvalidParameter


class MullerKernels:
    """Precomputed kernel coefficients for a fixed smoothing length h.

    Coefficients:
        sigma_density   =  315 / (64 π h⁹)
        sigma_pressure  = -45 / (π h⁶)
        sigma_viscosity =  45 / (π h⁶)

    Build a new instance whenever h changes.
    """

    def __init__(self, smoothing_length: float):
        if not smoothing_length > 0.0:
            raise InvalidParameter(
                f"Smoothing length must be positive, got {smoothing_length}")
        h = float(smoothing_length)
        self.h = h
        self.h_squared = h * h
        self.sigma_density = 315.0 / (64.0 * np.pi * h ** 9)
        self.sigma_pressure = -45.0 / (np.pi * h ** 6)
        self.sigma_viscosity = 45.0 / (np.pi * h ** 6)

    def __repr__(self) -> str:
        return f"MullerKernels(h={self.h})"

    def pressure_gradient(self, r: float) -> float:
        """Spiky gradient magnitude σ_p (h − r)² (negative inside support)."""
        diff = self.h - r
        if diff <= 0.0:
            return 0.0
        return self.sigma_pressure * diff * diff

    def viscosity_laplacian(self, r: float) -> float:
        """Viscosity Laplacian σ_v (h − r)."""
        diff = self.h - r
        if diff <= 0.0:
            return 0.0
        return self.sigma_viscosity * diff

    def density_vectorized(self, r_squared: np.ndarray) -> np.ndarray:
        """Vectorized poly6 weight for an array of squared distances."""
        diff = np.clip(self.h_squared - np.asarray(r_squared, dtype=np.float64), 0.0, None)
        return self.sigma_density * diff ** 3
