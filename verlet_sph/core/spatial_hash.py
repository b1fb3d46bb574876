"""
Spatial partitioning for SPH neighbor searches.

Three interchangeable structures share one contract:
- Grid: bounded 2D array of cells, indices clamped into the domain
- HashBuckets: sparse dict of cells keyed by integer cell coordinates
- BruteForceIndex: O(N²) scan, used when partitioning is switched off

Each is rebuilt every step (``clear`` then ``insert``) and answers
``query_neighbors(particle)`` by appending every inserted particle whose
squared distance is below the admission radius squared. The query particle
itself is included when it was inserted. Because the cell size equals the
admission radius, scanning the 3x3 block of cells around a particle is
sufficient, so all three return the same neighbor set.
"""

import enum
import math
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .particles import Particle
from ..errors import InvalidParameter


class SpatialPartitioning(enum.Enum):
    """Neighbor search strategy."""
    NONE = "none"
    GRID = "grid"
    HASH = "hash"


def _admits(p: Particle, q: Particle, radius_squared: float) -> bool:
    return p.pos.distance_from_squared(q.pos) < radius_squared


class _Bucket:
    """Cell contents with a logical size, reused across steps."""

    __slots__ = ("particles", "size")

    def __init__(self):
        self.particles: List[Particle] = []
        self.size = 0

    def push(self, particle: Particle) -> None:
        if self.size < len(self.particles):
            self.particles[self.size] = particle
        else:
            self.particles.append(particle)
        self.size += 1

    @property
    def capacity(self) -> int:
        return len(self.particles)

    def contents(self) -> List[Particle]:
        return self.particles[:self.size]


class SpatialIndex:
    """Base class holding the admission radius."""

    mode: SpatialPartitioning

    def __init__(self, cell_size: float):
        if not cell_size > 0.0:
            raise InvalidParameter(f"Cell size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self.cell_size_squared = self.cell_size * self.cell_size

    def _radius_squared(self, radius: Optional[float]) -> float:
        if radius is None:
            return self.cell_size_squared
        if not 0.0 < radius <= self.cell_size:
            raise InvalidParameter(
                f"Query radius must be in (0, {self.cell_size}], got {radius}")
        return radius * radius

    def clear(self) -> None:
        raise NotImplementedError

    def insert(self, particle: Particle) -> None:
        raise NotImplementedError

    def query_neighbors(self, particle: Particle, radius: Optional[float] = None) -> None:
        raise NotImplementedError


class Grid(SpatialIndex):
    """Uniform grid over the bounded domain [0, width] x [0, height].

    Positions outside the domain fold into the nearest boundary cell.

    Args:
        cell_size: Cell edge length (the SPH smoothing length)
        width: Domain width
        height: Domain height
    """

    mode = SpatialPartitioning.GRID

    def __init__(self, cell_size: float, width: float, height: float):
        super().__init__(cell_size)
        if not (width > 0.0 and height > 0.0):
            raise InvalidParameter(f"Grid extents must be positive, got {width}x{height}")
        self.nx = max(1, math.ceil(width / self.cell_size))
        self.ny = max(1, math.ceil(height / self.cell_size))
        self.buckets = [[_Bucket() for _ in range(self.ny)] for _ in range(self.nx)]

    def cell_of(self, particle: Particle) -> Tuple[int, int]:
        """Clamped (i, j) cell index for a particle."""
        i = math.floor(particle.pos.x / self.cell_size)
        j = math.floor(particle.pos.y / self.cell_size)
        i = min(max(i, 0), self.nx - 1)
        j = min(max(j, 0), self.ny - 1)
        return i, j

    def clear(self) -> None:
        # Keep backing storage, only reset the logical sizes
        for column in self.buckets:
            for bucket in column:
                bucket.size = 0

    def insert(self, particle: Particle) -> None:
        i, j = self.cell_of(particle)
        self.buckets[i][j].push(particle)

    def query_neighbors(self, particle: Particle, radius: Optional[float] = None) -> None:
        radius_squared = self._radius_squared(radius)
        ci, cj = self.cell_of(particle)
        neighbors = particle.fluid_neighbors
        for i in range(max(ci - 1, 0), min(ci + 1, self.nx - 1) + 1):
            for j in range(max(cj - 1, 0), min(cj + 1, self.ny - 1) + 1):
                bucket = self.buckets[i][j]
                for k in range(bucket.size):
                    candidate = bucket.particles[k]
                    if _admits(particle, candidate, radius_squared):
                        neighbors.append(candidate)

    def cell_contents(self, i: int, j: int) -> List[Particle]:
        """Particles currently in cell (i, j)."""
        return self.buckets[i][j].contents()

    def iter_cells(self) -> Iterator[Tuple[Tuple[int, int], List[Particle]]]:
        """Yield ((i, j), particles) for every occupied cell."""
        for i in range(self.nx):
            for j in range(self.ny):
                if self.buckets[i][j].size:
                    yield (i, j), self.buckets[i][j].contents()

    def get_statistics(self) -> dict:
        """Get occupancy statistics for debugging."""
        counts = np.array([[b.size for b in column] for column in self.buckets],
                          dtype=np.int64).flatten()
        occupied = counts > 0
        return {
            'total_cells': int(counts.size),
            'occupied_cells': int(np.sum(occupied)),
            'occupancy_rate': float(np.sum(occupied)) / counts.size,
            'max_particles_per_cell': int(np.max(counts)),
            'mean_particles_per_occupied_cell': float(np.mean(counts[occupied])) if np.any(occupied) else 0.0,
        }


class HashBuckets(SpatialIndex):
    """Sparse spatial hash with lazily created buckets.

    Unbounded, so nothing is clamped. Slower than Grid for dense domains.
    """

    mode = SpatialPartitioning.HASH

    def __init__(self, bin_size: float):
        super().__init__(bin_size)
        self._buckets: Dict[Tuple[int, int], List[Particle]] = {}

    @property
    def size(self) -> int:
        """Number of non-empty buckets."""
        return len(self._buckets)

    def key_of(self, particle: Particle) -> Tuple[int, int]:
        return (math.floor(particle.pos.x / self.cell_size),
                math.floor(particle.pos.y / self.cell_size))

    def clear(self) -> None:
        self._buckets.clear()

    def insert(self, particle: Particle) -> None:
        self._buckets.setdefault(self.key_of(particle), []).append(particle)

    def query_neighbors(self, particle: Particle, radius: Optional[float] = None) -> None:
        radius_squared = self._radius_squared(radius)
        bx, by = self.key_of(particle)
        neighbors = particle.fluid_neighbors
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                bucket = self._buckets.get((bx + dx, by + dy))
                if bucket is None:
                    continue
                for candidate in bucket:
                    if _admits(particle, candidate, radius_squared):
                        neighbors.append(candidate)

    def iter_cells(self) -> Iterator[Tuple[Tuple[int, int], List[Particle]]]:
        yield from self._buckets.items()

    def get_statistics(self) -> dict:
        counts = np.array([len(b) for b in self._buckets.values()], dtype=np.int64)
        return {
            'occupied_cells': int(counts.size),
            'max_particles_per_cell': int(np.max(counts)) if counts.size else 0,
            'mean_particles_per_occupied_cell': float(np.mean(counts)) if counts.size else 0.0,
        }


class BruteForceIndex(SpatialIndex):
    """Exhaustive O(N²) search with the same contract as the cell structures."""

    mode = SpatialPartitioning.NONE

    def __init__(self, radius: float):
        super().__init__(radius)
        self._particles: List[Particle] = []

    def clear(self) -> None:
        self._particles.clear()

    def insert(self, particle: Particle) -> None:
        self._particles.append(particle)

    def query_neighbors(self, particle: Particle, radius: Optional[float] = None) -> None:
        radius_squared = self._radius_squared(radius)
        particle.fluid_neighbors.extend(
            candidate for candidate in self._particles
            if _admits(particle, candidate, radius_squared))

    def iter_cells(self) -> Iterator[Tuple[Tuple[int, int], List[Particle]]]:
        if self._particles:
            yield (0, 0), list(self._particles)


def create_spatial_index(mode: SpatialPartitioning, cell_size: float,
                         width: float, height: float) -> SpatialIndex:
    """Build the spatial index for a partitioning mode.

    Args:
        mode: Partitioning strategy (enum member or its string value)
        cell_size: Cell size / admission radius (the smoothing length)
        width, height: Domain extents, used by Grid only

    Returns:
        A freshly allocated, empty index
    """
    try:
        mode = SpatialPartitioning(mode)
    except ValueError:
        raise InvalidParameter(
            f"Unknown partitioning mode {mode!r}, choose from: "
            f"{', '.join(m.value for m in SpatialPartitioning)}") from None

    if mode is SpatialPartitioning.GRID:
        return Grid(cell_size, width, height)
    if mode is SpatialPartitioning.HASH:
        return HashBuckets(cell_size)
    return BruteForceIndex(cell_size)
